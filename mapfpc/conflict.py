"""Constraints and conflicts between agents."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import NamedTuple


class ConflictType(IntEnum):
    TEMPORAL = 0
    MUTEX = 1
    TARGET = 2
    CORRIDOR = 3
    RECTANGLE = 4
    STANDARD = 5


class ConflictPriority(IntEnum):
    """Pseudo-cardinal conflicts are semi-/non-cardinal conflicts between dependent agents."""

    CARDINAL = 0
    PSEUDO_CARDINAL = 1
    SEMI = 2
    NON = 3
    UNKNOWN = 4


class ConstraintType(IntEnum):
    LEQLENGTH = 0
    GLENGTH = 1
    RANGE = 2
    BARRIER = 3
    VERTEX = 4
    EDGE = 5
    LEQSTOP = 6
    GSTOP = 7
    POSITIVE_VERTEX = 8
    POSITIVE_EDGE = 9
    GPRIORITY = 10


class ConflictSelection(IntEnum):
    RANDOM = 0
    EARLIEST = 1
    CONFLICTS = 2
    MCONSTRAINTS = 3
    FCONSTRAINTS = 4
    WIDTH = 5
    SINGLETONS = 6


class Constraint(NamedTuple):
    """A constraint ``(agent, x, y, t, type)``.

    Meaning of the fields depends on the type: ``(agent, loc, -1, t, VERTEX)``,
    ``(agent, from, to, t, EDGE)``, ``(agent, B1, B2, t, BARRIER)``,
    ``(from_task, to_task, -1, -1, GPRIORITY)`` and so on.
    """

    agent: int
    x: int
    y: int
    t: int
    type: ConstraintType


@dataclass
class Conflict:
    """A conflict between two agents with the constraints for each branch."""

    a1: int = -1
    a2: int = -1
    constraint1: list[Constraint] = field(default_factory=list)
    constraint2: list[Constraint] = field(default_factory=list)
    type: ConflictType | None = None
    priority: ConflictPriority = ConflictPriority.UNKNOWN
    secondary_priority: float = 0.0
    final_len_1: int = 0
    final_len_2: int = 0
    t1: int = 0
    loc1: int = 0
    loc1_to: int = -1
    t2: int = 0
    loc2: int = 0
    loc2_to: int = -1

    def _reset(self, a1: int, a2: int) -> None:
        self.constraint1 = []
        self.constraint2 = []
        self.a1 = a1
        self.a2 = a2

    def vertex_conflict(self, a1: int, a2: int, v: int, t: int) -> Conflict:
        self._reset(a1, a2)
        self.constraint1.append(Constraint(a1, v, -1, t, ConstraintType.VERTEX))
        self.constraint2.append(Constraint(a2, v, -1, t, ConstraintType.VERTEX))
        self.type = ConflictType.STANDARD
        return self

    def edge_conflict(self, a1: int, a2: int, v1: int, v2: int, t: int) -> Conflict:
        self._reset(a1, a2)
        self.constraint1.append(Constraint(a1, v1, v2, t, ConstraintType.EDGE))
        self.constraint2.append(Constraint(a2, v2, v1, t, ConstraintType.EDGE))
        self.type = ConflictType.STANDARD
        return self

    def corridor_conflict(self, a1: int, a2: int, v1: int, v2: int, t1: int, t2: int) -> Conflict:
        self._reset(a1, a2)
        self.constraint1.append(Constraint(a1, v1, 0, t1, ConstraintType.RANGE))
        self.constraint2.append(Constraint(a2, v2, 0, t2, ConstraintType.RANGE))
        self.type = ConflictType.CORRIDOR
        return self

    def rectangle_conflict(self, a1: int, a2: int, constraint1, constraint2) -> Conflict:
        self.a1 = a1
        self.a2 = a2
        self.constraint1 = list(constraint1)
        self.constraint2 = list(constraint2)
        self.type = ConflictType.RECTANGLE
        return self

    def target_conflict(self, a1: int, a2: int, v: int, t: int) -> Conflict:
        self._reset(a1, a2)
        self.constraint1.append(Constraint(a1, v, -1, t, ConstraintType.LEQLENGTH))
        self.constraint2.append(Constraint(a1, v, -1, t, ConstraintType.GLENGTH))
        self.type = ConflictType.TARGET
        return self

    def mutex_conflict(self, a1: int, a2: int) -> Conflict:
        self._reset(a1, a2)
        self.type = ConflictType.MUTEX
        self.priority = ConflictPriority.CARDINAL
        return self

    def temporal_conflict(self, a1: int, a2: int, i1: int, i2: int, t1: int, t2: int) -> Conflict:
        """Stop ``i1`` of ``a1`` must precede stop ``i2`` of ``a2`` although ``t1 >= t2``."""
        self._reset(a1, a2)
        self.type = ConflictType.TEMPORAL
        self.priority = ConflictPriority.CARDINAL
        self.constraint1.append(Constraint(a1, i1, -1, t1 - 1, ConstraintType.LEQSTOP))
        self.constraint1.append(Constraint(a2, i2, -1, t1, ConstraintType.LEQSTOP))
        self.constraint2.append(Constraint(a2, i2, -1, t1, ConstraintType.GSTOP))
        return self

    def priority_conflict(self, a1: int, a2: int) -> Conflict:
        self._reset(a1, a2)
        self.constraint1.append(Constraint(a1, a2, -1, -1, ConstraintType.GPRIORITY))
        self.constraint2.append(Constraint(a2, a1, -1, -1, ConstraintType.GPRIORITY))
        return self