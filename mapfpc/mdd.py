"""Multi-valued decision diagrams over the time-expanded grid.

An MDD of ``n`` levels holds every location an agent can occupy at each
timestep on some path of exactly ``n - 1`` moves that visits its goals in
order and satisfies its constraints.
"""

from __future__ import annotations

from collections import deque
from itertools import takewhile
from typing import Protocol, Sequence

from .common import INT_MAX


class _ConstraintView(Protocol):
    """What building an MDD needs from a constraint table."""

    leq_goal_time: Sequence[int]
    g_goal_time: Sequence[int]

    def constrained(self, *args: int) -> bool:
        """``(loc, t)`` checks a vertex, ``(from, to, t)`` checks an edge."""
        ...


class _Solver(Protocol):
    """What building an MDD needs from a single-agent solver."""

    start_location: int
    goal_location: Sequence[int]
    heuristic_landmark: Sequence[int]

    def get_heuristic(self, stage: int, loc: int) -> int: ...

    def get_next_locations(self, curr: int) -> list[int]: ...


def _discard(items: list, item: object) -> None:
    """Remove every occurrence of ``item`` (by identity); absent items are ignored."""
    items[:] = [entry for entry in items if entry is not item]


class MDDNode:
    """A location at a given level (timestep) and goal stage."""

    __slots__ = ("location", "level", "stage", "cost", "children", "parents")

    def __init__(self, location: int, parent: MDDNode | None = None, stage: int = 0) -> None:
        self.location = location
        self.stage = stage
        self.cost = 0  # minimum cost of a path traversing this node
        self.children: list[MDDNode] = []
        self.parents: list[MDDNode] = []
        if parent is None:
            self.level = 0
        else:
            self.level = parent.level + 1
            self.parents.append(parent)

    def __repr__(self) -> str:
        return f"MDDNode(location={self.location}, level={self.level}, stage={self.stage})"


class MDD:
    """A layered graph of the locations an agent may occupy at each timestep."""

    def __init__(self) -> None:
        self.levels: list[list[MDDNode]] = []
        self.flatten_levels: list[list[MDDNode]] = []
        self.solver: _Solver | None = None

    def build(self, ct: _ConstraintView, num_of_levels: int, solver: _Solver) -> bool:
        """Build the MDD of ``num_of_levels`` levels for the solver's agent.

        Raises ``ValueError`` when no path of that length exists.
        """
        if num_of_levels < 1:
            raise ValueError("an MDD needs at least one level")
        goals = solver.goal_location
        last = len(goals) - 1

        f_ub = [INT_MAX] * len(goals)
        if ct.leq_goal_time[last] != -1:
            f_ub[last] = ct.leq_goal_time[last]
        for i in range(last - 1, -1, -1):
            if ct.leq_goal_time[i] != -1:
                f_ub[i] = min(f_ub[i + 1], ct.leq_goal_time[i] + solver.heuristic_landmark[i])
            else:
                f_ub[i] = f_ub[i + 1]

        self.solver = solver
        root = MDDNode(solver.start_location)
        root.cost = num_of_levels - 1
        open_queue = deque([root])
        closed = [root]
        self.levels = [[] for _ in range(num_of_levels)]

        while open_queue:
            curr = open_queue.popleft()
            if curr.level == num_of_levels - 1:
                self.levels[-1].append(curr)
                break
            # children must satisfy (g + 1) + h <= num_of_levels - 1
            heuristic_bound = num_of_levels - curr.level - 2
            t = curr.level + 1
            for nxt in solver.get_next_locations(curr.location):
                stage = curr.stage
                if t + solver.get_heuristic(stage, nxt) > f_ub[stage]:
                    continue
                if nxt == goals[stage] and stage < last and ct.g_goal_time[stage] < t:
                    stage += 1
                if (
                    solver.get_heuristic(stage, nxt) <= heuristic_bound
                    and not ct.constrained(nxt, t)
                    and not ct.constrained(curr.location, nxt, t)
                ):
                    same_level = takewhile(lambda node: node.level == t, reversed(closed))
                    existing = next(
                        (n for n in same_level if n.location == nxt and n.stage == stage), None
                    )
                    if existing is not None:
                        existing.parents.append(curr)
                    else:
                        child = MDDNode(nxt, curr, stage)
                        child.cost = num_of_levels - 1
                        open_queue.append(child)
                        closed.append(child)

        if not self.levels[-1]:
            self.levels = []
            raise ValueError(f"no path with {num_of_levels - 1} moves satisfies the constraints")

        goal_node = self.levels[-1][0]
        if num_of_levels > 1:
            # the parent of the goal node must not already be at the goal location
            goal_node.parents = [p for p in goal_node.parents if p.location != goal_node.location]
            for parent in goal_node.parents:
                self.levels[-2].append(parent)
                parent.children.append(goal_node)
            for t in range(num_of_levels - 2, 0, -1):
                for node in self.levels[t]:
                    for parent in node.parents:
                        if not parent.children:
                            self.levels[t - 1].append(parent)
                        parent.children.append(node)
        return True

    def flatten(self) -> list[list[MDDNode]]:
        """Merge nodes that share a location on a level, ignoring goal stages."""
        if self.solver is None:
            raise ValueError("the MDD has not been built")
        self.flatten_levels = [[] for _ in self.levels]
        root = MDDNode(self.solver.start_location)
        self.flatten_levels[0].append(root)
        map_prev = {self.solver.start_location: root}
        for i in range(1, len(self.levels)):
            map_curr: dict[int, MDDNode] = {}
            for node in self.levels[i]:
                node_cpy = map_curr.get(node.location)
                if node_cpy is None:
                    node_cpy = MDDNode(node.location)
                    node_cpy.level = i
                    map_curr[node.location] = node_cpy
                    self.flatten_levels[i].append(node_cpy)
                for parent in node.parents:
                    known = any(p.location == parent.location for p in node_cpy.parents)
                    if not known and parent.location in map_prev:
                        prev = map_prev[parent.location]
                        node_cpy.parents.append(prev)
                        prev.children.append(node_cpy)
            map_prev = map_curr
        return self.flatten_levels

    def find(self, location: int, level: int) -> MDDNode | None:
        if 0 <= level < len(self.levels):
            for node in self.levels[level]:
                if node.location == location:
                    return node
        return None

    def delete_node(self, node: MDDNode) -> None:
        """Remove a node and every node left without parents or children."""
        _discard(self.levels[node.level], node)
        for child in list(node.children):
            _discard(child.parents, node)
            if not child.parents:
                self.delete_node(child)
        for parent in list(node.parents):
            _discard(parent.children, node)
            if not parent.children:
                self.delete_node(parent)

    def clear(self) -> None:
        self.levels = []

    def goal_at(self, level: int) -> MDDNode | None:
        """The final-goal node whose cost equals ``level``, if any."""
        if level >= len(self.levels) or self.solver is None:
            return None
        final_goal = self.solver.goal_location[-1]
        for node in self.levels[level]:
            if node.location == final_goal and node.cost == level:
                return node
        return None

    def copy(self) -> MDD:
        """A deep copy with nodes merged by location on each level."""
        if not self.levels or not self.levels[0]:
            raise ValueError("cannot copy an empty MDD")
        other = MDD()
        other.levels = [[] for _ in self.levels]
        source_root = self.levels[0][0]
        root = MDDNode(source_root.location, None, source_root.stage)
        root.cost = len(self.levels) - 1
        other.levels[0].append(root)
        for t in range(len(other.levels) - 1):
            for node in other.levels[t]:
                source = self.find(node.location, node.level)
                for source_child in source.children:
                    child = other.find(source_child.location, source_child.level)
                    if child is None:
                        child = MDDNode(source_child.location, node, source_child.stage)
                        child.cost = source_child.cost
                        other.levels[child.level].append(child)
                    else:
                        child.parents.append(node)
                    node.children.append(child)
        other.solver = self.solver
        return other

    def __str__(self) -> str:
        return format_mdd(self)


class SyncMDDNode:
    """A node of an MDD being synchronised against another agent's MDD."""

    __slots__ = ("location", "children", "parents", "coexisting_nodes")

    def __init__(self, location: int, parent: SyncMDDNode | None = None) -> None:
        self.location = location
        self.children: list[SyncMDDNode] = []
        self.parents: list[SyncMDDNode] = []
        self.coexisting_nodes: list[MDDNode] = []
        if parent is not None:
            self.parents.append(parent)

    def __repr__(self) -> str:
        return f"SyncMDDNode(location={self.location})"


class SyncMDD:
    """A copy of an MDD whose nodes record coexisting nodes of another MDD."""

    def __init__(self, mdd: MDD) -> None:
        self.levels: list[list[SyncMDDNode]] = [[] for _ in mdd.levels]
        if not mdd.levels or not mdd.levels[0]:
            raise ValueError("cannot synchronise an empty MDD")
        self.levels[0].append(SyncMDDNode(mdd.levels[0][0].location))
        for t in range(len(self.levels) - 1):
            for node in self.levels[t]:
                source = mdd.find(node.location, t)
                for source_child in source.children:
                    child = self.find(source_child.location, source_child.level)
                    if child is None:
                        child = SyncMDDNode(source_child.location, node)
                        self.levels[t + 1].append(child)
                    else:
                        child.parents.append(node)
                    node.children.append(child)

    def find(self, location: int, level: int) -> SyncMDDNode | None:
        if 0 <= level < len(self.levels):
            for node in self.levels[level]:
                if node.location == location:
                    return node
        return None

    def delete_node(self, node: SyncMDDNode, level: int) -> None:
        """Remove a node and every node left without parents or children."""
        _discard(self.levels[level], node)
        for child in list(node.children):
            _discard(child.parents, node)
            if not child.parents:
                self.delete_node(child, level + 1)
        for parent in list(node.parents):
            _discard(parent.children, node)
            if not parent.children:
                self.delete_node(parent, level - 1)

    def clear(self) -> None:
        self.levels = []


def collect_mdd_level(mdd: MDD, level: int) -> dict[int, MDDNode]:
    """Map each location on a level to its node (the last one wins)."""
    return {node.location: node for node in mdd.levels[level]}


def format_mdd(mdd: MDD) -> str:
    """One line per level: ``L<level>: loc,loc,...``."""
    lines = []
    for index, level in enumerate(mdd.levels):
        label = level[0].level if level else index
        lines.append(f"L{label}: " + "".join(f"{node.location}," for node in level) + "\n")
    return "".join(lines)