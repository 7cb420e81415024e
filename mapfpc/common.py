"""Path representation and limits shared by the planners."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

INT_MAX = 2**31 - 1
MAX_TIMESTEP = INT_MAX // 2
MAX_COST = INT_MAX // 2
MAX_NODES = INT_MAX // 2


@dataclass
class PathEntry:
    """One timestep of a path."""

    location: int = -1
    mdd_width: int = 0
    is_goal: bool = False

    def is_single(self) -> bool:
        """True when the MDD has exactly one node at this timestep."""
        return self.mdd_width == 1


@dataclass
class Path:
    """A sequence of path entries starting at ``begin_time``."""

    entries: list[PathEntry] = field(default_factory=list)
    begin_time: int = 0
    timestamps: list[int] = field(default_factory=list)

    def end_time(self) -> int:
        """Timestep at which the last entry is reached."""
        return self.begin_time + len(self.entries) - 1

    def empty(self) -> bool:
        return not self.entries

    def locations(self) -> list[int]:
        """Locations visited, one per timestep."""
        return [entry.location for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __getitem__(self, index: int) -> PathEntry:
        return self.entries[index]

    def __iter__(self) -> Iterator[PathEntry]:
        return iter(self.entries)