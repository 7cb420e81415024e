"""Grid maps with agents that visit ordered sequences of goal locations."""

from __future__ import annotations

import random
from collections import deque

RANDOM_WALK_STEPS = 100000


class InstanceError(Exception):
    """Raised when a map or agent file is missing or malformed."""


class Instance:
    """An undirected, unweighted 4-neighbour grid with agents and temporal constraints.

    ``temporal_cons[i * num_of_agents + j]`` holds pairs ``(k, l)``: the k-th
    goal of agent i must be reached before the l-th goal of agent j.
    """

    def __init__(
        self,
        map_fname: str,
        agent_fname: str,
        num_of_agents: int = 0,
        num_of_rows: int = 0,
        num_of_cols: int = 0,
        num_of_obstacles: int = 0,
        warehouse_width: int = 0,
        rng: random.Random | None = None,
    ) -> None:
        self.map_fname = str(map_fname)
        self.agent_fname = str(agent_fname)
        self.num_of_agents = num_of_agents
        self.warehouse_width = warehouse_width
        self._rng = rng if rng is not None else random.Random()
        self.num_of_rows = 0
        self.num_of_cols = 0
        self.map_size = 0
        self.my_map: list[bool] = []
        self.start_locations: list[int] = []
        self.goal_locations: list[list[int]] = []
        self.temporal_cons: list[list[tuple[int, int]]] = []

        if not self._load_map():
            if (
                num_of_rows > 0
                and num_of_cols > 0
                and 0 <= num_of_obstacles < num_of_rows * num_of_cols
            ):
                self._generate_connected_random_grid(num_of_rows, num_of_cols, num_of_obstacles)
                self.save_map()
            else:
                raise InstanceError(f"Map file {self.map_fname} not found.")

        if not self._load_agents():
            raise InstanceError(f"Agent file {self.agent_fname} not found.")

    # ------------------------------------------------------------------ grid

    def is_obstacle(self, loc: int) -> bool:
        return self.my_map[loc]

    def valid_move(self, curr: int, next_loc: int) -> bool:
        if next_loc < 0 or next_loc >= self.map_size:
            return False
        if self.my_map[next_loc]:
            return False
        return self.get_manhattan_distance(curr, next_loc) < 2

    def get_neighbors(self, curr: int) -> list[int]:
        candidates = (curr + 1, curr - 1, curr + self.num_of_cols, curr - self.num_of_cols)
        return [nxt for nxt in candidates if self.valid_move(curr, nxt)]

    def linearize_coordinate(self, row: int, col: int) -> int:
        return self.num_of_cols * row + col

    def get_row_coordinate(self, loc: int) -> int:
        return loc // self.num_of_cols

    def get_col_coordinate(self, loc: int) -> int:
        return loc % self.num_of_cols

    def get_coordinate(self, loc: int) -> tuple[int, int]:
        return divmod(loc, self.num_of_cols)

    def get_manhattan_distance(self, loc1, loc2) -> int:
        """Distance between two locations, given as ids or as (row, col) pairs."""
        r1, c1 = loc1 if isinstance(loc1, tuple) else self.get_coordinate(loc1)
        r2, c2 = loc2 if isinstance(loc2, tuple) else self.get_coordinate(loc2)
        return abs(r1 - r2) + abs(c1 - c2)

    def get_degree(self, loc: int) -> int:
        if not 0 <= loc < self.map_size or self.my_map[loc]:
            raise ValueError(f"location {loc} is not a free cell")
        cols = self.num_of_cols
        degree = 0
        if 0 < loc - cols and not self.my_map[loc - cols]:
            degree += 1
        if loc + cols < self.map_size and not self.my_map[loc + cols]:
            degree += 1
        if loc % cols > 0 and not self.my_map[loc - 1]:
            degree += 1
        if loc % cols < cols - 1 and not self.my_map[loc + 1]:
            degree += 1
        return degree

    def is_connected(self, start: int, goal: int) -> bool:
        """Breadth-first search for a path from start to goal."""
        closed = {start}
        open_queue = deque([start])
        while open_queue:
            curr = open_queue.popleft()
            if curr == goal:
                return True
            for nxt in self.get_neighbors(curr):
                if nxt not in closed:
                    closed.add(nxt)
                    open_queue.append(nxt)
        return False

    def add_obstacle(self, obstacle: int) -> bool:
        """Place an obstacle only if the free cells around it stay connected."""
        if self.my_map[obstacle]:
            return False
        self.my_map[obstacle] = True
        row, col = self.get_coordinate(obstacle)
        around = [(row, col - 1), (row + 1, col), (row, col + 1), (row - 1, col)]

        def blocked(index: int) -> bool:
            x, y = around[index]
            if not (0 <= x < self.num_of_rows and 0 <= y < self.num_of_cols):
                return True
            return self.my_map[self.linearize_coordinate(x, y)]

        start, goal = 0, 1
        while start < 3 and goal < 4:
            if blocked(start):
                start += 1
            elif goal <= start:
                goal = start + 1
            elif blocked(goal):
                goal += 1
            elif self.is_connected(
                self.linearize_coordinate(*around[start]),
                self.linearize_coordinate(*around[goal]),
            ):
                start = goal
                goal += 1
            else:
                self.my_map[obstacle] = False
                return False
        return True

    def random_walk(self, loc: int, steps: int) -> int:
        curr = loc
        for _ in range(steps):
            candidates = self.get_neighbors(curr)
            self._rng.shuffle(candidates)
            for nxt in candidates:
                if self.valid_move(curr, nxt):
                    curr = nxt
                    break
        return curr

    def _generate_connected_random_grid(self, rows: int, cols: int, obstacles: int) -> None:
        self.num_of_rows = rows + 2
        self.num_of_cols = cols + 2
        self.map_size = self.num_of_rows * self.num_of_cols
        self.my_map = [False] * self.map_size
        for c in range(self.num_of_cols):
            self.my_map[self.linearize_coordinate(0, c)] = True
            self.my_map[self.linearize_coordinate(self.num_of_rows - 1, c)] = True
        for r in range(self.num_of_rows):
            self.my_map[self.linearize_coordinate(r, 0)] = True
            self.my_map[self.linearize_coordinate(r, self.num_of_cols - 1)] = True
        placed = 0
        while placed < obstacles:
            if self.add_obstacle(self._rng.randrange(self.map_size)):
                placed += 1

    # ----------------------------------------------------------------- files

    @staticmethod
    def _read_lines(fname: str) -> list[str] | None:
        try:
            with open(fname, encoding="utf-8") as handle:
                return handle.read().splitlines()
        except OSError:
            return None

    def _load_map(self) -> bool:
        lines = self._read_lines(self.map_fname)
        if lines is None:
            return False
        try:
            header = lines[0]
            if header.startswith("t"):
                rows = int(lines[1].split()[1])
                cols = int(lines[2].split()[1])
                body = lines[4:]
            else:
                fields = [token for token in header.split(",") if token]
                rows, cols = int(fields[0]), int(fields[1])
                body = lines[1:]
        except (IndexError, ValueError) as exc:
            raise InstanceError(f"Map file {self.map_fname} has a malformed header") from exc
        if len(body) < rows:
            raise InstanceError(f"Map file {self.map_fname} has fewer than {rows} rows")
        self.num_of_rows = rows
        self.num_of_cols = cols
        self.map_size = rows * cols
        self.my_map = [
            not (col < len(line) and line[col] == ".")
            for line in body[:rows]
            for col in range(cols)
        ]
        return True

    @staticmethod
    def _tokens(line: str) -> list[str]:
        return [token for token in line.split("\t") if token]

    def _parse_agent_line(self, line: str) -> tuple[int, list[int]]:
        try:
            values = [int(token) for token in self._tokens(line)]
            num_landmarks = values[0]
            if len(values) < 3 + 2 * num_landmarks:
                raise IndexError
            start = self.linearize_coordinate(values[2], values[1])
            goals = [
                self.linearize_coordinate(values[4 + 2 * j], values[3 + 2 * j])
                for j in range(num_landmarks)
            ]
        except (IndexError, ValueError) as exc:
            raise InstanceError(f"Malformed agent line in {self.agent_fname}: {line!r}") from exc
        return start, goals

    def _load_agents(self) -> bool:
        lines = self._read_lines(self.agent_fname)
        if lines is None:
            return False
        if self.num_of_agents == 0:
            raise InstanceError("The number of agents should be larger than 0")
        n = self.num_of_agents
        self.start_locations = []
        self.goal_locations = []
        self.temporal_cons = [[] for _ in range(n * n)]

        remaining = iter(lines[1:])
        for _ in range(n):
            line = next((item for item in remaining if not item.startswith("#")), None)
            if line is None:
                raise InstanceError(f"Agent file {self.agent_fname} describes fewer than {n} agents")
            start, goals = self._parse_agent_line(line)
            self.start_locations.append(start)
            self.goal_locations.append(goals)

        for line in remaining:
            if line.startswith("t"):
                break
        for line in remaining:
            tokens = self._tokens(line)
            if len(tokens) < 4:
                continue
            try:
                from_agent, from_landmark, to_agent, to_landmark = (int(t) for t in tokens[:4])
            except ValueError as exc:
                raise InstanceError(f"Malformed temporal constraint: {line!r}") from exc
            if 0 <= from_agent < n and 0 <= to_agent < n:
                self.temporal_cons[from_agent * n + to_agent].append((from_landmark, to_landmark))
        return True

    def map_text(self) -> str:
        """The map drawn with '@' for obstacles and '.' for free cells."""
        return "".join(
            "".join(
                "@" if self.my_map[self.linearize_coordinate(r, c)] else "."
                for c in range(self.num_of_cols)
            )
            + "\n"
            for r in range(self.num_of_rows)
        )

    def save_map(self) -> None:
        try:
            with open(self.map_fname, "w", encoding="utf-8") as handle:
                handle.write(f"{self.num_of_rows},{self.num_of_cols}\n")
                handle.write(self.map_text())
        except OSError as exc:
            raise InstanceError(f"Fail to save the map to {self.map_fname}") from exc

    def save_agents(self) -> None:
        try:
            with open(self.agent_fname, "w", encoding="utf-8") as handle:
                handle.write(f"{self.num_of_agents}\n")
                for start, goals in zip(self.start_locations, self.goal_locations):
                    row, col = self.get_coordinate(start)
                    handle.write(f"{row},{col},{len(goals)}\n")
        except OSError as exc:
            raise InstanceError(f"Fail to save the agents to {self.agent_fname}") from exc

    def describe_agents(self) -> str:
        """One line per agent with its start and its goals in order."""
        lines = []
        for i, (start, goals) in enumerate(zip(self.start_locations, self.goal_locations)):
            row, col = self.get_coordinate(start)
            text = f"Agent{i} : S=({row},{col})"
            for j, goal in enumerate(goals):
                g_row, g_col = self.get_coordinate(goal)
                text += f" ; 0: ({g_row},{g_col})" if j == 0 else f" =>{j}: ({g_row},{g_col})"
            lines.append(text)
        return "\n".join(lines) + ("\n" if lines else "")