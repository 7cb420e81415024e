from collections import deque

import pytest

from mapfpc.mdd import MDD, SyncMDD, collect_mdd_level, format_mdd


class GridSolver:
    def __init__(self, rows, start, goals):
        self.cols = len(rows[0])
        self.size = len(rows) * self.cols
        self.free = [ch == "." for row in rows for ch in row]
        self.start_location = start
        self.goal_location = list(goals)
        self.my_heuristic = [self._distances(g) for g in goals]
        landmark = [0] * len(goals)
        for i in range(len(goals) - 2, -1, -1):
            landmark[i] = landmark[i + 1] + self.my_heuristic[i + 1][goals[i]]
        self.heuristic_landmark = landmark

    def neighbors(self, loc):
        row, col = divmod(loc, self.cols)
        result = []
        for dr, dc in ((0, 1), (0, -1), (1, 0), (-1, 0)):
            r, c = row + dr, col + dc
            nxt = r * self.cols + c
            if 0 <= c < self.cols and 0 <= nxt < self.size and self.free[nxt]:
                result.append(nxt)
        return result

    def _distances(self, goal):
        dist = [10**6] * self.size
        dist[goal] = 0
        queue = deque([goal])
        while queue:
            curr = queue.popleft()
            for nxt in self.neighbors(curr):
                if dist[nxt] > dist[curr] + 1:
                    dist[nxt] = dist[curr] + 1
                    queue.append(nxt)
        return dist

    def get_next_locations(self, curr):
        return [curr] + self.neighbors(curr)

    def get_heuristic(self, stage, loc):
        return self.my_heuristic[stage][loc] + self.heuristic_landmark[stage]


class Table:
    def __init__(self, stops, vertices=(), edges=(), leq=None):
        self.leq_goal_time = list(leq) if leq is not None else [-1] * stops
        self.g_goal_time = [-1] * stops
        self.vertices = set(vertices)
        self.edges = set(edges)

    def constrained(self, *args):
        if len(args) == 2:
            return tuple(args) in self.vertices
        return tuple(args) in self.edges


GRID = ["...", "...", "..."]


def build(rows, start, goals, levels, **table_args):
    solver = GridSolver(rows, start, goals)
    mdd = MDD()
    mdd.build(Table(len(goals), **table_args), levels, solver)
    return mdd


def check_structure(mdd):
    last = len(mdd.levels) - 1
    for t, level in enumerate(mdd.levels):
        for node in level:
            assert node.level == t
            for child in node.children:
                assert child.level == t + 1
                assert any(p is node for p in child.parents)
                assert any(c is child for c in mdd.levels[t + 1])
            if t < last:
                assert node.children
            if t > 0:
                assert node.parents


def level_sets(levels):
    return [sorted(node.location for node in level) for level in levels]


def test_open_grid_levels():
    mdd = build(GRID, 0, [8], 5)
    check_structure(mdd)
    assert [len(level) for level in mdd.levels] == [1, 2, 3, 2, 1]
    assert mdd.levels[0][0].location == 0
    assert mdd.levels[-1][0].location == 8
    for t, level in enumerate(mdd.levels):
        for node in level:
            row, col = divmod(node.location, 3)
            assert row + col == t


def test_vertex_constraint_removes_location():
    mdd = build(GRID, 0, [8], 5, vertices={(1, 1)})
    check_structure(mdd)
    assert 1 not in [n.location for n in mdd.levels[1]]
    assert mdd.levels[-1][0].location == 8


def test_edge_constraint_removes_move():
    mdd = build(GRID, 0, [8], 5, edges={(0, 1, 1)})
    check_structure(mdd)
    assert 1 not in [n.location for n in mdd.levels[1]]


def test_goal_parent_not_at_goal():
    mdd = build(["...."], 0, [3], 5)
    check_structure(mdd)
    assert all(n.location != 3 for n in mdd.levels[-2])
    assert all(p.location != 3 for p in mdd.levels[-1][0].parents)


def test_multi_stage_corridor():
    mdd = build(["....."], 2, [0, 4], 7)
    check_structure(mdd)
    assert level_sets(mdd.levels) == [[2], [1], [0], [1], [2], [3], [4]]
    stages = [level[0].stage for level in mdd.levels]
    assert stages == sorted(stages)
    assert stages[-1] == 1
    assert mdd.goal_at(6) is mdd.levels[6][0]
    assert mdd.goal_at(5) is None
    assert mdd.goal_at(10) is None


def test_too_few_levels_raises():
    with pytest.raises(ValueError):
        build(["...."], 0, [3], 2)


def test_length_bound_prunes_everything():
    with pytest.raises(ValueError):
        build(["...."], 0, [3], 4, leq=[1])


def test_find():
    mdd = build(GRID, 0, [8], 5)
    node = mdd.find(4, 2)
    assert node is not None and node.location == 4 and node.level == 2
    assert mdd.find(4, 1) is None
    assert mdd.find(0, 99) is None


def test_delete_node_prunes_dangling():
    mdd = build(GRID, 0, [8], 5)
    mdd.delete_node(mdd.find(1, 1))
    check_structure(mdd)
    assert [n.location for n in mdd.levels[1]] == [3]
    assert mdd.find(2, 2) is None
    assert mdd.find(4, 2) is not None


def test_copy_is_deep_and_equal():
    mdd = build(GRID, 0, [8], 5)
    other = mdd.copy()
    assert level_sets(other.levels) == level_sets(mdd.levels)
    check_structure(other)
    other.delete_node(other.find(1, 1))
    assert mdd.find(1, 1) is not None
    assert other.find(1, 1) is None
    assert other.solver is mdd.solver


def test_copy_of_empty_raises():
    with pytest.raises(ValueError):
        MDD().copy()


def test_flatten_matches_levels():
    mdd = build(["....."], 2, [0, 4], 7)
    flat = mdd.flatten()
    assert level_sets(flat) == level_sets(mdd.levels)
    for i in range(1, len(flat)):
        previous = {n.location for n in mdd.levels[i - 1]}
        for node in flat[i]:
            assert node.parents
            assert {p.location for p in node.parents} <= previous
            for parent in node.parents:
                assert any(c is node for c in parent.children)


def test_collect_level():
    mdd = build(GRID, 0, [8], 5)
    collected = collect_mdd_level(mdd, 2)
    assert set(collected) == {n.location for n in mdd.levels[2]}
    for loc, node in collected.items():
        assert node.location == loc


def test_format_mdd():
    mdd = build(["...."], 0, [3], 4)
    assert format_mdd(mdd) == "L0: 0,\nL1: 1,\nL2: 2,\nL3: 3,\n"
    assert str(mdd) == format_mdd(mdd)


def test_clear():
    mdd = build(GRID, 0, [8], 5)
    mdd.clear()
    assert mdd.levels == []


def test_sync_mdd_copies_structure():
    mdd = build(GRID, 0, [8], 5)
    sync = SyncMDD(mdd)
    assert level_sets(sync.levels) == level_sets(mdd.levels)
    node = sync.find(4, 2)
    assert node is not None and node.location == 4
    assert {p.location for p in node.parents} == {
        p.location for p in mdd.find(4, 2).parents
    }
    assert sync.find(4, 1) is None


def test_sync_mdd_delete_node():
    mdd = build(GRID, 0, [8], 5)
    sync = SyncMDD(mdd)
    sync.delete_node(sync.find(1, 1), 1)
    mdd.delete_node(mdd.find(1, 1))
    assert level_sets(sync.levels) == level_sets(mdd.levels)
    sync.clear()
    assert sync.levels == []