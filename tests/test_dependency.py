import pytest

from mapfpc.dependency import (
    agents_dependent,
    copy_conflict_graph,
    dependence_edges,
    sync_mdds,
)
from mapfpc.mdd import MDD, MDDNode


def make_mdd(levels, edges):
    """Build an MDD from locations per level and (level, from_loc, to_loc) edges."""
    mdd = MDD()
    mdd.levels = []
    for t, locations in enumerate(levels):
        row = []
        for loc in locations:
            node = MDDNode(loc)
            node.level = t
            row.append(node)
        mdd.levels.append(row)
    for t, src, dst in edges:
        parent = mdd.find(src, t)
        child = mdd.find(dst, t + 1)
        parent.children.append(child)
        child.parents.append(parent)
    return mdd


def path_mdd(locations):
    edges = [(t, a, b) for t, (a, b) in enumerate(zip(locations, locations[1:]))]
    return make_mdd([[loc] for loc in locations], edges)


def test_disjoint_paths_are_independent():
    assert sync_mdds(path_mdd([0, 1]), path_mdd([5, 6])) is True
    assert agents_dependent(path_mdd([0, 1]), path_mdd([5, 6])) is False


def test_vertex_conflict_makes_agents_dependent():
    assert agents_dependent(path_mdd([0, 1, 4]), path_mdd([2, 1, 5])) is True


def test_swap_conflict_makes_agents_dependent():
    assert sync_mdds(path_mdd([0, 1]), path_mdd([1, 0])) is False


def test_alternative_branch_avoids_dependency():
    mdd1 = make_mdd(
        [[0], [1, 3], [4]],
        [(0, 0, 1), (0, 0, 3), (1, 1, 4), (1, 3, 4)],
    )
    assert agents_dependent(mdd1, path_mdd([2, 1, 5])) is False


def test_shorter_agent_waits_at_goal():
    short = path_mdd([0, 1])
    assert agents_dependent(short, path_mdd([5, 6, 1])) is True
    assert agents_dependent(short, path_mdd([5, 6, 7])) is False


def test_dependency_is_symmetric():
    short = path_mdd([0, 1])
    long = path_mdd([5, 6, 1])
    assert agents_dependent(short, long) == agents_dependent(long, short)


def test_single_level_other_is_not_synchronisable():
    assert sync_mdds(path_mdd([0]), path_mdd([3])) is False


def test_sync_does_not_modify_inputs():
    short = path_mdd([0, 1])
    long = path_mdd([5, 6, 1])
    sync_mdds(short, long)
    assert [[n.location for n in level] for level in short.levels] == [[0], [1]]
    assert [[n.location for n in level] for level in long.levels] == [[5], [6], [1]]


def test_copy_conflict_graph_drops_changed_agents():
    parent = {1: 1, 5: 1, 2: 0}
    child = copy_conflict_graph(parent, [1], 3)
    assert child == {2: 0}
    assert parent == {1: 1, 5: 1, 2: 0}


def test_copy_conflict_graph_keeps_all_without_changes():
    parent = {1: 1, 5: 2}
    assert copy_conflict_graph(parent, [], 3) == parent


def test_dependence_edges_symmetric_and_counted():
    matrix, count = dependence_edges({1: 1, 5: 0, 2: 3}, 3)
    assert count == 2
    assert matrix[1] == matrix[3] == 1
    assert matrix[2] == matrix[6] == 3
    assert matrix[5] == matrix[7] == 0
    assert all(matrix[i * 3 + j] == matrix[j * 3 + i] for i in range(3) for j in range(3))


def test_dependence_edges_empty_graph():
    matrix, count = dependence_edges({}, 2)
    assert count == 0
    assert matrix == [0, 0, 0, 0]


@pytest.mark.parametrize("changed", [[0], [2], [0, 2]])
def test_copied_graph_never_touches_changed(changed):
    parent = {1: 1, 2: 1, 5: 1}
    child = copy_conflict_graph(parent, changed, 3)
    for index in child:
        assert index // 3 not in changed and index % 3 not in changed