"""Pairwise dependency between agents, decided by synchronising their MDDs.

Two agents are dependent when no pair of their cost-optimal paths is free of
vertex and edge conflicts. The dependence graph records one edge per dependent
pair and is stored as a mapping from ``a1 * num_of_agents + a2`` (with
``a1 < a2``) to an edge weight.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from .mdd import MDD, SyncMDD, SyncMDDNode


def _extend_with_waits(copy: SyncMDD, num_levels: int) -> None:
    """Pad a synchronised MDD by waiting at its last location."""
    while len(copy.levels) < num_levels:
        parent = copy.levels[-1][0]
        node = SyncMDDNode(parent.location, parent)
        parent.children.append(node)
        copy.levels.append([node])


def sync_mdds(mdd: MDD, other: MDD) -> bool:
    """True if the two MDDs hold a pair of paths without vertex or edge conflicts.

    ``mdd`` must not have more levels than ``other``; the shorter agent is
    assumed to wait at its goal until the longer one arrives. Neither MDD is
    modified.
    """
    if len(other.levels) <= 1:
        # the other MDD was already pruned completely
        return False

    copy = SyncMDD(mdd)
    _extend_with_waits(copy, len(other.levels))

    # start locations never collide, so the roots coexist
    copy.levels[0][0].coexisting_nodes.append(other.levels[0][0])

    for i in range(1, len(copy.levels)):
        for node in list(copy.levels[i]):
            for parent in node.parents:
                for parent_coexisting in parent.coexisting_nodes:
                    for candidate in parent_coexisting.children:
                        if node.location == candidate.location:
                            continue  # vertex conflict
                        if (
                            node.location == parent_coexisting.location
                            and parent.location == candidate.location
                        ):
                            continue  # edge conflict
                        if not any(known is candidate for known in node.coexisting_nodes):
                            node.coexisting_nodes.append(candidate)
            if not node.coexisting_nodes:
                copy.delete_node(node, i)
        if not copy.levels[i]:
            copy.clear()
            return False
    copy.clear()
    return True


def agents_dependent(mdd1: MDD, mdd2: MDD) -> bool:
    """True if the agents of the two MDDs cannot both follow cost-optimal paths."""
    if len(mdd1.levels) > len(mdd2.levels):
        mdd1, mdd2 = mdd2, mdd1
    return not sync_mdds(mdd1, mdd2)


def copy_conflict_graph(
    parent_graph: Mapping[int, int], changed_agents: Iterable[int], num_of_agents: int
) -> dict[int, int]:
    """The parent's dependence edges that touch none of the replanned agents."""
    changed = set(changed_agents)
    return {
        index: weight
        for index, weight in parent_graph.items()
        if index // num_of_agents not in changed and index % num_of_agents not in changed
    }


def dependence_edges(
    conflict_graph: Mapping[int, int], num_of_agents: int
) -> tuple[list[int], int]:
    """Symmetric adjacency matrix (flattened) of positive edges and the edge count."""
    matrix = [0] * (num_of_agents * num_of_agents)
    num_edges = 0
    for i in range(num_of_agents):
        for j in range(i + 1, num_of_agents):
            weight = conflict_graph.get(i * num_of_agents + j, 0)
            if weight > 0:
                matrix[i * num_of_agents + j] = weight
                matrix[j * num_of_agents + i] = weight
                num_edges += 1
    return matrix, num_edges