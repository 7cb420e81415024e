# mapfpc

Building blocks for multi-agent path finding (MAPF) on 4-connected grids where
each agent visits an ordered sequence of goal locations (landmarks) and some
landmark visits must happen before landmark visits of other agents.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `mapfpc.common` – `Path` (a list of `PathEntry` starting at `begin_time`,
  with `end_time()`, `empty()` and `locations()`) and `PathEntry`
  (`location`, `mdd_width`, `is_goal`, `is_single()`). Also the limits
  `MAX_TIMESTEP`, `MAX_COST` and `MAX_NODES`.
- `mapfpc.conflict` – `Constraint`, a named tuple `(agent, x, y, t, type)`,
  and `Conflict`, whose builders `vertex_conflict`, `edge_conflict`,
  `corridor_conflict`, `rectangle_conflict`, `target_conflict`,
  `mutex_conflict`, `temporal_conflict` and `priority_conflict` fill in the
  two agents and the constraints of each branch and return the conflict.
  The enums are `ConstraintType`, `ConflictType`, `ConflictPriority` and
  `ConflictSelection`.
- `mapfpc.instance` – `Instance`, a grid map with agents, their start cells,
  goal sequences and precedence constraints between goals. It offers grid
  helpers (`valid_move`, `get_neighbors`, `get_manhattan_distance`,
  `get_degree`, `is_connected`, coordinate conversion), `add_obstacle`,
  `random_walk`, `map_text`, `save_map`, `save_agents` and
  `describe_agents`. Missing or malformed files raise `InstanceError`.
- `mapfpc.mdd` – multi-valued decision diagrams: `MDD` (`build`, `flatten`,
  `find`, `delete_node`, `goal_at`, `copy`, `clear`), `MDDNode`, `SyncMDD`
  and `SyncMDDNode`, plus `collect_mdd_level` and `format_mdd`.
- `mapfpc.dependency` – `sync_mdds` and `agents_dependent` decide whether two
  agents' MDDs hold a pair of paths without vertex or edge conflicts;
  `copy_conflict_graph` keeps the dependence edges of a parent that touch no
  replanned agent, and `dependence_edges` turns them into a flattened
  symmetric matrix with the edge count.

## File formats read by `Instance`

Map files start either with a line `rows,cols` followed by the rows, or with a
four-line header whose second and third lines carry the height and width as
their second word (`height 8`, `width 8`) followed by the rows. A `.` is a
free cell, anything else an obstacle. If the map file is missing and
`num_of_rows`, `num_of_cols` and `num_of_obstacles` are given, a connected
random grid with a border of obstacles is generated and saved.

Agent files have one ignored header line, then one tab-separated line per agent
(`num_goals  col  row  col  row ...`, start first); lines starting with `#`
are skipped. After a line starting with `t`, tab-separated lines
`from_agent  from_goal  to_agent  to_goal` list precedence constraints.
`num_of_agents` must be greater than zero.

## Example

```python
from mapfpc.conflict import Conflict, ConstraintType
from mapfpc.dependency import copy_conflict_graph, dependence_edges

conflict = Conflict().vertex_conflict(0, 1, v=12, t=3)
assert conflict.constraint1[0].type is ConstraintType.VERTEX

# dependence edges between agents (0, 1) and (1, 2) among three agents
graph = {0 * 3 + 1: 1, 1 * 3 + 2: 1}
kept = copy_conflict_graph(graph, changed_agents=[2], num_of_agents=3)
matrix, num_edges = dependence_edges(kept, 3)   # num_edges == 1
```

## What the package does not do

It contains no complete solver and no command-line program: there is no
high-level conflict-based or priority-based search, no single-agent path
planner and no constraint table. `MDD.build` expects the caller to supply a
constraint table (with `leq_goal_time`, `g_goal_time` and `constrained`) and a
solver object (with `start_location`, `goal_location`, `heuristic_landmark`,
`get_heuristic` and `get_next_locations`). `Instance` does not generate random
agents; a missing agent file is an error.