"""Fork support: a junction may not send out more lanes than reach it.

Every lane of color ``c`` at ``dst`` is a unit edge ``(dst - dir(c)) -> dst``
in a directed multigraph rebuilt from the board on every query. Two checks
are available and a game uses exactly one of them:

- ``max_flow``: for every fork (a non-origin node with two or more edges
  toward a higher ring) the max flow from all origins to the fork must be at
  least the fork's outward edge count. Flow is computed with Dinic's
  algorithm.
- ``local_degree``: every non-origin node must have out-degree no larger
  than its in-degree.

The two are related but not equivalent; see the property tests.
"""

from __future__ import annotations

from collections import Counter, deque

from hexstrings.games.hex_strings.board import iter_tiles, origin_set
from hexstrings.games.hex_strings.rules import ForkFormulation, Rules
from hexstrings.games.hex_strings.types import Coord, in_bounds, lane_source, ring_index

Edge = tuple[Coord, Coord]

_UNBOUNDED = 1 << 30


# ------------------------------------------------------------------
# Lane multigraph
# ------------------------------------------------------------------


def lane_edges(
    board: dict,
    rules: Rules,
    extra: tuple[Coord, str] | None = None,
) -> list[Edge]:
    """Edges for every lane on the board, plus an optional hypothetical lane.

    Lanes whose source lies off the board contribute no edge.
    """
    radius = board["radius"]
    lanes = [(coord, color) for coord, colors in iter_tiles(board) for color in colors]
    if extra is not None:
        lanes.append(extra)

    edges: list[Edge] = []
    for coord, color in lanes:
        src = lane_source(coord, color, rules.edge_colors)
        if in_bounds(src, radius):
            edges.append((src, coord))
    return edges


def outward_branches(edges: list[Edge], origins: set[Coord]) -> dict[Coord, int]:
    """Forks: non-origin nodes with at least two edges toward a higher ring."""
    out = Counter(u for u, v in edges if ring_index(v) > ring_index(u) and u not in origins)
    return {node: n for node, n in out.items() if n >= 2}


# ------------------------------------------------------------------
# Dinic max-flow
# ------------------------------------------------------------------


def max_flow(
    num_nodes: int,
    arcs: list[tuple[int, int, int]],
    source: int,
    sink: int,
) -> int:
    """Maximum flow from *source* to *sink* over ``(u, v, capacity)`` arcs."""
    if source == sink:
        return _UNBOUNDED

    # Arc e and its residual twin e ^ 1 are stored side by side.
    adjacency: list[list[int]] = [[] for _ in range(num_nodes)]
    head: list[int] = []
    cap: list[int] = []
    for u, v, c in arcs:
        adjacency[u].append(len(head))
        head.append(v)
        cap.append(c)
        adjacency[v].append(len(head))
        head.append(u)
        cap.append(0)

    def build_levels() -> list[int]:
        level = [-1] * num_nodes
        level[source] = 0
        queue = deque([source])
        while queue:
            u = queue.popleft()
            for e in adjacency[u]:
                if cap[e] > 0 and level[head[e]] < 0:
                    level[head[e]] = level[u] + 1
                    queue.append(head[e])
        return level

    def augment(u: int, pushed: int, level: list[int], cursor: list[int]) -> int:
        if u == sink:
            return pushed
        while cursor[u] < len(adjacency[u]):
            e = adjacency[u][cursor[u]]
            v = head[e]
            if cap[e] > 0 and level[v] == level[u] + 1:
                got = augment(v, min(pushed, cap[e]), level, cursor)
                if got > 0:
                    cap[e] -= got
                    cap[e ^ 1] += got
                    return got
            cursor[u] += 1
        return 0

    flow = 0
    while True:
        level = build_levels()
        if level[sink] < 0:
            return flow
        cursor = [0] * num_nodes
        while True:
            pushed = augment(source, _UNBOUNDED, level, cursor)
            if pushed == 0:
                break
            flow += pushed


def max_flow_violations(edges: list[Edge], origins: set[Coord]) -> list[Coord]:
    """Forks whose supply from the origins is smaller than their branch count."""
    forks = outward_branches(edges, origins)
    if not forks:
        return []

    nodes = sorted({n for edge in edges for n in edge} | origins)
    index = {node: i for i, node in enumerate(nodes)}
    super_source = len(nodes)
    arcs = [(index[u], index[v], 1) for u, v in edges]
    arcs.extend((super_source, index[o], _UNBOUNDED) for o in origins)

    return [
        fork
        for fork, branches in sorted(forks.items())
        if max_flow(len(nodes) + 1, arcs, super_source, index[fork]) < branches
    ]


# ------------------------------------------------------------------
# Local degree
# ------------------------------------------------------------------


def local_degree_violations(edges: list[Edge], origins: set[Coord]) -> list[Coord]:
    """Non-origin nodes that send out more lanes than they receive."""
    in_degree = Counter(v for _u, v in edges)
    out_degree = Counter(u for u, _v in edges)
    return sorted(
        node for node, out in out_degree.items()
        if node not in origins and out > in_degree[node]
    )


# ------------------------------------------------------------------
# Entry points
# ------------------------------------------------------------------


def fork_support_violations(
    board: dict,
    rules: Rules,
    extra: tuple[Coord, str] | None = None,
) -> list[Coord]:
    """Nodes that break the configured fork-support formulation."""
    edges = lane_edges(board, rules, extra)
    origins = origin_set(board)
    if rules.fork_support_formulation == ForkFormulation.LOCAL_DEGREE:
        return local_degree_violations(edges, origins)
    return max_flow_violations(edges, origins)


def fork_support_ok(board: dict, coord: Coord, color: str, rules: Rules) -> bool:
    """Would adding *color* at *coord* keep every fork supported?"""
    return not fork_support_violations(board, rules, extra=(coord, color))
