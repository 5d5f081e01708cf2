"""Scoring: which colors connect the origins to the rim.

For each color independently:

- ``from_origins``: cells reachable from any origin. With the canonical
  ``multi_color`` reach the walk may cross lanes of any color (a path may
  change color on the way out); with ``same_color`` it may not. Origins chain
  through each other.
- ``from_rim``: cells of that color reachable, through that color only, from
  a rim cell holding it.
- The color scores the cells in both sets (origins themselves never score),
  optionally restricted to cells on a shortest origin-to-rim route, plus an
  optional origin-to-origin bonus.

Scores are a pure function of the board, the preferences and the rules.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable, Iterable

from hexstrings.games.hex_strings.board import is_occupied, lanes_at, origin_set, rim_coords
from hexstrings.games.hex_strings.rules import OriginReach, Rules
from hexstrings.games.hex_strings.types import Coord, hex_neighbors, in_bounds

PREFERENCE_RANKS = ("primary", "secondary", "tertiary")


def compute_scores(
    board: dict,
    preferences: dict[str, dict[str, str]],
    rules: Rules,
) -> dict[str, int]:
    """Weighted score per player. ``preferences`` maps player -> rank -> color."""
    counts = compute_color_counts(board, rules)
    return {
        pid: sum(preference_weight(prefs, color, rules) * n for color, n in counts.items())
        for pid, prefs in preferences.items()
    }


def preference_weight(prefs: dict[str, str], color: str, rules: Rules) -> int:
    """Points per scoring cell of *color* for a player with *prefs*."""
    for rank, key in enumerate(PREFERENCE_RANKS):
        if prefs.get(key) == color:
            return rules.scoring.color_points[rank]
    return 0


def compute_color_counts(board: dict, rules: Rules) -> dict[str, int]:
    """Number of scoring cells per color."""
    origins = origin_set(board)
    occupied_reach: dict[Coord, int] | None = None
    if rules.scoring.origin_reach == OriginReach.MULTI_COLOR:
        occupied_reach = _bfs(
            board, sorted(origins), lambda c: c in origins or is_occupied(board, c),
        )
    return {
        color: _count_color(board, color, rules, origins, occupied_reach)
        for color in rules.colors
    }


def _count_color(
    board: dict,
    color: str,
    rules: Rules,
    origins: set[Coord],
    occupied_reach: dict[Coord, int] | None,
) -> int:
    scoring = rules.scoring

    def has_color(c: Coord) -> bool:
        return color in lanes_at(board, c)

    if occupied_reach is not None:
        from_origins = occupied_reach
    else:
        from_origins = _bfs(board, sorted(origins), lambda c: c in origins or has_color(c))

    if scoring.by_rim_touch:
        rim_seeds = [c for c in rim_coords(board["radius"]) if has_color(c)]
        from_rim = _bfs(board, rim_seeds, has_color)
        connected = [c for c in from_rim if c in from_origins and c not in origins]
        if scoring.shortest_path and connected:
            best = min(from_origins[c] + from_rim[c] for c in connected)
            counted = {c for c in connected if from_origins[c] + from_rim[c] == best}
        else:
            counted = set(connected)
    else:
        counted = {c for c in from_origins if c not in origins and has_color(c)}

    total = len(counted)
    if scoring.origin_to_origin and len(origins) >= 2:
        total += _origin_to_origin(board, has_color, origins, counted, scoring.shortest_path)
    return total


def _origin_to_origin(
    board: dict,
    has_color: Callable[[Coord], bool],
    origins: set[Coord],
    counted: set[Coord],
    shortest_path: bool,
) -> int:
    """Cells linking two origins through one color, not passing a third origin."""
    reach: dict[Coord, dict[Coord, int]] = {}
    linked: dict[Coord, dict[Coord, int]] = {}
    for origin in sorted(origins):
        dist = {origin: 0}
        hits: dict[Coord, int] = {}
        queue = deque([origin])
        while queue:
            cur = queue.popleft()
            for n in hex_neighbors(cur):
                if n in origins:
                    if n != origin and n not in hits:
                        hits[n] = dist[cur] + 1
                    continue
                if n in dist or not has_color(n):
                    continue
                dist[n] = dist[cur] + 1
                queue.append(n)
        del dist[origin]
        reach[origin] = dist
        linked[origin] = hits

    if shortest_path:
        bonus = 0
        ordered = sorted(origins)
        for i, a in enumerate(ordered):
            for b in ordered[i + 1:]:
                edges = linked[a].get(b)
                if edges is not None:
                    bonus += max(0, edges - 1)
        return bonus

    seen_by: dict[Coord, int] = {}
    for dist in reach.values():
        for c in dist:
            seen_by[c] = seen_by.get(c, 0) + 1
    return sum(1 for c, n in seen_by.items() if n >= 2 and c not in counted)


def _bfs(
    board: dict,
    seeds: Iterable[Coord],
    passable: Callable[[Coord], bool],
) -> dict[Coord, int]:
    """Multi-source BFS distances over in-bounds cells where *passable* holds."""
    radius = board["radius"]
    dist: dict[Coord, int] = {}
    queue: deque[Coord] = deque()
    for s in seeds:
        if s not in dist:
            dist[s] = 0
            queue.append(s)
    while queue:
        cur = queue.popleft()
        for n in hex_neighbors(cur):
            if n in dist or not in_bounds(n, radius) or not passable(n):
                continue
            dist[n] = dist[cur] + 1
            queue.append(n)
    return dist
