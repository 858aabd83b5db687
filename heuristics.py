"""
Construction heuristics and 2-opt local search shared by the solvers.
"""

from typing import List, Optional, Sequence

import numpy as np

from tsp_core import City, DistanceMatrix, EPSILON, reverse_segment


def make_rng(rng: Optional[np.random.Generator] = None) -> np.random.Generator:
    """Return ``rng`` or a fresh, unseeded generator."""
    return rng if rng is not None else np.random.default_rng()


# --------------------------------------------------------
# CONSTRUCTORS
# --------------------------------------------------------
def nearest_neighbor(
    cities: Sequence[City],
    rng: Optional[np.random.Generator] = None,
    start: Optional[int] = None,
    distance_matrix: Optional[DistanceMatrix] = None
) -> List[City]:
    """
    Greedy nearest neighbour tour.

    Starts at index ``start`` (random when omitted) and keeps appending the
    closest unvisited city. Ties go to the city that comes first in ``cities``.
    """
    n = len(cities)
    if n == 0:
        return []

    if start is None:
        start = int(make_rng(rng).integers(n))
    dm = distance_matrix or DistanceMatrix(cities)
    order = nearest_neighbor_order(dm, start)
    return dm.to_cities(order)


def nearest_neighbor_order(dm: DistanceMatrix, start: int) -> List[int]:
    n = dm.n
    visited = [False] * n
    visited[start] = True
    order = [start]
    cur = start

    for _ in range(n - 1):
        row = dm.rows[cur]
        nxt = -1
        best = float("inf")
        for j in range(n):
            if not visited[j] and row[j] < best:
                best = row[j]
                nxt = j
        visited[nxt] = True
        order.append(nxt)
        cur = nxt

    return order


def random_tour(cities: Sequence[City], rng: Optional[np.random.Generator] = None) -> List[City]:
    """Uniformly shuffled copy of ``cities``."""
    perm = make_rng(rng).permutation(len(cities))
    return [cities[i] for i in perm]


# --------------------------------------------------------
# 2-OPT
# --------------------------------------------------------
def two_opt_delta(rows: List[List[float]], order: Sequence[int], i: int, k: int) -> float:
    """
    Change in tour length caused by reversing ``order[i..k]``.

    Only the edges (i-1, i) and (k, k+1) are replaced, so this is O(1).
    """
    n = len(order)
    a, b = order[i - 1], order[i]
    c, e = order[k], order[(k + 1) % n]
    return rows[a][c] + rows[b][e] - rows[a][b] - rows[c][e]


def two_opt_order(order: Sequence[int], rows: List[List[float]], max_passes: Optional[int] = None) -> List[int]:
    """First-improvement 2-opt on an index order until no reversal helps."""
    best = list(order)
    n = len(best)
    if n < 4:
        return best

    passes = 0
    improved = True
    while improved:
        if max_passes is not None and passes >= max_passes:
            break
        improved = False
        passes += 1

        for i in range(1, n - 1):
            for k in range(i + 1, n):
                if two_opt_delta(rows, best, i, k) < -EPSILON:
                    best = reverse_segment(best, i, k)
                    improved = True

    return best


def two_opt(
    cities: Sequence[City],
    distance_matrix: Optional[DistanceMatrix] = None,
    max_passes: Optional[int] = None
) -> List[City]:
    """Return a 2-opt local optimum reachable from ``cities``."""
    if len(cities) < 4:
        return list(cities)

    dm = distance_matrix or DistanceMatrix(cities)
    order = two_opt_order(dm.to_indices(cities), dm.rows, max_passes)
    return dm.to_cities(order)
