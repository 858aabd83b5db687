"""
Scatter Search Solver
Diversified 2-opt improved population, an elite reference set and pairwise
segment crossover, with early termination once the best tour stops improving.
"""

import itertools
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from tsp_core import (
    City,
    DistanceMatrix,
    EPSILON,
    InvalidConfigurationError,
    SolveResult,
    Tour,
    canonical_key,
    empty_result,
    require_positive,
)
from heuristics import make_rng, random_tour, two_opt, two_opt_order


Member = Tuple[float, List[int]]


def segment_crossover(parent1: Sequence, parent2: Sequence, rng: Optional[np.random.Generator] = None) -> list:
    """
    Copy a random slice of ``parent1`` into the child at the same positions,
    then fill the empty slots left to right with the remaining elements in
    the order they appear in ``parent2``.
    """
    rng = make_rng(rng)
    size = len(parent1)
    if size == 0:
        return []

    start = int(rng.integers(size))
    end = int(rng.integers(size))
    if start > end:
        start, end = end, start

    child = [None] * size
    used = set()
    for i in range(start, end + 1):
        child[i] = parent1[i]
        used.add(parent1[i])

    p2_idx = 0
    for i in range(size):
        if child[i] is None:
            while parent2[p2_idx] in used:
                p2_idx += 1
            child[i] = parent2[p2_idx]
            used.add(parent2[p2_idx])
            p2_idx += 1

    return child


class ReferenceSet:
    """Bounded elite pool of distinct tours, kept sorted by length."""

    def __init__(self, size: int):
        self.size = size
        self.members: List[Member] = []

    def update(self, candidates: Iterable[Member]):
        """Pool candidates with the current members, sort, and keep the best."""
        pool = []
        seen = set()
        for distance, order in itertools.chain(self.members, candidates):
            key = canonical_key(order)
            if key in seen:
                continue
            seen.add(key)
            pool.append((distance, order))

        pool.sort(key=lambda member: member[0])
        self.members = pool[:self.size]

    @property
    def best(self) -> Member:
        return self.members[0]

    def pairs(self) -> Iterator[Tuple[List[int], List[int]]]:
        for (_, a), (_, b) in itertools.combinations(self.members, 2):
            yield a, b

    def __len__(self):
        return len(self.members)

    def __iter__(self):
        return iter(self.members)


@dataclass
class ScatterState:
    """Search state owned by a single run."""
    reference_set: ReferenceSet
    best: List[int]
    best_distance: float


class ScatterSearchSolver:
    """Scatter Search solver for the TSP."""

    def __init__(
        self,
        cities: Sequence[City],
        max_iterations: int = 100,
        ref_set_size: int = 5,
        population_size: int = 30,
        rng: Optional[np.random.Generator] = None
    ):
        self.cities = list(cities)
        self.max_iterations = require_positive("max_iterations", max_iterations)
        self.ref_set_size = require_positive("ref_set_size", ref_set_size)
        self.population_size = require_positive("population_size", population_size)
        if ref_set_size > population_size:
            raise InvalidConfigurationError(
                f"invalid configuration: ref_set_size ({ref_set_size}) exceeds population_size ({population_size})"
            )
        self.rng = make_rng(rng)

    # ---------------------------------------
    # Population
    # ---------------------------------------

    def _initial_population(self, dm: DistanceMatrix) -> List[Member]:
        population = []
        for _ in range(self.population_size):
            order = dm.to_indices(two_opt(random_tour(dm.cities, self.rng), dm))
            population.append((dm.order_length(order), order))
        return population

    def _combine(self, reference_set: ReferenceSet, dm: DistanceMatrix) -> List[Member]:
        children = []
        for a, b in reference_set.pairs():
            child = two_opt_order(segment_crossover(a, b, self.rng), dm.rows)
            children.append((dm.order_length(child), child))
        return children

    # ---------------------------------------
    # Solve
    # ---------------------------------------

    def solve(
        self,
        verbose: bool = False,
        callback: Optional[Callable[[ScatterState, int], None]] = None,
        time_limit: Optional[float] = None
    ) -> SolveResult:
        """
        Returns a SolveResult whose initial distance is the best tour of the
        2-opt improved starting population.
        """
        t0 = time.time()
        if not self.cities:
            return empty_result()

        dm = DistanceMatrix(self.cities)

        reference_set = ReferenceSet(self.ref_set_size)
        reference_set.update(self._initial_population(dm))
        best_distance, best = reference_set.best
        state = ScatterState(reference_set=reference_set, best=best, best_distance=best_distance)
        initial_distance = best_distance
        log = [(time.time() - t0, initial_distance)]

        if verbose:
            print(f"Initial population | Best = {initial_distance:.2f}")

        iterations = 0
        for it in range(self.max_iterations):
            if time_limit and time.time() - t0 >= time_limit:
                break
            iterations += 1

            reference_set.update(self._combine(reference_set, dm))
            new_distance, new_best = reference_set.best

            improved = new_distance < state.best_distance - EPSILON
            if improved:
                state.best = new_best
                state.best_distance = new_distance
                log.append((time.time() - t0, new_distance))

            if callback:
                callback(state, it)

            if verbose:
                print(f"Iter {it+1} | Best = {state.best_distance:.2f}")

            if not improved:
                break

        return SolveResult(
            best_tour=Tour(dm.to_cities(state.best)),
            best_distance=state.best_distance,
            initial_distance=initial_distance,
            elapsed_time=time.time() - t0,
            iterations=iterations,
            log=log,
        )
