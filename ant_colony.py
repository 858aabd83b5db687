import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

import numpy as np

from tsp_core import (
    City,
    DistanceMatrix,
    EPSILON,
    InvalidConfigurationError,
    SolveResult,
    Tour,
    empty_result,
    require_positive,
)
from heuristics import make_rng, nearest_neighbor, two_opt_order


class PheromoneMatrix:
    """Symmetric pheromone trails between every pair of cities."""

    def __init__(self, n: int, initial: float = 1.0):
        self.values = np.full((n, n), initial, dtype=float)

    def evaporate(self, rate: float):
        self.values *= (1.0 - rate)

    def deposit(self, order: Sequence[int], amount: float):
        """Add ``amount`` to both directions of every edge of the closed tour."""
        a = np.asarray(order, dtype=int)
        b = np.roll(a, -1)
        np.add.at(self.values, (a, b), amount)
        np.add.at(self.values, (b, a), amount)

    def min(self) -> float:
        return float(self.values.min()) if self.values.size else 0.0


@dataclass
class ColonyState:
    """Search state owned by a single run."""
    pheromones: PheromoneMatrix
    best: List[int]
    best_distance: float


class AntColonyOptimizer:
    """
    ACO with:
    - nearest neighbour incumbent before the first generation
    - 2-opt refinement of the global best after every generation
    - pheromone deposit along the global best tour only
    - returns a SolveResult
    """

    def __init__(
        self,
        cities: Sequence[City],
        iterations: int = 100,
        n_ants: int = 20,
        alpha: float = 1.0,
        beta: float = 5.0,
        evaporation_rate: float = 0.5,
        q: float = 100.0,
        rng: Optional[np.random.Generator] = None
    ):
        self.cities = list(cities)
        self.iterations = require_positive("iterations", iterations)
        self.n_ants = require_positive("n_ants", n_ants)
        self.alpha = require_positive("alpha", alpha, allow_zero=True)
        self.beta = require_positive("beta", beta, allow_zero=True)
        if evaporation_rate is None or not 0.0 <= evaporation_rate < 1.0:
            raise InvalidConfigurationError(
                f"invalid configuration: evaporation_rate must be in [0, 1), got {evaporation_rate!r}"
            )
        self.evaporation_rate = evaporation_rate
        self.q = require_positive("q", q)
        self.rng = make_rng(rng)

    # --------------------------------------------------------
    def _selection_weights(self, pheromones: PheromoneMatrix, heuristic: np.ndarray, valid: np.ndarray) -> np.ndarray:
        # tau^alpha * eta^beta, zero where the distance is degenerate
        return np.where(valid, pheromones.values ** self.alpha * heuristic, 0.0)

    def _choose_next(self, cur: int, unvisited: np.ndarray, weights: np.ndarray) -> int:
        candidates = np.flatnonzero(unvisited)
        w = weights[cur, candidates]
        total = w.sum()

        if total > 0 and np.isfinite(total):
            cumulative = np.cumsum(w) / total
            idx = int(np.searchsorted(cumulative, self.rng.random(), side="right"))
            if idx < candidates.size:
                return int(candidates[idx])

        # nothing to weigh, or rounding left the draw past the last bucket
        return int(candidates[0])

    def _construct_tour(self, n: int, weights: np.ndarray) -> List[int]:
        start = int(self.rng.integers(n))
        unvisited = np.ones(n, dtype=bool)
        unvisited[start] = False
        tour = [start]

        cur = start
        for _ in range(n - 1):
            nxt = self._choose_next(cur, unvisited, weights)
            tour.append(nxt)
            unvisited[nxt] = False
            cur = nxt

        return tour

    # --------------------------------------------------------
    def solve(
        self,
        verbose: bool = False,
        callback: Optional[Callable[[ColonyState, int], None]] = None,
        time_limit: Optional[float] = None
    ) -> SolveResult:
        t0 = time.time()
        n = len(self.cities)
        if n == 0:
            return empty_result()

        dm = DistanceMatrix(self.cities)

        best = dm.to_indices(nearest_neighbor(self.cities, self.rng, distance_matrix=dm))
        best_distance = dm.order_length(best)
        initial_distance = best_distance
        log = [(0.0, initial_distance)]

        if n < 3:
            return SolveResult(Tour(dm.to_cities(best)), best_distance, initial_distance, time.time() - t0, 0, log)

        valid = dm.matrix > 0
        eta = np.zeros_like(dm.matrix)
        np.divide(1.0, dm.matrix, out=eta, where=valid)
        heuristic = eta ** self.beta

        state = ColonyState(pheromones=PheromoneMatrix(n), best=best, best_distance=best_distance)

        iterations = 0
        for it in range(self.iterations):
            if time_limit and time.time() - t0 >= time_limit:
                break
            iterations += 1

            weights = self._selection_weights(state.pheromones, heuristic, valid)
            for _ in range(self.n_ants):
                order = self._construct_tour(n, weights)
                d = dm.order_length(order)
                if d < state.best_distance - EPSILON:
                    state.best = order
                    state.best_distance = d
                    log.append((time.time() - t0, d))

            state.pheromones.evaporate(self.evaporation_rate)

            refined = two_opt_order(state.best, dm.rows)
            d = dm.order_length(refined)
            if d < state.best_distance - EPSILON:
                state.best = refined
                state.best_distance = d
                log.append((time.time() - t0, d))

            if state.best_distance > 0:
                state.pheromones.deposit(state.best, self.q / state.best_distance)

            if callback:
                callback(state, it)

            if verbose and (it + 1) % 100 == 0:
                print(f"Iter {it+1} | Best = {state.best_distance:.2f} | tau_min = {state.pheromones.min():.4f}")

        return SolveResult(
            best_tour=Tour(dm.to_cities(state.best)),
            best_distance=state.best_distance,
            initial_distance=initial_distance,
            elapsed_time=time.time() - t0,
            iterations=iterations,
            log=log,
        )
