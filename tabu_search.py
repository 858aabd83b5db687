"""
Tabu Search for the TSP.

Iterated best-improvement over the full 2-opt neighbourhood with a recency
based tabu list and an aspiration criterion: a tabu move is still allowed
when it would beat the best distance found so far.
"""

import math
import time
from collections import Counter, deque
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from tsp_core import (
    City,
    DistanceMatrix,
    EPSILON,
    SolveResult,
    Tour,
    empty_result,
    require_positive,
    reverse_segment,
)
from heuristics import two_opt_delta


MoveKey = Tuple[int, int]


class TabuList:
    """Fixed capacity FIFO of recently applied move keys."""

    def __init__(self, capacity: int):
        self.capacity = capacity
        self._queue = deque()
        self._counts = Counter()

    def add(self, key: MoveKey):
        self._queue.append(key)
        self._counts[key] += 1
        if len(self._queue) > self.capacity:
            old = self._queue.popleft()
            self._counts[old] -= 1
            if self._counts[old] == 0:
                del self._counts[old]

    def __contains__(self, key) -> bool:
        return key in self._counts

    def __len__(self):
        return len(self._queue)

    def __iter__(self):
        return iter(self._queue)


@dataclass
class TabuState:
    """Search state owned by a single run."""
    current: List[int]
    current_distance: float
    best: List[int]
    best_distance: float
    tabu_list: TabuList


class TabuSearchSolver:
    """
    Tabu Search solver.

    The search starts from the cities in the order given and always moves to
    the best admissible neighbour, even when it is worse than the current
    tour. It runs the whole iteration budget.
    """

    def __init__(
        self,
        cities: Sequence[City],
        max_iterations: int = 100,
        tabu_tenure: Optional[int] = 20
    ):
        self.cities = list(cities)
        self.max_iterations = require_positive("max_iterations", max_iterations, allow_zero=True)
        if tabu_tenure is None:
            tabu_tenure = max(5, math.isqrt(len(self.cities)))
        self.tabu_tenure = require_positive("tabu_tenure", tabu_tenure)

    # --------------------------------------------------------
    def _best_admissible_move(self, state: TabuState, rows, ids) -> Optional[Tuple[int, int, MoveKey, float]]:
        order = state.current
        n = len(order)
        best_move = None
        best_value = float("inf")

        for i in range(1, n - 1):
            for k in range(i + 1, n):
                value = state.current_distance + two_opt_delta(rows, order, i, k)
                if value >= best_value:
                    continue

                a, b = ids[order[i]], ids[order[k]]
                key = (a, b) if a < b else (b, a)

                # aspiration
                if key not in state.tabu_list or value < state.best_distance - EPSILON:
                    best_value = value
                    best_move = (i, k, key, value)

        return best_move

    # --------------------------------------------------------
    def solve(
        self,
        verbose: bool = False,
        callback: Optional[Callable[[TabuState, int], None]] = None,
        time_limit: Optional[float] = None
    ) -> SolveResult:
        t0 = time.time()
        if not self.cities:
            return empty_result()

        dm = DistanceMatrix(self.cities)
        ids = [c.id for c in dm.cities]

        current = list(range(dm.n))
        current_distance = dm.order_length(current)
        state = TabuState(
            current=current,
            current_distance=current_distance,
            best=list(current),
            best_distance=current_distance,
            tabu_list=TabuList(self.tabu_tenure),
        )
        initial_distance = current_distance
        log = [(0.0, initial_distance)]

        iterations = 0
        for it in range(self.max_iterations):
            if time_limit and time.time() - t0 >= time_limit:
                break
            iterations += 1

            move = self._best_admissible_move(state, dm.rows, ids)
            if move is not None:
                i, k, key, _ = move
                state.current = reverse_segment(state.current, i, k)
                state.current_distance = dm.order_length(state.current)
                state.tabu_list.add(key)

                if state.current_distance < state.best_distance - EPSILON:
                    state.best = state.current
                    state.best_distance = state.current_distance
                    log.append((time.time() - t0, state.best_distance))

            if callback:
                callback(state, it)

            if verbose and (it + 1) % 100 == 0:
                print(f"Iter {it+1} | Best = {state.best_distance:.2f}")

        return SolveResult(
            best_tour=Tour(dm.to_cities(state.best)),
            best_distance=state.best_distance,
            initial_distance=initial_distance,
            elapsed_time=time.time() - t0,
            iterations=iterations,
            log=log,
        )
