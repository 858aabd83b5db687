"""
TSP Solver - Core Module
Contains the fundamental data structures and distance primitives shared by
the Tabu Search, Ant Colony and Scatter Search engines.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np


# Improvements smaller than this are treated as floating point noise.
EPSILON = 1e-9


class InvalidConfigurationError(ValueError):
    """Raised when a solver is configured with an unusable parameter."""


def require_positive(name: str, value, allow_zero: bool = False):
    """Validate a numeric solver parameter and return it unchanged."""
    if value is None or value < 0 or (value == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        raise InvalidConfigurationError(f"invalid configuration: {name} must be {bound}, got {value!r}")
    return value


@dataclass(frozen=True)
class City:
    """A point of the problem instance with a unique integer id."""
    id: int
    x: float
    y: float
    name: Optional[str] = None

    def __repr__(self):
        return f"City({self.id}, {self.x:.2f}, {self.y:.2f})"


@dataclass
class Problem:
    """A loaded TSP instance. Only ``cities`` is used by the solvers."""
    name: str
    cities: List[City]
    dimension: Optional[int] = None
    edge_weight_type: Optional[str] = None
    comment: Optional[str] = None

    def __len__(self):
        return len(self.cities)


def distance(a: City, b: City) -> float:
    """Euclidean distance between two cities."""
    return math.hypot(a.x - b.x, a.y - b.y)


def tour_length(cities: Sequence[City]) -> float:
    """Length of the closed tour, including the edge back to the start."""
    n = len(cities)
    if n < 2:
        return 0.0

    total = 0.0
    for i in range(n - 1):
        total += distance(cities[i], cities[i + 1])
    total += distance(cities[-1], cities[0])
    return total


def reverse_segment(seq: Sequence, i: int, k: int) -> list:
    """
    Return a copy of ``seq`` with positions ``i..k`` (inclusive) reversed.

    This is the 2-opt move. The input is never modified.
    """
    if not 0 <= i < k < len(seq):
        raise IndexError(f"invalid segment [{i}, {k}] for tour of length {len(seq)}")
    out = list(seq)
    out[i:k + 1] = reversed(out[i:k + 1])
    return out


def canonical_key(seq: Sequence[int]) -> Tuple[int, ...]:
    """
    Key identifying a cycle regardless of starting point and direction.

    The sequence is rotated so the smallest element comes first, then read in
    whichever direction gives the smaller second element.
    """
    items = list(seq)
    if len(items) < 3:
        return tuple(sorted(items))
    pos = items.index(min(items))
    rotated = items[pos:] + items[:pos]
    backwards = [rotated[0]] + rotated[:0:-1]
    return tuple(min(rotated, backwards))


class Tour:
    """Represents a tour (solution) as an ordered sequence of cities."""

    def __init__(self, cities: Iterable[City] = None):
        self._cities: Tuple[City, ...] = tuple(cities) if cities else ()
        self._distance = None

    def get_total_distance(self) -> float:
        """Calculate the total distance of the tour."""
        if self._distance is None:
            self._distance = tour_length(self._cities)
        return self._distance

    def ids(self) -> List[int]:
        return [city.id for city in self._cities]

    def is_permutation_of(self, cities: Sequence[City]) -> bool:
        """Check that every city appears exactly once and nothing else does."""
        if len(self._cities) != len(cities):
            return False
        ids = self.ids()
        return len(set(ids)) == len(ids) and set(ids) == {c.id for c in cities}

    def __len__(self):
        return len(self._cities)

    def __iter__(self):
        return iter(self._cities)

    def __getitem__(self, index):
        return self._cities[index]

    def __eq__(self, other):
        if not isinstance(other, Tour):
            return NotImplemented
        return self.ids() == other.ids()

    def __hash__(self):
        return hash(tuple(self.ids()))

    def __repr__(self):
        return f"Tour(cities={len(self._cities)}, distance={self.get_total_distance():.2f})"


class DistanceMatrix:
    """Precomputed distance matrix for efficient distance lookups."""

    def __init__(self, cities: Sequence[City]):
        self.cities = list(cities)
        self.n = len(self.cities)
        self.index_of: Dict[int, int] = {city.id: i for i, city in enumerate(self.cities)}

        if self.n == 0:
            self.matrix = np.zeros((0, 0))
        else:
            coords = np.array([[c.x, c.y] for c in self.cities], dtype=float)
            diff = coords[:, None, :] - coords[None, :, :]
            self.matrix = np.hypot(diff[..., 0], diff[..., 1])
            np.fill_diagonal(self.matrix, 0.0)

        # python lists are much faster than numpy scalars in the 2-opt loops
        self.rows: List[List[float]] = self.matrix.tolist()

    def to_indices(self, cities: Sequence[City]) -> List[int]:
        return [self.index_of[c.id] for c in cities]

    def to_cities(self, order: Sequence[int]) -> List[City]:
        return [self.cities[i] for i in order]

    def order_length(self, order: Sequence[int]) -> float:
        """Closed tour length of an index order."""
        n = len(order)
        if n < 2:
            return 0.0
        rows = self.rows
        total = rows[order[-1]][order[0]]
        for a, b in zip(order, order[1:]):
            total += rows[a][b]
        return total


@dataclass
class SolveResult:
    """Outcome of a single solver run."""
    best_tour: Tour
    best_distance: float
    initial_distance: float
    elapsed_time: float
    iterations: int = 0
    log: List[Tuple[float, float]] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "best_tour": self.best_tour.ids(),
            "best_distance": self.best_distance,
            "initial_distance": self.initial_distance,
            "elapsed_time": self.elapsed_time,
            "iterations": self.iterations,
        }


def empty_result() -> SolveResult:
    """Result returned for an empty problem: nothing to visit, nothing to pay."""
    return SolveResult(Tour(), 0.0, 0.0, 0.0)
