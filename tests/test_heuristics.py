import numpy as np
import pytest

from tsp_core import City, DistanceMatrix, Tour, reverse_segment, tour_length
from heuristics import nearest_neighbor, random_tour, two_opt, two_opt_delta, two_opt_order


def test_nearest_neighbor_follows_closest_city():
    cities = [City(1, 0, 0), City(2, 5, 0), City(3, 1, 0), City(4, 3, 0)]
    tour = nearest_neighbor(cities, start=0)
    assert [c.id for c in tour] == [1, 3, 4, 2]


def test_nearest_neighbor_breaks_ties_by_input_order(unit_square):
    # from (0,0) both (0,1) and (1,0) are one unit away
    tour = nearest_neighbor(unit_square, start=0)
    assert [c.id for c in tour] == [1, 2, 3, 4]


def test_nearest_neighbor_random_start_is_seedable(random_cities):
    a = nearest_neighbor(random_cities, rng=np.random.default_rng(5))
    b = nearest_neighbor(random_cities, rng=np.random.default_rng(5))
    assert a == b
    assert Tour(a).is_permutation_of(random_cities)


def test_nearest_neighbor_empty():
    assert nearest_neighbor([]) == []


def test_random_tour_is_a_permutation(random_cities, rng):
    tour = random_tour(random_cities, rng)
    assert Tour(tour).is_permutation_of(random_cities)


def test_two_opt_delta_matches_full_recomputation(random_cities):
    dm = DistanceMatrix(random_cities)
    order = list(range(len(random_cities)))
    base = dm.order_length(order)
    n = len(order)
    for i in range(1, n - 1):
        for k in range(i + 1, n):
            moved = reverse_segment(order, i, k)
            assert base + two_opt_delta(dm.rows, order, i, k) == pytest.approx(dm.order_length(moved))


def test_two_opt_uncrosses_the_square(crossed_square):
    assert tour_length(crossed_square) > 4.0
    improved = two_opt(crossed_square)
    assert tour_length(improved) == pytest.approx(4.0)
    assert [c.id for c in crossed_square] == [1, 3, 2, 4]


def test_two_opt_never_worsens(random_cities, rng):
    start = random_tour(random_cities, rng)
    improved = two_opt(start)
    assert Tour(improved).is_permutation_of(random_cities)
    assert tour_length(improved) <= tour_length(start) + 1e-9


def test_two_opt_reaches_local_optimum(random_cities):
    dm = DistanceMatrix(random_cities)
    order = two_opt_order(list(range(len(random_cities))), dm.rows)
    n = len(order)
    for i in range(1, n - 1):
        for k in range(i + 1, n):
            assert two_opt_delta(dm.rows, order, i, k) >= -1e-9


def test_two_opt_max_passes_limits_work(random_cities, rng):
    dm = DistanceMatrix(random_cities)
    start = [int(i) for i in rng.permutation(len(random_cities))]
    assert two_opt_order(start, dm.rows, max_passes=0) == start


def test_two_opt_small_tours_are_returned_as_is():
    cities = [City(1, 0, 0), City(2, 1, 0), City(3, 0, 1)]
    assert two_opt(cities) == cities
