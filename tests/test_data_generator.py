import numpy as np
import pytest

from data_generator import (
    generate_circle_cities,
    generate_random_cities,
    load_optimal_values,
    load_tsp_file,
)
from tsp_core import tour_length


def test_load_tsp_file_reads_headers_and_coordinates(tsp_file):
    problem = load_tsp_file(tsp_file)
    assert problem.name == "sample4"
    assert problem.comment == "unit square"
    assert problem.dimension == 4
    assert problem.edge_weight_type == "EUC_2D"
    assert [c.id for c in problem.cities] == [1, 2, 3, 4]
    assert (problem.cities[2].x, problem.cities[2].y) == (10.0, 10.0)
    assert len(problem) == 4


def test_load_tsp_file_without_section_marker(tmp_path):
    path = tmp_path / "bare.tsp"
    path.write_text("\n1 1.5 2.5\n2 -3 4e1\n\n3 0 0\n")
    problem = load_tsp_file(path)
    assert problem.name == "bare"
    assert [(c.x, c.y) for c in problem.cities] == [(1.5, 2.5), (-3.0, 40.0), (0.0, 0.0)]
    assert problem.dimension is None


def test_load_tsp_file_ignores_other_sections(tmp_path):
    path = tmp_path / "display.tsp"
    path.write_text(
        "name: display\n"
        "NODE_COORD_SECTION\n"
        "1 0 0\n"
        "2 3 4\n"
        "DISPLAY_DATA_SECTION\n"
        "1 9 9\n"
        "2 8 8\n"
        "EOF\n"
        "3 7 7\n"
    )
    problem = load_tsp_file(path)
    assert problem.name == "display"
    assert [c.id for c in problem.cities] == [1, 2]


def test_load_tsp_file_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_tsp_file(tmp_path / "missing.tsp")

    empty = tmp_path / "empty.tsp"
    empty.write_text("NAME: empty\nNODE_COORD_SECTION\nEOF\n")
    with pytest.raises(ValueError):
        load_tsp_file(empty)


def test_load_optimal_values(tmp_path):
    path = tmp_path / "optimal.json"
    path.write_text('{"a280": 2579, "kroA100": 21282.0}')
    assert load_optimal_values(path) == {"a280": 2579.0, "kroA100": 21282.0}

    with pytest.raises(FileNotFoundError):
        load_optimal_values(tmp_path / "nope.json")

    bad = tmp_path / "bad.json"
    bad.write_text("[1, 2]")
    with pytest.raises(ValueError):
        load_optimal_values(bad)


def test_generate_random_cities_is_seedable():
    a = generate_random_cities(10, width=5, height=7, rng=np.random.default_rng(1))
    b = generate_random_cities(10, width=5, height=7, rng=np.random.default_rng(1))
    assert a == b
    assert [c.id for c in a] == list(range(1, 11))
    assert all(0 <= c.x <= 5 and 0 <= c.y <= 7 for c in a)


def test_generate_circle_cities_in_order_is_the_perimeter():
    cities = generate_circle_cities(12, radius=10)
    side = 2 * 10 * np.sin(np.pi / 12)
    assert tour_length(cities) == pytest.approx(12 * side)
