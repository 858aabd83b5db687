import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from tsp_core import City
from data_generator import generate_random_cities


SAMPLE_TSP = """NAME : sample4
COMMENT : unit square
TYPE : TSP
DIMENSION : 4
EDGE_WEIGHT_TYPE : EUC_2D
NODE_COORD_SECTION
1 0 0
2 0 10
3 10 10
4 10 0
EOF
"""


@pytest.fixture
def unit_square():
    return [City(1, 0.0, 0.0), City(2, 0.0, 1.0), City(3, 1.0, 1.0), City(4, 1.0, 0.0)]


@pytest.fixture
def crossed_square(unit_square):
    a, b, c, d = unit_square
    return [a, c, b, d]


@pytest.fixture
def random_cities():
    return generate_random_cities(15, rng=np.random.default_rng(0))


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def tsp_file(tmp_path):
    path = tmp_path / "sample4.tsp"
    path.write_text(SAMPLE_TSP)
    return path


@pytest.fixture
def problem_dir(tmp_path):
    directory = tmp_path / "problems"
    directory.mkdir()
    (directory / "sample4.tsp").write_text(SAMPLE_TSP)

    lines = ["NAME: circle8", "DIMENSION: 8", "EDGE_WEIGHT_TYPE: EUC_2D", "NODE_COORD_SECTION"]
    for i in range(8):
        angle = 2 * np.pi * i / 8
        lines.append(f"{i + 1} {10 * np.cos(angle):.6f} {10 * np.sin(angle):.6f}")
    lines.append("EOF")
    (directory / "circle8.tsp").write_text("\n".join(lines) + "\n")

    optimal = tmp_path / "optimal.json"
    optimal.write_text('{"sample4": 40, "circle8": 61.23}')
    return directory, optimal
