import json
import os
import re
from typing import Dict, List, Optional

import numpy as np

from tsp_core import City, Problem


HEADER_RE = re.compile(r"^\s*([A-Za-z_]+)\s*:\s*(.*?)\s*$")
COORD_RE = re.compile(r"^\s*(\d+)\s+([-+]?[\d.]+(?:[eE][-+]?\d+)?)\s+([-+]?[\d.]+(?:[eE][-+]?\d+)?)")


def load_tsp_file(path) -> Problem:
    """
    TSPLIB loader for coordinate based instances.
    Reads:
        - NAME / COMMENT / TYPE / DIMENSION / EDGE_WEIGHT_TYPE headers
          (any case, ``KEY: value`` or ``KEY : value``)
        - NODE_COORD_SECTION lines ``id x y`` up to EOF
    Handles:
        - blank lines
        - files that omit NODE_COORD_SECTION and start coordinates directly
    """

    if not os.path.exists(path):
        raise FileNotFoundError(f"TSP file not found: {path}")

    with open(path, "r") as f:
        raw_lines = [l.strip() for l in f if l.strip()]

    headers: Dict[str, str] = {}
    cities: List[City] = []
    section = None

    for line in raw_lines:
        upper = line.upper()

        if upper.startswith("EOF"):
            break

        if upper.endswith("_SECTION"):
            section = upper
            continue

        if section is None:
            header = HEADER_RE.match(line)
            if header:
                headers[header.group(1).upper()] = header.group(2)
                continue
        elif section != "NODE_COORD_SECTION":
            continue

        match = COORD_RE.match(line)
        if match:
            cities.append(City(int(match.group(1)), float(match.group(2)), float(match.group(3))))

    if len(cities) == 0:
        raise ValueError(f"No coordinates parsed in: {path}")

    dimension = headers.get("DIMENSION")
    name = headers.get("NAME") or os.path.splitext(os.path.basename(path))[0]

    return Problem(
        name=name,
        cities=cities,
        dimension=int(dimension) if dimension and dimension.isdigit() else None,
        edge_weight_type=headers.get("EDGE_WEIGHT_TYPE"),
        comment=headers.get("COMMENT"),
    )


def load_optimal_values(path) -> Dict[str, float]:
    """Known optimal tour costs keyed by problem name."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Optimal values file not found: {path}")

    with open(path, "r") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in: {path}")
    return {str(k): float(v) for k, v in data.items()}


def generate_random_cities(
    n: int,
    width: float = 100,
    height: float = 100,
    rng: Optional[np.random.Generator] = None
) -> List[City]:
    """
    Generate random cities for testing.

    Args:
        n: Number of cities to generate
        width: Width of the area
        height: Height of the area
        rng: Optional seeded generator

    Returns:
        List of randomly placed cities with ids 1..n
    """
    rng = rng if rng is not None else np.random.default_rng()
    xs = rng.uniform(0, width, size=n)
    ys = rng.uniform(0, height, size=n)
    return [City(i + 1, float(x), float(y), name=f"City_{i + 1}") for i, (x, y) in enumerate(zip(xs, ys))]


def generate_circle_cities(n: int, radius: float = 50, center_x: float = 50, center_y: float = 50) -> List[City]:
    """
    Generate cities arranged in a circle. The optimal tour visits them in
    order, which makes this handy for checking solvers.
    """
    cities = []
    for i in range(n):
        angle = 2 * np.pi * i / n
        x = center_x + radius * np.cos(angle)
        y = center_y + radius * np.sin(angle)
        cities.append(City(i + 1, float(x), float(y), name=f"City_{i + 1}"))
    return cities
