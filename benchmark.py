import json
import os
from concurrent.futures import ProcessPoolExecutor
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from tqdm import tqdm

from data_generator import load_tsp_file
from tsp_core import SolveResult, Problem
from tabu_search import TabuSearchSolver
from ant_colony import AntColonyOptimizer
from scatter_search import ScatterSearchSolver


# ================================
# CONFIGURATION
# ================================
DATASET_DIR = os.path.join("assets", "problems")
OPTIMAL_FILE = os.path.join("assets", "optimal.json")
OUTPUT_DIR = os.path.join("assets", "results")

SOLVERS = {
    "ant": AntColonyOptimizer,
    "tabu": TabuSearchSolver,
    "scatter": ScatterSearchSolver,
}

DEFAULT_PARAMS = {
    "ant": {"iterations": 100, "n_ants": 75, "alpha": 1.0, "beta": 5.0, "evaporation_rate": 0.7, "q": 100.0},
    "tabu": {"max_iterations": 100},
    "scatter": {"max_iterations": 100, "ref_set_size": 5, "population_size": 30},
}

# exported column -> spreadsheet header
COLUMN_TITLES = {
    "file": "File",
    "optimal": "Optimal",
    "cost": "Result Cost",
    "initial_cost": "Initial Cost",
    "time": "Time",
    "deviation": "Deviation",
    "params": "Parameters",
}


# =============================================================
# SINGLE RUNS
# =============================================================
def build_solver(algorithm: str, cities, params: Optional[Dict] = None, rng: Optional[np.random.Generator] = None):
    if algorithm not in SOLVERS:
        raise ValueError(f"Unknown algorithm: {algorithm} (expected one of {sorted(SOLVERS)})")

    kwargs = dict(DEFAULT_PARAMS[algorithm])
    kwargs.update(params or {})
    if algorithm != "tabu":
        kwargs["rng"] = rng
    return SOLVERS[algorithm](cities, **kwargs)


def deviation(cost: float, optimal: Optional[float]) -> Optional[float]:
    """Percentage gap between a cost and the known optimum."""
    if not optimal:
        return None
    return abs((cost - optimal) / optimal) * 100


def make_row(problem: Problem, result: SolveResult, optimal: Optional[float], params: Dict) -> Dict:
    summary = result.to_dict()
    dev = deviation(summary["best_distance"], optimal)
    return {
        "file": problem.name,
        "optimal": round(optimal) if optimal else None,
        "cost": round(summary["best_distance"]),
        "initial_cost": round(summary["initial_distance"]),
        "time": round(summary["elapsed_time"], 1),
        "deviation": round(dev, 2) if dev is not None else None,
        "params": json.dumps(params, sort_keys=True),
    }


def problem_key(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[0]


def run_algorithm(
    algorithm: str,
    paths: Sequence[str],
    optimal_values: Dict[str, float],
    params: Optional[Dict] = None,
    seed: Optional[int] = None,
    verbose: bool = False,
    progress: bool = True,
    time_limit: Optional[float] = None
) -> List[Dict]:
    """Run one algorithm over every problem file and return one row per file."""
    rng = np.random.default_rng(seed)
    used_params = dict(DEFAULT_PARAMS[algorithm])
    used_params.update(params or {})

    rows = []
    for path in tqdm(paths, desc=algorithm, disable=not progress):
        problem = load_tsp_file(path)
        if verbose:
            print(f"[{algorithm}] Processing file: {os.path.basename(path)}")

        solver = build_solver(algorithm, problem.cities, used_params, rng)
        result = solver.solve(verbose=verbose, time_limit=time_limit)
        if not result.best_tour.is_permutation_of(problem.cities):
            raise RuntimeError(f"{algorithm} returned an invalid tour for {problem.name}")

        optimal = optimal_values.get(problem_key(path), optimal_values.get(problem.name))
        rows.append(make_row(problem, result, optimal, used_params))

    return rows


# =============================================================
# EXPORT
# =============================================================
def save_results_to_xlsx(algorithm: str, rows: List[Dict], output_dir: str = OUTPUT_DIR) -> str:
    """Write the rows of one algorithm to ``<output_dir>/<algorithm>_results.xlsx``."""
    os.makedirs(output_dir, exist_ok=True)
    path = os.path.join(output_dir, f"{algorithm}_results.xlsx")

    df = pd.DataFrame(rows, columns=list(COLUMN_TITLES)).rename(columns=COLUMN_TITLES)
    df.to_excel(path, sheet_name=f"{algorithm}_results", index=False)

    print(f"Results saved to {path}")
    return path


# =============================================================
# BATCH
# =============================================================
def list_problem_files(directory: str = DATASET_DIR, names: Optional[Iterable[str]] = None) -> List[str]:
    if not os.path.isdir(directory):
        raise FileNotFoundError(f"Problem directory not found: {directory}")

    if names:
        return [os.path.join(directory, f"{name}.tsp") for name in names]
    return sorted(
        os.path.join(directory, f) for f in os.listdir(directory) if f.endswith(".tsp")
    )


def run_benchmark(
    paths: Sequence[str],
    optimal_values: Dict[str, float],
    algorithms: Sequence[str] = ("ant", "tabu", "scatter"),
    params: Optional[Dict[str, Dict]] = None,
    output_dir: Optional[str] = OUTPUT_DIR,
    workers: int = 1,
    seed: Optional[int] = None,
    time_limit: Optional[float] = None
) -> pd.DataFrame:
    """
    Run every algorithm over the same problem files.

    Algorithms are independent, so with ``workers > 1`` each one runs in its
    own process. When ``output_dir`` is set, one workbook per algorithm and a
    combined CSV are written there. ``time_limit`` caps every single
    solver run, in seconds.

    Returns:
        DataFrame with one row per (algorithm, problem)
    """
    params = params or {}
    for algorithm in algorithms:
        if algorithm not in SOLVERS:
            raise ValueError(f"Unknown algorithm: {algorithm} (expected one of {sorted(SOLVERS)})")

    results: Dict[str, List[Dict]] = {}
    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = {
                algorithm: pool.submit(
                    run_algorithm, algorithm, paths, optimal_values,
                    params.get(algorithm), seed, False, False, time_limit
                )
                for algorithm in algorithms
            }
            for algorithm, future in futures.items():
                results[algorithm] = future.result()
    else:
        for algorithm in algorithms:
            results[algorithm] = run_algorithm(
                algorithm, paths, optimal_values, params.get(algorithm), seed, time_limit=time_limit
            )

    frames = []
    for algorithm, rows in results.items():
        if output_dir:
            save_results_to_xlsx(algorithm, rows, output_dir)
        df = pd.DataFrame(rows, columns=list(COLUMN_TITLES))
        df.insert(0, "algorithm", algorithm)
        frames.append(df)

    df = pd.concat(frames, ignore_index=True)

    print("\n=== Benchmark Results ===")
    print(df.drop(columns=["params"]).to_string(index=False))

    if output_dir:
        df.to_csv(os.path.join(output_dir, "full_benchmarks.csv"), index=False)

    return df
