"""
TSP Solver - Main Application
Solve a single instance with Tabu Search, Ant Colony Optimization or Scatter
Search, or benchmark all of them over a directory of TSPLIB files.
"""

import argparse
import sys
from typing import Dict, List, Optional

import numpy as np

from tsp_core import Problem, SolveResult
from data_generator import (
    generate_circle_cities,
    generate_random_cities,
    load_optimal_values,
    load_tsp_file,
)
from benchmark import (
    DATASET_DIR,
    OPTIMAL_FILE,
    OUTPUT_DIR,
    SOLVERS,
    build_solver,
    deviation,
    list_problem_files,
    run_benchmark,
)


# CLI flag -> solver keyword, per algorithm
SOLVER_FLAGS = {
    "tabu": {"iterations": "max_iterations", "tenure": "tabu_tenure"},
    "ant": {
        "iterations": "iterations",
        "ants": "n_ants",
        "alpha": "alpha",
        "beta": "beta",
        "evaporation": "evaporation_rate",
        "q": "q",
    },
    "scatter": {
        "iterations": "max_iterations",
        "ref_set": "ref_set_size",
        "population": "population_size",
    },
}


def solver_params(args: argparse.Namespace, algorithm: str) -> Dict:
    """Collect the knobs given on the command line for one algorithm."""
    params = {}
    for flag, keyword in SOLVER_FLAGS[algorithm].items():
        value = getattr(args, flag)
        if value is not None:
            params[keyword] = value
    return params


def load_problem(args: argparse.Namespace, rng: np.random.Generator) -> Problem:
    if args.file:
        return load_tsp_file(args.file)

    print(f"\nGenerating {args.cities} cities in {args.pattern} pattern...")
    if args.pattern == 'circle':
        cities = generate_circle_cities(args.cities, radius=50)
    else:
        cities = generate_random_cities(args.cities, width=100, height=100, rng=rng)
    return Problem(name=f"{args.pattern}{args.cities}", cities=cities, dimension=len(cities))


def print_result(algorithm: str, problem: Problem, result: SolveResult, optimal: Optional[float]):
    print("\n" + "=" * 70)
    print(f"{algorithm.upper()} on {problem.name} ({len(problem)} cities)")
    print("=" * 70)
    print(f"Initial Distance: {result.initial_distance:.2f}")
    print(f"Final Distance:   {result.best_distance:.2f}")
    print(f"Iterations:       {result.iterations}")
    print(f"Time:             {result.elapsed_time:.3f}s")
    gap = deviation(result.best_distance, optimal)
    if gap is not None:
        print(f"Deviation:        {gap:.2f}% (optimal {optimal:.0f})")
    print("=" * 70)
    print("Tour:", " -> ".join(str(city.id) for city in result.best_tour))


def demo_single_solver(args: argparse.Namespace) -> SolveResult:
    rng = np.random.default_rng(args.seed)
    problem = load_problem(args, rng)

    solver = build_solver(args.solver, problem.cities, solver_params(args, args.solver), rng)
    print(f"\nRunning {args.solver}...")
    result = solver.solve(verbose=args.verbose, time_limit=args.time_limit)

    print_result(args.solver, problem, result, args.optimal_value)

    if not args.no_viz or args.save_plot:
        from visualization import TSPVisualizer

        visualizer = TSPVisualizer(show=not args.no_viz)
        visualizer.plot_tour(result.best_tour, title=f"{args.solver} - {problem.name}", save_path=args.save_plot)
        visualizer.plot_convergence(result.log, title=f"{args.solver} convergence")

    return result


def run_benchmark_mode(args: argparse.Namespace):
    paths = list_problem_files(args.problems, args.names)
    optimal_values = load_optimal_values(args.optimal)
    params = {algorithm: solver_params(args, algorithm) for algorithm in args.algorithms}
    return run_benchmark(
        paths,
        optimal_values,
        algorithms=args.algorithms,
        params=params,
        output_dir=args.output,
        workers=args.workers,
        seed=args.seed,
        time_limit=args.time_limit,
    )


def build_argparser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="TSP Solver - Tabu Search, Ant Colony Optimization and Scatter Search",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Tabu Search on a TSPLIB file
  python main.py --solver tabu --file assets/problems/kroA100.tsp

  # Ant Colony on 50 random cities, reproducible
  python main.py --solver ant --cities 50 --seed 7 --ants 30

  # Benchmark every algorithm over a directory, one process each
  python main.py --benchmark --problems assets/problems --workers 3
        """
    )

    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--solver', type=str, choices=sorted(SOLVERS),
                      help='Run a single solver on one instance')
    mode.add_argument('--benchmark', action='store_true',
                      help='Run the selected algorithms over a directory of .tsp files')

    src = parser.add_argument_group("Instance (single solver)")
    src.add_argument('--file', type=str, default=None, help='TSPLIB file to solve')
    src.add_argument('--cities', type=int, default=30,
                     help='Number of cities to generate when no file is given (default: 30)')
    src.add_argument('--pattern', type=str, choices=['random', 'circle'], default='random',
                     help='City placement pattern (default: random)')
    src.add_argument('--optimal-value', type=float, default=None,
                     help='Known optimal cost, used to report the deviation')

    knobs = parser.add_argument_group("Solver parameters (defaults per solver)")
    knobs.add_argument('--iterations', type=int, default=None, help='Iteration budget')
    knobs.add_argument('--tenure', type=int, default=None, help='Tabu tenure')
    knobs.add_argument('--ants', type=int, default=None, help='Number of ants')
    knobs.add_argument('--alpha', type=float, default=None, help='Pheromone influence')
    knobs.add_argument('--beta', type=float, default=None, help='Distance influence')
    knobs.add_argument('--evaporation', type=float, default=None, help='Evaporation rate in [0, 1)')
    knobs.add_argument('--q', type=float, default=None, help='Pheromone deposit scale')
    knobs.add_argument('--ref-set', dest='ref_set', type=int, default=None, help='Reference set size')
    knobs.add_argument('--population', type=int, default=None, help='Initial population size')
    knobs.add_argument('--time-limit', dest='time_limit', type=float, default=None,
                       help='Stop each solver run after this many seconds')

    bench = parser.add_argument_group("Benchmark")
    bench.add_argument('--problems', type=str, default=DATASET_DIR, help='Directory of .tsp files')
    bench.add_argument('--names', nargs='+', default=None, help='Only these problem names')
    bench.add_argument('--optimal', type=str, default=OPTIMAL_FILE, help='JSON file of known optimal costs')
    bench.add_argument('--algorithms', nargs='+', choices=sorted(SOLVERS), default=['ant', 'tabu', 'scatter'])
    bench.add_argument('--output', type=str, default=OUTPUT_DIR, help='Directory for the xlsx/csv results')
    bench.add_argument('--workers', type=int, default=1, help='Worker processes (one algorithm each)')

    parser.add_argument('--seed', type=int, default=None, help='Seed for reproducible runs')
    parser.add_argument('--no-viz', action='store_true', help='Disable visualizations')
    parser.add_argument('--save-plot', type=str, default=None, help='Save the tour plot to this path')
    parser.add_argument('--verbose', action='store_true', help='Print solver progress')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the TSP solver application."""
    args = build_argparser().parse_args(argv)

    try:
        if args.benchmark:
            run_benchmark_mode(args)
        else:
            demo_single_solver(args)
    except FileNotFoundError as e:
        print(f"File not found: {e}")
        return 1
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
