import pytest

from main import build_argparser, main, solver_params


def test_solve_file(tsp_file, capsys):
    code = main(["--solver", "tabu", "--file", str(tsp_file), "--iterations", "5", "--no-viz",
                 "--optimal-value", "40"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Final Distance:   40.00" in out
    assert "Deviation:        0.00%" in out


def test_solve_generated_instance_with_plot(tmp_path, capsys):
    plot = tmp_path / "tour.png"
    code = main(["--solver", "scatter", "--cities", "8", "--seed", "3", "--iterations", "2",
                 "--population", "4", "--ref-set", "2", "--no-viz", "--save-plot", str(plot)])
    assert code == 0
    assert plot.exists()
    assert "SCATTER on random8" in capsys.readouterr().out


def test_missing_file_exits_with_error(tmp_path, capsys):
    code = main(["--solver", "ant", "--file", str(tmp_path / "nope.tsp"), "--no-viz"])
    assert code == 1
    assert "File not found" in capsys.readouterr().out


def test_invalid_configuration_exits_with_error(capsys):
    code = main(["--solver", "ant", "--cities", "5", "--evaporation", "1.5", "--no-viz"])
    assert code == 1
    assert "invalid configuration" in capsys.readouterr().out


def test_benchmark_mode(problem_dir, tmp_path):
    directory, optimal = problem_dir
    out = tmp_path / "results"
    code = main([
        "--benchmark", "--problems", str(directory), "--optimal", str(optimal),
        "--algorithms", "tabu", "ant", "--iterations", "2", "--ants", "2",
        "--output", str(out), "--seed", "1",
    ])
    assert code == 0
    assert (out / "tabu_results.xlsx").exists()
    assert (out / "ant_results.xlsx").exists()
    assert not (out / "scatter_results.xlsx").exists()


def test_solver_params_only_includes_given_flags():
    args = build_argparser().parse_args(["--solver", "ant", "--ants", "9", "--evaporation", "0.2"])
    assert solver_params(args, "ant") == {"n_ants": 9, "evaporation_rate": 0.2}
    assert solver_params(args, "tabu") == {}


def test_a_mode_is_required():
    with pytest.raises(SystemExit):
        build_argparser().parse_args([])


def test_time_limit_flag_reaches_the_solver(tsp_file, capsys):
    args = build_argparser().parse_args(["--solver", "tabu", "--time-limit", "2.5"])
    assert args.time_limit == 2.5

    code = main(["--solver", "tabu", "--file", str(tsp_file), "--iterations", "50",
                 "--time-limit", "30", "--no-viz"])
    assert code == 0
    assert "Iterations:       50" in capsys.readouterr().out
