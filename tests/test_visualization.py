from tsp_core import Tour
from visualization import TSPVisualizer


def test_plot_tour_saves_figure(unit_square, tmp_path):
    path = tmp_path / "square.png"
    fig = TSPVisualizer(show=False).plot_tour(Tour(unit_square), title="Square", save_path=str(path))
    assert path.exists()
    assert "Total Distance: 4.00" in fig.axes[0].get_title()


def test_plot_empty_tour():
    fig = TSPVisualizer(show=False).plot_tour(Tour())
    assert fig.axes[0].texts[0].get_text() == "No cities in tour"


def test_plot_convergence(tmp_path):
    path = tmp_path / "log.png"
    fig = TSPVisualizer(show=False).plot_convergence([(0.0, 10.0), (0.5, 8.0), (1.0, 5.0)], save_path=str(path))
    assert path.exists()
    assert "Improvement: 50.00%" in fig.axes[0].get_title()
