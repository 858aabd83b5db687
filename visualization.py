"""
TSP Solver - Visualization Module
Plot tours and solver convergence logs.
"""

import matplotlib.pyplot as plt
from typing import List, Optional, Tuple

from tsp_core import Tour


class TSPVisualizer:
    """Visualize TSP tours and optimization progress."""

    def __init__(self, figsize=(12, 8), show: bool = True):
        self.figsize = figsize
        self.show = show

    def _finish(self, fig, save_path: Optional[str], what: str):
        plt.tight_layout()

        if save_path:
            fig.savefig(save_path, dpi=150, bbox_inches='tight')
            print(f"{what} saved to {save_path}")

        if self.show:
            plt.show()
        else:
            plt.close(fig)

    def plot_tour(
        self,
        tour: Tour,
        title: str = "TSP Tour",
        show_labels: bool = True,
        save_path: str = None
    ):
        """
        Plot a single tour.

        Args:
            tour: The tour to visualize
            title: Plot title
            show_labels: Annotate each city with its id
            save_path: Optional path to save the figure
        """
        fig, ax = plt.subplots(figsize=self.figsize)

        if len(tour) == 0:
            ax.text(0.5, 0.5, 'No cities in tour',
                    ha='center', va='center', fontsize=16)
            self._finish(fig, save_path, "Tour")
            return fig

        # Close the loop
        x_coords = [city.x for city in tour] + [tour[0].x]
        y_coords = [city.y for city in tour] + [tour[0].y]

        ax.scatter(x_coords[:-1], y_coords[:-1],
                   c='red', s=60, zorder=3, edgecolors='darkred', linewidth=1)
        ax.plot(x_coords, y_coords, 'b-', linewidth=1.5, alpha=0.6, zorder=1)

        if show_labels:
            for city in tour:
                ax.annotate(str(city.id), (city.x, city.y),
                            fontsize=7, xytext=(3, 3), textcoords='offset points')

        # Highlight start city
        ax.scatter([tour[0].x], [tour[0].y],
                   c='green', s=200, zorder=4,
                   marker='*', edgecolors='darkgreen', linewidth=1.5)

        ax.set_title(f"{title}\nTotal Distance: {tour.get_total_distance():.2f}",
                     fontsize=14, weight='bold')
        ax.set_xlabel('X Coordinate', fontsize=12)
        ax.set_ylabel('Y Coordinate', fontsize=12)
        ax.grid(True, alpha=0.3)
        ax.set_aspect('equal')

        self._finish(fig, save_path, "Tour")
        return fig

    def plot_convergence(
        self,
        log: List[Tuple[float, float]],
        title: str = "Convergence History",
        save_path: str = None
    ):
        """
        Plot a solver log of ``(elapsed_seconds, best_distance)`` points as a
        step line.
        """
        fig, ax = plt.subplots(figsize=(10, 6))

        times = [t for t, _ in log]
        distances = [d for _, d in log]

        ax.step(times, distances, where='post', color='b', linewidth=2, label='Best Distance')

        if distances:
            initial = distances[0]
            final = distances[-1]
            improvement = ((initial - final) / initial) * 100 if initial > 0 else 0.0

            ax.axhline(y=final, color='g', linestyle='--',
                       linewidth=1.5, label=f'Final: {final:.2f}')
            ax.axhline(y=initial, color='r', linestyle='--',
                       linewidth=1.5, label=f'Initial: {initial:.2f}')
            title = f"{title}\nImprovement: {improvement:.2f}%"

        ax.set_xlabel('Time (s)', fontsize=12)
        ax.set_ylabel('Best Distance', fontsize=12)
        ax.set_title(title, fontsize=14, weight='bold')
        ax.grid(True, alpha=0.3)
        ax.legend(loc='upper right', fontsize=10)

        self._finish(fig, save_path, "Convergence plot")
        return fig
