"""
Convergence plots for weasel runs: best and mean batch fitness per generation.
"""

from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from weasel.history import EvolutionHistory


def plot_convergence(history: EvolutionHistory, path) -> Path:
    """Save a fitness-over-generations plot to `path` and return it."""
    if not len(history):
        raise ValueError("Nothing to plot: history has no generations")

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gens = [s.generation for s in history.generations]

    fig, ax = plt.subplots(figsize=(10, 6))
    ax.plot(gens, history.best_fitness_curve(), linewidth=2, label="Best fitness")
    ax.plot(gens, history.mean_fitness_curve(), linewidth=2, linestyle="--", alpha=0.7, label="Mean fitness")

    # mark generations that improved the best-known candidate
    improved = history.improvements()
    ax.scatter([s.generation for s in improved], [s.best_fitness for s in improved],
               marker="o", s=20, color="tab:red", label="Improvement", zorder=3)

    ax.set_xlabel("Generation")
    ax.set_ylabel("Mismatches to target")
    ax.set_title(f"Weasel convergence: '{history.target}'")
    ax.set_ylim(bottom=0)
    ax.grid(True, alpha=0.3)
    ax.legend()

    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
