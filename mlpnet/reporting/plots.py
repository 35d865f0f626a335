"""Headless-safe plotting of per-epoch losses."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Mapping, Tuple

import matplotlib

matplotlib.use("Agg", force=True)
import matplotlib.pyplot as plt  # noqa: E402


class PlotAdapter:
    """Collect per-split losses and optionally write ``loss.png``."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: Dict[str, List[Tuple[int, float]]] = {}
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def logger(self, split: str):
        """Return an ``on_epoch``-style callable recording ``split``."""

        def _record(epoch: int, metrics: Mapping[str, float]) -> None:
            if not self.enable_plots:
                return
            self._history.setdefault(split, []).append((epoch, float(metrics.get("loss", 0.0))))

        return _record

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        fig, ax = plt.subplots()
        for split, points in sorted(self._history.items()):
            epochs, losses = zip(*points)
            ax.plot(epochs, losses, label=split)
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Cross-entropy")
        ax.set_title("Training Curve")
        ax.legend()
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path


__all__ = ["PlotAdapter"]
