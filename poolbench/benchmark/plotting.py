from typing import List, Tuple

import matplotlib.pyplot as plt

from poolbench.benchmark.report import LatencySeries


class MatplotlibChart:
    """XY line chart of latency by request rank, one line per series."""

    def __init__(
        self,
        path: str = "pool_latency.png",
        title: str = "",
        figsize: Tuple[float, float] = (19.2, 10.8),
        dpi: int = 100,
    ) -> None:
        self.path = path
        self.title = title
        self.figsize = figsize
        self.dpi = dpi
        self.series: List[LatencySeries] = []

    def add_series(self, series: LatencySeries) -> None:
        self.series.append(series)

    def render(self) -> None:
        fig, ax = plt.subplots(figsize=self.figsize)
        try:
            for series in self.series:
                ranks = [rank for rank, _ in series.points]
                latencies = [latency for _, latency in series.points]
                ax.plot(ranks, latencies, label=series.name, linewidth=0.8)

            ax.set_title(self.title)
            ax.set_xlabel('request')
            ax.set_ylabel('time elapsed (ms)')
            if self.series:
                ax.legend()
            ax.grid(True, alpha=0.3)

            fig.tight_layout()
            fig.savefig(self.path, dpi=self.dpi, bbox_inches='tight')
        finally:
            plt.close(fig)
