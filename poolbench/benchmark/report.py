from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Tuple

import pandas as pd

from poolbench.benchmark.stats import SummaryStatistic


def percentile_label(p: float) -> str:
    """``0.999`` -> ``"99.9"``, ``0.9`` -> ``"90"``."""
    return f"{p * 100:.10g}"


def format_trial_line(trial: int, stats: SummaryStatistic) -> str:
    return (
        f"trial {trial}: average: {stats.mean:.3f} min: {stats.min:.3f} "
        f"max: {stats.max:.3f} {percentile_label(stats.percentile)}-percentile: "
        f"{stats.percentile_value:.3f} total_elapsed_time: {stats.sum:.3f}"
    )


@dataclass
class LatencySeries:
    name: str
    points: List[Tuple[int, float]]

    @staticmethod
    def series_name(backend: str, trial: int) -> str:
        return f"{backend}-t{trial}"


class SeriesSink(Protocol):
    """Receives the percentile series once every backend has run."""

    def add_series(self, series: LatencySeries) -> None: ...

    def render(self) -> None: ...


@dataclass
class TrialSummary:
    backend: str
    trial: int
    stats: SummaryStatistic
    failures: int = 0
    aborted_workers: int = 0
    window: Optional[float] = None
    throughput: Optional[float] = None


@dataclass
class BenchmarkReport:
    summaries: List[TrialSummary] = field(default_factory=list)
    series: List[LatencySeries] = field(default_factory=list)
    skipped_backends: Dict[str, str] = field(default_factory=dict)
    failed_trials: List[Tuple[str, int, str]] = field(default_factory=list)

    @property
    def lines(self) -> List[str]:
        return [format_trial_line(s.trial, s.stats) for s in self.summaries]

    def summary_frame(self) -> pd.DataFrame:
        columns = [
            "backend", "trial", "count", "mean_ms", "min_ms", "max_ms",
            "percentile", "percentile_ms", "total_ms", "failures",
            "aborted_workers", "window_s", "ops_per_sec",
        ]
        rows = [
            {
                "backend": s.backend,
                "trial": s.trial,
                "count": s.stats.count,
                "mean_ms": s.stats.mean,
                "min_ms": s.stats.min,
                "max_ms": s.stats.max,
                "percentile": s.stats.percentile,
                "percentile_ms": s.stats.percentile_value,
                "total_ms": s.stats.sum,
                "failures": s.failures,
                "aborted_workers": s.aborted_workers,
                "window_s": s.window,
                "ops_per_sec": s.throughput,
            }
            for s in self.summaries
        ]
        return pd.DataFrame(rows, columns=columns)

    def series_frame(self) -> pd.DataFrame:
        rows = [
            {"series": s.name, "rank": rank, "latency_ms": latency}
            for s in self.series
            for rank, latency in s.points
        ]
        return pd.DataFrame(rows, columns=["series", "rank", "latency_ms"])

    def to_csv(self, prefix: str) -> Tuple[str, str]:
        summary_path = f"{prefix}_summary.csv"
        series_path = f"{prefix}_series.csv"
        self.summary_frame().to_csv(summary_path, index=False)
        self.series_frame().to_csv(series_path, index=False)
        return summary_path, series_path

    def generate_report(self) -> str:
        """Plain-text comparison of the measured trials, averaged per backend."""
        report = []
        report.append("Connection Pool Benchmark Report")
        report.append("=" * 50)

        frame = self.summary_frame()
        if not frame.empty:
            per_backend = frame.groupby("backend", sort=False).agg(
                trials=("trial", "count"),
                mean_ms=("mean_ms", "mean"),
                percentile_ms=("percentile_ms", "mean"),
                max_ms=("max_ms", "max"),
                failures=("failures", "sum"),
            )
            label = percentile_label(frame["percentile"].iloc[0])
            for backend, row in per_backend.iterrows():
                report.append(f"\nBackend: {backend}")
                report.append("-" * 30)
                report.append(f"Trials:   {int(row['trials'])}")
                report.append(f"Average:  {row['mean_ms']:.3f}ms")
                report.append(f"{label}-percentile: {row['percentile_ms']:.3f}ms")
                report.append(f"Worst:    {row['max_ms']:.3f}ms")
                report.append(f"Failures: {int(row['failures'])}")

            if len(per_backend) > 1:
                winner = per_backend["percentile_ms"].idxmin()
                report.append(f"\nLowest {label}-percentile latency: {winner}")

        for backend, reason in self.skipped_backends.items():
            report.append(f"\nSkipped backend {backend}: {reason}")
        for backend, trial, reason in self.failed_trials:
            report.append(f"Failed trial {backend} t{trial}: {reason}")

        return "\n".join(report)
