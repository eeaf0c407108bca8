from poolbench.benchmark.orchestrator import BenchmarkOrchestrator, run_benchmark
from poolbench.benchmark.report import (
    BenchmarkReport,
    LatencySeries,
    SeriesSink,
    TrialSummary,
    format_trial_line,
)
from poolbench.benchmark.stats import Aggregator, SummaryStatistic, nearest_rank_index, percentile
from poolbench.benchmark.trial import TrialResult, TrialRunner
from poolbench.benchmark.worker import BarrierWorker, WorkerResult

__all__ = [
    "Aggregator",
    "BarrierWorker",
    "BenchmarkOrchestrator",
    "BenchmarkReport",
    "LatencySeries",
    "SeriesSink",
    "SummaryStatistic",
    "TrialResult",
    "TrialRunner",
    "TrialSummary",
    "WorkerResult",
    "format_trial_line",
    "nearest_rank_index",
    "percentile",
    "run_benchmark",
]
