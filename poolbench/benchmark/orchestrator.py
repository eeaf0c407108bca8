import logging
import sys
from typing import Optional, Sequence, TextIO

from poolbench.backends.base import BackendAdapter, PoolHandle
from poolbench.benchmark.report import (
    BenchmarkReport,
    LatencySeries,
    SeriesSink,
    TrialSummary,
    format_trial_line,
)
from poolbench.benchmark.stats import Aggregator
from poolbench.benchmark.trial import WARMUP_TRIAL, TrialRunner
from poolbench.config import BenchmarkConfig
from poolbench.exceptions import BackendOpenError, EmptySampleError, TrialTimeoutError
from poolbench.workload import TimedWorkload


class BenchmarkOrchestrator:
    """Runs every backend in turn: one warm-up trial, then ``trial_count`` measured trials.

    Report lines go to ``out``; the percentile series of all measured trials
    are handed to ``sink`` after the last backend.
    """

    def __init__(
        self,
        backends: Sequence[BackendAdapter],
        workload: TimedWorkload,
        config: Optional[BenchmarkConfig] = None,
        sink: Optional[SeriesSink] = None,
        out: Optional[TextIO] = None,
        logger: Optional[logging.Logger] = None,
        runner: Optional[TrialRunner] = None,
    ) -> None:
        self.backends = list(backends)
        self.config = config or BenchmarkConfig()
        self.sink = sink
        self.out = out
        self.logger = logger or logging.getLogger(__name__)
        self.runner = runner or TrialRunner.from_config(self.config, workload, self.logger)
        self.aggregator = Aggregator(self.config.tail_percentile)

    def _emit(self, line: str = "") -> None:
        print(line, file=self.out or sys.stdout, flush=True)

    def run(self) -> BenchmarkReport:
        report = BenchmarkReport()
        for backend in self.backends:
            self.run_backend(backend, report)

        if self.sink is not None:
            for series in report.series:
                self.sink.add_series(series)
            try:
                self.sink.render()
            except Exception as e:
                self.logger.error(f"Failed to render latency series: {e!r}")
        return report

    def run_backend(self, backend: BackendAdapter, report: BenchmarkReport) -> None:
        self.logger.info(f"testing datasource: {backend.name}")
        try:
            handle = self._open(backend)
        except BackendOpenError as e:
            self.logger.error(str(e), exc_info=e.cause)
            report.skipped_backends[backend.name] = str(e.cause or e)
            return

        try:
            if self.config.warmup:
                self.logger.info("warmup running..")
                self._run_trial(backend, handle, WARMUP_TRIAL, report)
            for trial in range(1, self.config.trial_count + 1):
                self.logger.info(f"trial {trial} running..")
                self._run_trial(backend, handle, trial, report)
        finally:
            try:
                backend.close(handle)
            except Exception as e:
                self.logger.error(f"Failed to close backend {backend.name!r}: {e!r}")

        self._emit()

    def _open(self, backend: BackendAdapter) -> PoolHandle:
        try:
            return backend.open()
        except Exception as e:
            raise BackendOpenError(backend.name, e) from e

    def _run_trial(
        self,
        backend: BackendAdapter,
        handle: PoolHandle,
        trial: int,
        report: BenchmarkReport,
    ) -> None:
        try:
            result = self.runner.run(handle, trial, backend.name)
        except TrialTimeoutError as e:
            self.logger.error(str(e))
            report.failed_trials.append((backend.name, trial, str(e)))
            return

        if result.aborted_workers:
            self.logger.warning(
                f"{backend.name} trial {trial}: workers {result.aborted_workers} aborted early"
            )
        if result.is_warmup:
            return

        samples = self.aggregator.merge(result.workers)
        try:
            stats = self.aggregator.summarize_sorted(samples)
        except EmptySampleError as e:
            self.logger.error(f"{backend.name} trial {trial}: {e}")
            report.failed_trials.append((backend.name, trial, str(e)))
            return

        self._emit(format_trial_line(trial, stats))
        report.summaries.append(
            TrialSummary(
                backend=backend.name,
                trial=trial,
                stats=stats,
                failures=result.failures,
                aborted_workers=len(result.aborted_workers),
                window=result.window,
                throughput=result.throughput,
            )
        )
        report.series.append(
            LatencySeries(
                name=LatencySeries.series_name(backend.name, trial),
                points=self.aggregator.series(samples),
            )
        )


def run_benchmark(
    backends: Sequence[BackendAdapter],
    workload: TimedWorkload,
    config: Optional[BenchmarkConfig] = None,
    sink: Optional[SeriesSink] = None,
    out: Optional[TextIO] = None,
) -> BenchmarkReport:
    return BenchmarkOrchestrator(backends, workload, config, sink=sink, out=out).run()
