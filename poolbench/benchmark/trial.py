import itertools
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional

from poolbench.backends.base import PoolHandle
from poolbench.benchmark.worker import BarrierWorker, WorkerResult
from poolbench.config import BenchmarkConfig
from poolbench.exceptions import TrialTimeoutError
from poolbench.workload import TimedWorkload

WARMUP_TRIAL = 0


@dataclass
class TrialResult:
    backend: str
    index: int
    workers: List[WorkerResult]
    window: Optional[float] = None  # seconds from start-barrier release to end-barrier release

    @property
    def is_warmup(self) -> bool:
        return self.index == WARMUP_TRIAL

    def samples(self) -> Iterator[float]:
        return itertools.chain.from_iterable(w.samples for w in self.workers)

    @property
    def sample_count(self) -> int:
        return sum(len(w.samples) for w in self.workers)

    @property
    def failures(self) -> int:
        return sum(w.failures for w in self.workers)

    @property
    def aborted_workers(self) -> List[int]:
        return [w.index for w in self.workers if w.aborted]

    @property
    def throughput(self) -> Optional[float]:
        """Completed cycles per second over the measurement window."""
        if not self.window:
            return None
        return self.sample_count / self.window


class _Window:
    def __init__(self, clock: Callable[[], float]) -> None:
        self._clock = clock
        self.started: Optional[float] = None
        self.ended: Optional[float] = None

    # Barrier actions run once, in the last thread to arrive.
    def start(self) -> None:
        self.started = self._clock()

    def end(self) -> None:
        self.ended = self._clock()

    @property
    def elapsed(self) -> Optional[float]:
        if self.started is None or self.ended is None:
            return None
        return self.ended - self.started


class TrialRunner:
    """Runs one trial: ``thread_count`` barrier-synchronized workers on a fresh thread pool."""

    def __init__(
        self,
        thread_count: int,
        iterations_per_thread: int,
        workload: TimedWorkload,
        timeout: float = 3600.0,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        if thread_count < 1:
            raise ValueError(f"thread_count must be >= 1, got {thread_count}")
        self.thread_count = thread_count
        self.iterations_per_thread = iterations_per_thread
        self.workload = workload
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: BenchmarkConfig,
        workload: TimedWorkload,
        logger: Optional[logging.Logger] = None,
    ) -> "TrialRunner":
        return cls(
            thread_count=config.thread_count,
            iterations_per_thread=config.iterations_per_thread,
            workload=workload,
            timeout=config.trial_timeout,
            logger=logger,
        )

    def run(self, pool: PoolHandle, trial: int, backend: str = "") -> TrialResult:
        """Run trial ``trial`` against ``pool`` and return worker results in slot order.

        Raises:
            TrialTimeoutError: the workers did not all finish within ``timeout``.
        """
        window = _Window(self._clock)
        stop = threading.Event()
        start_barrier = threading.Barrier(self.thread_count, action=window.start)
        end_barrier = threading.Barrier(self.thread_count, action=window.end)

        workers = [
            BarrierWorker(
                index=j,
                pool=pool,
                workload=self.workload,
                iterations=self.iterations_per_thread,
                start_barrier=start_barrier,
                end_barrier=end_barrier,
                logger=self.logger,
                clock=self._clock,
                stop=stop,
            )
            for j in range(self.thread_count)
        ]

        executor = ThreadPoolExecutor(
            max_workers=self.thread_count,
            thread_name_prefix=f"{backend or 'pool'}-t{trial}",
        )
        futures = [executor.submit(worker.run) for worker in workers]
        _, not_done = wait(futures, timeout=self.timeout)

        if not_done:
            # Workers finish their current cycle at most; threads stuck inside the pool are abandoned.
            stop.set()
            start_barrier.abort()
            end_barrier.abort()
            executor.shutdown(wait=False, cancel_futures=True)
            raise TrialTimeoutError(backend, trial, self.timeout)

        executor.shutdown(wait=True)

        results: List[WorkerResult] = []
        for j, future in enumerate(futures):
            try:
                results.append(future.result())
            except Exception as e:
                self.logger.error(f"Worker {j} failed before publishing results: {e!r}")
                results.append(WorkerResult(j, error=e))

        return TrialResult(
            backend=backend,
            index=trial,
            workers=results,
            window=window.elapsed,
        )
