import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from poolbench.backends.base import PoolHandle
from poolbench.exceptions import WorkerAbort
from poolbench.workload import TimedWorkload


@dataclass
class WorkerResult:
    index: int
    samples: List[float] = field(default_factory=list)  # milliseconds
    failures: int = 0
    error: Optional[BaseException] = None

    @property
    def aborted(self) -> bool:
        return self.error is not None


class BarrierWorker:
    """One worker slot of a trial.

    Waits on the start barrier, runs ``iterations`` timed
    acquire/work/release cycles, then waits on the end barrier. Both barrier
    arrivals happen on every exit path. Setting ``stop`` ends the loop before
    the next cycle starts.
    """

    def __init__(
        self,
        index: int,
        pool: PoolHandle,
        workload: TimedWorkload,
        iterations: int,
        start_barrier: threading.Barrier,
        end_barrier: threading.Barrier,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.perf_counter,
        stop: Optional[threading.Event] = None,
    ) -> None:
        self.index = index
        self._pool = pool
        self._workload = workload
        self._iterations = iterations
        self._start_barrier = start_barrier
        self._end_barrier = end_barrier
        self._clock = clock
        self._stop = stop or threading.Event()
        self.logger = logger or logging.getLogger(__name__)

    def run(self) -> WorkerResult:
        result = WorkerResult(self.index)
        try:
            self._start_barrier.wait()
            self._run_iterations(result)
        except threading.BrokenBarrierError as e:
            result.error = e
            self.logger.error(f"Worker {self.index}: start barrier broken, no samples taken")
        except Exception as e:
            result.error = e
            self.logger.error(
                f"Worker {self.index} aborted after {len(result.samples)} samples: {e!r}"
            )
        finally:
            self._arrive_at_end()
        return result

    def _run_iterations(self, result: WorkerResult) -> None:
        clock = self._clock
        samples = result.samples
        for k in range(self._iterations):
            if self._stop.is_set():
                self.logger.debug(f"Worker {self.index} stopped after {k} iterations")
                return
            start = clock()
            try:
                with self._pool.connection() as conn:
                    self._workload(conn)
            except WorkerAbort:
                raise
            except Exception as e:
                result.failures += 1
                self.logger.warning(f"Worker {self.index} iteration {k} failed: {e!r}")
                continue
            end = clock()
            samples.append((end - start) * 1000.0)

    def _arrive_at_end(self) -> None:
        try:
            self._end_barrier.wait()
        except threading.BrokenBarrierError:
            self.logger.warning(f"Worker {self.index}: end barrier broken")
