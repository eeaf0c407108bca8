import itertools
import math
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from poolbench.benchmark.worker import WorkerResult
from poolbench.exceptions import EmptySampleError


def nearest_rank_index(count: int, p: float) -> int:
    """Index of the ``p`` quantile in a sorted sequence of ``count`` values.

    Plain truncation of ``count * p``; ``p == 1.0`` maps to the last element.
    """
    if count <= 0:
        raise EmptySampleError("Cannot take a percentile of an empty sample")
    if not 0.0 <= p <= 1.0:
        raise ValueError(f"Percentile must be within [0, 1], got {p}")
    return min(int(math.floor(count * p)), count - 1)


def percentile(sorted_samples: Sequence[float], p: float) -> float:
    return float(sorted_samples[nearest_rank_index(len(sorted_samples), p)])


@dataclass(frozen=True)
class SummaryStatistic:
    count: int
    mean: float
    min: float
    max: float
    percentile: float
    percentile_value: float
    sum: float


class Aggregator:
    """Reduces the worker results of one trial to summary statistics."""

    def __init__(self, tail_percentile: float = 0.999) -> None:
        if not 0.0 <= tail_percentile <= 1.0:
            raise ValueError(f"tail_percentile must be within [0, 1], got {tail_percentile}")
        self.tail_percentile = tail_percentile

    def merge(self, workers: Iterable[WorkerResult]) -> np.ndarray:
        """All samples of all workers, sorted ascending."""
        merged = np.fromiter(
            itertools.chain.from_iterable(w.samples for w in workers),
            dtype=np.float64,
        )
        merged.sort()
        return merged

    def summarize(self, workers: Iterable[WorkerResult]) -> SummaryStatistic:
        return self.summarize_sorted(self.merge(workers))

    def summarize_sorted(self, samples: np.ndarray) -> SummaryStatistic:
        count = len(samples)
        if count == 0:
            raise EmptySampleError("Cannot summarize a trial with no samples")
        total = float(samples.sum())
        return SummaryStatistic(
            count=count,
            mean=total / count,
            min=float(samples[0]),
            max=float(samples[count - 1]),
            percentile=self.tail_percentile,
            percentile_value=percentile(samples, self.tail_percentile),
            sum=total,
        )

    def series(self, samples: np.ndarray) -> List[Tuple[int, float]]:
        """``(rank, latency)`` pairs for ranks ``0..floor(count * tail_percentile)``."""
        last = nearest_rank_index(len(samples), self.tail_percentile)
        return [(rank, float(value)) for rank, value in enumerate(samples[: last + 1])]
