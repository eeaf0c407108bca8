import random

import numpy as np
import pytest

from poolbench.benchmark.stats import Aggregator, nearest_rank_index, percentile
from poolbench.benchmark.worker import WorkerResult
from poolbench.exceptions import EmptySampleError


def _workers(*sample_lists):
    return [WorkerResult(i, list(samples)) for i, samples in enumerate(sample_lists)]


class TestNearestRank:
    def test_truncates_instead_of_interpolating(self):
        assert nearest_rank_index(40, 0.9) == 36
        assert nearest_rank_index(10, 0.999) == 9
        assert nearest_rank_index(320000, 0.999) == 319680

    def test_zero_maps_to_first(self):
        assert nearest_rank_index(7, 0.0) == 0

    def test_one_maps_to_last(self):
        assert nearest_rank_index(7, 1.0) == 6

    def test_empty_is_an_error(self):
        with pytest.raises(EmptySampleError):
            nearest_rank_index(0, 0.5)

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            nearest_rank_index(10, 1.5)


class TestAggregator:
    def test_summary_of_known_values(self):
        stats = Aggregator(0.5).summarize(_workers([4.0, 1.0], [3.0, 2.0]))

        assert stats.count == 4
        assert stats.sum == 10.0
        assert stats.mean == 2.5
        assert stats.min == 1.0
        assert stats.max == 4.0
        # sorted [1, 2, 3, 4], index floor(4 * 0.5) = 2
        assert stats.percentile_value == 3.0
        assert stats.percentile == 0.5

    def test_fixed_millisecond_scenario(self):
        samples = [1.0 + k * 0.01 for k in range(40)]
        random.Random(7).shuffle(samples)
        workers = _workers(samples[0:10], samples[10:20], samples[20:30], samples[30:40])

        aggregator = Aggregator(0.9)
        stats = aggregator.summarize(workers)

        assert stats.count == 40
        assert stats.min >= 1.0
        assert stats.percentile_value == sorted(samples)[36]

    def test_partial_worker_counts(self):
        stats = Aggregator().summarize(_workers([1.0] * 3, [1.0] * 10, [1.0] * 10, [1.0] * 10))
        assert stats.count == 33

    def test_empty_input_fails_loudly(self):
        with pytest.raises(EmptySampleError):
            Aggregator().summarize(_workers([], []))
        with pytest.raises(EmptySampleError):
            Aggregator().summarize([])

    def test_bounds_hold(self):
        rng = random.Random(42)
        samples = [rng.randint(1, 1000) / 8 for _ in range(500)]
        aggregator = Aggregator()
        merged = aggregator.merge(_workers(samples))
        stats = aggregator.summarize_sorted(merged)

        assert stats.min <= stats.mean <= stats.max
        for p in (0.0, 0.1, 0.5, 0.9, 0.99, 0.999, 1.0):
            assert stats.min <= percentile(merged, p) <= stats.max

    def test_percentile_zero_is_min_and_monotonic(self):
        rng = random.Random(3)
        merged = Aggregator().merge(_workers([rng.random() for _ in range(101)]))

        assert percentile(merged, 0.0) == merged[0]
        values = [percentile(merged, p / 100) for p in range(101)]
        assert values == sorted(values)

    def test_merge_is_order_independent(self):
        a, b, c = [3.0, 1.0], [2.0, 9.0, 0.5], [4.0]
        aggregator = Aggregator()

        first = aggregator.merge(_workers(a, b, c))
        second = aggregator.merge(_workers(c, a, b))

        np.testing.assert_array_equal(first, second)
        assert list(first) == sorted(a + b + c)

    def test_series_covers_ranks_up_to_tail_index(self):
        aggregator = Aggregator(0.9)
        merged = aggregator.merge(_workers([float(v) for v in range(40, 0, -1)]))

        series = aggregator.series(merged)

        assert len(series) == 37
        assert series[0] == (0, 1.0)
        assert series[-1] == (36, 37.0)

    def test_rejects_bad_percentile(self):
        with pytest.raises(ValueError):
            Aggregator(-0.1)
