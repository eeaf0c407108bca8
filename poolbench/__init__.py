"""Latency benchmarks for connection pools under barrier-synchronized contention."""

from poolbench.backends import BackendAdapter, BackendFactory, CallableBackend, PoolHandle
from poolbench.benchmark import (
    Aggregator,
    BenchmarkOrchestrator,
    BenchmarkReport,
    TrialRunner,
    run_benchmark,
)
from poolbench.config import BenchmarkConfig, PoolConfig
from poolbench.workload import ExistsQuery

__version__ = "0.1.0"

__all__ = [
    "Aggregator",
    "BackendAdapter",
    "BackendFactory",
    "BenchmarkConfig",
    "BenchmarkOrchestrator",
    "BenchmarkReport",
    "CallableBackend",
    "ExistsQuery",
    "PoolConfig",
    "PoolHandle",
    "TrialRunner",
    "run_benchmark",
]
