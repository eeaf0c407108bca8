"""
poolbench CLI -- compare connection pools under barrier-synchronized load.

Usage:
  poolbench --url postgresql://user:pw@localhost/db [--driver psycopg3 --driver psycopg2]
            [--trials 3] [--threads 32] [--iterations 10000] [--percentile 0.999]
            [--plot pool_latency.png] [--csv results]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from poolbench.backends.factory import BackendFactory
from poolbench.benchmark.orchestrator import BenchmarkOrchestrator
from poolbench.config import BenchmarkConfig, PoolConfig, PoolDriver
from poolbench.logging import create_logger, shutdown_logging
from poolbench.workload import ExistsQuery


def build_parser() -> argparse.ArgumentParser:
    defaults = BenchmarkConfig()
    pool_defaults = PoolConfig()

    parser = argparse.ArgumentParser(
        prog="poolbench",
        description="Compare connection pool latency under concurrent contention.",
    )
    parser.add_argument("--url", required=True, help="database URL, e.g. postgresql://user:pw@host/db")
    parser.add_argument(
        "--driver",
        action="append",
        choices=[d.value for d in PoolDriver],
        help="pool driver to benchmark (repeatable; default: every driver of the URL's dialect)",
    )
    parser.add_argument("--trials", type=int, default=defaults.trial_count)
    parser.add_argument("--threads", type=int, default=defaults.thread_count)
    parser.add_argument("--iterations", type=int, default=defaults.iterations_per_thread)
    parser.add_argument("--percentile", type=float, default=defaults.tail_percentile)
    parser.add_argument(
        "--timeout", type=float, default=defaults.trial_timeout,
        help="seconds before a trial is considered hung",
    )
    parser.add_argument("--no-warmup", action="store_true", help="skip the warm-up trial")
    parser.add_argument("--pool-min", type=int, default=pool_defaults.min_size)
    parser.add_argument("--pool-max", type=int, default=pool_defaults.max_size)
    parser.add_argument("--pool-timeout", type=float, default=pool_defaults.connection_timeout)
    parser.add_argument("--table", help="table for the existence check (default: SELECT 1)")
    parser.add_argument("--column", default="id")
    parser.add_argument("--value", default="")
    parser.add_argument("--plot", metavar="PATH", help="save a latency chart to PATH")
    parser.add_argument("--csv", metavar="PREFIX", help="write PREFIX_summary.csv and PREFIX_series.csv")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    parser.add_argument("--log-file")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logger = create_logger("poolbench", getattr(logging, args.log_level), args.log_file)

    try:
        config = BenchmarkConfig(
            trial_count=args.trials,
            thread_count=args.threads,
            iterations_per_thread=args.iterations,
            tail_percentile=args.percentile,
            trial_timeout=args.timeout,
            warmup=not args.no_warmup,
        )
        pool_config = PoolConfig(
            min_size=args.pool_min,
            max_size=args.pool_max,
            connection_timeout=args.pool_timeout,
        )
        backends = BackendFactory.create_all(args.url, args.driver, pool_config)
        workload = ExistsQuery(
            table=args.table,
            column=args.column,
            value=args.value,
        )
    except ValueError as e:
        logger.error(str(e))
        shutdown_logging()
        return 2

    sink = None
    if args.plot:
        from poolbench.benchmark.plotting import MatplotlibChart
        sink = MatplotlibChart(args.plot)

    try:
        report = BenchmarkOrchestrator(backends, workload, config, sink=sink, logger=logger).run()
        print(report.generate_report())
        if args.csv:
            for path in report.to_csv(args.csv):
                logger.info(f"wrote {path}")
    finally:
        shutdown_logging()

    return 0 if report.summaries else 1


if __name__ == "__main__":
    sys.exit(main())
