"""cardinality-lite CLI entry point.

Usage: cardinality-lite [-v] {estimate,compare} [FILE]

Each input line (without its newline) is one value. FILE defaults to
stdin.
"""
import argparse
import logging
import sys
from collections.abc import Iterator
from typing import TextIO

from cardinality_lite.base import CardinalityEstimator
from cardinality_lite.hash_counter import HashCounter
from cardinality_lite.hyperloglog import HyperLogLog
from cardinality_lite.linear import LinearCounterBuilder
from cardinality_lite.loglog import LogLog
from cardinality_lite.report import compare_estimators, format_comparison

ALGORITHMS = ("hyperloglog", "loglog", "linear", "exact")


def _read_values(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield line.rstrip("\r\n")


def _build(args: argparse.Namespace, algorithm: str) -> CardinalityEstimator:
    if algorithm == "exact":
        return HashCounter()
    if algorithm == "linear":
        return LinearCounterBuilder.one_percent_error(args.max_cardinality).build()
    cls = HyperLogLog if algorithm == "hyperloglog" else LogLog
    if args.rse is not None:
        return cls.from_rse(args.rse)
    return cls(args.k)


def _add_sizing_arguments(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "file", nargs="?", type=argparse.FileType("r"), default=sys.stdin,
        help="Input file, one value per line (default: stdin)",
    )
    p.add_argument(
        "--k", type=int, default=14,
        help="log2 register count for hyperloglog/loglog (default: 14)",
    )
    p.add_argument(
        "--rse", type=float, default=None,
        help="Target relative standard error; overrides --k",
    )
    p.add_argument(
        "--max-cardinality", type=int, default=1_000_000,
        help="Expected maximum cardinality for the linear counter (default: 1000000)",
    )


def _add_estimate_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "estimate",
        help="Estimate the number of distinct lines with one estimator.",
    )
    _add_sizing_arguments(p)
    p.add_argument(
        "--algorithm", choices=ALGORITHMS, default="hyperloglog",
        help="Estimator to use (default: hyperloglog)",
    )


def _add_compare_parser(subparsers: argparse._SubParsersAction) -> None:
    p = subparsers.add_parser(
        "compare",
        help="Run every estimator over the input and compare with the exact count.",
    )
    _add_sizing_arguments(p)


def _run_estimate(args: argparse.Namespace) -> None:
    estimator = _build(args, args.algorithm)
    estimator.offer_all(_read_values(args.file))
    print(f"Estimator:    {estimator!r}")
    print(f"Cardinality:  {estimator.cardinality():,}")
    print(f"Size:         {estimator.sizeof():,} bytes")


def _run_compare(args: argparse.Namespace) -> None:
    estimators = {name: _build(args, name) for name in ALGORITHMS if name != "exact"}
    results = compare_estimators(_read_values(args.file), estimators)
    print(format_comparison(results))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="cardinality-lite",
        description="Approximate distinct counting -- HyperLogLog, LogLog, linear counting.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command")

    _add_estimate_parser(subparsers)
    _add_compare_parser(subparsers)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "estimate":
            _run_estimate(args)
        elif args.command == "compare":
            _run_compare(args)
    except ValueError as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    main()
