#!/usr/bin/env python3
"""
Fluxion Performance Benchmarks

Measures how fast the store broadcasts and how much the operator pipeline costs
on top of a bare subscription. Results are printed as a rich table.

Usage:
    python scripts/benchmark.py            # Run all benchmarks
    python scripts/benchmark.py --config   # Show current benchmark configuration
"""

import argparse
import sys
import time
from dataclasses import dataclass
from typing import Callable, Dict, List

# Add the project root to the Python path
sys.path.insert(0, ".")

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fluxion import ManualScheduler, Store, dedup, make_coeffect, select, throttle

TIME_LIMIT_SECONDS = 1.0
STARTING_N = 100
SCALE_FACTOR = 1.5


@dataclass
class BenchmarkResult:
    """Largest workload that completed within the time limit."""

    name: str
    max_n: int
    operation_time: float
    operations_per_second: float


def _increment(state: int) -> int:
    return state + 1


def bench_broadcast(n: int) -> int:
    """n handler calls against one plain consumer."""
    store = Store(0)
    store.subscribe(lambda s: None)
    inc = store.create_handler(_increment)
    for _ in range(n):
        inc()
    return n


def bench_fanout(n: int) -> int:
    """One handler call broadcast to n consumers."""
    store = Store(0)
    for _ in range(n):
        store.subscribe(lambda s: None)
    store.create_handler(_increment)()
    return n


def bench_dedup_pipeline(n: int) -> int:
    """n updates, each projected and deduplicated (half are duplicates)."""
    store = Store(0)
    store.subscribe.with_(select(lambda s: s // 2)).with_(dedup())(lambda v: None)
    inc = store.create_handler(_increment)
    for _ in range(n):
        inc()
    return n


def bench_throttle_pipeline(n: int) -> int:
    """n updates coalesced into one flush per 100 updates."""
    frames = ManualScheduler()
    store = Store(0)
    store.subscribe.with_(throttle(frames))(lambda s: None)
    inc = store.create_handler(_increment)
    for i in range(n):
        inc()
        if i % 100 == 0:
            frames.flush()
    frames.flush()
    return n


def bench_coeffect_trigger(n: int) -> int:
    """n coeffect triggers re-delivering to 10 consumers."""
    clock, tick = make_coeffect(time.perf_counter)
    store = Store(0)
    for _ in range(10):
        store.subscribe.with_(clock)(lambda s, t: None)
    for _ in range(n):
        tick()
    return n * 10


BENCHMARKS: Dict[str, Callable[[int], int]] = {
    "Handler broadcast": bench_broadcast,
    "Consumer fan-out": bench_fanout,
    "select + dedup pipeline": bench_dedup_pipeline,
    "throttle pipeline": bench_throttle_pipeline,
    "Coeffect trigger": bench_coeffect_trigger,
}


def run_scaled(name: str, operation: Callable[[int], int]) -> BenchmarkResult:
    """Grow n by SCALE_FACTOR until a run takes longer than the time limit."""
    n = STARTING_N
    while True:
        start = time.perf_counter()
        performed = operation(n)
        elapsed = max(time.perf_counter() - start, 1e-9)
        result = BenchmarkResult(name, n, elapsed, performed / elapsed)
        if elapsed >= TIME_LIMIT_SECONDS:
            return result
        n = int(n * SCALE_FACTOR) + 1


class BenchmarkReport:
    """Rich-formatted display for benchmark results."""

    def __init__(self, quiet: bool = False):
        self.console = Console()
        self.quiet = quiet
        self.results: List[BenchmarkResult] = []

    def run(self) -> None:
        self.console.print(
            Panel(
                Align.center("Fluxion Performance Benchmark Suite"),
                title="Fluxion Benchmarks",
                border_style="blue",
            )
        )
        for name, operation in BENCHMARKS.items():
            if not self.quiet:
                self.console.print(f"[yellow]Running {name}...[/yellow]")
            result = run_scaled(name, operation)
            self.results.append(result)
            if not self.quiet:
                self.console.print(
                    f"[green]✓[/green] {name}: {result.operations_per_second:,.0f} ops/sec "
                    f"({result.max_n} items)"
                )
        self._display_results()

    def _display_results(self) -> None:
        table = Table(title="Final Benchmark Results")
        table.add_column("Benchmark", style="cyan", no_wrap=True)
        table.add_column("Max Workload", style="magenta")
        table.add_column("Performance", style="green", justify="right")
        table.add_column("Latency", style="yellow", justify="right")

        for result in self.results:
            latency_us = result.operation_time / max(result.max_n, 1) * 1e6
            table.add_row(
                result.name,
                f"{result.max_n:,}",
                f"{result.operations_per_second / 1000:.1f}K ops/sec",
                f"{latency_us:.2f}μs",
            )

        self.console.print()
        self.console.print(table)


def print_config() -> None:
    """Print the current benchmark configuration."""
    print("Fluxion Benchmark Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Fluxion Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output, show only final results",
    )
    args = parser.parse_args()

    if args.config:
        print_config()
        return

    BenchmarkReport(quiet=args.quiet).run()


if __name__ == "__main__":
    main()
