#!/usr/bin/env python3
"""
Fluxion vs ReactiveX Comparison

Runs equivalent deduplication and coalescing pipelines through fluxion and
through ReactiveX (``reactivex``), checks that both deliver the same values,
and reports throughput side by side.

Pipelines:
- Dedup: consecutive duplicates dropped (``distinct_until_changed``)
- Coalesce: latest value per explicit window (``sample`` on a window subject)
- Projection + dedup: ``select`` then ``dedup`` vs ``map`` then ``distinct_until_changed``
"""

import argparse
import sys
import time
from dataclasses import dataclass
from typing import Callable, List, Tuple

sys.path.insert(0, ".")

import reactivex
from reactivex import operators as ops
from reactivex.subject import Subject
from rich.console import Console
from rich.table import Table

from fluxion import ManualScheduler, Store, dedup, only_if, select, throttle

WINDOW = 50


@dataclass
class ComparisonResult:
    operation: str
    n: int
    fluxion_seconds: float
    rx_seconds: float
    outputs_match: bool


def _inputs(n: int) -> List[int]:
    # Each value repeated three times so dedup has work to do
    return [i // 3 for i in range(n)]


def fluxion_dedup(values: List[int]) -> List[int]:
    out: List[int] = []
    store = Store(None)
    set_value = store.create_handler(lambda state, value: value)
    # Skip the None replay so both libraries see the same stream
    store.subscribe.with_(only_if(lambda v: v is not None)).with_(dedup())(out.append)
    for v in values:
        set_value(v)
    return out


def rx_dedup(values: List[int]) -> List[int]:
    out: List[int] = []
    reactivex.from_iterable(values).pipe(ops.distinct_until_changed()).subscribe(
        out.append
    )
    return out


def fluxion_coalesce(values: List[int]) -> List[int]:
    out: List[int] = []
    window = ManualScheduler()
    consumer = throttle(window)(out.append)
    for i, v in enumerate(values, 1):
        consumer(v)
        if i % WINDOW == 0:
            window.flush()
    window.flush()
    return out


def rx_coalesce(values: List[int]) -> List[int]:
    out: List[int] = []
    source: Subject = Subject()
    window: Subject = Subject()
    source.pipe(ops.sample(window)).subscribe(out.append)
    for i, v in enumerate(values, 1):
        source.on_next(v)
        if i % WINDOW == 0:
            window.on_next(None)
    window.on_next(None)
    return out


def fluxion_select_dedup(values: List[int]) -> List[int]:
    out: List[int] = []
    store = Store({"value": -1})
    set_value = store.create_handler(lambda state, value: {"value": value})
    store.subscribe.with_(select(lambda s: s["value"] // 2)).with_(dedup())(
        out.append
    )
    for v in values:
        set_value(v)
    # Drop the replayed initial value, which has no Rx counterpart
    return out[1:]


def rx_select_dedup(values: List[int]) -> List[int]:
    out: List[int] = []
    reactivex.from_iterable(values).pipe(
        ops.map(lambda v: v // 2), ops.distinct_until_changed()
    ).subscribe(out.append)
    return out


COMPARISONS: List[Tuple[str, Callable, Callable]] = [
    ("Dedup", fluxion_dedup, rx_dedup),
    ("Coalesce per window", fluxion_coalesce, rx_coalesce),
    ("Projection + dedup", fluxion_select_dedup, rx_select_dedup),
]


def _timed(fn: Callable[[List[int]], List[int]], values: List[int]):
    start = time.perf_counter()
    out = fn(values)
    return out, time.perf_counter() - start


def compare(n: int) -> List[ComparisonResult]:
    values = _inputs(n)
    results = []
    for name, fluxion_fn, rx_fn in COMPARISONS:
        fluxion_out, fluxion_seconds = _timed(fluxion_fn, values)
        rx_out, rx_seconds = _timed(rx_fn, values)
        results.append(
            ComparisonResult(name, n, fluxion_seconds, rx_seconds, fluxion_out == rx_out)
        )
    return results


def display(results: List[ComparisonResult]) -> None:
    console = Console()
    table = Table(title="Fluxion vs ReactiveX")
    table.add_column("Operation", style="cyan")
    table.add_column("Inputs", justify="right")
    table.add_column("Fluxion", style="green", justify="right")
    table.add_column("ReactiveX", style="magenta", justify="right")
    table.add_column("Same output", justify="center")

    for r in results:
        table.add_row(
            r.operation,
            f"{r.n:,}",
            f"{r.n / max(r.fluxion_seconds, 1e-9) / 1000:.1f}K ops/sec",
            f"{r.n / max(r.rx_seconds, 1e-9) / 1000:.1f}K ops/sec",
            "[green]yes[/green]" if r.outputs_match else "[red]no[/red]",
        )
    console.print(table)


def main() -> None:
    parser = argparse.ArgumentParser(description="Fluxion vs ReactiveX comparison")
    parser.add_argument("-n", type=int, default=100_000, help="Number of inputs")
    args = parser.parse_args()
    display(compare(args.n))


if __name__ == "__main__":
    main()
