#!/usr/bin/env python3
"""
Renderscope Benchmarks

Times the hot paths of the engine (windowing, deep equality, memo lookups,
rerender classification) through the engine's own profiler and prints the
results with rich.

Usage:
    python scripts/benchmark.py                  # Run all benchmarks
    python scripts/benchmark.py --iterations 500 # Fewer samples per benchmark
    python scripts/benchmark.py --config         # Show benchmark configuration
"""

import argparse
import time
from typing import Callable, Dict

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table, box

from renderscope import DeepMemo, EngineConfig, PerformanceRegistry, deep_equal
from renderscope.report import render_report

COLLECTION_SIZE = 100_000
ITEM_EXTENT = 48
VIEWPORT_EXTENT = 900
SNAPSHOT_WIDTH = 20


def _nested_payload(width: int) -> Dict[str, object]:
    return {
        f"key{i}": {"values": list(range(10)), "label": f"item-{i}", "flags": (i, i % 2)}
        for i in range(width)
    }


class BenchmarkSuite:
    """Runs each workload `iterations` times under one profiler operation id."""

    def __init__(self, iterations: int, console: Console):
        self.iterations = iterations
        self.console = console
        # Generous threshold: alerts here would only be noise
        self.registry = PerformanceRegistry(
            EngineConfig(slow_threshold_ms=50.0, high_frequency_cutoff=10 * iterations)
        )

    def _run(self, name: str, workload: Callable[[int], object]) -> None:
        self.console.print(f"[yellow]Running {name}...[/yellow]")
        for i in range(self.iterations):
            with self.registry.profiler.measure(name):
                workload(i)
        stats = self.registry.profiler.get_stats(name)
        ops_sec = 1000.0 / stats.average if stats.average else float("inf")
        self.console.print(f"[green]✓[/green] {name}: {ops_sec:,.0f} ops/sec")

    def run_all(self) -> None:
        self.console.print(
            Panel(
                Align.center("Renderscope Engine Benchmarks"),
                border_style="blue",
            )
        )

        self._run(
            "window",
            lambda i: self.registry.window(
                COLLECTION_SIZE, ITEM_EXTENT, VIEWPORT_EXTENT, (i * 37) % 4_000_000
            ),
        )

        left = _nested_payload(SNAPSHOT_WIDTH)
        right = _nested_payload(SNAPSHOT_WIDTH)
        self._run("deep-equal", lambda i: deep_equal(left, right))

        memo = DeepMemo()
        self._run(
            "memo-hit",
            lambda i: memo.get([left, "open"], lambda: sorted(left)),
        )

        snapshot = {f"prop{k}": k for k in range(SNAPSHOT_WIDTH)}
        self._run(
            "classify",
            lambda i: self.registry.update(f"Row#{i % 50}", {**snapshot, "tick": i}),
        )

    def display(self) -> None:
        table = Table(title="Latency percentiles", box=box.DOUBLE, header_style="bold cyan")
        table.add_column("Benchmark", style="white", no_wrap=True)
        table.add_column("p50 (μs)", style="green", justify="right")
        table.add_column("p95 (μs)", style="yellow", justify="right")
        table.add_column("p99 (μs)", style="red", justify="right")
        for name, stats in self.registry.get_all_stats().items():
            table.add_row(
                name,
                f"{stats.percentile(50) * 1000:.1f}",
                f"{stats.percentile(95) * 1000:.1f}",
                f"{stats.percentile(99) * 1000:.1f}",
            )
        self.console.print()
        self.console.print(table)
        self.console.print()
        render_report(self.registry, self.console)


def main():
    parser = argparse.ArgumentParser(description="Renderscope performance benchmarks")
    parser.add_argument("--iterations", type=int, default=2000)
    parser.add_argument(
        "--config", action="store_true", help="Show the benchmark configuration"
    )
    args = parser.parse_args()
    console = Console()

    if args.config:
        console.print(f"Iterations per benchmark: {args.iterations}")
        console.print(f"Collection size: {COLLECTION_SIZE:,} items of {ITEM_EXTENT}px")
        console.print(f"Viewport: {VIEWPORT_EXTENT}px")
        console.print(f"Snapshot width: {SNAPSHOT_WIDTH} keys")
        return

    start = time.time()
    suite = BenchmarkSuite(args.iterations, console)
    suite.run_all()
    suite.display()
    console.print(f"[dim]Benchmark completed in {time.time() - start:.2f} seconds[/dim]")


if __name__ == "__main__":
    main()
