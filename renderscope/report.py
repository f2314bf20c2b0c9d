"""
Diagnostics Report
==================

Renders a registry's query surface as rich tables for terminal diagnostics:
one table for profiled operations, one for components, one for alerts, and a
header panel carrying the performance score.

Usage:
    from rich.console import Console
    render_report(registry, Console())
"""

import time
from typing import Iterable, Mapping, Optional

from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table, box

from .alerts import Alert, Severity
from .monitor import ComponentProfile
from .profiler import StatsAggregate
from .registry import PerformanceRegistry


def _score_style(score: int) -> str:
    if score >= 80:
        return "green"
    if score >= 50:
        return "yellow"
    return "red"


def operations_table(
    stats: Mapping[str, StatsAggregate], slow_threshold_ms: float
) -> Table:
    """One row per operation, slowest average first."""
    table = Table(title="Operations", box=box.SIMPLE_HEAVY)
    table.add_column("Operation", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Min (ms)", justify="right")
    table.add_column("Max (ms)", justify="right")
    table.add_column("p95 (ms)", justify="right")

    ordered = sorted(stats.items(), key=lambda item: item[1].average, reverse=True)
    for operation_id, agg in ordered:
        style = "red" if agg.average > slow_threshold_ms else None
        table.add_row(
            operation_id,
            str(agg.count),
            f"{agg.average:.2f}",
            f"{agg.min:.2f}",
            f"{agg.max:.2f}",
            f"{agg.percentile(95):.2f}",
            style=style,
        )
    return table


def components_table(components: Iterable[ComponentProfile]) -> Table:
    table = Table(title="Components", box=box.SIMPLE_HEAVY)
    table.add_column("Component", style="cyan", no_wrap=True)
    table.add_column("Renders", justify="right")
    table.add_column("Total (ms)", justify="right")
    table.add_column("Avg (ms)", justify="right")
    table.add_column("Last (ms)", justify="right")

    for profile in components:
        table.add_row(
            profile.name,
            str(profile.render_count),
            f"{profile.total_time:.2f}",
            f"{profile.average_time:.2f}",
            f"{profile.last_render_time:.2f}",
            style="red" if profile.is_slow else None,
        )
    return table


def alerts_table(alerts: Iterable[Alert], limit: int = 20) -> Table:
    """The most recent alerts, newest first."""
    table = Table(title="Alerts", box=box.SIMPLE_HEAVY)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Severity")
    table.add_column("Source", style="cyan")
    table.add_column("Message")

    recent = list(alerts)[-limit:]
    for alert in reversed(recent):
        severity_style = "red" if alert.severity is Severity.ERROR else "yellow"
        table.add_row(
            time.strftime("%H:%M:%S", time.localtime(alert.timestamp)),
            f"[{severity_style}]{alert.severity.value}[/{severity_style}]",
            alert.source,
            alert.message,
        )
    return table


def build_report(registry: PerformanceRegistry) -> Group:
    score = registry.performance_score()
    style = _score_style(score)
    header = Panel(
        f"[bold {style}]{score}[/bold {style}] / 100",
        title="Performance score",
        expand=False,
    )
    return Group(
        header,
        operations_table(registry.get_all_stats(), registry.config.slow_threshold_ms),
        components_table(registry.get_components_performance_data()),
        alerts_table(registry.get_alerts()),
    )


def render_report(
    registry: PerformanceRegistry, console: Optional[Console] = None
) -> None:
    """Print the report for registry to console (default: a new stdout Console)."""
    console = console if console is not None else Console()
    console.print(build_report(registry))
