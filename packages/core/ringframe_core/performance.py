"""Runtime render budgeting and frame interval hints."""

from __future__ import annotations

from dataclasses import dataclass

import psutil

MIN_FRAME_INTERVAL_MS = 16
MAX_FRAME_INTERVAL_MS = 250


@dataclass(frozen=True)
class RenderBudget:
    render_ms_max: float = 50.0
    rss_mb_max: float = 400.0
    cpu_percent_max: float = 85.0


@dataclass(frozen=True)
class BudgetStatus:
    cpu_percent: float
    rss_mb: float
    render_ms: float
    overloaded: bool
    warning: str | None
    recommended_interval_ms: int


class PerformanceController:
    def __init__(self, budget: RenderBudget | None = None) -> None:
        self.budget = budget or RenderBudget()
        self._process = psutil.Process()
        # Prime non-blocking CPU measurement.
        self._process.cpu_percent(interval=None)

    def sample(self, render_ms: float, interval_ms: int) -> BudgetStatus:
        cpu = float(self._process.cpu_percent(interval=None))
        rss_mb = float(self._process.memory_info().rss) / (1024 * 1024)
        overloaded = cpu > self.budget.cpu_percent_max or rss_mb > self.budget.rss_mb_max

        warning = None
        rec_interval = interval_ms
        if overloaded:
            warning = "resource_overload"
            rec_interval = int(interval_ms * 1.25) + 8
        elif render_ms > self.budget.render_ms_max:
            warning = "slow_render"
            rec_interval = max(interval_ms, int(render_ms))
        elif render_ms < self.budget.render_ms_max / 2:
            rec_interval = interval_ms - 8

        return BudgetStatus(
            cpu_percent=cpu,
            rss_mb=rss_mb,
            render_ms=float(render_ms),
            overloaded=overloaded,
            warning=warning,
            recommended_interval_ms=max(MIN_FRAME_INTERVAL_MS, min(MAX_FRAME_INTERVAL_MS, rec_interval)),
        )
