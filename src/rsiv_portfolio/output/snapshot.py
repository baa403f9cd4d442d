from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt

from rsiv_portfolio.models.common import Action
from rsiv_portfolio.models.portfolio import AnalysisResult
from rsiv_portfolio.output.formatters import fmt_amount, fmt_number, fmt_pct

matplotlib.use("Agg")

logger = logging.getLogger(__name__)

BACKGROUND = "#f0f9ff"

COLORS = {
    "suggested": "#2563eb",
    "stock": "#1e293b",
    "cash": "#7f7f7f",
    "healthy": "#2ca02c",
    "weak": "#d62728",
    Action.INCREASE: "#2ca02c",
    Action.DECREASE: "#d62728",
    Action.HOLD: "#ff7f0e",
}


def snapshot_filename(on_date: date | None = None) -> str:
    day = on_date or date.today()
    return f"portfolio_result_{day.isoformat()}.png"


def _save_figure(fig: plt.Figure, path: Path) -> None:
    fig.savefig(
        path,
        dpi=150,
        bbox_inches="tight",
        facecolor=BACKGROUND,
        edgecolor="none",
    )
    plt.close(fig)


def _summary_lines(result: AnalysisResult, unit: str) -> list[tuple[str, str]]:
    health = COLORS["healthy"] if result.is_healthy else COLORS["weak"]
    lines = [
        (f"Calculated at: {result.timestamp}", "#64748b"),
        (f"Weighted RSIV: {fmt_number(result.weighted_sum)}", health),
        (result.portfolio_comment, health),
        (
            f"{result.action.value} stock allocation by about "
            f"{fmt_amount(result.amount, unit)}",
            COLORS[result.action],
        ),
    ]
    if result.has_weak_positions:
        lines.extend((f"- {label}", COLORS["weak"]) for label in result.weak_positions)
        lines.append((result.weak_positions_comment, COLORS["weak"]))
    else:
        lines.append((result.weak_positions_comment, COLORS["healthy"]))
    return lines


def export_snapshot(
    result: AnalysisResult,
    output_dir: Path,
    *,
    unit: str = "",
    on_date: date | None = None,
) -> Path | None:
    """Render ``result`` to a dated PNG in ``output_dir``.

    Returns ``None`` when the image could not be produced.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)

        fig, (ax_text, ax_bars) = plt.subplots(
            2, 1, figsize=(10, 7), height_ratios=[3, 2]
        )
        fig.patch.set_facecolor(BACKGROUND)
        fig.suptitle("Portfolio Health", fontsize=14, fontweight="bold")

        ax_text.axis("off")
        lines = _summary_lines(result, unit)
        step = 1.0 / (len(lines) + 1)
        for i, (text, color) in enumerate(lines):
            ax_text.text(
                0.0,
                1.0 - (i + 1) * step,
                text,
                color=color,
                fontsize=10,
                transform=ax_text.transAxes,
                wrap=True,
            )

        labels = ["Suggested", "Stocks", "Cash"]
        values = [
            result.suggested_ratio,
            result.total_stock_weight,
            result.cash_weight,
        ]
        bars = ax_bars.barh(
            labels,
            values,
            color=[COLORS["suggested"], COLORS["stock"], COLORS["cash"]],
        )
        for bar, value in zip(bars, values):
            ax_bars.text(
                bar.get_width(),
                bar.get_y() + bar.get_height() / 2,
                f" {fmt_pct(value)}",
                va="center",
                fontsize=9,
            )
        ax_bars.set_xlim(0, max(100.0, *values) * 1.15)
        ax_bars.set_xlabel("% of portfolio", fontsize=9)
        ax_bars.invert_yaxis()
        ax_bars.set_facecolor("white")
        ax_bars.grid(True, axis="x", alpha=0.3, linestyle="--")
        ax_bars.tick_params(labelsize=9)

        fig.tight_layout()
        path = output_dir / snapshot_filename(on_date)
        _save_figure(fig, path)
        return path
    except Exception:
        logger.warning("Failed to export result snapshot", exc_info=True)
        plt.close("all")
        return None
