from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rsiv_portfolio.config import AnalysisConfig
from rsiv_portfolio.models.common import SafetyStatus
from rsiv_portfolio.models.portfolio import AnalysisResult, PortfolioInput
from rsiv_portfolio.output.formatters import (
    action_color,
    fmt_amount,
    fmt_number,
    fmt_pct,
    health_color,
    safety_label,
    weight_bar,
)


class ResultRenderer:
    def __init__(
        self, console: Console | None = None, config: AnalysisConfig | None = None
    ) -> None:
        self.console = console or Console()
        self.config = config or AnalysisConfig()

    def render(
        self, result: AnalysisResult, portfolio: PortfolioInput | None = None
    ) -> None:
        self.console.print()
        self.console.print(
            f"[dim]Calculated at: {result.timestamp}[/dim]", justify="center"
        )
        if portfolio is not None:
            self.render_safety(portfolio)
        self._render_health(result)
        self._render_allocation(result)
        self._render_recommendation(result)
        self._render_weak_positions(result)

    def render_safety(self, portfolio: PortfolioInput) -> None:
        status = portfolio.safety_status(self.config.safety_warning_level)
        style = "green" if status is SafetyStatus.SAFE else "red"
        self.console.print(
            Text(safety_label(portfolio.safety_level, status), style=f"bold {style}")
        )

    def render_preview(self, portfolio: PortfolioInput) -> None:
        value = fmt_amount(portfolio.total_value, self.config.amount_unit)
        self.console.print(f"Current total portfolio value: [bold]{value}[/bold]")

    def _render_health(self, result: AnalysisResult) -> None:
        color = health_color(result.is_healthy)
        body = Text()
        body.append(fmt_number(result.weighted_sum), style=f"bold {color}")
        body.append("\n")
        body.append(result.portfolio_comment, style=color)
        self.console.print(Panel(body, title="Portfolio Health", style="cyan"))

    def _render_allocation(self, result: AnalysisResult) -> None:
        table = Table(title="Allocation", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Weight", justify="right")
        table.add_column("", justify="left")

        rows = [
            ("Suggested stock holding", result.suggested_ratio),
            ("Actual stock weight", result.total_stock_weight),
            ("Cash weight", result.cash_weight),
        ]
        for label, value in rows:
            table.add_row(label, fmt_pct(value), weight_bar(value))

        self.console.print(table)

    def _render_recommendation(self, result: AnalysisResult) -> None:
        body = Text()
        body.append(result.action.value, style=action_color(result.action))
        body.append(" stock allocation by about ")
        body.append(
            fmt_amount(result.amount, self.config.amount_unit), style="bold green"
        )
        self.console.print(Panel(body, title="Recommendation", style="blue"))

    def _render_weak_positions(self, result: AnalysisResult) -> None:
        if not result.has_weak_positions:
            self.console.print(
                Panel(
                    Text(result.weak_positions_comment, style="green"),
                    title="Stock Review",
                    style="green",
                )
            )
            return

        table = Table(title="Weak Positions", show_header=False)
        table.add_column("Position", style="bold red", no_wrap=True)
        table.add_column("Advice")
        for label in result.weak_positions:
            table.add_row(f"- {label}", result.weak_positions_comment)
        self.console.print(table)
