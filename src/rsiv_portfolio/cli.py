import argparse
import logging
import math
import sys
from pathlib import Path

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from rsiv_portfolio.analysis.portfolio import PortfolioAnalyzer
from rsiv_portfolio.config import AnalysisConfig
from rsiv_portfolio.errors import PortfolioError
from rsiv_portfolio.models.portfolio import PortfolioInput, StockPosition
from rsiv_portfolio.output.renderer import ResultRenderer

logger = logging.getLogger(__name__)
console = Console()
err_console = Console(stderr=True)


def parse_position(text: str) -> StockPosition:
    """Parse ``RSIV:INVESTMENT``; an empty side marks that field missing."""
    rsiv_text, sep, investment_text = text.partition(":")
    if not sep:
        raise argparse.ArgumentTypeError(
            f"expected RSIV:INVESTMENT, got {text!r}"
        )
    try:
        rsiv = float(rsiv_text) if rsiv_text.strip() else None
        investment = float(investment_text) if investment_text.strip() else None
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number in {text!r}") from None
    for value in (rsiv, investment):
        if value is not None and not math.isfinite(value):
            raise argparse.ArgumentTypeError(f"values must be finite: {text!r}")
        if value is not None and value < 0:
            raise argparse.ArgumentTypeError(
                f"values must be non-negative: {text!r}"
            )
    return StockPosition(rsiv=rsiv, investment=investment)


def _non_negative(text: str) -> float:
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if not math.isfinite(value):
        raise argparse.ArgumentTypeError(f"must be finite: {text!r}")
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {text!r}")
    return value


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rsiv-portfolio",
        description="RSIV-weighted portfolio health check",
    )
    sub = p.add_subparsers(dest="command")

    analyze = sub.add_parser("analyze", help="Analyze a portfolio")
    analyze.add_argument(
        "--safety-level",
        type=int,
        choices=range(10),
        metavar="{0..9}",
        default=None,
        help="Market safety level (0-9)",
    )
    analyze.add_argument(
        "--cash",
        type=_non_negative,
        default=None,
        help="Cash balance",
    )
    analyze.add_argument(
        "-p",
        "--position",
        dest="positions",
        type=parse_position,
        action="append",
        default=[],
        help="Stock position as RSIV:INVESTMENT (repeatable)",
    )
    analyze.add_argument(
        "--export-image",
        action="store_true",
        help="Save the result as a PNG image",
    )
    analyze.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for exported images",
    )
    analyze.add_argument(
        "--unit",
        default=None,
        help="Currency unit label for amounts",
    )
    analyze.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON",
    )
    analyze.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    return p


def _run_analyze(args: argparse.Namespace) -> int:
    """Execute the analyze subcommand."""
    overrides: dict[str, str] = {}
    if args.unit is not None:
        overrides["amount_unit"] = args.unit
    if args.output_dir is not None:
        overrides["output_dir"] = str(args.output_dir)
    config = AnalysisConfig(**overrides)

    if args.safety_level is None or args.cash is None:
        console.print("[red]Please fill in all fields.[/red]")
        return 1

    portfolio = PortfolioInput(
        safety_level=args.safety_level,
        cash_balance=args.cash,
        positions=args.positions,
    )
    if not portfolio.is_complete:
        console.print("[red]Please fill in all fields.[/red]")
        return 1

    renderer = ResultRenderer(console, config)
    if not args.json:
        renderer.render_preview(portfolio)

    result = PortfolioAnalyzer(config).analyze_input(portfolio)

    if args.json:
        console.out(result.model_dump_json(indent=2), highlight=False)
    else:
        renderer.render(result, portfolio)

    # Keep stdout parseable in JSON mode
    status = err_console if args.json else console
    if args.export_image:
        from rsiv_portfolio.output.snapshot import export_snapshot

        path = export_snapshot(
            result, Path(config.output_dir), unit=config.amount_unit
        )
        if path is None:
            status.print("[red]Could not create image.[/red]")
        else:
            status.print(f"[green]Image saved to {path}[/green]")

    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)

    # Bare options imply the analyze subcommand
    if argv and argv[0] not in ("analyze", "-h", "--help"):
        argv.insert(0, "analyze")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        code = _run_analyze(args)
    except (PortfolioError, ValidationError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(1)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
