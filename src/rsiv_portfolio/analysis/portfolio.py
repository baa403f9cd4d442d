import logging
import math
from collections.abc import Callable, Sequence
from datetime import datetime
from zoneinfo import ZoneInfo

import numpy as np

from rsiv_portfolio.config import (
    NO_WEAK_POSITIONS_TEMPLATE,
    OUTPERFORMING_TEMPLATE,
    TIMESTAMP_FORMAT,
    UNDERPERFORMING_TEMPLATE,
    WEAK_POSITIONS_ADVICE,
    AnalysisConfig,
)
from rsiv_portfolio.errors import InvalidInputError, ZeroInvestmentError
from rsiv_portfolio.models.common import Action
from rsiv_portfolio.models.portfolio import (
    AnalysisResult,
    PortfolioInput,
    StockPosition,
)

logger = logging.getLogger(__name__)


def weighted_average(positions: Sequence[StockPosition]) -> tuple[float, float]:
    """Investment-weighted mean RSIV.

    Returns ``(weighted_sum, total_investment)``. Missing values count as 0
    here; callers are expected to have rejected incomplete positions already.
    """
    rsiv = np.array([p.rsiv or 0.0 for p in positions], dtype=float)
    investment = np.array([p.investment or 0.0 for p in positions], dtype=float)

    total_investment = float(investment.sum())
    if not math.isfinite(total_investment):
        raise InvalidInputError(
            "Total investment is not a finite number",
            {"positions": len(positions)},
        )
    if total_investment == 0:
        raise ZeroInvestmentError(
            "Total investment across positions cannot be zero",
            {"positions": len(positions)},
        )

    weighted_sum = float(np.dot(rsiv, investment / total_investment))
    return weighted_sum, total_investment


def suggest_holding_ratio(
    safety_level: int, weighted_sum: float, baseline: float = 50.0
) -> float:
    # Unclamped: values above 100 are an aggressive but valid suggestion.
    return safety_level * 10 * (weighted_sum / baseline)


def actual_weights(
    total_investment: float, cash_balance: float
) -> tuple[float, float, float]:
    """Returns ``(total_stock_weight, cash_weight, total_portfolio_value)``."""
    total_value = total_investment + cash_balance
    if total_value == 0:
        return 0.0, 0.0, 0.0
    stock_weight = total_investment / total_value * 100
    cash_weight = cash_balance / total_value * 100
    return stock_weight, cash_weight, total_value


def recommend(
    total_stock_weight: float,
    suggested_ratio: float,
    total_portfolio_value: float,
    threshold: float = 1.0,
) -> tuple[Action, float]:
    difference = suggested_ratio - total_stock_weight
    action = Action.from_difference(difference, threshold)
    if action is Action.HOLD:
        return action, 0.0
    return action, total_portfolio_value * (abs(difference) / 100)


def weak_positions(
    positions: Sequence[StockPosition], baseline: float = 50.0
) -> list[str]:
    labels: list[str] = []
    for i, p in enumerate(positions, start=1):
        rsiv = p.rsiv or 0.0
        if rsiv < baseline:
            labels.append(f"Position {i}: RSIV = {rsiv:.2f}")
    return labels


class PortfolioAnalyzer:
    def __init__(
        self,
        config: AnalysisConfig | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self._clock = clock

    def analyze(
        self,
        safety_level: int,
        cash_balance: float,
        positions: Sequence[StockPosition],
    ) -> AnalysisResult:
        self._validate(cash_balance, positions)
        cfg = self.config

        weighted_sum, total_investment = weighted_average(positions)
        suggested = suggest_holding_ratio(safety_level, weighted_sum, cfg.baseline)
        stock_weight, cash_weight, total_value = actual_weights(
            total_investment, cash_balance
        )
        action, amount = recommend(
            stock_weight, suggested, total_value, cfg.rebalance_threshold
        )
        weak = weak_positions(positions, cfg.baseline)

        logger.debug(
            "weighted_sum=%.4f suggested=%.4f stock_weight=%.4f action=%s",
            weighted_sum,
            suggested,
            stock_weight,
            action,
        )

        return AnalysisResult(
            timestamp=self._timestamp(),
            weighted_sum=weighted_sum,
            suggested_ratio=suggested,
            total_stock_weight=stock_weight,
            cash_weight=cash_weight,
            total_portfolio_value=total_value,
            action=action,
            amount=amount,
            weak_positions=tuple(weak),
            portfolio_comment=(
                OUTPERFORMING_TEMPLATE
                if weighted_sum > cfg.baseline
                else UNDERPERFORMING_TEMPLATE
            ).format(baseline=cfg.baseline),
            weak_positions_comment=(
                WEAK_POSITIONS_ADVICE
                if weak
                else NO_WEAK_POSITIONS_TEMPLATE.format(baseline=cfg.baseline)
            ),
            baseline=cfg.baseline,
        )

    def analyze_input(self, portfolio: PortfolioInput) -> AnalysisResult:
        return self.analyze(
            portfolio.safety_level, portfolio.cash_balance, portfolio.positions
        )

    def _validate(
        self, cash_balance: float, positions: Sequence[StockPosition]
    ) -> None:
        if not math.isfinite(cash_balance):
            raise InvalidInputError(
                "Cash balance must be a finite number", {"cash": cash_balance}
            )
        if not positions:
            raise InvalidInputError("At least one stock position is required")
        incomplete = [
            i for i, p in enumerate(positions, start=1) if not p.is_complete
        ]
        if incomplete:
            raise InvalidInputError(
                "Invalid stock data: RSIV and investment are required",
                {"positions": incomplete},
            )
        non_finite = [
            i
            for i, p in enumerate(positions, start=1)
            if not (math.isfinite(p.rsiv) and math.isfinite(p.investment))
        ]
        if non_finite:
            raise InvalidInputError(
                "Invalid stock data: values must be finite numbers",
                {"positions": non_finite},
            )

    def _timestamp(self) -> str:
        tz = ZoneInfo(self.config.timezone)
        now = self._clock() if self._clock else datetime.now(tz)
        if now.tzinfo is not None:
            now = now.astimezone(tz)
        return now.strftime(TIMESTAMP_FORMAT)


def analyze_portfolio(
    safety_level: int,
    cash_balance: float,
    positions: Sequence[StockPosition],
    config: AnalysisConfig | None = None,
) -> AnalysisResult:
    return PortfolioAnalyzer(config).analyze(safety_level, cash_balance, positions)
