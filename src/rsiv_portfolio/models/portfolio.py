from pydantic import BaseModel, ConfigDict, Field

from rsiv_portfolio.config import BASELINE_RSIV
from rsiv_portfolio.models.common import Action, SafetyStatus


class StockPosition(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    rsiv: float | None = Field(default=None, ge=0.0)
    investment: float | None = Field(default=None, ge=0.0)

    @property
    def is_complete(self) -> bool:
        return self.rsiv is not None and self.investment is not None


class PortfolioInput(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    safety_level: int
    cash_balance: float = Field(ge=0.0)
    positions: list[StockPosition] = []

    @property
    def is_complete(self) -> bool:
        """True when there is at least one position and none has a gap."""
        return bool(self.positions) and all(p.is_complete for p in self.positions)

    @property
    def total_value(self) -> float:
        invested = sum(p.investment or 0.0 for p in self.positions)
        return invested + self.cash_balance

    def safety_status(self, warning_below: int = 5) -> SafetyStatus:
        return SafetyStatus.from_level(self.safety_level, warning_below)


class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    weighted_sum: float
    suggested_ratio: float
    total_stock_weight: float
    cash_weight: float
    total_portfolio_value: float
    action: Action
    amount: float
    weak_positions: tuple[str, ...] = ()
    portfolio_comment: str
    weak_positions_comment: str
    baseline: float = Field(default=BASELINE_RSIV, exclude=True)

    @property
    def is_healthy(self) -> bool:
        return self.weighted_sum > self.baseline

    @property
    def has_weak_positions(self) -> bool:
        return len(self.weak_positions) > 0
