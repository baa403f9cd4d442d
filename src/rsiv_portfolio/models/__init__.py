from rsiv_portfolio.models.common import Action, SafetyStatus
from rsiv_portfolio.models.portfolio import (
    AnalysisResult,
    PortfolioInput,
    StockPosition,
)

__all__ = [
    "Action",
    "AnalysisResult",
    "PortfolioInput",
    "SafetyStatus",
    "StockPosition",
]
