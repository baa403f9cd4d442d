"""
Exceptions raised by the portfolio analyzer.

Every failure is terminal for the call that raised it: no partial result is
produced and nothing is retried.
"""

from typing import Any


class PortfolioError(Exception):
    """
    Base class for portfolio analysis errors.

    Attributes:
        message: Error message
        details: Additional error details
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message

        detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class InvalidInputError(PortfolioError):
    """One or more positions lack an RSIV or investment value."""


class ZeroInvestmentError(PortfolioError):
    """Total invested amount is zero, so the weighted average is undefined."""
