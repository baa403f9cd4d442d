from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from rsiv_portfolio.analysis.portfolio import (
    PortfolioAnalyzer,
    actual_weights,
    analyze_portfolio,
    recommend,
    suggest_holding_ratio,
    weak_positions,
    weighted_average,
)
from rsiv_portfolio.config import (
    NO_WEAK_POSITIONS_COMMENT,
    OUTPERFORMING_COMMENT,
    UNDERPERFORMING_COMMENT,
    WEAK_POSITIONS_ADVICE,
    AnalysisConfig,
)
from rsiv_portfolio.errors import InvalidInputError, ZeroInvestmentError
from rsiv_portfolio.models.common import Action
from rsiv_portfolio.models.portfolio import PortfolioInput, StockPosition


def _fixed_clock() -> datetime:
    return datetime(2026, 3, 2, 1, 30, 15, tzinfo=UTC)


def _pos(rsiv, investment) -> StockPosition:
    return StockPosition(rsiv=rsiv, investment=investment)


class TestScenarios:
    def test_increase(self):
        r = analyze_portfolio(5, 100, [_pos(60, 100)])
        assert r.weighted_sum == pytest.approx(60)
        assert r.suggested_ratio == pytest.approx(60)
        assert r.total_portfolio_value == pytest.approx(200)
        assert r.total_stock_weight == pytest.approx(50)
        assert r.cash_weight == pytest.approx(50)
        assert r.action == Action.INCREASE
        assert r.amount == pytest.approx(20)
        assert r.weak_positions == ()
        assert r.portfolio_comment == OUTPERFORMING_COMMENT
        assert r.weak_positions_comment == NO_WEAK_POSITIONS_COMMENT

    def test_decrease(self):
        r = analyze_portfolio(5, 0, [_pos(40, 100)])
        assert r.weighted_sum == pytest.approx(40)
        assert r.suggested_ratio == pytest.approx(40)
        assert r.total_stock_weight == pytest.approx(100)
        assert r.cash_weight == 0
        assert r.action == Action.DECREASE
        assert r.amount == pytest.approx(60)
        assert r.weak_positions == ("Position 1: RSIV = 40.00",)
        assert r.weak_positions_comment == WEAK_POSITIONS_ADVICE

    def test_zero_investment(self):
        with pytest.raises(ZeroInvestmentError):
            analyze_portfolio(5, 100, [_pos(60, 0), _pos(40, 0)])

    def test_hold_at_baseline(self):
        r = analyze_portfolio(5, 50, [_pos(50, 50)])
        assert r.weighted_sum == pytest.approx(50)
        assert r.suggested_ratio == pytest.approx(50)
        assert r.total_portfolio_value == pytest.approx(100)
        assert r.total_stock_weight == pytest.approx(50)
        assert r.action == Action.HOLD
        assert r.amount == 0
        assert r.portfolio_comment == UNDERPERFORMING_COMMENT
        assert not r.is_healthy


class TestValidation:
    def test_missing_rsiv(self):
        with pytest.raises(InvalidInputError) as exc:
            analyze_portfolio(5, 0, [_pos(60, 100), _pos(None, 50)])
        assert exc.value.details == {"positions": [2]}

    def test_missing_investment(self):
        with pytest.raises(InvalidInputError):
            analyze_portfolio(5, 0, [_pos(60, None)])

    def test_validation_runs_before_zero_check(self):
        with pytest.raises(InvalidInputError):
            analyze_portfolio(5, 0, [_pos(60, 0), _pos(None, None)])

    def test_empty_positions(self):
        with pytest.raises(InvalidInputError):
            analyze_portfolio(5, 100, [])

    def test_error_message_includes_details(self):
        with pytest.raises(InvalidInputError) as exc:
            analyze_portfolio(5, 0, [_pos(None, 10)])
        assert "positions=[1]" in str(exc.value)

    @pytest.mark.parametrize("cash", [float("inf"), float("nan")])
    def test_non_finite_cash(self, cash):
        with pytest.raises(InvalidInputError):
            analyze_portfolio(5, cash, [_pos(60, 100)])

    def test_non_finite_position_bypassing_validation(self):
        bad = StockPosition.model_construct(rsiv=60.0, investment=float("inf"))
        with pytest.raises(InvalidInputError) as exc:
            analyze_portfolio(5, 0, [_pos(40, 10), bad])
        assert exc.value.details == {"positions": [2]}

    def test_overflowing_total_investment(self):
        with pytest.raises(InvalidInputError):
            analyze_portfolio(5, 0, [_pos(60, 1e308), _pos(40, 1e308)])


class TestProperties:
    @pytest.mark.parametrize(
        "cash,positions",
        [
            (0, [(70, 10), (30, 90)]),
            (123.45, [(55, 1), (45, 2), (80, 3)]),
            (1e6, [(10, 0.5)]),
            (0.01, [(99, 1000), (0, 0)]),
        ],
    )
    def test_weights_sum_to_100(self, cash, positions):
        r = analyze_portfolio(3, cash, [_pos(a, b) for a, b in positions])
        assert r.total_stock_weight + r.cash_weight == pytest.approx(100)

    def test_weighted_sum_bounded(self):
        positions = [_pos(20, 5), _pos(75, 30), _pos(48, 12)]
        r = analyze_portfolio(5, 10, positions)
        assert 20 - 1e-9 <= r.weighted_sum <= 75 + 1e-9

    def test_weighted_sum_value(self):
        r = analyze_portfolio(5, 0, [_pos(70, 10), _pos(30, 90)])
        assert r.weighted_sum == pytest.approx(34)

    def test_idempotent_apart_from_timestamp(self):
        positions = [_pos(62, 40), _pos(35, 60)]
        a = analyze_portfolio(6, 25, positions)
        b = analyze_portfolio(6, 25, positions)
        assert a.model_dump(exclude={"timestamp"}) == b.model_dump(
            exclude={"timestamp"}
        )

    def test_inputs_not_mutated(self):
        positions = [_pos(62, 40), _pos(35, 60)]
        before = [p.model_dump() for p in positions]
        analyze_portfolio(6, 25, positions)
        assert [p.model_dump() for p in positions] == before

    def test_suggested_ratio_not_clamped(self):
        r = analyze_portfolio(9, 0, [_pos(100, 10)])
        assert r.suggested_ratio == pytest.approx(180)

    def test_result_is_frozen(self):
        r = analyze_portfolio(5, 100, [_pos(60, 100)])
        with pytest.raises(ValidationError):
            r.amount = 1.0


class TestWeakPositions:
    def test_labels_keep_original_index(self):
        labels = weak_positions([_pos(60, 1), _pos(49.999, 1), _pos(70, 1), _pos(0, 1)])
        assert labels == ["Position 2: RSIV = 50.00", "Position 4: RSIV = 0.00"]

    def test_baseline_is_not_weak(self):
        assert weak_positions([_pos(50, 1)]) == []

    def test_missing_rsiv_counts_as_zero(self):
        assert weak_positions([_pos(None, 1)]) == ["Position 1: RSIV = 0.00"]


class TestHelpers:
    def test_weighted_average_zero(self):
        with pytest.raises(ZeroInvestmentError):
            weighted_average([_pos(50, 0)])

    def test_weighted_average_defaults_missing_to_zero(self):
        weighted, total = weighted_average([_pos(None, 10), _pos(80, None), _pos(60, 30)])
        assert total == pytest.approx(40)
        assert weighted == pytest.approx(45)

    def test_suggest_holding_ratio(self):
        assert suggest_holding_ratio(0, 80) == 0
        assert suggest_holding_ratio(4, 25) == pytest.approx(20)

    def test_actual_weights_zero_value(self):
        assert actual_weights(0, 0) == (0.0, 0.0, 0.0)

    def test_recommend_threshold_edges(self):
        assert recommend(50, 51, 100) == (Action.HOLD, 0.0)
        assert recommend(50, 49, 100) == (Action.HOLD, 0.0)
        action, amount = recommend(50, 51.5, 100)
        assert action == Action.INCREASE
        assert amount == pytest.approx(1.5)
        action, amount = recommend(50, 48.5, 100)
        assert action == Action.DECREASE
        assert amount == pytest.approx(1.5)


class TestPortfolioAnalyzer:
    def test_timestamp_uses_configured_timezone(self):
        analyzer = PortfolioAnalyzer(clock=_fixed_clock)
        r = analyzer.analyze(5, 100, [_pos(60, 100)])
        assert r.timestamp == "08:30:15 02/03/2026"

    def test_timestamp_other_timezone(self):
        config = AnalysisConfig(timezone="UTC")
        r = PortfolioAnalyzer(config, clock=_fixed_clock).analyze(5, 1, [_pos(1, 1)])
        assert r.timestamp == "01:30:15 02/03/2026"

    def test_default_clock_produces_timestamp(self):
        r = PortfolioAnalyzer().analyze(5, 100, [_pos(60, 100)])
        assert len(r.timestamp) == len("00:00:00 01/01/2026")

    def test_analyze_input(self):
        portfolio = PortfolioInput(
            safety_level=5, cash_balance=100, positions=[_pos(60, 100)]
        )
        r = PortfolioAnalyzer(clock=_fixed_clock).analyze_input(portfolio)
        assert r.action == Action.INCREASE

    def test_custom_threshold(self):
        config = AnalysisConfig(rebalance_threshold=15)
        r = PortfolioAnalyzer(config).analyze(5, 100, [_pos(60, 100)])
        assert r.action == Action.HOLD
        assert r.amount == 0


class TestBaselineComments:
    def test_default_comments_mention_50(self):
        assert "RSIV > 50)" in OUTPERFORMING_COMMENT
        assert "RSIV ≤ 50)" in UNDERPERFORMING_COMMENT
        assert "RSIV >= 50)" in NO_WEAK_POSITIONS_COMMENT

    def test_custom_baseline_in_comments(self):
        config = AnalysisConfig(baseline=60)
        r = PortfolioAnalyzer(config).analyze(5, 0, [_pos(65, 100)])
        assert r.portfolio_comment.endswith("(RSIV > 60).")
        assert r.weak_positions_comment.endswith("(all have RSIV >= 60).")

    def test_custom_baseline_underperforming(self):
        config = AnalysisConfig(baseline=60)
        r = PortfolioAnalyzer(config).analyze(5, 0, [_pos(55, 100)])
        assert r.portfolio_comment.endswith("(RSIV ≤ 60).")
        assert r.weak_positions == ("Position 1: RSIV = 55.00",)
        assert r.weak_positions_comment == WEAK_POSITIONS_ADVICE
        assert not r.is_healthy

    def test_fractional_baseline_formatting(self):
        config = AnalysisConfig(baseline=52.5)
        r = PortfolioAnalyzer(config).analyze(5, 0, [_pos(60, 100)])
        assert r.portfolio_comment.endswith("(RSIV > 52.5).")
