"""Tests for secondary metric derivation."""

from datetime import date

import pytest

from funding_liquidity_monitor.config import METRICS
from funding_liquidity_monitor.data.store import SeriesStore
from funding_liquidity_monitor.indicators.derivation import (
    DerivationEngine,
    align_and_operate,
    lag_difference,
    rolling_percentile,
    validate_catalog,
)
from funding_liquidity_monitor.models.market_data import (
    DataPoint,
    Derivation,
    DerivationKind,
    FormatHint,
    LiquidityType,
    MetricCategory,
    MetricDefinition,
)


def _primary(metric_id: str) -> MetricDefinition:
    return MetricDefinition(
        id=metric_id,
        name=metric_id,
        category=MetricCategory.PRIMARY,
        description="",
        liquidity_type=LiquidityType.CASH_FUNDING,
        format=FormatHint.PERCENT,
    )


def _secondary(metric_id: str, derivation: Derivation, scale: float | None = None) -> MetricDefinition:
    return MetricDefinition(
        id=metric_id,
        name=metric_id,
        category=MetricCategory.SECONDARY,
        description="",
        liquidity_type=LiquidityType.CASH_FUNDING,
        format=FormatHint.SPREAD,
        transform_scale=scale,
        derivation=derivation,
    )


def _pair(a: str, b: str, op: str = "subtract") -> Derivation:
    return Derivation(DerivationKind.PAIR_OP, (a, b), {"op": op})


class TestAlignment:
    def test_strict_intersection(self) -> None:
        a = [DataPoint(date(2024, 1, 1), 10.0), DataPoint(date(2024, 1, 2), 20.0)]
        b = [DataPoint(date(2024, 1, 2), 5.0)]

        result = align_and_operate(a, b, lambda x, y: x - y)

        assert result == [DataPoint(date(2024, 1, 2), 15.0)]

    def test_empty_input_gives_empty_result(self, make_series) -> None:
        series = make_series([1, 2, 3])
        assert align_and_operate([], series, lambda x, y: x - y) == []
        assert align_and_operate(series, [], lambda x, y: x - y) == []

    def test_follows_order_of_first_series(self, make_series) -> None:
        a = list(reversed(make_series([1, 2, 3])))
        b = make_series([1, 1, 1])

        result = align_and_operate(a, b, lambda x, y: x + y)

        assert [p.value for p in result] == [4.0, 3.0, 2.0]


class TestLagDifference:
    def test_lag_difference(self) -> None:
        series = [
            DataPoint(date(2024, 1, 1), 10.0),
            DataPoint(date(2024, 1, 2), 12.0),
            DataPoint(date(2024, 1, 3), 9.0),
        ]
        assert lag_difference(series) == [
            DataPoint(date(2024, 1, 2), 2.0),
            DataPoint(date(2024, 1, 3), -3.0),
        ]

    def test_sorts_before_differencing(self) -> None:
        series = [
            DataPoint(date(2024, 1, 3), 9.0),
            DataPoint(date(2024, 1, 1), 10.0),
            DataPoint(date(2024, 1, 2), 12.0),
        ]
        assert [p.value for p in lag_difference(series)] == [2.0, -3.0]

    def test_short_series(self, make_series) -> None:
        assert lag_difference(make_series([1.0])) == []
        assert lag_difference([]) == []


class TestRollingPercentile:
    def test_needs_full_window(self, make_series) -> None:
        assert rolling_percentile(make_series(range(364)), 365, 5, 99) == []

    def test_steps_through_windows(self, make_series) -> None:
        series = make_series(range(376))
        result = rolling_percentile(series, 365, 5, 99)

        # Windows reported at indices 365, 370 and 375
        assert [p.date for p in result] == [series[i].date for i in (365, 370, 375)]
        # 99th percentile of 0..364: index ceil(361.35) - 1 = 361
        assert result[0].value == 361.0
        assert result[1].value == 366.0

    def test_unsorted_input_matches_sorted(self, make_series) -> None:
        series = make_series(range(376))

        assert rolling_percentile(list(reversed(series)), 365, 5, 99) == rolling_percentile(
            series, 365, 5, 99
        )


class TestDerivationEngine:
    def test_ratio_with_zero_divisor_yields_zero(self, make_series) -> None:
        catalog = [
            _primary("ASSETS"),
            _primary("EQUITY"),
            _secondary("LEVERAGE", _pair("ASSETS", "EQUITY", "divide")),
        ]
        store = SeriesStore({
            "ASSETS": make_series([100.0, 120.0, 90.0]),
            "EQUITY": make_series([10.0, 0.0, 9.0]),
        })

        DerivationEngine(catalog).run(store)

        assert [p.value for p in store.get_sorted("LEVERAGE")] == [10.0, 0.0, 10.0]

    def test_absolute_ratio(self, make_series) -> None:
        catalog = [
            _primary("VOL"),
            _primary("POS"),
            _secondary("TURNOVER", _pair("VOL", "POS", "divide_abs")),
        ]
        store = SeriesStore({
            "VOL": make_series([50.0, 60.0]),
            "POS": make_series([-25.0, 0.0]),
        })

        DerivationEngine(catalog).run(store)

        assert [p.value for p in store.get("TURNOVER")] == [2.0, 0.0]

    def test_rolling_volatility_strategy(self, make_series) -> None:
        catalog = [
            _primary("SOFR"),
            _secondary("SOFR_VOL", Derivation(DerivationKind.ROLLING_STAT, ("SOFR",), {"window": 30})),
        ]
        store = SeriesStore({"SOFR": make_series([5.3 + 0.01 * (i % 3) for i in range(45)])})

        DerivationEngine(catalog).run(store)

        assert len(store.get("SOFR_VOL")) == 15

    def test_pair_output_is_chronological_for_unsorted_first_input(self, make_series) -> None:
        catalog = [_primary("A"), _primary("B"), _secondary("SPREAD", _pair("A", "B"))]
        store = SeriesStore({
            "A": list(reversed(make_series([10.0, 20.0, 30.0]))),
            "B": make_series([1.0, 2.0, 3.0]),
        })

        DerivationEngine(catalog).run(store)

        result = store.get("SPREAD")
        assert [p.date for p in result] == sorted(p.date for p in result)
        assert [p.value for p in result] == [9.0, 18.0, 27.0]

    def test_secondary_can_depend_on_later_secondary(self, make_series) -> None:
        catalog = [
            _primary("A"),
            _primary("B"),
            _secondary("SPREAD_DELTA", Derivation(DerivationKind.LAG_DIFF, ("SPREAD",))),
            _secondary("SPREAD", _pair("A", "B")),
        ]
        store = SeriesStore({
            "A": make_series([5.0, 6.0, 8.0]),
            "B": make_series([1.0, 1.0, 1.0]),
        })

        engine = DerivationEngine(catalog)
        engine.run(store)

        assert engine.order == ["SPREAD", "SPREAD_DELTA"]
        assert [p.value for p in store.get("SPREAD_DELTA")] == [1.0, 2.0]

    def test_independent_secondaries_keep_catalog_order(self) -> None:
        catalog = [
            _primary("A"),
            _primary("B"),
            _secondary("Z_SPREAD", _pair("A", "B")),
            _secondary("A_SPREAD", _pair("B", "A")),
        ]
        assert DerivationEngine(catalog).order == ["Z_SPREAD", "A_SPREAD"]

    def test_empty_result_keeps_ingested_series(self, make_series) -> None:
        catalog = [_primary("A"), _primary("B"), _secondary("SPREAD", _pair("A", "B"))]
        supplied = make_series([0.25, 0.5])
        store = SeriesStore({"A": make_series([1.0]), "SPREAD": supplied})

        result = DerivationEngine(catalog).run(store)

        assert result.empty == ["SPREAD"]
        assert store.get("SPREAD") == supplied

    def test_secondary_scale_applied_once(self, make_series) -> None:
        catalog = [
            _primary("FAILS"),
            _primary("VOLUME"),
            _secondary("RATIO", _pair("FAILS", "VOLUME", "divide"), scale=100),
        ]
        store = SeriesStore({
            "FAILS": make_series([1.0]),
            "VOLUME": make_series([4.0]),
        })

        DerivationEngine(catalog).run(store)

        assert store.get("RATIO")[0].value == pytest.approx(25.0)
        assert store.is_scaled("RATIO")

    def test_missing_inputs_do_not_raise(self) -> None:
        result = DerivationEngine(METRICS).run(SeriesStore())
        assert result.computed == {}


class TestCatalogValidation:
    def test_shipped_catalog_is_valid(self) -> None:
        validate_catalog(METRICS)

    def test_cycle_is_rejected(self) -> None:
        catalog = [
            _secondary("X", Derivation(DerivationKind.LAG_DIFF, ("Y",))),
            _secondary("Y", Derivation(DerivationKind.LAG_DIFF, ("X",))),
        ]
        with pytest.raises(ValueError, match="Circular"):
            DerivationEngine(catalog)

    def test_unknown_operation_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="unknown operation"):
            validate_catalog([_secondary("X", _pair("A", "B", "multiply"))])

    def test_wrong_input_count_is_rejected(self) -> None:
        derivation = Derivation(DerivationKind.PAIR_OP, ("A",), {"op": "subtract"})
        with pytest.raises(ValueError, match="takes 2"):
            validate_catalog([_secondary("X", derivation)])

    def test_secondary_without_derivation_is_rejected(self) -> None:
        definition = MetricDefinition(
            id="X",
            name="X",
            category=MetricCategory.SECONDARY,
            description="",
            liquidity_type=LiquidityType.MARKET,
            format=FormatHint.RATIO,
        )
        with pytest.raises(ValueError, match="no derivation"):
            validate_catalog([definition])

    def test_duplicate_ids_are_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            validate_catalog([_primary("A"), _primary("A")])

    @pytest.mark.parametrize("window", [0, -30, 2.5, True])
    def test_rolling_window_must_be_positive_integer(self, window) -> None:
        derivation = Derivation(DerivationKind.ROLLING_STAT, ("A",), {"window": window})
        with pytest.raises(ValueError, match="window must be a positive integer"):
            validate_catalog([_secondary("X", derivation)])

    def test_percentile_step_must_be_positive(self) -> None:
        derivation = Derivation(
            DerivationKind.PERCENTILE_WINDOW, ("A",), {"window": 365, "step": 0}
        )
        with pytest.raises(ValueError, match="step must be a positive integer"):
            validate_catalog([_secondary("X", derivation)])

    def test_percentile_out_of_range_is_rejected(self) -> None:
        derivation = Derivation(DerivationKind.PERCENTILE_WINDOW, ("A",), {"percentile": 150})
        with pytest.raises(ValueError, match="percentile"):
            validate_catalog([_secondary("X", derivation)])
