"""Compute secondary metric series from series already in the store."""

import logging
from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
from typing import Callable, Sequence

import numpy as np

from funding_liquidity_monitor.data.store import SeriesStore
from funding_liquidity_monitor.indicators import stats
from funding_liquidity_monitor.models.market_data import (
    DataPoint,
    Derivation,
    DerivationKind,
    MetricCategory,
    MetricDefinition,
    Series,
    sort_series,
)


logger = logging.getLogger(__name__)


BinaryOp = Callable[[float, float], float]


def _subtract(a: float, b: float) -> float:
    return a - b


def _divide(a: float, b: float) -> float:
    return a / b if b != 0 else 0.0


def _divide_abs(a: float, b: float) -> float:
    return a / abs(b) if b != 0 else 0.0


# Ratio operations emit 0 for a zero divisor rather than dropping the date
PAIR_OPERATIONS: dict[str, BinaryOp] = {
    "subtract": _subtract,
    "divide": _divide,
    "divide_abs": _divide_abs,
}


def align_and_operate(
    series_a: Sequence[DataPoint], series_b: Sequence[DataPoint], op: BinaryOp
) -> Series:
    """
    Combine two series on the dates present in both.

    Iterates A in its given order; dates only in A or only in B are dropped.
    """
    if not series_a or not series_b:
        return []

    values_b = {p.date: p.value for p in series_b}
    return [
        DataPoint(date=p.date, value=op(p.value, values_b[p.date]))
        for p in series_a
        if p.date in values_b
    ]


def rolling_percentile(
    series: Sequence[DataPoint], window: int, step: int, p: float
) -> Series:
    """
    Percentile over a trailing window, sampled every `step` points.

    Window [i - window, i) is reported at point i, for i = window, window + step, ...
    """
    if len(series) < window:
        return []

    ordered = sort_series(series)
    values = np.array([pt.value for pt in ordered], dtype=float)

    return [
        DataPoint(date=ordered[i].date, value=stats.percentile(values[i - window:i], p))
        for i in range(window, len(ordered), step)
    ]


def lag_difference(series: Sequence[DataPoint]) -> Series:
    """Point-to-point change; one fewer point than the source."""
    if len(series) < 2:
        return []

    ordered = sort_series(series)
    return [
        DataPoint(date=curr.date, value=curr.value - prev.value)
        for prev, curr in zip(ordered, ordered[1:])
    ]


@dataclass
class DerivationResult:
    """Outcome of a derivation pass."""

    computed: dict[str, int]  # metric id -> points written
    empty: list[str]  # secondaries with no resolvable data


class DerivationEngine:
    """
    Resolves secondary metric definitions into series.

    Definitions are evaluated in dependency order, so a secondary may read
    another secondary regardless of where either sits in the catalog.
    """

    ROLLING_WINDOW = 30
    TAIL_WINDOW = 365
    TAIL_STEP = 5
    TAIL_PERCENTILE = 99

    def __init__(self, catalog: list[MetricDefinition]) -> None:
        self.catalog = catalog
        self._secondaries = {
            d.id: d for d in catalog if d.category is MetricCategory.SECONDARY
        }
        validate_catalog(catalog)
        self.order = self._evaluation_order()

    def _evaluation_order(self) -> list[str]:
        """Topological order over secondary inputs, catalog order for ties."""
        sorter: TopologicalSorter = TopologicalSorter()
        for metric_id, definition in self._secondaries.items():
            deps = [i for i in definition.derivation.inputs if i in self._secondaries]
            sorter.add(metric_id, *deps)

        position = {metric_id: i for i, metric_id in enumerate(self._secondaries)}
        try:
            sorter.prepare()
        except CycleError as e:
            raise ValueError(f"Circular secondary metric dependency: {e.args[1]}") from e

        order: list[str] = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=position.__getitem__)
            order.extend(ready)
            sorter.done(*ready)
        return order

    def compute(self, definition: MetricDefinition, store: SeriesStore) -> Series:
        """Compute one secondary series from the store without writing it."""
        derivation = definition.derivation
        sources = [store.get(series_id) for series_id in derivation.inputs]
        params = derivation.params

        if derivation.kind is DerivationKind.PAIR_OP:
            op = PAIR_OPERATIONS[params.get("op", "subtract")]
            result = align_and_operate(sort_series(sources[0]), sources[1], op)
        elif derivation.kind is DerivationKind.ROLLING_STAT:
            window = params.get("window", self.ROLLING_WINDOW)
            result = stats.rolling_std_dev(sources[0], window)
        elif derivation.kind is DerivationKind.PERCENTILE_WINDOW:
            result = rolling_percentile(
                sources[0],
                window=params.get("window", self.TAIL_WINDOW),
                step=params.get("step", self.TAIL_STEP),
                p=params.get("percentile", self.TAIL_PERCENTILE),
            )
        elif derivation.kind is DerivationKind.LAG_DIFF:
            result = lag_difference(sources[0])
        else:
            raise ValueError(f"Unknown derivation kind: {derivation.kind}")

        if definition.transform_scale and result:
            scale = definition.transform_scale
            result = [DataPoint(date=p.date, value=p.value * scale) for p in result]

        return result

    def run(self, store: SeriesStore) -> DerivationResult:
        """
        Compute every secondary metric and write it into the store.

        An empty result is not written, so a same-id series supplied by
        ingestion stays in place.
        """
        computed: dict[str, int] = {}
        empty: list[str] = []

        for metric_id in self.order:
            definition = self._secondaries[metric_id]
            data = self.compute(definition, store)
            if data:
                store.put(metric_id, data, scaled=True)
                computed[metric_id] = len(data)
            else:
                empty.append(metric_id)

        logger.info(
            f"Derived {len(computed)} secondary series; {len(empty)} without data"
        )
        if empty:
            logger.debug(f"Secondary metrics without data: {empty}")

        return DerivationResult(computed=computed, empty=empty)


_INPUT_COUNTS = {
    DerivationKind.PAIR_OP: 2,
    DerivationKind.ROLLING_STAT: 1,
    DerivationKind.PERCENTILE_WINDOW: 1,
    DerivationKind.LAG_DIFF: 1,
}


def validate_catalog(catalog: list[MetricDefinition]) -> None:
    """
    Check that catalog definitions are well formed.

    Raises:
        ValueError: On duplicate ids, a secondary without a derivation, a
            derivation on a primary, a wrong input count, an unknown operation
            or a window or step that is not a positive integer
    """
    seen: set[str] = set()
    for definition in catalog:
        if definition.id in seen:
            raise ValueError(f"Duplicate metric id: {definition.id}")
        seen.add(definition.id)

        derivation: Derivation | None = definition.derivation
        if definition.category is MetricCategory.PRIMARY:
            if derivation is not None:
                raise ValueError(f"Primary metric {definition.id} has a derivation")
            continue

        if derivation is None:
            raise ValueError(f"Secondary metric {definition.id} has no derivation")

        expected = _INPUT_COUNTS.get(derivation.kind)
        if expected is None:
            raise ValueError(f"Unknown derivation kind: {derivation.kind}")
        if len(derivation.inputs) != expected:
            raise ValueError(
                f"{definition.id}: {derivation.kind.value} takes {expected} input(s), "
                f"got {len(derivation.inputs)}"
            )
        if definition.id in derivation.inputs:
            raise ValueError(f"{definition.id} depends on itself")
        if derivation.kind is DerivationKind.PAIR_OP:
            op = derivation.params.get("op", "subtract")
            if op not in PAIR_OPERATIONS:
                raise ValueError(f"{definition.id}: unknown operation {op!r}")
        else:
            for name in ("window", "step"):
                value = derivation.params.get(name)
                if value is not None and (
                    isinstance(value, bool) or not isinstance(value, int) or value <= 0
                ):
                    raise ValueError(
                        f"{definition.id}: {name} must be a positive integer, got {value!r}"
                    )
            p = derivation.params.get("percentile")
            if p is not None and not 0 <= p <= 100:
                raise ValueError(f"{definition.id}: percentile must be in [0, 100], got {p!r}")
