"""Assemble dashboard view models from the series store."""

from funding_liquidity_monitor.data.store import SeriesStore
from funding_liquidity_monitor.models.market_data import (
    DataPoint,
    MetricDefinition,
    MetricView,
    ResolutionStatus,
)


def build_view(definition: MetricDefinition, store: SeriesStore) -> MetricView:
    """Snapshot one metric: latest value, prior value, change and full history."""
    history = store.get_sorted(definition.id)

    if definition.transform_scale and history and not store.is_scaled(definition.id):
        scale = definition.transform_scale
        history = [DataPoint(date=p.date, value=p.value * scale) for p in history]

    current = history[-1] if history else None
    previous = history[-2] if len(history) > 1 else None

    return MetricView(
        definition=definition,
        current_value=current.value if current else None,
        previous_value=previous.value if previous else None,
        daily_change=(
            current.value - previous.value if current and previous else None
        ),
        history=tuple(history),
        status=ResolutionStatus.SUCCESS if history else ResolutionStatus.FAILURE,
    )


def assemble(catalog: list[MetricDefinition], store: SeriesStore) -> list[MetricView]:
    """One view per definition, in catalog order, whether or not data exists."""
    return [build_view(definition, store) for definition in catalog]
