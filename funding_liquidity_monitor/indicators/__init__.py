"""Statistics, derivation and view assembly for funding liquidity metrics."""

from funding_liquidity_monitor.indicators.derivation import DerivationEngine
from funding_liquidity_monitor.indicators.assembler import assemble

__all__ = ["DerivationEngine", "assemble"]
