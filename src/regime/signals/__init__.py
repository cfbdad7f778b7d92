"""Regime screening built on the ADX indicator."""

from regime.signals.models import Regime, ScreeningConfig, ScreeningSignal
from regime.signals.screening import AdxScreeningStrategy

__all__ = [
    "AdxScreeningStrategy",
    "Regime",
    "ScreeningConfig",
    "ScreeningSignal",
]
