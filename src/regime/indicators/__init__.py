"""Technical indicators used by the regime screen."""

from regime.indicators.adx import (
    AdxSample,
    WilderState,
    adx_at,
    compute_adx,
    directional_movement,
    true_range,
)

__all__ = [
    "AdxSample",
    "WilderState",
    "adx_at",
    "compute_adx",
    "directional_movement",
    "true_range",
]
