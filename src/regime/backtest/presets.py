"""Strategy preset configurations for quick CLI parameter pre-fill.

Three preset levels:
- Conservative: strict lateral threshold, short holding cap (fewer, shorter trades)
- Balanced: reference threshold with a moderate holding cap
- Aggressive: loose threshold, no holding cap (more time in the market)

Presets only pre-fill parameters; explicit CLI flags override them.
"""

STRATEGY_PRESETS: dict[str, dict] = {
    "conservative": {
        "label": "Conservative",
        "description": "Enter only in clearly ranging markets; exit after 20 bars at most.",
        "screening": {
            "period": 14,
            "max_lateral_threshold": "12",
        },
        "backtest": {
            "max_holding_period": 20,
        },
    },
    "balanced": {
        "label": "Balanced",
        "description": "Reference ADX(14) <= 15 screen with a 50-bar holding cap.",
        "screening": {
            "period": 14,
            "max_lateral_threshold": "15",
        },
        "backtest": {
            "max_holding_period": 50,
        },
    },
    "aggressive": {
        "label": "Aggressive",
        "description": "Looser ADX(10) <= 20 screen, hold until the trend returns.",
        "screening": {
            "period": 10,
            "max_lateral_threshold": "20",
        },
        "backtest": {
            "max_holding_period": None,
        },
    },
}
