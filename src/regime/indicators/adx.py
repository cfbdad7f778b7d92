"""Average Directional Index (ADX) using Wilder's smoothing.

ADX measures trend strength on a 0-100 scale; readings below roughly 20-25
indicate a weak trend (lateral/ranging market). The computation is a chain
of recursive filters, so it is path-dependent: every smoothed value depends
on the whole history before it.

WilderState carries the recursion forward one candle at a time, which makes
a full-series evaluation linear in the number of candles. compute_adx() and
adx_at() are thin wrappers around it.

CRITICAL: All computations use Decimal. Never use float.
"""

from collections import deque
from dataclasses import dataclass
from decimal import Decimal

from regime.data.models import Candle
from regime.exceptions import InvalidConfigError

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass(frozen=True)
class AdxSample:
    """ADX state at one candle index.

    ``adx`` is reported as 0 until ``period`` DX values have accumulated;
    ``adx_ready`` tells whether the reading is a genuine ADX value.
    """

    true_range: Decimal
    plus_dm: Decimal
    minus_dm: Decimal
    smoothed_tr: Decimal
    smoothed_plus_dm: Decimal
    smoothed_minus_dm: Decimal
    plus_di: Decimal
    minus_di: Decimal
    dx: Decimal
    adx: Decimal
    adx_ready: bool


def true_range(candle: Candle, prev: Candle | None) -> Decimal:
    """True range of ``candle`` given the previous candle (None for the first)."""
    if prev is None:
        return candle.high - candle.low
    return max(
        candle.high - candle.low,
        abs(candle.high - prev.close),
        abs(candle.low - prev.close),
    )


def directional_movement(
    candle: Candle, prev: Candle | None
) -> tuple[Decimal, Decimal]:
    """Return (+DM, -DM) for ``candle``. At most one of them is nonzero."""
    if prev is None:
        return _ZERO, _ZERO

    high_diff = candle.high - prev.high
    low_diff = prev.low - candle.low

    plus_dm = high_diff if high_diff > low_diff and high_diff > _ZERO else _ZERO
    minus_dm = low_diff if low_diff > high_diff and low_diff > _ZERO else _ZERO
    return plus_dm, minus_dm


def _wilder(prev: Decimal, current: Decimal, period: int) -> Decimal:
    return (prev * (period - 1) + current) / period


def _mean(values: deque[Decimal] | list[Decimal], period: int) -> Decimal:
    return sum(values, _ZERO) / period


class WilderState:
    """Persistent ADX recursion state, advanced by exactly one candle per update().

    Holds the smoothed true range, smoothed +DM/-DM, smoothed DX and the
    windows needed to seed each filter with a simple mean.

    Args:
        period: Smoothing period (typically 14).

    Raises:
        InvalidConfigError: If period is not a positive integer.
    """

    def __init__(self, period: int = 14) -> None:
        if period < 1:
            raise InvalidConfigError(f"ADX period must be positive, got {period}")

        self.period = period
        self.index = -1
        self._prev: Candle | None = None

        # Raw values of the most recent `period` candles (seed window)
        self._tr_window: deque[Decimal] = deque(maxlen=period)
        self._plus_window: deque[Decimal] = deque(maxlen=period)
        self._minus_window: deque[Decimal] = deque(maxlen=period)

        self.smoothed_tr: Decimal | None = None
        self.smoothed_plus_dm: Decimal | None = None
        self.smoothed_minus_dm: Decimal | None = None
        self.smoothed_dx: Decimal | None = None
        self._dx_seed: list[Decimal] = []

    def update(self, candle: Candle) -> AdxSample | None:
        """Advance the recursion by one candle.

        Args:
            candle: The next candle in ascending time order.

        Returns:
            The sample at this index, or None while index < period.
        """
        self.index += 1
        period = self.period

        tr = true_range(candle, self._prev)
        plus_dm, minus_dm = directional_movement(candle, self._prev)
        self._prev = candle

        self._tr_window.append(tr)
        self._plus_window.append(plus_dm)
        self._minus_window.append(minus_dm)

        if self.index < period:
            return None

        if self.smoothed_tr is None:
            self.smoothed_tr = _mean(self._tr_window, period)
            self.smoothed_plus_dm = _mean(self._plus_window, period)
            self.smoothed_minus_dm = _mean(self._minus_window, period)
        else:
            self.smoothed_tr = _wilder(self.smoothed_tr, tr, period)
            self.smoothed_plus_dm = _wilder(self.smoothed_plus_dm, plus_dm, period)
            self.smoothed_minus_dm = _wilder(self.smoothed_minus_dm, minus_dm, period)

        if self.smoothed_tr > _ZERO:
            plus_di = self.smoothed_plus_dm / self.smoothed_tr * _HUNDRED
            minus_di = self.smoothed_minus_dm / self.smoothed_tr * _HUNDRED
        else:
            plus_di = _ZERO
            minus_di = _ZERO

        di_sum = plus_di + minus_di
        dx = abs(plus_di - minus_di) / di_sum * _HUNDRED if di_sum > _ZERO else _ZERO

        if self.smoothed_dx is None:
            self._dx_seed.append(dx)
            if len(self._dx_seed) == period:
                self.smoothed_dx = _mean(self._dx_seed, period)
                self._dx_seed = []
        else:
            self.smoothed_dx = _wilder(self.smoothed_dx, dx, period)

        return AdxSample(
            true_range=tr,
            plus_dm=plus_dm,
            minus_dm=minus_dm,
            smoothed_tr=self.smoothed_tr,
            smoothed_plus_dm=self.smoothed_plus_dm,
            smoothed_minus_dm=self.smoothed_minus_dm,
            plus_di=plus_di,
            minus_di=minus_di,
            dx=dx,
            adx=self.smoothed_dx if self.smoothed_dx is not None else _ZERO,
            adx_ready=self.smoothed_dx is not None,
        )


def compute_adx(candles: list[Candle], period: int = 14) -> list[AdxSample | None]:
    """Compute ADX samples for every candle index in one left-to-right pass.

    Args:
        candles: Candles ordered by timestamp ascending.
        period: ADX period.

    Returns:
        List the same length as ``candles``. Entries are None for indices
        below ``period``, and for every index when the series holds fewer
        than ``2 * period`` candles.
    """
    if len(candles) < period * 2:
        return [None] * len(candles)

    state = WilderState(period)
    return [state.update(candle) for candle in candles]


def adx_at(candles: list[Candle], index: int, period: int = 14) -> AdxSample | None:
    """Return the ADX sample at ``index`` computed over ``candles[: index + 1]``.

    Only the prefix up to ``index`` is visible, so the result never depends
    on later candles.
    """
    if index < 0 or index >= len(candles) or index + 1 < period * 2:
        return None

    state = WilderState(period)
    sample = None
    for candle in candles[: index + 1]:
        sample = state.update(candle)
    return sample
