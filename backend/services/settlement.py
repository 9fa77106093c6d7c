"""Settlement of a short position against the current price pair.

    pnl        = entry_price - tracked_price
    withdrawal = (entry_price + pnl) * size / base_price

All values are integers. Division truncates toward zero (int256 semantics),
so a losing position settles to a negative or zero withdrawal and leaves the
same dust the on-chain formula does.
"""

from dataclasses import dataclass

from backend.engine.errors import ArithmeticOverflow, InvalidPrice
from backend.models.position import Position
from backend.utils.constants import INT256_MAX, INT256_MIN


@dataclass(frozen=True)
class Settlement:
    withdrawal_amount: int  # wei, signed
    close_price: int  # normalized tracked price used

    @property
    def is_liquidatable(self) -> bool:
        return self.withdrawal_amount <= 0


def _checked(value: int) -> int:
    if value > INT256_MAX or value < INT256_MIN:
        raise ArithmeticOverflow(f"Settlement value {value} overflows int256")
    return value


def _div_toward_zero(numerator: int, denominator: int) -> int:
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def settle(position: Position, base_price: int, tracked_price: int) -> Settlement:
    if base_price <= 0 or tracked_price <= 0:
        raise InvalidPrice("Settlement prices must be positive")

    entry_price = position.entry_price
    pnl = _checked(entry_price - tracked_price)
    numerator = _checked(_checked(entry_price + pnl) * position.size)
    withdrawal = _div_toward_zero(numerator, base_price)
    return Settlement(withdrawal_amount=withdrawal, close_price=tracked_price)
