"""
Linear Bonding Curve Pricing Engine

Pure integer math for a curve whose instantaneous price grows linearly
with circulating supply:

    price(s) = base_price + floor(slope * s / SCALE)

Buy and sell amounts are priced with the closed-form integral of that line.
Rounding always favours the protocol: buy costs round every intermediate
term up, sell proceeds round every intermediate term down, so no sequence of
trades can extract value through rounding.

All arithmetic is bounded by the 256-bit unsigned range of the settlement
environment. Exceeding it raises ArithmeticOverflow instead of wrapping.

Example:
    ```python
    from launchpad.pricing import PricingEngine
    from launchpad.models import CurveParameters

    engine = PricingEngine(CurveParameters(slope=100, base_price=1000,
                                           graduation_threshold=10**9, scale=1))
    engine.buy_cost(supply=0, amount=3)   # 3450
    ```
"""

from typing import Final

from ..errors import ArithmeticOverflow, ValidationError
from ..models.curve import CurveParameters, GraduationProgress

UINT256_MAX: Final[int] = 2**256 - 1
BPS_DENOMINATOR: Final[int] = 10_000


# =============================================================================
# Checked integer primitives
# =============================================================================


def checked_add(a: int, b: int) -> int:
    """Add two unsigned values, failing on overflow."""
    result = a + b
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"addition overflow: {a} + {b}")
    return result


def checked_mul(a: int, b: int) -> int:
    """Multiply two unsigned values, failing on overflow."""
    result = a * b
    if result > UINT256_MAX:
        raise ArithmeticOverflow(f"multiplication overflow: {a} * {b}")
    return result


def mul_div(a: int, b: int, denominator: int) -> int:
    """floor(a * b / denominator) with an overflow-checked product."""
    if denominator <= 0:
        raise ValidationError("denominator must be positive")
    return checked_mul(a, b) // denominator


def mul_div_rounding_up(a: int, b: int, denominator: int) -> int:
    """ceil(a * b / denominator) with an overflow-checked product."""
    if denominator <= 0:
        raise ValidationError("denominator must be positive")
    return -(-checked_mul(a, b) // denominator)


def _require_supply(supply: int) -> None:
    if supply < 0:
        raise ValidationError(f"supply cannot be negative, got {supply}")


def _require_amount(amount: int) -> None:
    if amount <= 0:
        raise ValidationError(f"amount must be greater than zero, got {amount}")


# =============================================================================
# Curve functions
# =============================================================================


def spot_price(supply: int, *, slope: int, base_price: int, scale: int) -> int:
    """Instantaneous price at the given supply."""
    _require_supply(supply)
    return checked_add(base_price, mul_div(slope, supply, scale))


def buy_cost(supply: int, amount: int, *, slope: int, base_price: int, scale: int) -> int:
    """
    Cost of minting `amount` on top of `supply`, rounded up.

    Integral of the price line over [supply, supply + amount]:

        term1 = ceil(base_price * amount / SCALE)
        term2 = ceil(ceil(slope * amount / SCALE) * (2 * supply + amount) / (2 * SCALE))
    """
    _require_supply(supply)
    _require_amount(amount)

    term1 = mul_div_rounding_up(base_price, amount, scale)
    slope_amount = mul_div_rounding_up(slope, amount, scale)
    span = checked_add(checked_mul(2, supply), amount)
    term2 = mul_div_rounding_up(slope_amount, span, checked_mul(2, scale))
    return checked_add(term1, term2)


def sell_proceeds(supply: int, amount: int, *, slope: int, base_price: int, scale: int) -> int:
    """
    Proceeds of burning `amount` from `supply`, rounded down.

    Integral of the price line over [supply - amount, supply].
    """
    _require_supply(supply)
    _require_amount(amount)
    if amount > supply:
        raise ValidationError(f"cannot sell {amount} from a supply of {supply}")

    term1 = mul_div(base_price, amount, scale)
    slope_amount = mul_div(slope, amount, scale)
    span = checked_mul(2, supply) - amount
    term2 = mul_div(slope_amount, span, checked_mul(2, scale))
    return checked_add(term1, term2)


def market_cap(supply: int, *, slope: int, base_price: int, scale: int) -> int:
    """floor(supply * price(supply) / SCALE)."""
    price = spot_price(supply, slope=slope, base_price=base_price, scale=scale)
    return mul_div(supply, price, scale)


def graduation_progress(cap: int, threshold: int) -> GraduationProgress:
    """Progress toward the threshold in bps, capped at 10000, and the remaining gap."""
    if threshold <= 0:
        raise ValidationError("graduation threshold must be positive")
    if cap >= threshold:
        return GraduationProgress(progress_bps=BPS_DENOMINATOR, remaining=0)
    return GraduationProgress(
        progress_bps=mul_div(cap, BPS_DENOMINATOR, threshold),
        remaining=threshold - cap,
    )


# =============================================================================
# Parameter-bound engine
# =============================================================================


class PricingEngine:
    """
    Curve math bound to one instance's CurveParameters.

    Stateless: every method takes the supply it should price against, so the
    engine can be shared freely and tested without any ledger.
    """

    def __init__(self, params: CurveParameters):
        self._params = params

    @property
    def params(self) -> CurveParameters:
        return self._params

    @property
    def scale(self) -> int:
        return self._params.scale

    def _curve(self) -> dict[str, int]:
        return {
            "slope": self._params.slope,
            "base_price": self._params.base_price,
            "scale": self._params.scale,
        }

    def price(self, supply: int) -> int:
        return spot_price(supply, **self._curve())

    def buy_cost(self, supply: int, amount: int) -> int:
        return buy_cost(supply, amount, **self._curve())

    def sell_proceeds(self, supply: int, amount: int) -> int:
        return sell_proceeds(supply, amount, **self._curve())

    def market_cap(self, supply: int) -> int:
        return market_cap(supply, **self._curve())

    def graduation_progress(self, supply: int) -> GraduationProgress:
        return graduation_progress(self.market_cap(supply), self._params.graduation_threshold)

    def reaches_threshold(self, supply: int) -> bool:
        """Whether the market cap at `supply` meets the graduation threshold."""
        return self.market_cap(supply) >= self._params.graduation_threshold
