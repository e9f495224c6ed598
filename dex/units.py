"""
Conversion between on-chain integer amounts and human-scale Decimals.

On-chain amounts are plain ``int`` values in a token's smallest unit (wei for
an 18-decimal token, micro-units for a 6-decimal stablecoin). Human-scale
values are ``Decimal``.

Conversion policy:
- base units -> human: digit-string placement of the decimal point, never a
  division, so amounts far beyond 2**53 stay exact
- human -> base units: scale by 10**decimals and round half away from zero
- a failed digit-string parse degrades to zero and is logged as a
  conversion fallback
"""

from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import NamedTuple, Optional, Union

from arb_monitor.utils import get_logger

logger = get_logger(__name__)

MAX_UINT256 = 2**256 - 1
MAX_DECIMALS = 255
UINT256_DIGITS = len(str(MAX_UINT256))

# Ties away from zero
BASE_UNIT_ROUNDING = ROUND_HALF_UP

# 78 digits holds any uint256; headroom covers 10**decimals scaling
DECIMAL_CONTEXT = Context(prec=MAX_DECIMALS + 80)

HumanValue = Union[Decimal, int, float, str]


class Conversion(NamedTuple):
    """Result of a base-unit to human conversion."""

    value: Decimal
    fallback: bool


def _check_decimals(decimals: int) -> None:
    if isinstance(decimals, bool) or not isinstance(decimals, int):
        raise ValueError(f"decimals must be an int, got {type(decimals).__name__}")
    if decimals < 0 or decimals > MAX_DECIMALS:
        raise ValueError(f"decimals must be in [0, {MAX_DECIMALS}]: {decimals}")


def _as_decimal(value: HumanValue) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal value: {value!r}") from e


def to_base_units(human_value: HumanValue, decimals: int) -> int:
    """
    Convert a human-scale quantity into an integer amount of base units.

    Args:
        human_value: Non-negative, finite quantity (e.g. Decimal("1.5") WETH)
        decimals: Token decimal count

    Returns:
        Amount in the token's smallest unit

    Raises:
        ValueError: If the value is negative, non-finite, decimals are out of
            range, or the result does not fit in a uint256
    """
    _check_decimals(decimals)
    value = _as_decimal(human_value)

    if not value.is_finite():
        raise ValueError(f"human_value must be finite: {human_value!r}")
    if value < 0:
        raise ValueError(f"human_value must be non-negative: {human_value!r}")

    # Most significant digit must land below 10**78
    if value and value.adjusted() + decimals >= UINT256_DIGITS:
        raise ValueError(f"{human_value} with {decimals} decimals overflows uint256")

    scaled = DECIMAL_CONTEXT.multiply(
        value, DECIMAL_CONTEXT.power(Decimal(10), decimals)
    )
    if scaled > MAX_UINT256:
        raise ValueError(f"{human_value} with {decimals} decimals overflows uint256")

    raw = int(
        scaled.quantize(
            Decimal(1), rounding=BASE_UNIT_ROUNDING, context=DECIMAL_CONTEXT
        )
    )
    if raw > MAX_UINT256:
        raise ValueError(f"{human_value} with {decimals} decimals overflows uint256")
    return raw


def render_digits(amount: int, decimals: int) -> str:
    """Render ``amount`` with the decimal point ``decimals`` digits from the right."""
    digits = str(amount)
    if decimals == 0:
        return digits
    if len(digits) <= decimals:
        return "0." + "0" * (decimals - len(digits)) + digits
    idx = len(digits) - decimals
    return f"{digits[:idx]}.{digits[idx:]}"


def convert_to_human(amount: int, decimals: int) -> Conversion:
    """
    Convert base units to a human-scale Decimal, reporting degraded results.

    Returns:
        Conversion(value, fallback); ``fallback`` is True when the rendered
        digit string could not be parsed and ``value`` was forced to zero.

    Raises:
        ValueError: If ``amount`` is negative or decimals are out of range
    """
    _check_decimals(decimals)
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")

    text = render_digits(amount, decimals)
    try:
        return Conversion(Decimal(text), False)
    except (InvalidOperation, ValueError):
        logger.warning(
            f"Conversion fallback: could not parse {text!r} "
            f"(amount={amount}, decimals={decimals}), using 0"
        )
        return Conversion(Decimal(0), True)


def to_human_value(amount: int, decimals: int) -> Decimal:
    """
    Convert an integer base-unit amount to a human-scale Decimal.

    Example: ``to_human_value(1_500_000, 6) == Decimal("1.500000")``.
    """
    return convert_to_human(amount, decimals).value


def format_base_units(amount: int, decimals: int, places: Optional[int] = None) -> str:
    """Display string for a base-unit amount, optionally rounded to ``places``."""
    value = to_human_value(amount, decimals)
    if places is None:
        return str(value)
    return f"{value:.{places}f}"
