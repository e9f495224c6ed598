"""
Opportunity evaluation for a pair of router quotes.

This module is the only place where a spread becomes a profit decision.
The spread is taken on raw integers first; only the (small) difference is
converted to human units, so the subtraction itself never loses precision.
"""

from decimal import Decimal
from typing import Optional

from arb_monitor.utils import get_logger

from .types import Decision, EvaluationParameters, QuotePair, VenueSelection
from .units import DECIMAL_CONTEXT, convert_to_human, to_base_units

logger = get_logger(__name__)


def d(x) -> Decimal:
    return x if isinstance(x, Decimal) else Decimal(str(x))


def select_venues(
    quotes: QuotePair, params: EvaluationParameters
) -> Optional[VenueSelection]:
    """
    Assign buy and sell sides from two quotes for the same input.

    Rule: the venue returning fewer output tokens for the fixed input is
    where we buy; the venue returning more is where we sell. Equal quotes
    mean no arbitrage and yield None.
    """
    a, b = quotes.from_source_a, quotes.from_source_b
    if a == b:
        return None
    if a > b:
        return VenueSelection(
            buy_on=params.source_b_name,
            sell_on=params.source_a_name,
            amount_out_buy=b,
            amount_out_sell=a,
        )
    return VenueSelection(
        buy_on=params.source_a_name,
        sell_on=params.source_b_name,
        amount_out_buy=a,
        amount_out_sell=b,
    )


def evaluate(quotes: QuotePair, params: EvaluationParameters) -> Optional[Decision]:
    """
    Decide whether a quote pair is a reportable opportunity.

    Args:
        quotes: Amounts out from both venues for the same amount in
        params: Evaluation settings snapshot

    Returns:
        Decision when net profit >= params.min_profit, otherwise None
    """
    selection = select_venues(quotes, params)
    if selection is None:
        logger.debug("Quotes equal, no spread")
        return None

    gross, fallback = convert_to_human(selection.spread, params.token_out_decimals)
    if fallback:
        logger.warning(
            f"Gross profit for {selection.buy_on}->{selection.sell_on} is a "
            f"conversion fallback (spread={selection.spread} base units)"
        )

    net = DECIMAL_CONTEXT.subtract(gross, d(params.fixed_cost))

    if net < d(params.min_profit):
        logger.debug(
            f"Below threshold: gross={gross} net={net} min={params.min_profit}"
        )
        return None

    return Decision(
        buy_on=selection.buy_on,
        sell_on=selection.sell_on,
        amount_out_buy=selection.amount_out_buy,
        amount_out_sell=selection.amount_out_sell,
        gross_profit=gross,
        net_profit=net,
        conversion_fallback=fallback,
    )


class ArbEngine:
    """
    Stateless evaluation engine bound to one parameter snapshot.

    Safe to share between ticks; holds no mutable state.
    """

    def __init__(self, params: EvaluationParameters):
        self.params = params

    def amount_in_base_units(self) -> int:
        """Trade size expressed in input-token base units."""
        return to_base_units(self.params.trade_size, self.params.token_in_decimals)

    def evaluate(self, quotes: QuotePair) -> Optional[Decision]:
        return evaluate(quotes, self.params)
