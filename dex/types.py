"""
Core data types for two-venue DEX arbitrage evaluation.
"""

from dataclasses import dataclass
from decimal import Decimal

# Base-unit amount as returned by a router (uint256)
TokenAmount = int


@dataclass(frozen=True)
class QuotePair:
    """
    Output-token quotes from both venues for the same input amount.

    Attributes:
        from_source_a: Amount out (base units) quoted by venue A
        from_source_b: Amount out (base units) quoted by venue B
    """

    from_source_a: TokenAmount
    from_source_b: TokenAmount


@dataclass(frozen=True)
class VenueSelection:
    """Buy/sell assignment for a pair of unequal quotes."""

    buy_on: str
    sell_on: str
    amount_out_buy: TokenAmount
    amount_out_sell: TokenAmount

    @property
    def spread(self) -> TokenAmount:
        return self.amount_out_sell - self.amount_out_buy


@dataclass(frozen=True)
class Decision:
    """
    A profitable directional opportunity for one sampling cycle.

    Attributes:
        buy_on: Venue quoting fewer output tokens (buy side)
        sell_on: Venue quoting more output tokens (sell side)
        amount_out_buy: Raw quote from the buy-side venue
        amount_out_sell: Raw quote from the sell-side venue
        gross_profit: Spread converted to output-token units
        net_profit: Gross profit minus the fixed cost
        conversion_fallback: True if gross_profit came from a degraded conversion
    """

    buy_on: str
    sell_on: str
    amount_out_buy: TokenAmount
    amount_out_sell: TokenAmount
    gross_profit: Decimal
    net_profit: Decimal
    conversion_fallback: bool = False

    @property
    def spread_base_units(self) -> TokenAmount:
        return self.amount_out_sell - self.amount_out_buy


@dataclass(frozen=True)
class EvaluationParameters:
    """
    Read-only evaluation settings for a run.

    Attributes:
        trade_size: Input amount in human units of token_in
        token_in_decimals: Decimal count of the input token
        token_out_decimals: Decimal count of the output token
        fixed_cost: Per-cycle cost in output-token units (e.g. gas in USDC)
        min_profit: Net profit threshold, inclusive
        source_a_name: Label for venue A
        source_b_name: Label for venue B
    """

    trade_size: Decimal
    token_in_decimals: int
    token_out_decimals: int
    fixed_cost: Decimal
    min_profit: Decimal
    source_a_name: str = "DEX A"
    source_b_name: str = "DEX B"

    @classmethod
    def from_config(cls, config) -> "EvaluationParameters":
        """Snapshot the evaluation fields of a DexConfig."""
        return cls(
            trade_size=config.trade_size,
            token_in_decimals=config.token_in_decimals,
            token_out_decimals=config.token_out_decimals,
            fixed_cost=config.gas_cost_usd,
            min_profit=config.min_profit_usd,
            source_a_name=config.dex_a_name,
            source_b_name=config.dex_b_name,
        )
