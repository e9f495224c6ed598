"""
Two-venue DEX arbitrage scanning.

Modules:
- units: base-unit <-> human Decimal conversion
- evaluator: spread -> profit decision
- adapters.v2: Uniswap V2 router quotes
- config: YAML / environment configuration
- storage: SQLite opportunity sink
- runner: polling loop
"""

from .evaluator import ArbEngine, evaluate, select_venues
from .types import Decision, EvaluationParameters, QuotePair
from .units import to_base_units, to_human_value

__all__ = [
    "ArbEngine",
    "Decision",
    "EvaluationParameters",
    "QuotePair",
    "evaluate",
    "select_venues",
    "to_base_units",
    "to_human_value",
]
