"""
DEX adapter modules for router quoting.
"""

from .v2 import RouterClient, is_rate_limit_error, make_web3

__all__ = ["RouterClient", "is_rate_limit_error", "make_web3"]
