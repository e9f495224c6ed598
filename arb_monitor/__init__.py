"""
Two-venue DEX arbitrage monitor.

Samples two constant-product router quotes for the same trade, decides
whether the spread beats a fixed cost and a minimum profit, and records
qualifying opportunities.
"""

from arb_monitor.version import __version__

PROJECT_NAME = "dex-arb-monitor"
VERSION = __version__

__all__ = ["PROJECT_NAME", "VERSION", "__version__"]
