#!/usr/bin/env python3
"""
Two-venue DEX arbitrage monitor CLI.

Quotes the configured trade on both routers every poll interval and records
opportunities whose net profit clears the threshold.

Usage:
    python3 run_dex.py                      # config from environment / .env
    python3 run_dex.py --config monitor.yaml
    python3 run_dex.py --once --db /tmp/arb.db
"""

import argparse
import logging
import sys
from typing import List, Optional

import logging_config
from arb_monitor.exceptions import ArbMonitorError
from dex.config import ConfigError, load_config, load_config_from_env
from dex.runner import DexRunner
from dex.storage import OpportunityStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Two-venue DEX arbitrage monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Config from environment variables (RPC_URL, DEX_A_ROUTER, ...)
  python3 run_dex.py

  # Config from YAML
  python3 run_dex.py --config monitor.yaml

  # Single tick (for testing/CI)
  python3 run_dex.py --once
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML file (default: read environment / .env)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single tick and exit (overrides config setting)",
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite file for opportunities (overrides config db_path)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    logging_config.setup(getattr(logging, args.log_level))

    try:
        config = load_config(args.config) if args.config else load_config_from_env()
    except ConfigError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1

    if args.once:
        config.once = True
    if args.db:
        config.db_path = args.db

    store = OpportunityStore(config.db_path)
    try:
        store.init()
        runner = DexRunner(config, store=store)
        runner.connect()
    except (ArbMonitorError, ValueError) as e:
        print(f"❌ Initialization failed: {e}", file=sys.stderr)
        store.close()
        return 1

    try:
        runner.run()
    except KeyboardInterrupt:
        print("\n\n⏸ Stopped by user")
    finally:
        store.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
