"""
Logging configuration for CLI runs.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys

APP_LOGGERS = ("dex", "arb_monitor", "__main__")


def setup(level=logging.INFO):
    """
    Configure root logging for cleaner, more readable output.

    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Suppresses per-request HTTP logs from web3's transport
    """
    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
        )
    )
    root.addHandler(console)

    # Suppress noisy transport loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    # Module loggers built by get_logger() carry their own handler; route
    # them through the root handler instead
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if isinstance(logger, logging.Logger) and name.split(".")[0] in APP_LOGGERS:
            logger.handlers.clear()
            logger.setLevel(logging.NOTSET)

    for name in APP_LOGGERS:
        logging.getLogger(name).setLevel(level)


def setup_debug():
    """Verbose logging for debugging, including RPC transport."""
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
