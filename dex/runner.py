"""
Polling runner for the two-venue DEX monitor.

Each tick quotes the configured trade size on both routers, evaluates the
spread and stores qualifying opportunities. Ticks run one at a time on a
fixed cadence; a failed tick is logged and skipped, never fatal.
"""

import asyncio
import time
from typing import Optional

from arb_monitor.exceptions import ArbMonitorError, StorageError
from arb_monitor.utils import format_duration, get_logger

from .adapters.v2 import RouterClient, make_web3
from .config import DexConfig
from .evaluator import ArbEngine
from .storage import OpportunityRecord, OpportunityStore
from .types import EvaluationParameters, QuotePair
from .units import format_base_units

logger = get_logger(__name__)


class DexRunner:
    """
    Sequential tick loop over two V2 routers.

    Routers and store may be injected (tests, alternative sinks); otherwise
    ``connect()`` builds them from the config.
    """

    def __init__(
        self,
        config: DexConfig,
        store: Optional[OpportunityStore] = None,
        router_a: Optional[RouterClient] = None,
        router_b: Optional[RouterClient] = None,
        parallel_quotes: bool = True,
    ):
        """
        Initialize runner with config.

        Args:
            config: Validated DexConfig instance
            store: Opportunity sink (None disables persistence)
            router_a: Quote client for venue A
            router_b: Quote client for venue B
            parallel_quotes: If True, fetch both quotes concurrently
        """
        self.config = config
        self.params = EvaluationParameters.from_config(config)
        self.engine = ArbEngine(self.params)
        self.store = store
        self.router_a = router_a
        self.router_b = router_b
        self.parallel_quotes = parallel_quotes

        self.ticks = 0
        self.opportunities = 0
        self.errors = 0

    def connect(self) -> None:
        """
        Connect to RPC and build both router clients.

        Raises:
            NetworkError: If the RPC node is unreachable
        """
        logger.info("Connecting to RPC")
        web3 = make_web3(self.config.rpc_url)
        self.router_a = RouterClient(
            web3, self.config.dex_a_router, self.config.dex_a_name
        )
        self.router_b = RouterClient(
            web3, self.config.dex_b_router, self.config.dex_b_name
        )
        logger.info(
            f"Routers ready: {self.config.dex_a_name}={self.config.dex_a_router}, "
            f"{self.config.dex_b_name}={self.config.dex_b_router}"
        )

    async def _fetch_quotes_async(self, amount_in: int) -> QuotePair:
        q_a, q_b = await asyncio.gather(
            self.router_a.get_amount_out_async(
                amount_in, self.config.token_in, self.config.token_out
            ),
            self.router_b.get_amount_out_async(
                amount_in, self.config.token_in, self.config.token_out
            ),
        )
        return QuotePair(from_source_a=q_a, from_source_b=q_b)

    def fetch_quotes(self, amount_in: int) -> QuotePair:
        """
        Quote ``amount_in`` on both venues.

        Raises:
            QuoteError: If either venue fails
        """
        if self.router_a is None or self.router_b is None:
            raise RuntimeError("Routers not initialized; call connect() first")

        if self.parallel_quotes:
            return asyncio.run(self._fetch_quotes_async(amount_in))

        q_a = self.router_a.get_amount_out(
            amount_in, self.config.token_in, self.config.token_out
        )
        q_b = self.router_b.get_amount_out(
            amount_in, self.config.token_in, self.config.token_out
        )
        return QuotePair(from_source_a=q_a, from_source_b=q_b)

    def tick_once(self) -> Optional[OpportunityRecord]:
        """
        Run one sampling cycle.

        Returns:
            OpportunityRecord if the spread clears cost and threshold, else None

        Raises:
            QuoteError: If a quote could not be fetched
        """
        amount_in = self.engine.amount_in_base_units()
        quotes = self.fetch_quotes(amount_in)

        decimals = self.params.token_out_decimals
        logger.debug(
            f"Quotes: {self.params.source_a_name}="
            f"{format_base_units(quotes.from_source_a, decimals)} "
            f"{self.params.source_b_name}="
            f"{format_base_units(quotes.from_source_b, decimals)}"
        )

        decision = self.engine.evaluate(quotes)
        if decision is None:
            return None

        if decision.conversion_fallback:
            logger.warning("Opportunity profit derived from a conversion fallback")

        return OpportunityRecord.from_decision(decision, self.config, amount_in)

    def _store(self, record: OpportunityRecord) -> None:
        if self.store is None:
            return
        try:
            self.store.insert(record)
        except StorageError as e:
            logger.error(f"DB insert error: {e}")

    def run(self, max_ticks: Optional[int] = None) -> None:
        """
        Main loop: tick, store, sleep to cadence.

        Args:
            max_ticks: Stop after this many ticks (None runs until interrupted
                or ``config.once`` is set)
        """
        logger.info(f"Monitor config: {self.config.redacted()}")
        started = time.time()

        try:
            while True:
                t0 = time.time()
                self.ticks += 1

                try:
                    record = self.tick_once()
                except (ArbMonitorError, ValueError) as e:
                    self.errors += 1
                    logger.error(f"Tick error: {e}")
                else:
                    if record is not None:
                        self.opportunities += 1
                        logger.info(f"[OPPORTUNITY] {record}")
                        self._store(record)
                    else:
                        logger.info("No profitable opportunity this round.")

                if self.config.once or (
                    max_ticks is not None and self.ticks >= max_ticks
                ):
                    break

                # sleep to cadence
                dt = time.time() - t0
                time.sleep(max(0.0, self.config.poll_sec - dt))
        finally:
            logger.info(
                f"Stopped after {self.ticks} ticks in "
                f"{format_duration(time.time() - started)}: "
                f"{self.opportunities} opportunities, {self.errors} errors"
            )
