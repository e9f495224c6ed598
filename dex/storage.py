"""
SQLite persistence for recorded opportunities.

Raw router amounts are uint256 and do not fit an SQLite INTEGER, so they are
stored as decimal strings. Profit columns are REAL for easy querying.
"""

import sqlite3
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import List, Optional

from arb_monitor.exceptions import StorageError
from arb_monitor.utils import get_logger, utc_now_iso

from .types import Decision

logger = get_logger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS opportunities (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    ts_utc TEXT NOT NULL,
    dex_buy TEXT NOT NULL,
    dex_sell TEXT NOT NULL,
    token_pair TEXT NOT NULL,
    amount_in TEXT NOT NULL,
    quote_buy_out TEXT NOT NULL,
    quote_sell_out TEXT NOT NULL,
    gross_profit_usdc REAL NOT NULL,
    gas_cost_usdc REAL NOT NULL,
    net_profit_usdc REAL NOT NULL
);
"""

_COLUMNS = (
    "ts_utc, dex_buy, dex_sell, token_pair, amount_in, quote_buy_out, "
    "quote_sell_out, gross_profit_usdc, gas_cost_usdc, net_profit_usdc"
)


@dataclass
class OpportunityRecord:
    """
    One persisted opportunity with its provenance.

    Attributes:
        ts_utc: ISO 8601 timestamp of the tick
        dex_buy: Buy-side venue label
        dex_sell: Sell-side venue label
        token_pair: "token_in->token_out"
        amount_in: Trade size in base units of token_in
        quote_buy_out: Raw buy-side quote (base units of token_out)
        quote_sell_out: Raw sell-side quote (base units of token_out)
        gross_profit_usd: Spread in output-token units
        gas_cost_usd: Fixed cost subtracted for this tick
        net_profit_usd: Gross minus gas
    """

    ts_utc: str
    dex_buy: str
    dex_sell: str
    token_pair: str
    amount_in: str
    quote_buy_out: str
    quote_sell_out: str
    gross_profit_usd: float
    gas_cost_usd: float
    net_profit_usd: float

    @classmethod
    def from_decision(
        cls,
        decision: Decision,
        config,
        amount_in: int,
        ts_utc: Optional[str] = None,
    ) -> "OpportunityRecord":
        """Package a Decision with the tick's provenance."""
        return cls(
            ts_utc=ts_utc or utc_now_iso(),
            dex_buy=decision.buy_on,
            dex_sell=decision.sell_on,
            token_pair=config.token_pair,
            amount_in=str(amount_in),
            quote_buy_out=str(decision.amount_out_buy),
            quote_sell_out=str(decision.amount_out_sell),
            gross_profit_usd=float(decision.gross_profit),
            gas_cost_usd=float(Decimal(config.gas_cost_usd)),
            net_profit_usd=float(decision.net_profit),
        )

    def as_row(self) -> tuple:
        return (
            self.ts_utc,
            self.dex_buy,
            self.dex_sell,
            self.token_pair,
            self.amount_in,
            self.quote_buy_out,
            self.quote_sell_out,
            self.gross_profit_usd,
            self.gas_cost_usd,
            self.net_profit_usd,
        )

    def __str__(self) -> str:
        return (
            f"{self.ts_utc} | Buy {self.dex_buy} / Sell {self.dex_sell} | "
            f"{self.token_pair} | net=${self.net_profit_usd:.4f}"
        )


class OpportunityStore:
    """SQLite sink for OpportunityRecords."""

    def __init__(self, path: str = "arb.db"):
        self.path = str(path)
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            try:
                self._conn = sqlite3.connect(self.path)
            except sqlite3.Error as e:
                raise StorageError(
                    f"Cannot open {self.path}: {e}", path=self.path
                ) from e
        return self._conn

    def init(self) -> None:
        """Create the opportunities table if it does not exist."""
        try:
            self.conn.executescript(SCHEMA)
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Schema init failed: {e}", path=self.path) from e

    def insert(self, record: OpportunityRecord) -> int:
        """
        Persist one record.

        Returns:
            Row id of the inserted record

        Raises:
            StorageError: If the insert fails
        """
        try:
            cursor = self.conn.execute(
                f"INSERT INTO opportunities ({_COLUMNS}) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                record.as_row(),
            )
            self.conn.commit()
        except sqlite3.Error as e:
            raise StorageError(f"Insert failed: {e}", path=self.path) from e

        logger.debug(f"Stored opportunity #{cursor.lastrowid}")
        return cursor.lastrowid

    def recent(self, limit: int = 20) -> List[OpportunityRecord]:
        """Most recent records, newest first."""
        try:
            rows = self.conn.execute(
                f"SELECT {_COLUMNS} FROM opportunities ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}", path=self.path) from e
        return [OpportunityRecord(*row) for row in rows]

    def count(self) -> int:
        try:
            (total,) = self.conn.execute(
                "SELECT COUNT(*) FROM opportunities"
            ).fetchone()
        except sqlite3.Error as e:
            raise StorageError(f"Query failed: {e}", path=self.path) from e
        return total

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "OpportunityStore":
        self.init()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
