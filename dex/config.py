"""
Configuration loading and validation for the two-venue DEX monitor.

Config comes either from a YAML file (``load_config``) or from environment
variables, optionally seeded from a ``.env`` file (``load_config_from_env``).
Both paths produce the same validated ``DexConfig``.
"""

import os
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv
from web3 import Web3

from arb_monitor.exceptions import ConfigurationError
from arb_monitor.utils import get_logger

from .units import MAX_DECIMALS

logger = get_logger(__name__)

_HEX_ADDRESS = re.compile(r"^(0x)?[0-9a-fA-F]{40}$")

# env var -> (config key, default); None default means required
ENV_KEYS = {
    "RPC_URL": ("rpc_url", None),
    "DEX_A_ROUTER": ("dex_a_router", None),
    "DEX_B_ROUTER": ("dex_b_router", None),
    "TOKEN_IN": ("token_in", None),
    "TOKEN_OUT": ("token_out", None),
    "TOKEN_IN_DECIMALS": ("token_in_decimals", 18),
    "TOKEN_OUT_DECIMALS": ("token_out_decimals", 6),
    "TRADE_SIZE_IN_TOKEN_IN": ("trade_size", Decimal("1.0")),
    "GAS_COST_USDC": ("gas_cost_usd", Decimal("2.0")),
    "MIN_PROFIT_USDC": ("min_profit_usd", Decimal("5.0")),
    "POLL_INTERVAL_SECS": ("poll_sec", 20),
    "DEX_A_NAME": ("dex_a_name", "DEX A"),
    "DEX_B_NAME": ("dex_b_name", "DEX B"),
    "ARB_DB_PATH": ("db_path", "arb.db"),
}


class ConfigError(ConfigurationError):
    """Raised when config is invalid or missing required fields."""

    pass


class DexConfig:
    """
    Parsed and validated configuration for the monitor.

    Attributes:
        rpc_url: HTTP(S) RPC endpoint
        dex_a_router: Checksummed router address of venue A
        dex_b_router: Checksummed router address of venue B
        dex_a_name: Label for venue A
        dex_b_name: Label for venue B
        token_in: Checksummed input token address
        token_out: Checksummed output token address
        token_in_decimals: Decimal count of token_in
        token_out_decimals: Decimal count of token_out
        trade_size: Trade size in human units of token_in
        gas_cost_usd: Fixed per-cycle cost in output-token units
        min_profit_usd: Minimum net profit to record an opportunity
        poll_sec: Seconds between ticks
        once: If True, run a single tick and exit
        db_path: SQLite file for recorded opportunities
    """

    def __init__(self, config_dict: Dict[str, Any]):
        """
        Parse and validate config from dictionary.

        Args:
            config_dict: Loaded YAML config or environment mapping

        Raises:
            ConfigError: If required fields missing or invalid
        """
        self.rpc_url: str = self._get_required(config_dict, "rpc_url", str)
        if not self.rpc_url.startswith(("http://", "https://")):
            raise ConfigError(f"rpc_url must be http(s): {self.rpc_url}")

        # Venues
        self.dex_a_router: str = self._parse_address(config_dict, "dex_a_router")
        self.dex_b_router: str = self._parse_address(config_dict, "dex_b_router")
        self.dex_a_name: str = str(config_dict.get("dex_a_name", "DEX A"))
        self.dex_b_name: str = str(config_dict.get("dex_b_name", "DEX B"))
        if self.dex_a_name == self.dex_b_name:
            raise ConfigError("dex_a_name and dex_b_name must differ")

        # Tokens
        self.token_in: str = self._parse_address(config_dict, "token_in")
        self.token_out: str = self._parse_address(config_dict, "token_out")
        if self.token_in == self.token_out:
            raise ConfigError("token_in and token_out must differ")
        self.token_in_decimals: int = self._parse_decimals(
            config_dict, "token_in_decimals", 18
        )
        self.token_out_decimals: int = self._parse_decimals(
            config_dict, "token_out_decimals", 6
        )

        # Trading parameters
        self.trade_size: Decimal = self._parse_amount(config_dict, "trade_size", "1.0")
        self.gas_cost_usd: Decimal = self._parse_amount(
            config_dict, "gas_cost_usd", "2.0"
        )
        self.min_profit_usd: Decimal = self._parse_amount(
            config_dict, "min_profit_usd", "5.0"
        )

        # Loop settings
        try:
            self.poll_sec: int = int(config_dict.get("poll_sec", 20))
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"poll_sec must be an integer: {config_dict.get('poll_sec')!r}"
            ) from e
        if self.poll_sec < 0:
            raise ConfigError(f"poll_sec must be non-negative: {self.poll_sec}")
        self.once: bool = bool(config_dict.get("once", False))
        self.db_path: str = str(config_dict.get("db_path", "arb.db"))

    @staticmethod
    def _get_required(d: Dict, key: str, expected_type: type) -> Any:
        """Get required config field with type validation."""
        if key not in d or d[key] in (None, ""):
            raise ConfigError(f"Missing required config field: {key}")
        val = d[key]
        if not isinstance(val, expected_type):
            raise ConfigError(
                f"Config field '{key}' must be {expected_type.__name__}, got {type(val).__name__}"
            )
        return val

    @classmethod
    def _parse_address(cls, d: Dict, key: str) -> str:
        """Validate a 20-byte hex address and return it checksummed."""
        raw = cls._get_required(d, key, str).strip()
        if not _HEX_ADDRESS.match(raw):
            raise ConfigError(f"{key} must be 20 bytes (40 hex chars): {raw}")
        if not raw.startswith("0x"):
            raw = "0x" + raw
        return Web3.to_checksum_address(raw)

    @staticmethod
    def _parse_decimals(d: Dict, key: str, default: int) -> int:
        try:
            value = int(d.get(key, default))
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{key} must be an integer: {d.get(key)!r}") from e
        if value < 0 or value > MAX_DECIMALS:
            raise ConfigError(f"{key} must be in [0, {MAX_DECIMALS}]: {value}")
        return value

    @staticmethod
    def _parse_amount(d: Dict, key: str, default: str) -> Decimal:
        raw = d.get(key, default)
        try:
            value = Decimal(str(raw))
        except InvalidOperation as e:
            raise ConfigError(f"{key} must be a number: {raw!r}") from e
        if not value.is_finite() or value < 0:
            raise ConfigError(f"{key} must be finite and non-negative: {raw!r}")
        return value

    @property
    def token_pair(self) -> str:
        """Display form of the traded pair."""
        return f"{self.token_in}->{self.token_out}"

    def redacted(self) -> Dict[str, Any]:
        """Config snapshot safe for logs (RPC URL may embed an API key)."""
        return {
            "rpc_url": "<redacted>",
            "dex_a": f"{self.dex_a_name} @ {self.dex_a_router}",
            "dex_b": f"{self.dex_b_name} @ {self.dex_b_router}",
            "token_in": self.token_in,
            "token_out": self.token_out,
            "token_in_decimals": self.token_in_decimals,
            "token_out_decimals": self.token_out_decimals,
            "trade_size": str(self.trade_size),
            "gas_cost_usd": str(self.gas_cost_usd),
            "min_profit_usd": str(self.min_profit_usd),
            "poll_sec": self.poll_sec,
            "db_path": self.db_path,
        }


def load_config(config_path: str) -> DexConfig:
    """
    Load and validate config from YAML file.

    Args:
        config_path: Path to config YAML file

    Returns:
        Validated DexConfig instance

    Raises:
        ConfigError: If config invalid or file not found
    """
    if not os.path.exists(config_path):
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML: {e}") from e

    if not isinstance(config_dict, dict):
        raise ConfigError("Config file must contain a YAML dictionary")

    return DexConfig(config_dict)


def _env_value(env: Dict[str, str], name: str, default: Any) -> Any:
    """Read an optional env var, falling back to the default when unparseable."""
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    raw = raw.strip()
    if isinstance(default, int):
        try:
            value = int(raw)
        except ValueError:
            value = -1
        if value < 0:
            logger.warning(
                f"{name}={raw!r} is not a non-negative integer, using {default}"
            )
            return default
        return value
    if isinstance(default, Decimal):
        try:
            return Decimal(raw)
        except InvalidOperation:
            logger.warning(f"{name}={raw!r} is not a number, using {default}")
            return default
    return raw


def load_config_from_env(
    env: Optional[Dict[str, str]] = None, dotenv_path: Optional[str] = None
) -> DexConfig:
    """
    Build config from environment variables.

    Args:
        env: Mapping to read instead of ``os.environ`` (loads .env when None)
        dotenv_path: Explicit .env path passed to python-dotenv

    Returns:
        Validated DexConfig instance

    Raises:
        ConfigError: If a required variable is missing or invalid
    """
    if env is None:
        load_dotenv(dotenv_path)
        env = dict(os.environ)

    config_dict: Dict[str, Any] = {}
    for name, (key, default) in ENV_KEYS.items():
        if default is None:
            if not env.get(name):
                raise ConfigError(f"missing env {name}")
            config_dict[key] = env[name].strip()
        else:
            config_dict[key] = _env_value(env, name, default)

    return DexConfig(config_dict)
