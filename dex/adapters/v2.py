"""
Uniswap V2 style router adapter.

Quotes a single-hop swap through ``getAmountsOut`` on a V2 router. The router
applies its own fee and reserves, so the returned amount is what the venue
would pay out for ``amount_in`` at the current block.
"""

import asyncio
import time
from typing import List

from web3 import Web3

from arb_monitor.exceptions import NetworkError, QuoteError
from arb_monitor.utils import get_logger

from ..abi import UNISWAP_V2_ROUTER_ABI

logger = get_logger(__name__)


def is_rate_limit_error(error: Exception) -> bool:
    """Check an RPC error for the common rate-limit patterns."""
    error_msg = str(error)
    return (
        "429" in error_msg
        or "Too Many Requests" in error_msg
        or "-32005" in error_msg  # BSC/Ethereum rate limit code
        or "limit exceeded" in error_msg.lower()
    )


def make_web3(rpc_url: str, timeout: int = 20, check_connection: bool = True) -> Web3:
    """
    Build a Web3 instance over HTTP.

    Args:
        rpc_url: HTTP(S) RPC endpoint
        timeout: Request timeout in seconds
        check_connection: If True, fail fast when the node is unreachable

    Raises:
        ValueError: If the URL is not http(s)
        NetworkError: If the node does not respond
    """
    if not rpc_url.startswith(("http://", "https://")):
        raise ValueError(f"Invalid RPC URL format: {rpc_url}")

    web3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
    if check_connection and not web3.is_connected():
        raise NetworkError("Web3 not connected; bad RPC_URL?", endpoint=rpc_url)
    return web3


class RouterClient:
    """Quote client for one V2 router (one venue)."""

    def __init__(self, web3: Web3, router_addr: str, name: str = "router"):
        """
        Args:
            web3: Web3 instance connected to the chain
            router_addr: Checksummed router address
            name: Venue label used in logs and errors

        Raises:
            ValueError: If the router address is not checksummed
        """
        if not Web3.is_checksum_address(router_addr):
            raise ValueError(f"Invalid router address: {router_addr}")

        self.web3 = web3
        self.name = name
        self.router_addr = router_addr
        self.router = web3.eth.contract(address=router_addr, abi=UNISWAP_V2_ROUTER_ABI)

    def _amounts_out(self, amount_in: int, path: List[str]) -> List[int]:
        return self.router.functions.getAmountsOut(amount_in, path).call()

    def get_amount_out(
        self, amount_in: int, token_in: str, token_out: str, max_retries: int = 3
    ) -> int:
        """
        Quote ``amount_in`` of token_in -> token_out on this router.

        Args:
            amount_in: Input amount in token_in base units
            token_in: Checksummed input token address
            token_out: Checksummed output token address
            max_retries: Maximum number of attempts on rate-limit errors

        Returns:
            Output amount in token_out base units

        Raises:
            QuoteError: If the call fails, or the response is empty or malformed
        """
        path = [token_in, token_out]
        last_error = None

        for attempt in range(max_retries):
            try:
                amounts = self._amounts_out(amount_in, path)
                break
            except Exception as e:
                last_error = e
                if is_rate_limit_error(e) and attempt < max_retries - 1:
                    # Exponential backoff: 1s, 2s, 4s
                    wait_time = 2**attempt
                    logger.warning(
                        f"{self.name}: rate limited, retrying in {wait_time}s"
                    )
                    time.sleep(wait_time)
                    continue
                raise QuoteError(
                    f"{self.name}: getAmountsOut failed: {e}",
                    venue=self.name,
                    router=self.router_addr,
                ) from e
        else:
            raise QuoteError(
                f"{self.name}: getAmountsOut failed after {max_retries} retries: "
                f"{last_error}",
                venue=self.name,
                router=self.router_addr,
            ) from last_error

        if not amounts:
            raise QuoteError(
                f"{self.name}: router returned empty amounts",
                venue=self.name,
                router=self.router_addr,
            )

        amount_out = amounts[-1]
        if (
            isinstance(amount_out, bool)
            or not isinstance(amount_out, int)
            or amount_out < 0
        ):
            raise QuoteError(
                f"{self.name}: malformed amount out {amount_out!r}",
                venue=self.name,
                router=self.router_addr,
            )
        return amount_out

    async def get_amount_out_async(
        self, amount_in: int, token_in: str, token_out: str, max_retries: int = 3
    ) -> int:
        """
        Async version of get_amount_out.

        Runs the synchronous RPC call in a thread pool to avoid blocking the
        event loop.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.get_amount_out, amount_in, token_in, token_out, max_retries
        )
