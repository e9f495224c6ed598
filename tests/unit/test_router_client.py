"""
Unit tests for dex/adapters/v2.py

The router contract is mocked; no RPC traffic.
"""

import asyncio
import unittest
from unittest.mock import Mock, patch

from arb_monitor.exceptions import NetworkError, QuoteError
from dex.adapters.v2 import RouterClient, is_rate_limit_error, make_web3

ROUTER = "0x7a250d5630B4cF539739dF2C5dAcb4c659F2488D"
WETH = "0xC02aaA39b223FE8D0A0e5C4F27eAD9083C756Cc2"
USDC = "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48"


def make_client(call_result=None, call_side_effect=None):
    web3 = Mock()
    contract = Mock()
    call = contract.functions.getAmountsOut.return_value.call
    if call_side_effect is not None:
        call.side_effect = call_side_effect
    else:
        call.return_value = call_result
    web3.eth.contract.return_value = contract
    return RouterClient(web3, ROUTER, name="UniswapV2"), contract


class TestRouterClient(unittest.TestCase):
    """Test quote retrieval and error mapping."""

    def test_returns_last_amount(self):
        client, contract = make_client([10**18, 3_012_345_678])
        amount_out = client.get_amount_out(10**18, WETH, USDC)

        self.assertEqual(amount_out, 3_012_345_678)
        contract.functions.getAmountsOut.assert_called_once_with(10**18, [WETH, USDC])

    def test_rejects_unchecksummed_router(self):
        with self.assertRaises(ValueError):
            RouterClient(Mock(), ROUTER.lower())

    def test_empty_response(self):
        client, _ = make_client([])
        with self.assertRaises(QuoteError) as ctx:
            client.get_amount_out(10**18, WETH, USDC)
        self.assertEqual(ctx.exception.venue, "UniswapV2")
        self.assertIn("empty", str(ctx.exception))

    def test_malformed_response(self):
        client, _ = make_client([10**18, "not-a-number"])
        with self.assertRaises(QuoteError):
            client.get_amount_out(10**18, WETH, USDC)

    def test_call_failure_wrapped(self):
        client, _ = make_client(call_side_effect=ValueError("execution reverted"))
        with self.assertRaises(QuoteError) as ctx:
            client.get_amount_out(10**18, WETH, USDC)
        self.assertEqual(ctx.exception.router, ROUTER)
        self.assertIsInstance(ctx.exception, NetworkError)
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    @patch("dex.adapters.v2.time.sleep")
    def test_rate_limit_retried(self, mock_sleep):
        client, _ = make_client(
            call_side_effect=[Exception("429 Too Many Requests"), [1, 42]]
        )
        self.assertEqual(client.get_amount_out(1, WETH, USDC), 42)
        mock_sleep.assert_called_once_with(1)

    @patch("dex.adapters.v2.time.sleep")
    def test_rate_limit_exhausted(self, mock_sleep):
        client, _ = make_client(call_side_effect=Exception("429 Too Many Requests"))
        with self.assertRaises(QuoteError):
            client.get_amount_out(1, WETH, USDC, max_retries=3)
        self.assertEqual(mock_sleep.call_count, 2)

    def test_async_quote(self):
        client, _ = make_client([1, 99])
        amount_out = asyncio.run(client.get_amount_out_async(1, WETH, USDC))
        self.assertEqual(amount_out, 99)


class TestHelpers(unittest.TestCase):
    """Test module helpers."""

    def test_is_rate_limit_error(self):
        self.assertTrue(is_rate_limit_error(Exception("HTTP 429")))
        self.assertTrue(is_rate_limit_error(Exception("code -32005")))
        self.assertTrue(is_rate_limit_error(Exception("Daily Limit Exceeded")))
        self.assertFalse(is_rate_limit_error(Exception("execution reverted")))

    def test_make_web3_rejects_bad_url(self):
        with self.assertRaises(ValueError):
            make_web3("ftp://example.org")

    @patch("dex.adapters.v2.Web3")
    def test_make_web3_not_connected(self, mock_web3_cls):
        mock_web3_cls.return_value.is_connected.return_value = False
        with self.assertRaises(NetworkError):
            make_web3("https://eth.example.org")

    @patch("dex.adapters.v2.Web3")
    def test_make_web3_skip_check(self, mock_web3_cls):
        web3 = make_web3("https://eth.example.org", check_connection=False)
        self.assertIs(web3, mock_web3_cls.return_value)
        mock_web3_cls.return_value.is_connected.assert_not_called()


if __name__ == "__main__":
    unittest.main()
