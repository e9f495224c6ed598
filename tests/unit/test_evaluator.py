"""
Unit tests for dex/evaluator.py

Covers venue selection, the inclusive profit threshold and the worked
USDC examples (6 decimals, $2 gas, $5 minimum).
"""

import unittest
from decimal import Decimal
from unittest.mock import patch

from dex.evaluator import ArbEngine, evaluate, select_venues
from dex.types import EvaluationParameters, QuotePair
from dex.units import Conversion


def make_params(**overrides) -> EvaluationParameters:
    fields = dict(
        trade_size=Decimal("1.0"),
        token_in_decimals=18,
        token_out_decimals=6,
        fixed_cost=Decimal("2.0"),
        min_profit=Decimal("5.0"),
        source_a_name="UniswapV2",
        source_b_name="SushiV2",
    )
    fields.update(overrides)
    return EvaluationParameters(**fields)


class TestSelectVenues(unittest.TestCase):
    """Smaller output is the buy side, larger output is the sell side."""

    def setUp(self):
        self.params = make_params()

    def test_a_larger_buys_on_b(self):
        sel = select_venues(QuotePair(1_010_000_000, 1_000_000_000), self.params)
        self.assertEqual(sel.buy_on, "SushiV2")
        self.assertEqual(sel.sell_on, "UniswapV2")
        self.assertEqual(sel.amount_out_buy, 1_000_000_000)
        self.assertEqual(sel.amount_out_sell, 1_010_000_000)
        self.assertEqual(sel.spread, 10_000_000)

    def test_b_larger_buys_on_a(self):
        sel = select_venues(QuotePair(1_000_000_000, 1_010_000_000), self.params)
        self.assertEqual(sel.buy_on, "UniswapV2")
        self.assertEqual(sel.sell_on, "SushiV2")
        self.assertEqual(sel.amount_out_buy, 1_000_000_000)
        self.assertEqual(sel.amount_out_sell, 1_010_000_000)

    def test_equal_quotes(self):
        self.assertIsNone(select_venues(QuotePair(5, 5), self.params))


class TestEvaluate(unittest.TestCase):
    """Test evaluate() decisions."""

    def setUp(self):
        self.params = make_params()

    def test_small_spread_below_threshold(self):
        # 0.5 USDC gross - 2.0 gas = -1.5 net
        quotes = QuotePair(from_source_a=1_000_500_000, from_source_b=1_000_000_000)
        self.assertIsNone(evaluate(quotes, self.params))

    def test_profitable_spread(self):
        # 10 USDC gross - 2.0 gas = 8.0 net
        quotes = QuotePair(from_source_a=1_010_000_000, from_source_b=1_000_000_000)
        decision = evaluate(quotes, self.params)

        self.assertIsNotNone(decision)
        self.assertEqual(decision.buy_on, "SushiV2")
        self.assertEqual(decision.sell_on, "UniswapV2")
        self.assertEqual(decision.gross_profit, Decimal("10.0"))
        self.assertEqual(decision.net_profit, Decimal("8.0"))
        self.assertEqual(decision.spread_base_units, 10_000_000)
        self.assertFalse(decision.conversion_fallback)

    def test_equal_quotes_never_reported(self):
        # Even with zero cost and a zero threshold
        params = make_params(fixed_cost=Decimal(0), min_profit=Decimal(0))
        for q in (0, 1, 10**30):
            self.assertIsNone(evaluate(QuotePair(q, q), params))

    def test_threshold_is_inclusive(self):
        # gross 7.000000 - 2.0 = 5.0 == min_profit
        quotes = QuotePair(1_007_000_000, 1_000_000_000)
        decision = evaluate(quotes, self.params)
        self.assertIsNotNone(decision)
        self.assertEqual(decision.net_profit, Decimal("5"))

    def test_one_unit_below_threshold(self):
        # gross 6.999999 - 2.0 = 4.999999 < 5.0
        quotes = QuotePair(1_006_999_999, 1_000_000_000)
        self.assertIsNone(evaluate(quotes, self.params))

    def test_decision_invariants(self):
        params = make_params(fixed_cost=Decimal(0), min_profit=Decimal(0))
        pairs = [(2, 1), (1, 2), (10**40, 10**40 - 1), (3, 10**25)]
        for a, b in pairs:
            with self.subTest(a=a, b=b):
                decision = evaluate(QuotePair(a, b), params)
                self.assertIsNotNone(decision)
                self.assertGreater(decision.amount_out_sell, decision.amount_out_buy)
                self.assertNotEqual(decision.buy_on, decision.sell_on)

    def test_monotonic_in_sell_amount(self):
        params = make_params(fixed_cost=Decimal("0"), min_profit=Decimal("0"))
        buy = 1_000_000_000
        previous = None
        for sell in range(buy + 1, buy + 5_000_001, 1_000_000):
            net = evaluate(QuotePair(sell, buy), params).net_profit
            if previous is not None:
                self.assertGreaterEqual(net, previous)
            previous = net

    def test_large_amounts_stay_exact(self):
        # 18-decimal output, spread of 1 wei on top of ~1e59 wei quotes
        params = make_params(
            token_out_decimals=18, fixed_cost=Decimal(0), min_profit=Decimal(0)
        )
        big = 10**59
        decision = evaluate(QuotePair(big + 1, big), params)
        self.assertEqual(decision.gross_profit, Decimal("0.000000000000000001"))

    def test_float_parameters_accepted(self):
        params = make_params(fixed_cost=2.0, min_profit=5.0)
        decision = evaluate(QuotePair(1_010_000_000, 1_000_000_000), params)
        self.assertEqual(decision.net_profit, Decimal("8.0"))

    def test_conversion_fallback_flagged(self):
        params = make_params(fixed_cost=Decimal(0), min_profit=Decimal(0))
        with patch(
            "dex.evaluator.convert_to_human",
            return_value=Conversion(Decimal(0), True),
        ):
            with self.assertLogs("dex.evaluator", level="WARNING"):
                decision = evaluate(QuotePair(2_000_000, 1_000_000), params)

        self.assertIsNotNone(decision)
        self.assertTrue(decision.conversion_fallback)
        self.assertEqual(decision.gross_profit, Decimal(0))


class TestArbEngine(unittest.TestCase):
    """Test the engine wrapper used by the runner."""

    def test_amount_in_base_units(self):
        engine = ArbEngine(make_params(trade_size=Decimal("1.5")))
        self.assertEqual(engine.amount_in_base_units(), 1_500_000_000_000_000_000)

    def test_evaluate_delegates(self):
        engine = ArbEngine(make_params())
        decision = engine.evaluate(QuotePair(1_000_000_000, 1_010_000_000))
        self.assertEqual(decision.buy_on, "UniswapV2")
        self.assertEqual(decision.net_profit, Decimal("8"))


if __name__ == "__main__":
    unittest.main()
