"""Tests for the price-table valuation oracle."""

import unittest
from decimal import Decimal

from valuation.models import Holding
from valuation.oracle import PriceTableOracle, ValuationError, parse_prices


class PriceTableOracleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.oracle = PriceTableOracle(
            denomination="USDC",
            prices={"ETH": Decimal("2500"), "DAI": Decimal("0.999")},
        )

    def test_denomination_priced_at_par(self) -> None:
        self.assertEqual(self.oracle.value((Holding("USDC", 1000),)), 1000)

    def test_mixed_holdings_sum(self) -> None:
        holdings = (
            Holding("DAI", 1000),
            Holding("ETH", 2),
            Holding("USDC", 10),
        )

        self.assertEqual(self.oracle.value(holdings), 999 + 5000 + 10)

    def test_fractional_values_truncate(self) -> None:
        self.assertEqual(self.oracle.value((Holding("DAI", 1),)), 0)

    def test_batch_pricing_matches_value(self) -> None:
        total = self.oracle.total_value(["ETH", "USDC"], [3, 7], "USDC")

        self.assertEqual(total, self.oracle.value((Holding("ETH", 3), Holding("USDC", 7))))

    def test_unpriced_asset_aborts(self) -> None:
        with self.assertRaises(ValuationError):
            self.oracle.value((Holding("WBTC", 1),))

    def test_wrong_denomination_aborts(self) -> None:
        with self.assertRaises(ValuationError):
            self.oracle.total_value(["ETH"], [1], "EUR")

    def test_mismatched_lengths_abort(self) -> None:
        with self.assertRaises(ValuationError):
            self.oracle.total_value(["ETH", "DAI"], [1], "USDC")

    def test_with_price_returns_new_oracle(self) -> None:
        updated = self.oracle.with_price("WBTC", "60000")

        self.assertEqual(updated.value((Holding("WBTC", 1),)), 60000)
        with self.assertRaises(ValuationError):
            self.oracle.value((Holding("WBTC", 1),))

    def test_native_asset_fund(self) -> None:
        oracle = PriceTableOracle(denomination="ETH", prices={"USDC": Decimal("0.0004")})

        self.assertEqual(oracle.value((Holding("ETH", 10), Holding("USDC", 5000))), 12)


class ParsePricesTests(unittest.TestCase):
    def test_parses_pairs(self) -> None:
        self.assertEqual(
            parse_prices(["ETH=2500", "DAI=0.99"]),
            {"ETH": Decimal("2500"), "DAI": Decimal("0.99")},
        )

    def test_rejects_malformed(self) -> None:
        for raw in ("ETH", "=5", "ETH=abc"):
            with self.subTest(raw=raw):
                with self.assertRaises(ValueError):
                    parse_prices([raw])


if __name__ == "__main__":
    unittest.main()
