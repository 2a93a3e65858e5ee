"""Determinism tests for the fund state transitions."""

import os
import unittest
from dataclasses import replace

from fund_core import engine
from valuation.oracle import PriceTableOracle


class FundEngineDeterminismTests(unittest.TestCase):
    def setUp(self) -> None:
        self.oracle = PriceTableOracle(denomination="USD")
        self.state = engine.open_fund(
            fund_id="fund-det",
            manager="manager",
            platform="platform",
            denomination_asset="USD",
            success_fee_rate=1500,
            platform_fee_rate=1000,
        )

    def test_same_input_same_transition(self) -> None:
        first = engine.deposit(self.state, "alice", 1234, self.oracle)
        second = engine.deposit(self.state, "alice", 1234, self.oracle)

        self.assertEqual(first, second)
        self.assertEqual(first.to_dict(), second.to_dict())

    def test_input_state_is_never_mutated(self) -> None:
        funded = engine.deposit(self.state, "alice", 1000, self.oracle).state
        snapshot = replace(funded)

        engine.withdraw(funded, "alice", 2500, self.oracle)
        engine.manager_withdraw(funded, "manager", self.oracle)

        self.assertEqual(funded, snapshot)

    def test_keyword_order_does_not_change_output(self) -> None:
        state_a = engine.open_fund(
            fund_id="fund-det",
            manager="manager",
            platform="platform",
            denomination_asset="USD",
            success_fee_rate=1500,
            platform_fee_rate=1000,
        )
        state_b = engine.open_fund(
            platform_fee_rate=1000,
            success_fee_rate=1500,
            denomination_asset="USD",
            platform="platform",
            manager="manager",
            fund_id="fund-det",
        )

        self.assertEqual(
            engine.deposit(state_a, "bob", 10, self.oracle),
            engine.deposit(state_b, "bob", 10, self.oracle),
        )

    def test_environment_changes_do_not_affect_output(self) -> None:
        baseline = engine.deposit(self.state, "carol", 99, self.oracle).to_dict()
        os.environ["FUND_TEST_ENV"] = "changed"
        self.addCleanup(os.environ.pop, "FUND_TEST_ENV", None)

        after = engine.deposit(self.state, "carol", 99, self.oracle).to_dict()

        self.assertEqual(baseline, after)


if __name__ == "__main__":
    unittest.main()
