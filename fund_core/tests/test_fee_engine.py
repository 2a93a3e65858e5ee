"""Fee engine tests: profit-only cuts and the platform split."""

import unittest

from fund_core.errors import AccountingInvariantViolation, InvalidAmount
from fund_core.fees import compute_manager_cut, manager_cut_for, split_platform_cut
from fund_core.models import FundState


class ComputeManagerCutTests(unittest.TestCase):
    def test_ten_percent_of_profit(self) -> None:
        remaining, total = compute_manager_cut(3000, 2000, 0, 0, 1000)

        self.assertEqual(total, 100)
        self.assertEqual(remaining, 100)

    def test_no_fee_without_profit(self) -> None:
        cases = [
            (2000, 2000, 0, 0),
            (1500, 2000, 0, 0),
            (0, 0, 0, 0),
            (900, 2000, 1000, 100),
        ]
        for fund_value, deposited, withdrawn, cashed_out in cases:
            with self.subTest(fund_value=fund_value):
                self.assertEqual(
                    compute_manager_cut(fund_value, deposited, withdrawn, cashed_out, 2000),
                    (0, 0),
                )

    def test_positive_profit_positive_cut(self) -> None:
        remaining, total = compute_manager_cut(20_001, 10_000, 0, 0, 1)

        self.assertGreater(remaining, 0)
        self.assertEqual(remaining, total)

    def test_zero_rate_never_charges(self) -> None:
        self.assertEqual(compute_manager_cut(10_000, 1000, 0, 0, 0), (0, 0))

    def test_withdrawals_can_push_baseline_negative(self) -> None:
        remaining, total = compute_manager_cut(500, 1000, 1200, 0, 1000)

        # net contributed is -200, so profit is 700
        self.assertEqual(total, 70)
        self.assertEqual(remaining, 70)

    def test_cash_out_is_not_charged_twice(self) -> None:
        remaining, total = compute_manager_cut(3000, 2000, 0, 0, 1000)
        after_value = 3000 - remaining

        second_remaining, second_total = compute_manager_cut(
            after_value, 2000, 0, remaining, 1000
        )

        self.assertEqual(second_total, total)
        self.assertEqual(second_remaining, 0)

    def test_negative_remaining_cut_fails_loudly(self) -> None:
        with self.assertRaises(AccountingInvariantViolation):
            compute_manager_cut(2000, 2000, 0, 100, 1000)

    def test_invalid_inputs_rejected(self) -> None:
        with self.assertRaises(InvalidAmount):
            compute_manager_cut(-1, 0, 0, 0, 1000)
        with self.assertRaises(InvalidAmount):
            compute_manager_cut(100, 0, 0, 0, 10_001)
        with self.assertRaises(InvalidAmount):
            compute_manager_cut(100, 0, 0, 0, -1)


class ManagerCutForStateTests(unittest.TestCase):
    def test_reads_cumulative_flows_from_state(self) -> None:
        state = FundState(
            fund_id="fund-1",
            manager="manager",
            platform="platform",
            denomination_asset="USD",
            success_fee_rate=2000,
            platform_fee_rate=1000,
            total_deposited=1000,
        )

        cut = manager_cut_for(state, 1500)

        self.assertEqual(cut.total_cut, 100)
        self.assertEqual(cut.remaining_cut, 100)
        self.assertEqual(cut.fund_value, 1500)


class PlatformSplitTests(unittest.TestCase):
    def test_split_adds_back_to_cut(self) -> None:
        platform_cut, manager_net = split_platform_cut(105, 1000)

        self.assertEqual(platform_cut, 10)
        self.assertEqual(manager_net, 95)
        self.assertEqual(platform_cut + manager_net, 105)

    def test_zero_platform_fee(self) -> None:
        self.assertEqual(split_platform_cut(100, 0), (0, 100))


if __name__ == "__main__":
    unittest.main()
