"""Share ledger tests."""

import unittest

from fund_core import ledger
from fund_core.errors import AccountingInvariantViolation, InsufficientShares, InvalidAmount
from fund_core.models import FundState, Position


def _empty_state() -> FundState:
    return FundState(
        fund_id="fund-ledger",
        manager="manager",
        platform="platform",
        denomination_asset="USD",
        success_fee_rate=1000,
        platform_fee_rate=0,
    )


class ShareLedgerTests(unittest.TestCase):
    def test_mint_and_burn_track_totals(self) -> None:
        state = ledger.mint(_empty_state(), "alice", 70)
        state = ledger.mint(state, "bob", 30)
        state = ledger.burn(state, "alice", 20)

        self.assertEqual(state.total_shares, 80)
        self.assertEqual(state.position_of("alice").shares, 50)
        self.assertEqual(state.position_of("bob").shares, 30)
        ledger.check_share_invariant(state)

    def test_burn_beyond_balance_fails(self) -> None:
        state = ledger.mint(_empty_state(), "alice", 10)

        with self.assertRaises(InsufficientShares):
            ledger.burn(state, "alice", 11)
        with self.assertRaises(InsufficientShares):
            ledger.burn(state, "carol", 1)

    def test_non_positive_amounts_rejected(self) -> None:
        with self.assertRaises(InvalidAmount):
            ledger.mint(_empty_state(), "alice", 0)
        with self.assertRaises(InvalidAmount):
            ledger.burn(_empty_state(), "alice", -1)

    def test_net_deposit_independent_of_shares(self) -> None:
        state = ledger.mint(_empty_state(), "alice", 10)
        state = ledger.adjust_net_deposit(state, "alice", 500)
        state = ledger.adjust_net_deposit(state, "alice", -700)

        position = state.position_of("alice")
        self.assertEqual(position.shares, 10)
        self.assertEqual(position.net_deposit, -200)

    def test_redeemed_position_keeps_net_deposit(self) -> None:
        state = ledger.mint(_empty_state(), "alice", 10)
        state = ledger.adjust_net_deposit(state, "alice", -5)
        state = ledger.burn(state, "alice", 10)

        self.assertEqual(state.positions, (Position("alice", 0, -5),))

    def test_positions_sorted_by_participant(self) -> None:
        state = ledger.mint(_empty_state(), "zed", 1)
        state = ledger.mint(state, "amy", 1)

        self.assertEqual([p.participant for p in state.positions], ["amy", "zed"])

    def test_invariant_check_detects_mismatch(self) -> None:
        state = ledger.mint(_empty_state(), "alice", 10)
        broken = FundState(
            fund_id=state.fund_id,
            manager=state.manager,
            platform=state.platform,
            denomination_asset=state.denomination_asset,
            success_fee_rate=state.success_fee_rate,
            platform_fee_rate=state.platform_fee_rate,
            total_shares=11,
            positions=state.positions,
        )

        with self.assertRaises(AccountingInvariantViolation):
            ledger.check_share_invariant(broken)

    def test_negative_holding_is_an_accounting_error(self) -> None:
        state = _empty_state().with_holding("USD", 10)

        with self.assertRaises(AccountingInvariantViolation):
            state.with_holding("USD", -1)
        self.assertEqual(state.with_holding("USD", 0).holdings, ())


if __name__ == "__main__":
    unittest.main()
