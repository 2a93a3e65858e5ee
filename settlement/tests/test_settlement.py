"""All-or-nothing settlement tests."""

import unittest

from fund_core.errors import SettlementFailure
from fund_core.models import Transfer, TransferDirection
from settlement.book import BalanceBook
from settlement.executor import compensate, settle
from settlement.models import Balance


def _pull(account: str, asset: str, amount: int) -> Transfer:
    return Transfer(TransferDirection.PULL, account, asset, amount)


def _push(account: str, asset: str, amount: int) -> Transfer:
    return Transfer(TransferDirection.PUSH, account, asset, amount)


class BalanceBookTests(unittest.TestCase):
    def test_pull_requires_balance(self) -> None:
        book = BalanceBook(balances=(Balance("alice", "USD", 100),))

        self.assertFalse(book.pull("alice", "USD", 101))
        self.assertTrue(book.pull("alice", "USD", 100))
        self.assertEqual(book.balance_of("alice", "USD"), 0)

    def test_push_credits_account(self) -> None:
        book = BalanceBook()

        self.assertTrue(book.push("bob", "ETH", 3))
        self.assertEqual(book.balance_of("bob", "ETH"), 3)

    def test_frozen_account_rejects_both_directions(self) -> None:
        book = BalanceBook(balances=(Balance("alice", "USD", 100),), frozen=("alice",))

        self.assertFalse(book.pull("alice", "USD", 1))
        self.assertFalse(book.push("alice", "USD", 1))
        book.unfreeze("alice")
        self.assertTrue(book.push("alice", "USD", 1))

    def test_to_balances_sorted_and_non_zero(self) -> None:
        book = BalanceBook(
            balances=(
                Balance("zed", "USD", 5),
                Balance("amy", "USD", 0),
                Balance("amy", "ETH", 1),
            )
        )

        self.assertEqual(
            book.to_balances(),
            (Balance("amy", "ETH", 1), Balance("zed", "USD", 5)),
        )


class SettleTests(unittest.TestCase):
    def test_applies_in_order(self) -> None:
        book = BalanceBook(balances=(Balance("alice", "USD", 500),))

        receipt = settle(book, (_pull("alice", "USD", 200), _push("bob", "USD", 50)))

        self.assertEqual(len(receipt.applied), 2)
        self.assertEqual(book.balance_of("alice", "USD"), 300)
        self.assertEqual(book.balance_of("bob", "USD"), 50)

    def test_failure_compensates_applied_transfers(self) -> None:
        book = BalanceBook(frozen=("manager",))

        with self.assertRaises(SettlementFailure):
            settle(
                book,
                (_push("platform", "USD", 10), _push("manager", "USD", 90)),
            )

        self.assertEqual(book.balance_of("platform", "USD"), 0)
        self.assertEqual(book.balance_of("manager", "USD"), 0)

    def test_short_pull_fails_without_side_effects(self) -> None:
        book = BalanceBook(balances=(Balance("alice", "USD", 10),))

        with self.assertRaises(SettlementFailure):
            settle(book, (_pull("alice", "USD", 11),))

        self.assertEqual(book.balance_of("alice", "USD"), 10)

    def test_invalid_transfers_rejected(self) -> None:
        book = BalanceBook()
        for transfer in (_push("", "USD", 1), _push("bob", "USD", 0)):
            with self.subTest(transfer=transfer):
                with self.assertRaises(SettlementFailure):
                    settle(book, (transfer,))

    def test_compensate_reverses_most_recent_first(self) -> None:
        book = BalanceBook(balances=(Balance("alice", "USD", 100),))
        applied = (_pull("alice", "USD", 100), _push("bob", "USD", 100))
        settle(book, applied)

        compensate(book, applied)

        self.assertEqual(book.balance_of("alice", "USD"), 100)
        self.assertEqual(book.balance_of("bob", "USD"), 0)


if __name__ == "__main__":
    unittest.main()
