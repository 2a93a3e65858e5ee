"""Tests for the JSON fund store."""

import json
import tempfile
import unittest
from dataclasses import replace
from pathlib import Path

from fund_core import engine
from fund_core.errors import AccountingInvariantViolation
from fund_core.models import INITIAL_SHARES
from fund_service.gate import WhitelistGate
from fund_store import FileFundStore, FundNotFoundError, FundRecord
from settlement.models import Balance
from valuation.oracle import PriceTableOracle


class FileFundStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "fund.json"
        self.store = FileFundStore(self.path)
        oracle = PriceTableOracle(denomination="DAI")
        state = engine.open_fund("fund-1", "manager", "platform", "DAI", 1000, 1000)
        self.state = engine.deposit(state, "alice", 1000, oracle).state

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_missing_record_raises(self) -> None:
        self.assertFalse(self.store.exists())
        with self.assertRaises(FundNotFoundError):
            self.store.load()

    def test_save_and_load_preserves_record(self) -> None:
        record = FundRecord(
            state=self.state,
            gate=WhitelistGate(whitelist_only=True, allowed=("alice",)),
            balances=(Balance(account="bob", asset_code="DAI", amount=500),),
        )
        self.store.save(record)

        loaded = self.store.load()
        self.assertEqual(loaded, record)
        self.assertEqual(loaded.state.total_shares, INITIAL_SHARES)
        self.assertTrue(loaded.gate.whitelist_only)

    def test_saved_layout_is_plain_json(self) -> None:
        self.store.save(FundRecord(state=self.state))
        data = json.loads(self.path.read_text())

        self.assertEqual(data["version"], 1)
        self.assertEqual(data["fund"]["total_shares"], INITIAL_SHARES)
        self.assertEqual(data["fund"]["positions"][0]["participant"], "alice")
        self.assertEqual(data["fund"]["holdings"], [{"asset_code": "DAI", "amount": 1000}])

    def test_save_replaces_without_leftover_temp_files(self) -> None:
        self.store.save(FundRecord(state=self.state))
        self.store.save(FundRecord(state=replace(self.state, success_fee_rate=500)))

        self.assertEqual(self.store.load().state.success_fee_rate, 500)
        self.assertEqual([p.name for p in Path(self._tmp.name).iterdir()], ["fund.json"])

    def test_refuses_to_save_broken_share_accounting(self) -> None:
        broken = replace(self.state, total_shares=self.state.total_shares + 1)
        with self.assertRaises(AccountingInvariantViolation):
            self.store.save(FundRecord(state=broken))
        self.assertFalse(self.store.exists())

    def test_rejects_unknown_version(self) -> None:
        self.store.save(FundRecord(state=self.state))
        data = json.loads(self.path.read_text())
        data["version"] = 99
        self.path.write_text(json.dumps(data))
        with self.assertRaises(ValueError):
            self.store.load()


if __name__ == "__main__":
    unittest.main()
