"""Wire a stored fund record to a live service."""

import logging
from decimal import Decimal
from typing import Dict, Iterable, Optional

from fund_core import engine
from fund_core.errors import InvalidAmount
from fund_core.models import FundState
from fund_service.events import EventSink
from fund_service.gate import WhitelistGate
from fund_service.service import FundService
from fund_service.settings import FundSettings, get_settings
from settlement.book import BalanceBook
from valuation.oracle import PriceTableOracle

from .models import FundRecord
from .store import FileFundStore

logger = logging.getLogger(__name__)


class FundSession:
    """A ``FundService`` whose every commit is written back to its store.

    The record keeps the simulated external balances next to the fund, so a
    deposit pulled from an account and the minted shares land in one write.
    Everything that reads or writes the record runs under the service lock.
    """

    def __init__(
        self,
        store: FileFundStore,
        prices: Optional[Dict[str, Decimal]] = None,
        settings: Optional[FundSettings] = None,
        events: Optional[EventSink] = None,
    ) -> None:
        self.store = store
        self.prices = dict(prices or {})
        self._synced_ns = store.modified_ns()
        record = store.load()
        self.book = BalanceBook(balances=record.balances)
        self.service = FundService(
            state=record.state,
            oracle=PriceTableOracle(
                denomination=record.state.denomination_asset, prices=prices
            ),
            settlement=self.book,
            gate=record.gate,
            events=events,
            on_commit=self.persist,
            settings=settings,
        )

    @property
    def record(self) -> FundRecord:
        return self.service.run_exclusive(
            lambda state: FundRecord(
                state=state, gate=self._whitelist(), balances=self.book.to_balances()
            )
        )

    def is_stale(self) -> bool:
        """True when the store was written by someone other than this session."""

        return self.store.modified_ns() != self._synced_ns

    def persist(self, state: FundState) -> None:
        self._save(
            FundRecord(state=state, gate=self._whitelist(), balances=self.book.to_balances())
        )

    def set_prices(self, prices: Dict[str, Decimal]) -> None:
        self.prices = dict(prices)
        self.service.set_oracle(
            PriceTableOracle(
                denomination=self.service.state.denomination_asset, prices=prices
            )
        )

    def fund_account(self, account: str, asset_code: str, amount: int) -> int:
        """Credit an external account; returns its new balance."""

        if amount <= 0:
            raise InvalidAmount("Funding amount must be positive.")
        if not account or not asset_code:
            raise ValueError("Account and asset code are required.")

        def credit(state: FundState) -> int:
            staged = BalanceBook(balances=self.book.to_balances())
            staged.credit(account, asset_code, amount)
            self._save(
                FundRecord(
                    state=state, gate=self._whitelist(), balances=staged.to_balances()
                )
            )
            self.book.credit(account, asset_code, amount)
            return self.book.balance_of(account, asset_code)

        balance = self.service.run_exclusive(credit)
        logger.info("Credited %s %s to %s", amount, asset_code, account)
        return balance

    def update_whitelist(
        self,
        caller: str,
        whitelist_only: Optional[bool] = None,
        add: Iterable[str] = (),
        remove: Iterable[str] = (),
    ) -> WhitelistGate:
        def update(state: FundState) -> WhitelistGate:
            gate = self._whitelist()
            if whitelist_only is not None:
                gate = gate.with_whitelist_only(whitelist_only)
            for participant in add:
                gate = gate.with_participant(participant)
            for participant in remove:
                gate = gate.without_participant(participant)
            self.service.update_gate(caller, gate)
            return gate

        return self.service.run_exclusive(update)

    def _save(self, record: FundRecord) -> None:
        self.store.save(record)
        self._synced_ns = self.store.modified_ns()

    def _whitelist(self) -> WhitelistGate:
        gate = self.service.gate
        if not isinstance(gate, WhitelistGate):
            raise TypeError("Stored funds require a WhitelistGate.")
        return gate


def create_fund(
    store: FileFundStore,
    fund_id: str,
    manager: str,
    platform: str,
    denomination_asset: str,
    success_fee_rate: Optional[int] = None,
    platform_fee_rate: Optional[int] = None,
    whitelist_only: bool = False,
    settings: Optional[FundSettings] = None,
) -> FundRecord:
    settings = settings or get_settings()
    if store.exists():
        raise ValueError(f"A fund record already exists at {store.path}.")
    state = engine.open_fund(
        fund_id=fund_id,
        manager=manager,
        platform=platform,
        denomination_asset=denomination_asset,
        success_fee_rate=(
            settings.default_success_fee if success_fee_rate is None else success_fee_rate
        ),
        platform_fee_rate=(
            settings.default_platform_fee if platform_fee_rate is None else platform_fee_rate
        ),
        max_success_fee_rate=settings.max_success_fee,
        max_platform_fee_rate=settings.max_platform_fee,
    )
    record = FundRecord(state=state, gate=WhitelistGate(whitelist_only=whitelist_only))
    store.save(record)
    logger.info("[FUND] %s created at %s", fund_id, store.path, extra={"fund_id": fund_id})
    return record
