"""Serialized owner of a single fund's state."""

import logging
import threading
from typing import Callable, Optional, TypeVar

from fund_core import engine
from fund_core.errors import AccountingInvariantViolation, FundError, Unauthorized
from fund_core.models import (
    DepositEvent,
    FundState,
    ManagerCashOutEvent,
    ManagerCut,
    Transition,
    WithdrawEvent,
)
from settlement.book import Settlement
from settlement.executor import compensate, settle
from valuation.oracle import ValuationError, ValuationOracle

from .events import EventLog, EventSink
from .gate import AccessGate, OpenGate
from .settings import FundSettings, get_settings

logger = logging.getLogger(__name__)

CommitHook = Callable[[FundState], None]
T = TypeVar("T")


class FundService:
    """Runs fund operations one at a time against the current state.

    Each operation reads the state once, builds the transition, settles its
    transfers, hands the new state to the commit hook and only then makes it
    current. A failure at any step leaves the previous state in place and
    reverses whatever was already settled.
    """

    def __init__(
        self,
        state: FundState,
        oracle: ValuationOracle,
        settlement: Settlement,
        gate: Optional[AccessGate] = None,
        events: Optional[EventSink] = None,
        on_commit: Optional[CommitHook] = None,
        settings: Optional[FundSettings] = None,
    ) -> None:
        self._state = state
        self._oracle = oracle
        self._settlement = settlement
        self._gate = gate or OpenGate()
        self._events = events if events is not None else EventLog()
        self._on_commit = on_commit
        self._settings = settings or get_settings()
        self._lock = threading.RLock()

    @property
    def state(self) -> FundState:
        with self._lock:
            return self._state

    @property
    def gate(self) -> AccessGate:
        return self._gate

    @property
    def events(self) -> EventSink:
        return self._events

    def set_oracle(self, oracle: ValuationOracle) -> None:
        with self._lock:
            self._oracle = oracle

    def deposit(self, participant: str, amount: int) -> DepositEvent:
        def build(state: FundState) -> Transition:
            if not self._gate.is_authorized(participant):
                raise Unauthorized(f"{participant} is not whitelisted for deposits.")
            return engine.deposit(state, participant, amount, self._oracle)

        return self._execute("deposit", participant, build).events[0]

    def withdraw(self, participant: str, percentage: int = 0) -> WithdrawEvent:
        transition = self._execute(
            "withdraw",
            participant,
            lambda state: engine.withdraw(state, participant, percentage, self._oracle),
        )
        return transition.events[0]

    def manager_withdraw(self, caller: str) -> ManagerCashOutEvent:
        transition = self._execute(
            "manager_withdraw",
            caller,
            lambda state: engine.manager_withdraw(state, caller, self._oracle),
        )
        return transition.events[0]

    def adjust_success_fee(self, caller: str, new_rate: int) -> FundState:
        transition = self._execute(
            "adjust_success_fee",
            caller,
            lambda state: Transition(
                state=engine.adjust_success_fee(
                    state,
                    caller,
                    new_rate,
                    self._oracle,
                    max_rate=self._settings.max_success_fee,
                )
            ),
        )
        return transition.state

    def adjust_platform_fee(self, caller: str, new_rate: int) -> FundState:
        transition = self._execute(
            "adjust_platform_fee",
            caller,
            lambda state: Transition(
                state=engine.adjust_platform_fee(
                    state, caller, new_rate, max_rate=self._settings.max_platform_fee
                )
            ),
        )
        return transition.state

    def update_gate(self, caller: str, gate: AccessGate) -> None:
        with self._lock:
            if caller != self._state.manager:
                raise Unauthorized("Only the fund manager can change deposit access.")
            previous = self._gate
            self._gate = gate
            try:
                self._run_commit_hook(self._state)
            except Exception:
                self._gate = previous
                raise
            logger.info("[FUND] %s access gate updated by %s", self._state.fund_id, caller)

    def preview(self, operation: str, actor: str, amount: int = 0) -> Transition:
        """Build a transition without settling or committing it."""

        with self._lock:
            if operation == "deposit":
                if not self._gate.is_authorized(actor):
                    raise Unauthorized(f"{actor} is not whitelisted for deposits.")
                return engine.deposit(self._state, actor, amount, self._oracle)
            if operation == "withdraw":
                return engine.withdraw(self._state, actor, amount, self._oracle)
            if operation == "manager_withdraw":
                return engine.manager_withdraw(self._state, actor, self._oracle)
        raise ValueError(f"Unsupported operation: {operation}")

    def run_exclusive(self, action: Callable[[FundState], T]) -> T:
        """Run ``action`` against the current state with no operation in flight."""

        with self._lock:
            return action(self._state)

    def fund_value(self) -> int:
        with self._lock:
            return engine.fund_value(self._state, self._oracle)

    def manager_cut(self) -> ManagerCut:
        with self._lock:
            return engine.manager_cut(self._state, self._oracle)

    def quote_deposit(self, amount: int) -> int:
        with self._lock:
            return engine.quote_deposit(self._state, amount, self._oracle)

    def position_value(self, participant: str) -> int:
        with self._lock:
            return engine.position_value(self._state, participant, self._oracle)

    def position_profit(self, participant: str) -> int:
        with self._lock:
            return engine.position_profit(self._state, participant, self._oracle)

    def fund_profit(self) -> int:
        with self._lock:
            return engine.fund_profit(self._state, self._oracle)

    def _execute(
        self, operation: str, actor: str, build: Callable[[FundState], Transition]
    ) -> Transition:
        with self._lock:
            fund_id = self._state.fund_id
            extra = {"fund_id": fund_id, "participant": actor, "operation": operation}
            try:
                transition = build(self._state)
                self._commit(transition)
            except AccountingInvariantViolation:
                logger.error(
                    "[FUND] %s %s by %s hit an accounting invariant violation",
                    fund_id,
                    operation,
                    actor,
                    exc_info=True,
                    extra=extra,
                )
                raise
            except (FundError, ValuationError) as exc:
                logger.warning(
                    "[FUND] %s %s by %s rejected: %s",
                    fund_id,
                    operation,
                    actor,
                    exc,
                    extra=extra,
                )
                raise

            logger.info(
                "[FUND] %s %s by %s committed; total_shares=%s",
                fund_id,
                operation,
                actor,
                transition.state.total_shares,
                extra=extra,
            )
            return transition

    def _commit(self, transition: Transition) -> None:
        receipt = settle(self._settlement, transition.transfers)
        try:
            self._run_commit_hook(transition.state)
        except Exception:
            logger.exception("[FUND] Commit hook failed; reversing settlement")
            compensate(self._settlement, receipt.applied)
            raise

        self._state = transition.state
        for event in transition.events:
            self._events.publish(self._state.fund_id, event)

    def _run_commit_hook(self, state: FundState) -> None:
        if self._on_commit is not None:
            self._on_commit(state)
