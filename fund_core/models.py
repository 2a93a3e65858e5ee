"""Domain schemas for the fund share-accounting core."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, Tuple, Union

from valuation.models import Holding

from .errors import AccountingInvariantViolation

TOTAL_PERCENTAGE = 10_000
INITIAL_SHARES = 10**18
MAX_SUCCESS_FEE_RATE = 3_000
MAX_PLATFORM_FEE_RATE = 5_000


@dataclass(frozen=True)
class Position:
    """One participant's claim on the fund."""

    participant: str
    shares: int = 0
    net_deposit: int = 0


@dataclass(frozen=True)
class FundState:
    """Complete, immutable accounting state of a single fund."""

    fund_id: str
    manager: str
    platform: str
    denomination_asset: str
    success_fee_rate: int
    platform_fee_rate: int
    total_shares: int = 0
    total_deposited: int = 0
    total_withdrawn: int = 0
    manager_cashed_out: int = 0
    positions: Tuple[Position, ...] = ()
    holdings: Tuple[Holding, ...] = ()

    def position_of(self, participant: str) -> Position:
        for position in self.positions:
            if position.participant == participant:
                return position
        return Position(participant=participant)

    def holding_of(self, asset_code: str) -> int:
        for holding in self.holdings:
            if holding.asset_code == asset_code:
                return holding.amount
        return 0

    def with_holding(self, asset_code: str, amount: int) -> "FundState":
        if amount < 0:
            raise AccountingInvariantViolation(
                f"Holding of {asset_code} cannot go negative."
            )
        remaining = [item for item in self.holdings if item.asset_code != asset_code]
        if amount > 0:
            remaining.append(Holding(asset_code=asset_code, amount=amount))
        return replace(
            self, holdings=tuple(sorted(remaining, key=lambda item: item.asset_code))
        )


class TransferDirection(Enum):
    PULL = "PULL"
    PUSH = "PUSH"


@dataclass(frozen=True)
class Transfer:
    """An asset movement the caller must settle for a transition to hold."""

    direction: TransferDirection
    counterparty: str
    asset_code: str
    amount: int


@dataclass(frozen=True)
class DepositEvent:
    participant: str
    amount: int
    shares_minted: int
    total_shares: int
    kind: str = field(default="Deposit", init=False)


@dataclass(frozen=True)
class WithdrawEvent:
    participant: str
    shares_burned: int
    total_shares: int
    value_withdrawn: int
    kind: str = field(default="Withdraw", init=False)


@dataclass(frozen=True)
class ManagerCashOutEvent:
    amount: int
    platform_cut: int
    manager_net: int
    kind: str = field(default="ManagerCashOut", init=False)


FundEvent = Union[DepositEvent, WithdrawEvent, ManagerCashOutEvent]


@dataclass(frozen=True)
class ManagerCut:
    """Fee engine output for one valuation."""

    remaining_cut: int
    total_cut: int
    fund_value: int


@dataclass(frozen=True)
class Transition:
    """New state plus the transfers and events produced by one operation."""

    state: FundState
    transfers: Tuple[Transfer, ...] = ()
    events: Tuple[FundEvent, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "transfers": [
                {
                    "direction": transfer.direction.value,
                    "counterparty": transfer.counterparty,
                    "asset_code": transfer.asset_code,
                    "amount": transfer.amount,
                }
                for transfer in self.transfers
            ],
            "events": [event_to_dict(event) for event in self.events],
            "total_shares": self.state.total_shares,
        }


def event_to_dict(event: FundEvent) -> Dict[str, object]:
    if isinstance(event, DepositEvent):
        return {
            "kind": event.kind,
            "participant": event.participant,
            "amount": event.amount,
            "shares_minted": event.shares_minted,
            "total_shares": event.total_shares,
        }
    if isinstance(event, WithdrawEvent):
        return {
            "kind": event.kind,
            "participant": event.participant,
            "shares_burned": event.shares_burned,
            "total_shares": event.total_shares,
            "value_withdrawn": event.value_withdrawn,
        }
    return {
        "kind": event.kind,
        "amount": event.amount,
        "platform_cut": event.platform_cut,
        "manager_net": event.manager_net,
    }
