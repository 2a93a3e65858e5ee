"""Share ledger operations over an immutable fund state."""

from dataclasses import replace
from typing import Tuple

from .errors import AccountingInvariantViolation, InsufficientShares, InvalidAmount
from .models import FundState, Position


def mint(state: FundState, participant: str, amount: int) -> FundState:
    if amount <= 0:
        raise InvalidAmount("Minted share amount must be positive.")
    position = state.position_of(participant)
    updated = replace(position, shares=position.shares + amount)
    return replace(
        state,
        total_shares=state.total_shares + amount,
        positions=_with_position(state.positions, updated),
    )


def burn(state: FundState, participant: str, amount: int) -> FundState:
    if amount <= 0:
        raise InvalidAmount("Burned share amount must be positive.")
    position = state.position_of(participant)
    if amount > position.shares:
        raise InsufficientShares(
            f"{participant} holds {position.shares} shares, cannot burn {amount}."
        )
    if amount > state.total_shares:
        raise AccountingInvariantViolation("Burn exceeds total shares outstanding.")
    updated = replace(position, shares=position.shares - amount)
    return replace(
        state,
        total_shares=state.total_shares - amount,
        positions=_with_position(state.positions, updated),
    )


def adjust_net_deposit(state: FundState, participant: str, delta: int) -> FundState:
    """Move a participant's signed capital-flow balance; share counts are untouched."""

    position = state.position_of(participant)
    updated = replace(position, net_deposit=position.net_deposit + delta)
    return replace(state, positions=_with_position(state.positions, updated))


def check_share_invariant(state: FundState) -> None:
    ledger_total = sum(position.shares for position in state.positions)
    if ledger_total != state.total_shares:
        raise AccountingInvariantViolation(
            f"total_shares {state.total_shares} != ledger sum {ledger_total}."
        )
    if any(position.shares < 0 for position in state.positions):
        raise AccountingInvariantViolation("Negative share balance in ledger.")


def _with_position(
    positions: Tuple[Position, ...], updated: Position
) -> Tuple[Position, ...]:
    # Sorted by participant; entries with no shares and no net deposit are dropped.
    remaining = [item for item in positions if item.participant != updated.participant]
    if updated.shares or updated.net_deposit:
        remaining.append(updated)
    return tuple(sorted(remaining, key=lambda item: item.participant))
