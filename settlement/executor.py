"""Apply transition transfers all-or-nothing against a settlement backend."""

import logging
from typing import Iterable, List

from fund_core.errors import SettlementFailure
from fund_core.models import Transfer, TransferDirection

from .book import Settlement
from .models import SettlementReceipt

logger = logging.getLogger(__name__)


def settle(settlement: Settlement, transfers: Iterable[Transfer]) -> SettlementReceipt:
    """Apply transfers in order, undoing the applied ones if any fails."""

    applied: List[Transfer] = []
    for transfer in transfers:
        _validate_transfer(transfer)
        if not _apply(settlement, transfer):
            logger.warning(
                "%s of %s %s with %s failed; compensating %d applied transfer(s)",
                transfer.direction.value,
                transfer.amount,
                transfer.asset_code,
                transfer.counterparty,
                len(applied),
            )
            compensate(settlement, applied)
            raise SettlementFailure(
                f"{transfer.direction.value} of {transfer.amount} "
                f"{transfer.asset_code} with {transfer.counterparty} failed."
            )
        applied.append(transfer)

    return SettlementReceipt(
        applied=tuple(applied),
        notes=(f"{len(applied)} transfer(s) settled.",),
    )


def compensate(settlement: Settlement, applied: Iterable[Transfer]) -> None:
    """Reverse already-applied transfers, most recent first."""

    for transfer in reversed(list(applied)):
        if not _apply(settlement, _reverse(transfer)):
            raise SettlementFailure(
                f"Could not reverse {transfer.direction.value} of {transfer.amount} "
                f"{transfer.asset_code} with {transfer.counterparty}."
            )


def _apply(settlement: Settlement, transfer: Transfer) -> bool:
    if transfer.direction == TransferDirection.PULL:
        return bool(settlement.pull(transfer.counterparty, transfer.asset_code, transfer.amount))
    return bool(settlement.push(transfer.counterparty, transfer.asset_code, transfer.amount))


def _reverse(transfer: Transfer) -> Transfer:
    direction = (
        TransferDirection.PUSH
        if transfer.direction == TransferDirection.PULL
        else TransferDirection.PULL
    )
    return Transfer(
        direction=direction,
        counterparty=transfer.counterparty,
        asset_code=transfer.asset_code,
        amount=transfer.amount,
    )


def _validate_transfer(transfer: Transfer) -> None:
    if not isinstance(transfer.direction, TransferDirection):
        raise SettlementFailure("Transfer direction must be a defined enum.")
    if not transfer.counterparty or not transfer.asset_code:
        raise SettlementFailure("Transfer counterparty and asset are required.")
    if transfer.amount <= 0:
        raise SettlementFailure("Transfer amount must be positive.")
