"""In-memory account book implementing the settlement interface."""

import logging
from typing import Dict, Iterable, Optional, Protocol, Set, Tuple

from .models import Balance

logger = logging.getLogger(__name__)


class Settlement(Protocol):
    def pull(self, counterparty: str, asset_code: str, amount: int) -> bool:
        ...

    def push(self, counterparty: str, asset_code: str, amount: int) -> bool:
        ...


class BalanceBook:
    """Tracks external account balances the fund pulls from and pushes to.

    A pull fails when the counterparty cannot cover it. Frozen accounts
    reject both directions, which stands in for a recipient that refuses
    a transfer.
    """

    def __init__(
        self,
        balances: Optional[Iterable[Balance]] = None,
        frozen: Optional[Iterable[str]] = None,
    ) -> None:
        self._balances: Dict[Tuple[str, str], int] = {}
        for item in balances or ():
            self.credit(item.account, item.asset_code, item.amount)
        self._frozen: Set[str] = set(frozen or ())

    def balance_of(self, account: str, asset_code: str) -> int:
        return self._balances.get((account, asset_code), 0)

    def credit(self, account: str, asset_code: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("Credit amount must be non-negative.")
        key = (account, asset_code)
        self._balances[key] = self._balances.get(key, 0) + amount

    def freeze(self, account: str) -> None:
        self._frozen.add(account)

    def unfreeze(self, account: str) -> None:
        self._frozen.discard(account)

    def pull(self, counterparty: str, asset_code: str, amount: int) -> bool:
        if counterparty in self._frozen or amount < 0:
            return False
        available = self.balance_of(counterparty, asset_code)
        if available < amount:
            logger.debug(
                "Pull of %s %s from %s refused; balance %s",
                amount,
                asset_code,
                counterparty,
                available,
            )
            return False
        self._balances[(counterparty, asset_code)] = available - amount
        return True

    def push(self, counterparty: str, asset_code: str, amount: int) -> bool:
        if counterparty in self._frozen or amount < 0:
            return False
        self.credit(counterparty, asset_code, amount)
        return True

    def to_balances(self) -> Tuple[Balance, ...]:
        return tuple(
            Balance(account=account, asset_code=asset_code, amount=amount)
            for (account, asset_code), amount in sorted(self._balances.items())
            if amount
        )
