"""Settlement models for applied transfers and account balances."""

from dataclasses import dataclass
from typing import Tuple

from fund_core.models import Transfer


@dataclass(frozen=True)
class Balance:
    account: str
    asset_code: str
    amount: int


@dataclass(frozen=True)
class SettlementReceipt:
    applied: Tuple[Transfer, ...]
    notes: Tuple[str, ...] = ()
