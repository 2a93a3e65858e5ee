from .book import BalanceBook, Settlement
from .executor import compensate, settle
from .models import Balance, SettlementReceipt

__all__ = [
    "Balance",
    "BalanceBook",
    "Settlement",
    "SettlementReceipt",
    "compensate",
    "settle",
]
