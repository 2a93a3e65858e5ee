from .models import FundRecord, state_from_dict, state_to_dict
from .session import FundSession, create_fund
from .store import FileFundStore, FundNotFoundError, FundStore

__all__ = [
    "FileFundStore",
    "FundNotFoundError",
    "FundRecord",
    "FundSession",
    "FundStore",
    "create_fund",
    "state_from_dict",
    "state_to_dict",
]
