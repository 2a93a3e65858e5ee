from .engine import (
    adjust_platform_fee,
    adjust_success_fee,
    deposit,
    fund_profit,
    fund_value,
    manager_cut,
    manager_withdraw,
    open_fund,
    position_profit,
    position_value,
    quote_deposit,
    withdraw,
)
from .errors import (
    AccountingInvariantViolation,
    DegenerateValuation,
    FundError,
    InsufficientShares,
    InvalidAmount,
    SettlementFailure,
    Unauthorized,
)
from .fees import compute_manager_cut, split_platform_cut
from .models import (
    INITIAL_SHARES,
    TOTAL_PERCENTAGE,
    DepositEvent,
    FundState,
    Holding,
    ManagerCashOutEvent,
    ManagerCut,
    Position,
    Transfer,
    TransferDirection,
    Transition,
    WithdrawEvent,
)

__all__ = [
    "INITIAL_SHARES",
    "TOTAL_PERCENTAGE",
    "AccountingInvariantViolation",
    "DegenerateValuation",
    "DepositEvent",
    "FundError",
    "FundState",
    "Holding",
    "InsufficientShares",
    "InvalidAmount",
    "ManagerCashOutEvent",
    "ManagerCut",
    "Position",
    "SettlementFailure",
    "Transfer",
    "TransferDirection",
    "Transition",
    "Unauthorized",
    "WithdrawEvent",
    "adjust_platform_fee",
    "adjust_success_fee",
    "compute_manager_cut",
    "deposit",
    "fund_profit",
    "fund_value",
    "manager_cut",
    "manager_withdraw",
    "open_fund",
    "position_profit",
    "position_value",
    "quote_deposit",
    "split_platform_cut",
    "withdraw",
]
