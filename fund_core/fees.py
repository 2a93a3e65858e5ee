"""Profit-only success fee computation.

Profit is re-derived from cumulative capital flows on every call rather than
from a stored high-water mark. ``net_contributed`` is deposits minus
withdrawals minus what the manager already cashed out, so a cash-out lowers
both the fund value and the baseline by the same amount and is never
charged twice.
"""

from typing import Tuple

from .errors import AccountingInvariantViolation, InvalidAmount
from .models import TOTAL_PERCENTAGE, FundState, ManagerCut


def compute_manager_cut(
    fund_value: int,
    total_deposited: int,
    total_withdrawn: int,
    manager_cashed_out: int,
    success_fee_rate: int,
) -> Tuple[int, int]:
    """Return ``(remaining_cut, total_cut_ever)`` for the manager."""

    if min(fund_value, total_deposited, total_withdrawn, manager_cashed_out) < 0:
        raise InvalidAmount("Fee inputs must be non-negative.")
    _validate_rate(success_fee_rate)

    net_contributed = total_deposited - (total_withdrawn + manager_cashed_out)
    if fund_value <= net_contributed:
        return 0, 0

    profit = fund_value - net_contributed
    total_cut = profit * success_fee_rate // TOTAL_PERCENTAGE
    remaining_cut = total_cut - manager_cashed_out
    if remaining_cut < 0:
        raise AccountingInvariantViolation(
            f"Manager cashed out {manager_cashed_out} but only {total_cut} "
            "has ever accrued."
        )
    return remaining_cut, total_cut


def manager_cut_for(state: FundState, fund_value: int) -> ManagerCut:
    """Run the fee engine over a fund state and an already-read valuation."""

    remaining_cut, total_cut = compute_manager_cut(
        fund_value,
        state.total_deposited,
        state.total_withdrawn,
        state.manager_cashed_out,
        state.success_fee_rate,
    )
    if remaining_cut > fund_value:
        raise AccountingInvariantViolation(
            f"Manager cut {remaining_cut} exceeds fund value {fund_value}."
        )
    return ManagerCut(
        remaining_cut=remaining_cut, total_cut=total_cut, fund_value=fund_value
    )


def split_platform_cut(remaining_cut: int, platform_fee_rate: int) -> Tuple[int, int]:
    """Split a cash-out into ``(platform_cut, manager_net)``."""

    _validate_rate(platform_fee_rate)
    platform_cut = remaining_cut * platform_fee_rate // TOTAL_PERCENTAGE
    return platform_cut, remaining_cut - platform_cut


def _validate_rate(rate: int) -> None:
    if rate < 0 or rate > TOTAL_PERCENTAGE:
        raise InvalidAmount(f"Fee rate must be within 0..{TOTAL_PERCENTAGE}.")
