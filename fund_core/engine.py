"""Pure state transitions for deposits, withdrawals and manager cash-outs.

Every mutating operation takes the current ``FundState`` and returns a
``Transition``: the next state, the transfers the caller has to settle for
that state to be valid, and the events to publish. Nothing here talks to a
store or moves assets, so each operation can be exercised in isolation.
The oracle is read exactly once per operation.
"""

from dataclasses import replace
from typing import List, Tuple

from valuation.oracle import ValuationOracle

from . import ledger
from .errors import (
    AccountingInvariantViolation,
    DegenerateValuation,
    InsufficientShares,
    InvalidAmount,
    Unauthorized,
)
from .fees import compute_manager_cut, manager_cut_for, split_platform_cut
from .models import (
    INITIAL_SHARES,
    MAX_PLATFORM_FEE_RATE,
    MAX_SUCCESS_FEE_RATE,
    TOTAL_PERCENTAGE,
    DepositEvent,
    FundState,
    ManagerCashOutEvent,
    ManagerCut,
    Transfer,
    TransferDirection,
    Transition,
    WithdrawEvent,
)


def open_fund(
    fund_id: str,
    manager: str,
    platform: str,
    denomination_asset: str,
    success_fee_rate: int,
    platform_fee_rate: int,
    max_success_fee_rate: int = MAX_SUCCESS_FEE_RATE,
    max_platform_fee_rate: int = MAX_PLATFORM_FEE_RATE,
) -> FundState:
    """Return the empty state of a freshly created fund."""

    if not fund_id or not manager or not platform or not denomination_asset:
        raise ValueError("fund_id, manager, platform and denomination are required.")
    _validate_fee(success_fee_rate, max_success_fee_rate, "success")
    _validate_fee(platform_fee_rate, max_platform_fee_rate, "platform")
    return FundState(
        fund_id=fund_id,
        manager=manager,
        platform=platform,
        denomination_asset=denomination_asset,
        success_fee_rate=success_fee_rate,
        platform_fee_rate=platform_fee_rate,
    )


def fund_value(state: FundState, oracle: ValuationOracle) -> int:
    value = oracle.value(state.holdings)
    if value < 0:
        raise AccountingInvariantViolation("Oracle returned a negative fund value.")
    return value


def manager_cut(state: FundState, oracle: ValuationOracle) -> ManagerCut:
    return manager_cut_for(state, fund_value(state, oracle))


def quote_deposit(state: FundState, amount: int, oracle: ValuationOracle) -> int:
    """Shares a deposit of ``amount`` would mint right now; 0 when unpriceable."""

    _require_positive(amount)
    landed = _land_deposit(state, amount)
    return _shares_for_deposit(landed, amount, fund_value(landed, oracle))


def deposit(
    state: FundState, participant: str, amount: int, oracle: ValuationOracle
) -> Transition:
    _require_positive(amount)
    if not participant:
        raise InvalidAmount("Participant is required.")

    # Price against the fund as the oracle sees it once the deposit has landed.
    landed = _land_deposit(state, amount)
    shares = _shares_for_deposit(landed, amount, fund_value(landed, oracle))
    if shares == 0:
        raise DegenerateValuation(
            f"Deposit of {amount} would mint zero shares at the current valuation."
        )

    next_state = ledger.mint(landed, participant, shares)
    next_state = ledger.adjust_net_deposit(next_state, participant, amount)
    ledger.check_share_invariant(next_state)

    return Transition(
        state=next_state,
        transfers=(
            Transfer(
                direction=TransferDirection.PULL,
                counterparty=participant,
                asset_code=state.denomination_asset,
                amount=amount,
            ),
        ),
        events=(
            DepositEvent(
                participant=participant,
                amount=amount,
                shares_minted=shares,
                total_shares=next_state.total_shares,
            ),
        ),
    )


def withdraw(
    state: FundState, participant: str, percentage: int, oracle: ValuationOracle
) -> Transition:
    """Redeem ``percentage`` (out of ``TOTAL_PERCENTAGE``, 0 meaning all) of a position.

    The full requested share count is burned while assets are paid out for
    the fee-scaled share count, so the manager's uncashed cut stays inside
    the fund.
    """

    if percentage < 0 or percentage > TOTAL_PERCENTAGE:
        raise InvalidAmount(f"Percentage must be within 0..{TOTAL_PERCENTAGE}.")
    percentage = percentage or TOTAL_PERCENTAGE
    if state.total_shares == 0:
        raise InsufficientShares("Fund has no shares outstanding.")

    position = state.position_of(participant)
    shares_requested = position.shares * percentage // TOTAL_PERCENTAGE
    if shares_requested == 0:
        raise InsufficientShares(f"{participant} has no shares to withdraw.")

    cut = manager_cut(state, oracle)
    if cut.fund_value == 0:
        shares_to_redeem = 0
    else:
        shares_to_redeem = (
            shares_requested * (cut.fund_value - cut.remaining_cut) // cut.fund_value
        )

    payouts = _payouts(state, shares_to_redeem, state.total_shares)
    next_state, transfers = _apply_payouts(state, participant, payouts)

    value_withdrawn = cut.fund_value * shares_to_redeem // state.total_shares
    next_state = replace(
        next_state, total_withdrawn=state.total_withdrawn + value_withdrawn
    )
    next_state = ledger.adjust_net_deposit(next_state, participant, -value_withdrawn)
    next_state = ledger.burn(next_state, participant, shares_requested)
    ledger.check_share_invariant(next_state)

    return Transition(
        state=next_state,
        transfers=transfers,
        events=(
            WithdrawEvent(
                participant=participant,
                shares_burned=shares_requested,
                total_shares=next_state.total_shares,
                value_withdrawn=value_withdrawn,
            ),
        ),
    )


def manager_withdraw(
    state: FundState, caller: str, oracle: ValuationOracle
) -> Transition:
    if caller != state.manager:
        raise Unauthorized("Only the fund manager can cash out the success fee.")

    cut = manager_cut(state, oracle)
    platform_cut, manager_net = split_platform_cut(
        cut.remaining_cut, state.platform_fee_rate
    )

    next_state = state
    transfers: Tuple[Transfer, ...] = ()
    if cut.remaining_cut and cut.fund_value:
        # Both payouts are sized from the balances before either is taken.
        platform_payouts = _payouts(state, platform_cut, cut.fund_value)
        manager_payouts = _payouts(state, manager_net, cut.fund_value)
        next_state, platform_transfers = _apply_payouts(
            next_state, state.platform, platform_payouts
        )
        next_state, manager_transfers = _apply_payouts(
            next_state, state.manager, manager_payouts
        )
        transfers = platform_transfers + manager_transfers

    next_state = replace(
        next_state, manager_cashed_out=state.manager_cashed_out + cut.remaining_cut
    )
    if next_state.manager_cashed_out > cut.total_cut:
        raise AccountingInvariantViolation("Cash-out exceeds the cut ever accrued.")

    return Transition(
        state=next_state,
        transfers=transfers,
        events=(
            ManagerCashOutEvent(
                amount=cut.remaining_cut,
                platform_cut=platform_cut,
                manager_net=manager_net,
            ),
        ),
    )


def adjust_success_fee(
    state: FundState,
    caller: str,
    new_rate: int,
    oracle: ValuationOracle,
    max_rate: int = MAX_SUCCESS_FEE_RATE,
) -> FundState:
    """Change the success fee through the platform-only path."""

    if caller != state.platform:
        raise Unauthorized("Only the platform can change fee rates.")
    _validate_fee(new_rate, max_rate, "success")
    try:
        compute_manager_cut(
            fund_value(state, oracle),
            state.total_deposited,
            state.total_withdrawn,
            state.manager_cashed_out,
            new_rate,
        )
    except AccountingInvariantViolation as exc:
        raise InvalidAmount(
            "New success fee would leave cashed-out fees unaccrued."
        ) from exc
    return replace(state, success_fee_rate=new_rate)


def adjust_platform_fee(
    state: FundState,
    caller: str,
    new_rate: int,
    max_rate: int = MAX_PLATFORM_FEE_RATE,
) -> FundState:
    if caller != state.platform:
        raise Unauthorized("Only the platform can change fee rates.")
    _validate_fee(new_rate, max_rate, "platform")
    return replace(state, platform_fee_rate=new_rate)


def position_value(state: FundState, participant: str, oracle: ValuationOracle) -> int:
    """Value a participant could withdraw, net of the manager's uncashed cut."""

    if state.total_shares == 0:
        return 0
    cut = manager_cut(state, oracle)
    shares = state.position_of(participant).shares
    return shares * (cut.fund_value - cut.remaining_cut) // state.total_shares


def position_profit(state: FundState, participant: str, oracle: ValuationOracle) -> int:
    return position_value(state, participant, oracle) - state.position_of(
        participant
    ).net_deposit


def fund_profit(state: FundState, oracle: ValuationOracle) -> int:
    return fund_value(state, oracle) + state.total_withdrawn - state.total_deposited


def _land_deposit(state: FundState, amount: int) -> FundState:
    denomination = state.denomination_asset
    landed = state.with_holding(denomination, state.holding_of(denomination) + amount)
    return replace(landed, total_deposited=state.total_deposited + amount)


def _shares_for_deposit(landed: FundState, amount: int, value_after: int) -> int:
    if landed.total_shares == 0:
        return INITIAL_SHARES
    cut = manager_cut_for(landed, value_after)
    value_before = value_after - amount - cut.remaining_cut
    if value_before <= 0:
        return 0
    return amount * landed.total_shares // value_before


def _payouts(
    state: FundState, numerator: int, denominator: int
) -> Tuple[Tuple[str, int], ...]:
    payouts: List[Tuple[str, int]] = []
    if numerator <= 0 or denominator <= 0:
        return ()
    for holding in state.holdings:
        amount = holding.amount * numerator // denominator
        if amount > 0:
            payouts.append((holding.asset_code, amount))
    return tuple(payouts)


def _apply_payouts(
    state: FundState, counterparty: str, payouts: Tuple[Tuple[str, int], ...]
) -> Tuple[FundState, Tuple[Transfer, ...]]:
    transfers = []
    for asset_code, amount in payouts:
        balance = state.holding_of(asset_code)
        if amount > balance:
            raise AccountingInvariantViolation(
                f"Payout of {amount} {asset_code} exceeds fund balance {balance}."
            )
        state = state.with_holding(asset_code, balance - amount)
        transfers.append(
            Transfer(
                direction=TransferDirection.PUSH,
                counterparty=counterparty,
                asset_code=asset_code,
                amount=amount,
            )
        )
    return state, tuple(transfers)


def _require_positive(amount: int) -> None:
    if amount <= 0:
        raise InvalidAmount("Deposit amount must be positive.")


def _validate_fee(rate: int, max_rate: int, label: str) -> None:
    if rate < 0 or rate > max_rate:
        raise InvalidAmount(f"{label} fee rate must be within 0..{max_rate}.")
