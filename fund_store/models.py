"""Persisted record layout for a fund."""

from dataclasses import dataclass
from typing import Dict, Tuple

from fund_core.models import FundState, Position
from fund_service.gate import WhitelistGate
from settlement.models import Balance
from valuation.models import Holding

RECORD_VERSION = 1


@dataclass(frozen=True)
class FundRecord:
    state: FundState
    gate: WhitelistGate = WhitelistGate()
    balances: Tuple[Balance, ...] = ()

    def to_dict(self) -> Dict[str, object]:
        return {
            "version": RECORD_VERSION,
            "fund": state_to_dict(self.state),
            "access": self.gate.to_dict(),
            "balances": [
                {
                    "account": balance.account,
                    "asset_code": balance.asset_code,
                    "amount": balance.amount,
                }
                for balance in self.balances
            ],
        }

    @staticmethod
    def from_dict(data: Dict[str, object]) -> "FundRecord":
        version = data.get("version", RECORD_VERSION)
        if version != RECORD_VERSION:
            raise ValueError(f"Unsupported fund record version: {version}")
        balances = tuple(
            Balance(
                account=entry["account"],
                asset_code=entry["asset_code"],
                amount=int(entry["amount"]),
            )
            for entry in data.get("balances", [])
        )
        return FundRecord(
            state=state_from_dict(data["fund"]),
            gate=WhitelistGate.from_dict(data.get("access", {})),
            balances=balances,
        )


def state_to_dict(state: FundState) -> Dict[str, object]:
    return {
        "fund_id": state.fund_id,
        "manager": state.manager,
        "platform": state.platform,
        "denomination_asset": state.denomination_asset,
        "success_fee_rate": state.success_fee_rate,
        "platform_fee_rate": state.platform_fee_rate,
        "total_shares": state.total_shares,
        "total_deposited": state.total_deposited,
        "total_withdrawn": state.total_withdrawn,
        "manager_cashed_out": state.manager_cashed_out,
        "positions": [
            {
                "participant": position.participant,
                "shares": position.shares,
                "net_deposit": position.net_deposit,
            }
            for position in state.positions
        ],
        "holdings": [
            {"asset_code": holding.asset_code, "amount": holding.amount}
            for holding in state.holdings
        ],
    }


def state_from_dict(data: Dict[str, object]) -> FundState:
    return FundState(
        fund_id=data["fund_id"],
        manager=data["manager"],
        platform=data["platform"],
        denomination_asset=data["denomination_asset"],
        success_fee_rate=int(data["success_fee_rate"]),
        platform_fee_rate=int(data["platform_fee_rate"]),
        total_shares=int(data.get("total_shares", 0)),
        total_deposited=int(data.get("total_deposited", 0)),
        total_withdrawn=int(data.get("total_withdrawn", 0)),
        manager_cashed_out=int(data.get("manager_cashed_out", 0)),
        positions=tuple(
            Position(
                participant=entry["participant"],
                shares=int(entry["shares"]),
                net_deposit=int(entry["net_deposit"]),
            )
            for entry in data.get("positions", [])
        ),
        holdings=tuple(
            Holding(asset_code=entry["asset_code"], amount=int(entry["amount"]))
            for entry in data.get("holdings", [])
        ),
    )
