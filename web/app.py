"""Local JSON API over a stored fund."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from fund_core.errors import FundError, Unauthorized
from fund_core.models import Transition, event_to_dict
from fund_service.events import EventLog
from fund_store import FileFundStore, FundNotFoundError, FundSession, create_fund
from fund_store.models import state_to_dict
from valuation.oracle import ValuationError, parse_prices

app = FastAPI(title="Fund", description="Local fund operator API")

_CONTEXT: Dict[str, Optional[str]] = {"store_path": None}
_SESSIONS: Dict[str, FundSession] = {}
_EVENTS = EventLog()


class ContextRequest(BaseModel):
    store_path: str


class CreateFundRequest(BaseModel):
    store_path: str
    fund_id: str
    manager: str
    platform: str
    denomination_asset: str
    success_fee_rate: Optional[int] = None
    platform_fee_rate: Optional[int] = None
    whitelist_only: bool = False


class PricesRequest(BaseModel):
    prices: Dict[str, str]


class FundAccountRequest(BaseModel):
    account: str
    asset_code: str
    amount: int


class DepositRequest(BaseModel):
    participant: str
    amount: int
    dry_run: bool = False


class WithdrawRequest(BaseModel):
    participant: str
    percentage: int = 0
    dry_run: bool = False


class ManagerWithdrawRequest(BaseModel):
    caller: str
    dry_run: bool = False


class FeeRequest(BaseModel):
    caller: str
    kind: str
    rate: int


class WhitelistRequest(BaseModel):
    caller: str
    whitelist_only: Optional[bool] = None
    add: List[str] = []
    remove: List[str] = []


@app.middleware("http")
async def _local_only(request: Request, call_next):
    client = request.client
    if client is not None:
        host = client.host
        if host not in {"127.0.0.1", "::1", "testclient"}:
            return JSONResponse({"error": "Remote access disabled."}, status_code=403)
    return await call_next(request)


async def _handle_errors(request: Request, exc: Exception):
    message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
    return JSONResponse({"error": message}, status_code=400)


async def _handle_unauthorized(request: Request, exc: Exception):
    return JSONResponse({"error": str(exc)}, status_code=403)


for _exc_class in (FundError, ValuationError, FundNotFoundError, ValueError):
    app.add_exception_handler(_exc_class, _handle_errors)
app.add_exception_handler(Unauthorized, _handle_unauthorized)


@app.post("/api/funds")
def create(payload: CreateFundRequest):
    record = create_fund(
        FileFundStore(Path(payload.store_path)),
        fund_id=payload.fund_id,
        manager=payload.manager,
        platform=payload.platform,
        denomination_asset=payload.denomination_asset,
        success_fee_rate=payload.success_fee_rate,
        platform_fee_rate=payload.platform_fee_rate,
        whitelist_only=payload.whitelist_only,
    )
    _CONTEXT["store_path"] = payload.store_path
    return record.to_dict()


@app.post("/api/context")
def set_context(payload: ContextRequest):
    _get_session(payload.store_path)
    _CONTEXT["store_path"] = payload.store_path
    return {"status": "ok"}


@app.get("/api/status")
def status():
    session = _require_session()
    service = session.service
    cut = service.manager_cut()
    output = session.record.to_dict()
    output["valuation"] = {
        "fund_value": cut.fund_value,
        "fund_profit": service.fund_profit(),
        "manager_cut": cut.remaining_cut,
        "manager_cut_total": cut.total_cut,
    }
    return output


@app.post("/api/prices")
def set_prices(payload: PricesRequest):
    prices = parse_prices(f"{asset}={price}" for asset, price in payload.prices.items())
    _require_session().set_prices(prices)
    return {"prices": {asset: str(price) for asset, price in prices.items()}}


@app.post("/api/accounts/fund")
def fund_account(payload: FundAccountRequest):
    balance = _require_session().fund_account(
        payload.account, payload.asset_code, payload.amount
    )
    return {"account": payload.account, "asset_code": payload.asset_code, "balance": balance}


@app.post("/api/deposit")
def deposit(payload: DepositRequest):
    service = _require_session().service
    if payload.dry_run:
        return _preview(service.preview("deposit", payload.participant, payload.amount))
    return event_to_dict(service.deposit(payload.participant, payload.amount))


@app.post("/api/withdraw")
def withdraw(payload: WithdrawRequest):
    service = _require_session().service
    if payload.dry_run:
        return _preview(service.preview("withdraw", payload.participant, payload.percentage))
    return event_to_dict(service.withdraw(payload.participant, payload.percentage))


@app.post("/api/manager-withdraw")
def manager_withdraw(payload: ManagerWithdrawRequest):
    service = _require_session().service
    if payload.dry_run:
        return _preview(service.preview("manager_withdraw", payload.caller))
    return event_to_dict(service.manager_withdraw(payload.caller))


@app.post("/api/fees")
def set_fee(payload: FeeRequest):
    service = _require_session().service
    if payload.kind == "success":
        state = service.adjust_success_fee(payload.caller, payload.rate)
    elif payload.kind == "platform":
        state = service.adjust_platform_fee(payload.caller, payload.rate)
    else:
        raise HTTPException(status_code=400, detail=f"Unknown fee kind: {payload.kind}")
    return {
        "success_fee_rate": state.success_fee_rate,
        "platform_fee_rate": state.platform_fee_rate,
    }


@app.post("/api/whitelist")
def whitelist(payload: WhitelistRequest):
    gate = _require_session().update_whitelist(
        payload.caller,
        whitelist_only=payload.whitelist_only,
        add=payload.add,
        remove=payload.remove,
    )
    return gate.to_dict()


@app.get("/api/quote")
def quote(amount: int):
    return {"amount": amount, "shares": _require_session().service.quote_deposit(amount)}


@app.get("/api/positions/{participant}")
def position(participant: str):
    service = _require_session().service
    held = service.state.position_of(participant)
    return {
        "participant": held.participant,
        "shares": held.shares,
        "net_deposit": held.net_deposit,
        "value": service.position_value(participant),
        "profit": service.position_profit(participant),
    }


@app.get("/api/events")
def events():
    session = _require_session()
    fund_id = session.service.state.fund_id
    return {"events": [event_to_dict(event) for event in _EVENTS.for_fund(fund_id)]}


def _require_session() -> FundSession:
    store_path = _CONTEXT.get("store_path")
    if not store_path:
        raise HTTPException(status_code=400, detail="Context not set.")
    return _get_session(store_path)


def _get_session(store_path: str) -> FundSession:
    key = str(Path(store_path))
    session = _SESSIONS.get(key)
    if session is None or session.is_stale():
        prices = session.prices if session is not None else None
        session = FundSession(FileFundStore(Path(store_path)), prices=prices, events=_EVENTS)
        _SESSIONS[key] = session
    return session


def _preview(transition: Transition) -> dict:
    output = transition.to_dict()
    output["dry_run"] = True
    output["state"] = state_to_dict(transition.state)
    return output


def _reset_state() -> None:
    _CONTEXT["store_path"] = None
    _SESSIONS.clear()
    _EVENTS.clear()
