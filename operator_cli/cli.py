"""Operator CLI for a locally stored fund."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from fund_core.errors import FundError
from fund_core.models import Transition, event_to_dict
from fund_service.logging_config import setup_logging
from fund_service.settings import get_settings
from fund_store import FileFundStore, FundNotFoundError, FundSession, create_fund
from fund_store.models import state_to_dict
from valuation.oracle import ValuationError, parse_prices


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="fund-cli")
    parser.add_argument("--log-level")
    subparsers = parser.add_subparsers(dest="command", required=True)

    init_parser = subparsers.add_parser("init")
    _add_store_arg(init_parser)
    init_parser.add_argument("--fund-id", required=True)
    init_parser.add_argument("--manager", required=True)
    init_parser.add_argument("--platform", required=True)
    init_parser.add_argument("--denomination", required=True)
    init_parser.add_argument("--success-fee", type=int)
    init_parser.add_argument("--platform-fee", type=int)
    init_parser.add_argument("--whitelist-only", action="store_true")
    init_parser.set_defaults(func=_init)

    show_parser = subparsers.add_parser("show")
    _add_store_arg(show_parser)
    _add_price_arg(show_parser)
    show_parser.set_defaults(func=_show)

    fund_parser = subparsers.add_parser("fund-account")
    _add_store_arg(fund_parser)
    fund_parser.add_argument("--account", required=True)
    fund_parser.add_argument("--asset", required=True)
    fund_parser.add_argument("--amount", required=True, type=int)
    fund_parser.set_defaults(func=_fund_account)

    deposit_parser = subparsers.add_parser("deposit")
    _add_mutation_args(deposit_parser)
    deposit_parser.add_argument("--participant", required=True)
    deposit_parser.add_argument("--amount", required=True, type=int)
    deposit_parser.set_defaults(func=_deposit)

    withdraw_parser = subparsers.add_parser("withdraw")
    _add_mutation_args(withdraw_parser)
    withdraw_parser.add_argument("--participant", required=True)
    withdraw_parser.add_argument(
        "--percentage",
        type=int,
        default=0,
        help="Parts per 10000 of the position; 0 withdraws everything.",
    )
    withdraw_parser.set_defaults(func=_withdraw)

    manager_parser = subparsers.add_parser("manager-withdraw")
    _add_mutation_args(manager_parser)
    manager_parser.add_argument("--caller", required=True)
    manager_parser.set_defaults(func=_manager_withdraw)

    fee_parser = subparsers.add_parser("set-fee")
    _add_store_arg(fee_parser)
    _add_price_arg(fee_parser)
    fee_parser.add_argument("--caller", required=True)
    fee_parser.add_argument("--kind", choices=("success", "platform"), required=True)
    fee_parser.add_argument("--rate", required=True, type=int)
    fee_parser.set_defaults(func=_set_fee)

    whitelist_parser = subparsers.add_parser("whitelist")
    _add_store_arg(whitelist_parser)
    whitelist_parser.add_argument("--caller", required=True)
    toggle = whitelist_parser.add_mutually_exclusive_group()
    toggle.add_argument("--enable", dest="whitelist_only", action="store_true", default=None)
    toggle.add_argument("--disable", dest="whitelist_only", action="store_false", default=None)
    whitelist_parser.add_argument("--add", action="append", default=[])
    whitelist_parser.add_argument("--remove", action="append", default=[])
    whitelist_parser.set_defaults(func=_whitelist)

    quote_parser = subparsers.add_parser("quote")
    _add_store_arg(quote_parser)
    _add_price_arg(quote_parser)
    quote_parser.add_argument("--amount", required=True, type=int)
    quote_parser.set_defaults(func=_quote)

    position_parser = subparsers.add_parser("position")
    _add_store_arg(position_parser)
    _add_price_arg(position_parser)
    position_parser.add_argument("--participant", required=True)
    position_parser.set_defaults(func=_position)

    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)

    try:
        return args.func(args)
    except (FundError, ValuationError, FundNotFoundError, ValueError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else exc
        print(f"ERROR: {message}", file=sys.stderr)
        return 2


def _init(args: argparse.Namespace) -> int:
    record = create_fund(
        _store(args),
        fund_id=args.fund_id,
        manager=args.manager,
        platform=args.platform,
        denomination_asset=args.denomination,
        success_fee_rate=args.success_fee,
        platform_fee_rate=args.platform_fee,
        whitelist_only=args.whitelist_only,
    )
    _print(record.to_dict())
    return 0


def _show(args: argparse.Namespace) -> int:
    session = _session(args)
    service = session.service
    cut = service.manager_cut()
    output = session.record.to_dict()
    output["valuation"] = {
        "fund_value": cut.fund_value,
        "fund_profit": service.fund_profit(),
        "manager_cut": cut.remaining_cut,
        "manager_cut_total": cut.total_cut,
    }
    _print(output)
    return 0


def _fund_account(args: argparse.Namespace) -> int:
    session = FundSession(_store(args))
    balance = session.fund_account(args.account, args.asset, args.amount)
    _print({"account": args.account, "asset_code": args.asset, "balance": balance})
    return 0


def _deposit(args: argparse.Namespace) -> int:
    session = _session(args)
    if args.dry_run:
        _print(_preview(session.service.preview("deposit", args.participant, args.amount)))
        return 0
    event = session.service.deposit(args.participant, args.amount)
    _print(event_to_dict(event))
    return 0


def _withdraw(args: argparse.Namespace) -> int:
    session = _session(args)
    if args.dry_run:
        _print(_preview(session.service.preview("withdraw", args.participant, args.percentage)))
        return 0
    event = session.service.withdraw(args.participant, args.percentage)
    _print(event_to_dict(event))
    return 0


def _manager_withdraw(args: argparse.Namespace) -> int:
    session = _session(args)
    if args.dry_run:
        _print(_preview(session.service.preview("manager_withdraw", args.caller)))
        return 0
    event = session.service.manager_withdraw(args.caller)
    _print(event_to_dict(event))
    return 0


def _set_fee(args: argparse.Namespace) -> int:
    service = _session(args).service
    if args.kind == "success":
        state = service.adjust_success_fee(args.caller, args.rate)
    else:
        state = service.adjust_platform_fee(args.caller, args.rate)
    _print(
        {
            "success_fee_rate": state.success_fee_rate,
            "platform_fee_rate": state.platform_fee_rate,
        }
    )
    return 0


def _whitelist(args: argparse.Namespace) -> int:
    session = FundSession(_store(args))
    gate = session.update_whitelist(
        args.caller,
        whitelist_only=args.whitelist_only,
        add=args.add,
        remove=args.remove,
    )
    _print(gate.to_dict())
    return 0


def _quote(args: argparse.Namespace) -> int:
    service = _session(args).service
    _print({"amount": args.amount, "shares": service.quote_deposit(args.amount)})
    return 0


def _position(args: argparse.Namespace) -> int:
    service = _session(args).service
    position = service.state.position_of(args.participant)
    _print(
        {
            "participant": position.participant,
            "shares": position.shares,
            "net_deposit": position.net_deposit,
            "value": service.position_value(args.participant),
            "profit": service.position_profit(args.participant),
        }
    )
    return 0


def _add_store_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--store", help="Fund record path; defaults to FUND_STORE_PATH.")


def _add_price_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--price",
        action="append",
        default=[],
        help="ASSET=PRICE in denomination units; repeat per asset.",
    )


def _add_mutation_args(parser: argparse.ArgumentParser) -> None:
    _add_store_arg(parser)
    _add_price_arg(parser)
    parser.add_argument("--dry-run", action="store_true")


def _store(args: argparse.Namespace) -> FileFundStore:
    return FileFundStore(Path(args.store or get_settings().store_path))


def _session(args: argparse.Namespace) -> FundSession:
    return FundSession(_store(args), prices=parse_prices(args.price))


def _preview(transition: Transition) -> dict:
    output = transition.to_dict()
    output["dry_run"] = True
    output["state"] = state_to_dict(transition.state)
    return output


def _print(payload: dict) -> None:
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    raise SystemExit(main())
