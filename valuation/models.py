"""Holding schema shared by the valuation oracle and the fund core."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Holding:
    """Balance of one asset held by the fund."""

    asset_code: str
    amount: int
