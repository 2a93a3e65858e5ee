"""Valuation oracle interface and a static price-table implementation."""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Dict, Iterable, Optional, Protocol, Sequence, Union

from .models import Holding


class ValuationError(RuntimeError):
    """Raised when holdings cannot be priced in the denomination asset."""


class ValuationOracle(Protocol):
    def value(self, holdings: Iterable[Holding]) -> int:
        ...

    def total_value(
        self,
        asset_codes: Sequence[str],
        amounts: Sequence[int],
        denomination: str,
    ) -> int:
        ...


@dataclass(frozen=True)
class PriceTableOracle:
    """Prices holdings from a fixed table of denomination units per asset unit.

    The denomination asset is always worth exactly one unit of itself. Any
    other asset missing from the table aborts the valuation instead of being
    counted as zero.
    """

    denomination: str
    prices: Optional[Dict[str, Decimal]] = None

    def value(self, holdings: Iterable[Holding]) -> int:
        holdings = tuple(holdings)
        return self.total_value(
            [holding.asset_code for holding in holdings],
            [holding.amount for holding in holdings],
            self.denomination,
        )

    def total_value(
        self,
        asset_codes: Sequence[str],
        amounts: Sequence[int],
        denomination: str,
    ) -> int:
        if len(asset_codes) != len(amounts):
            raise ValuationError("asset_codes and amounts must have equal length.")
        if denomination != self.denomination:
            raise ValuationError(
                f"Oracle prices in {self.denomination}, not {denomination}."
            )

        total = 0
        for asset_code, amount in zip(asset_codes, amounts):
            if amount < 0:
                raise ValuationError(f"Negative amount for {asset_code}.")
            total += self._convert(asset_code, amount)
        return total

    def with_price(self, asset_code: str, price: Union[Decimal, int, str]) -> "PriceTableOracle":
        prices = dict(self.prices or {})
        prices[asset_code] = _to_decimal(price)
        return PriceTableOracle(denomination=self.denomination, prices=prices)

    def _convert(self, asset_code: str, amount: int) -> int:
        if asset_code == self.denomination:
            return amount
        price = (self.prices or {}).get(asset_code)
        if price is None:
            raise ValuationError(f"No price for {asset_code} in {self.denomination}.")
        if price < 0:
            raise ValuationError(f"Negative price for {asset_code}.")
        return int((Decimal(amount) * price).to_integral_value(rounding=ROUND_DOWN))


def _to_decimal(value: Union[Decimal, int, float, str]) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def parse_prices(values: Iterable[str]) -> Dict[str, Decimal]:
    """Parse ``ASSET=PRICE`` strings into a price table."""

    prices: Dict[str, Decimal] = {}
    for raw in values:
        if "=" not in raw:
            raise ValueError("Price must be formatted as ASSET=PRICE.")
        asset, price = raw.split("=", 1)
        if not asset:
            raise ValueError("Price asset code is required.")
        try:
            prices[asset] = _to_decimal(price)
        except InvalidOperation as exc:
            raise ValueError(f"Invalid price for {asset}: {price}") from exc
    return prices
