from .models import Holding
from .oracle import PriceTableOracle, ValuationError, ValuationOracle, parse_prices

__all__ = [
    "Holding",
    "PriceTableOracle",
    "ValuationError",
    "ValuationOracle",
    "parse_prices",
]
