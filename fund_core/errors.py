"""Error taxonomy for the share-accounting core."""


class FundError(Exception):
    """Base class for every rejected fund operation."""


class InvalidAmount(FundError, ValueError):
    """Raised for zero or negative deposits and out-of-range percentages."""


class InsufficientShares(FundError, ValueError):
    """Raised when a withdrawal or burn exceeds the share balance."""


class DegenerateValuation(FundError, ValueError):
    """Raised when deposit pricing has no positive denominator or mints nothing."""


class SettlementFailure(FundError, RuntimeError):
    """Raised when an asset pull or push fails."""


class AccountingInvariantViolation(FundError, RuntimeError):
    """Raised when fund accounting is inconsistent. Never retried."""


class Unauthorized(FundError, PermissionError):
    """Raised when the caller may not perform the operation."""
