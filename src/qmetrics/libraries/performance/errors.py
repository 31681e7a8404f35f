"""Exceptions raised at the analytics boundary.

The numeric stages never raise for data-shape reasons; degenerate input
resolves to documented default values. Only two conditions surface as
exceptions:

- InvalidTradeRecord: a trade record failed validation while being parsed
- ConfigurationError: the analytics configuration itself is unusable
"""


class AnalyticsError(Exception):
    """Base exception for the analytics engine."""

    pass


class InvalidTradeRecord(AnalyticsError, ValueError):
    """Raised when a raw trade record cannot be turned into a Trade."""

    def __init__(self, message: str, index: int | None = None, trade_id: str | None = None):
        self.index = index
        self.trade_id = trade_id
        location = []
        if index is not None:
            location.append(f"index={index}")
        if trade_id is not None:
            location.append(f"id={trade_id}")
        prefix = f"Invalid trade record ({', '.join(location)}): " if location else "Invalid trade record: "
        super().__init__(prefix + message)


class ConfigurationError(AnalyticsError, ValueError):
    """Raised when analytics configuration is invalid."""

    pass
