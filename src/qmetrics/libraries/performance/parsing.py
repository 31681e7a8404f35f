"""Trade record parsing and validation.

The boundary between loosely typed upstream data (storage rows, decoded
JSON) and the numeric core. Records are validated once here; everything
downstream only sees well-formed Trade objects with finite numbers.

Accepted keys:
- snake_case field names of Trade
- the camelCase names used by the trade storage layer
  (openTime, closeTime, openPrice, closePrice, type, volume, id)

Invalid records are rejected with InvalidTradeRecord rather than sanitised.
"""

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import structlog
from pydantic import ValidationError

from qmetrics.libraries.performance.errors import InvalidTradeRecord
from qmetrics.libraries.performance.models import Trade

logger = structlog.get_logger(__name__)

FIELD_ALIASES: dict[str, str] = {
    "id": "trade_id",
    "tradeId": "trade_id",
    "openTime": "open_time",
    "closeTime": "close_time",
    "openPrice": "open_price",
    "closePrice": "close_price",
    "type": "side",
    "volume": "size",
}


def _normalize_record(record: Mapping[str, Any]) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key, value in record.items():
        normalized[FIELD_ALIASES.get(key, key)] = value

    # Storage rows use an empty string for "not closed"
    if normalized.get("close_time") in ("", None):
        normalized["close_time"] = None
    if "trade_id" in normalized and normalized["trade_id"] is not None:
        normalized["trade_id"] = str(normalized["trade_id"])
    if isinstance(normalized.get("side"), str):
        normalized["side"] = normalized["side"].lower()

    return normalized


def _describe(error: ValidationError) -> str:
    parts = []
    for detail in error.errors():
        location = ".".join(str(loc) for loc in detail.get("loc", ())) or "record"
        parts.append(f"{location}: {detail.get('msg', 'invalid value')}")
    return "; ".join(parts)


def parse_trade(record: Mapping[str, Any] | Trade, index: int | None = None) -> Trade:
    """
    Validate one raw record into a Trade.

    Args:
        record: Mapping of trade fields, or an existing Trade (returned as is)
        index: Position in the source list, used in error messages

    Returns:
        Validated Trade

    Raises:
        InvalidTradeRecord: If a field is missing, non-finite or out of range
    """
    if isinstance(record, Trade):
        return record

    if not isinstance(record, Mapping):
        raise InvalidTradeRecord(f"expected a mapping, got {type(record).__name__}", index=index)

    normalized = _normalize_record(record)
    trade_id = normalized.get("trade_id")

    try:
        return Trade.model_validate(normalized)
    except ValidationError as e:
        message = _describe(e)
        logger.warning("analytics.trade_rejected", index=index, trade_id=trade_id, reason=message)
        raise InvalidTradeRecord(message, index=index, trade_id=trade_id) from e


def parse_trades(records: Iterable[Mapping[str, Any] | Trade]) -> list[Trade]:
    """
    Validate a sequence of raw records, preserving order.

    Raises:
        InvalidTradeRecord: On the first invalid record
    """
    return [parse_trade(record, index=i) for i, record in enumerate(records)]


def load_trades(path: Path | str) -> list[Trade]:
    """
    Load and validate trades from a JSON file.

    The file holds either a list of trade records or an object with a
    "trades" list.

    Raises:
        FileNotFoundError: If the file does not exist
        InvalidTradeRecord: If the payload shape or any record is invalid
    """
    file_path = Path(path)
    with file_path.open("r", encoding="utf-8") as f:
        try:
            payload = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidTradeRecord(f"{file_path} is not valid JSON: {e}") from e

    if isinstance(payload, Mapping):
        payload = payload.get("trades")

    if not isinstance(payload, list):
        raise InvalidTradeRecord(f"{file_path} must contain a list of trades or an object with a 'trades' list")

    return parse_trades(payload)
