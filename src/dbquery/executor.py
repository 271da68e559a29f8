import logging
import math
import re
from decimal import Decimal
from typing import Any, Callable, Optional, Sequence
from .connectors.factory import get_connector
from .domain.interfaces import QueryConnector
from .domain.models import Number

logger = logging.getLogger(__name__)

_INT_RE = re.compile(r"^\s*[-+]?\d+\s*$")
_NUMBER_RE = re.compile(
    r"^\s*[-+]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?|inf(?:inity)?|nan)\s*$",
    re.IGNORECASE,
)

def to_number(value: Any) -> Optional[Number]:
    """
    Numeric view of a column value, or None when it does not look like a
    number. NULL is never a number; numeric strings are.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, bytes):
        try:
            value = value.decode()
        except UnicodeDecodeError:
            return None
    if isinstance(value, str):
        if _INT_RE.match(value):
            return int(value)
        if _NUMBER_RE.match(value):
            return float(value)
        return None
    # numpy scalars and other numbers.Real implementations
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return int(number) if math.isfinite(number) and number.is_integer() else number

class QueryExecutor:
    """
    Opens a connection, runs a single query and reduces the result set to one
    value. The connection is released on every exit path.
    """
    def __init__(self, connector_factory: Callable[..., QueryConnector] = get_connector):
        self._connector_factory = connector_factory

    def execute(
        self,
        target: str,
        username: str,
        password: str,
        sql: str,
        placeholders: Sequence[str] = (),
        alias: str = "unknown",
    ) -> Optional[Number]:
        connector = self._connector_factory(target, username, password, alias)
        try:
            connector.connect()
            logger.debug("Running query on '%s' with %d placeholder value(s)", alias, len(placeholders))

            # No rows leaves the default of 0. With several rows the last one
            # read decides the value.
            result: Optional[Number] = 0
            rows = 0
            for value in connector.fetch_first_column(sql, placeholders):
                result = to_number(value)
                rows += 1
            if rows > 1:
                logger.info("Query on '%s' returned %d rows, using the last one", alias, rows)
            return result
        finally:
            connector.close()
