from typing import Any, Iterator, Optional, Protocol, Sequence
from .models import Number, StatusResult
from ..thresholds.range import Thresholds

class QueryConnector(Protocol):
    """A single-use connection able to run one read-only query."""
    db_alias: str

    def connect(self) -> None:
        ...

    def close(self) -> None:
        ...

    def fetch_first_column(self, sql: str, placeholders: Sequence[str] = ()) -> Iterator[Any]:
        ...

class ResultEvaluator(Protocol):
    def evaluate(self, value: Optional[Number], thresholds: Thresholds) -> StatusResult:
        ...
