import logging
from pathlib import Path
from typing import List, Optional
from pydantic import BaseModel, Field
from .config import ProbeSettings, load_catalog, resolve_query_spec
from .connectors.dsn import build_target
from .domain.interfaces import ResultEvaluator
from .domain.models import StatusResult
from .exceptions import DbQueryException
from .executor import QueryExecutor
from .thresholds import ThresholdEvaluator, Thresholds

logger = logging.getLogger(__name__)

class ProbeRequest(BaseModel):
    """What the caller asked for; unset fields fall back to ProbeSettings."""
    database: str
    query: str
    warning: Optional[str] = None
    critical: Optional[str] = None
    conn_file: Optional[Path] = None
    placeholders: List[str] = Field(default_factory=list)

class QueryProbe:
    """
    Facade Pattern: thresholds -> catalog -> lookup -> connect/run -> evaluate.
    Any failure along the way ends the run as CRITICAL.
    """
    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        executor: Optional[QueryExecutor] = None,
        evaluator: Optional[ResultEvaluator] = None,
    ):
        self.settings = settings or ProbeSettings()
        self._executor = executor or QueryExecutor()
        self._evaluator = evaluator or ThresholdEvaluator(label=self.settings.metric_label)

    def run(self, request: ProbeRequest) -> StatusResult:
        try:
            return self._run(request)
        except DbQueryException as e:
            logger.debug("Probe failed: %s", e)
            return StatusResult.failure(str(e))

    def _run(self, request: ProbeRequest) -> StatusResult:
        # Parse thresholds before touching the database
        thresholds = Thresholds.parse(
            request.warning if request.warning is not None else self.settings.warning,
            request.critical if request.critical is not None else self.settings.critical,
        )

        conn_file = request.conn_file or self.settings.conn_file
        catalog = load_catalog(conn_file)
        query_spec = resolve_query_spec(catalog, request.database, request.query, conn_file)

        entry = query_spec.database
        entry.require_connection_fields()
        target = build_target(entry.dbd, entry.values)

        value = self._executor.execute(
            target,
            entry.username,
            entry.password,
            query_spec.sql,
            request.placeholders,
            alias=entry.id,
        )
        return self._evaluator.evaluate(value, thresholds)
