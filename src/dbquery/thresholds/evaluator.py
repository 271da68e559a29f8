import logging
from typing import Optional
from ..domain.models import MetricRecord, Number, StatusLevel, StatusResult
from .range import Thresholds

logger = logging.getLogger(__name__)

UNDEFINED = "undefined"

def format_value(value: Optional[Number]) -> str:
    if value is None:
        return UNDEFINED
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

class ThresholdEvaluator:
    """
    Classifies a query result. Critical is checked before warning, so a value
    breaching both ranges is CRITICAL. A missing value is CRITICAL and carries
    no metric.
    """
    def __init__(self, label: str = "result"):
        self.label = label

    def check_threshold(self, value: Number, thresholds: Thresholds) -> StatusLevel:
        if thresholds.critical is not None and thresholds.critical.breaches(value):
            return StatusLevel.CRITICAL
        if thresholds.warning is not None and thresholds.warning.breaches(value):
            return StatusLevel.WARNING
        return StatusLevel.OK

    def evaluate(self, value: Optional[Number], thresholds: Thresholds) -> StatusResult:
        message = f"Result from query is {format_value(value)}"
        if value is None:
            logger.debug("Query returned no numeric value")
            return StatusResult(status=StatusLevel.CRITICAL, value=None, message=message)

        status = self.check_threshold(value, thresholds)
        logger.debug("Value %s classified as %s", value, status.name)
        metric = MetricRecord(
            label=self.label,
            value=value,
            warning=str(thresholds.warning) if thresholds.warning is not None else None,
            critical=str(thresholds.critical) if thresholds.critical is not None else None,
        )
        return StatusResult(status=status, value=value, message=message, metric=metric)
