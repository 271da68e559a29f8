import re
from typing import Optional
from pydantic import BaseModel
from .domain.models import MetricRecord, StatusResult
from .thresholds.evaluator import format_value

_LABEL_NEEDS_QUOTES = re.compile(r"[\s'=]")

def format_perfdata(metric: MetricRecord) -> str:
    """label=value;warn;crit as described by the Nagios plugin guidelines."""
    label = metric.label
    if _LABEL_NEEDS_QUOTES.search(label):
        label = "'{}'".format(label.replace("'", "''"))
    fields = [format_value(metric.value), metric.warning or "", metric.critical or ""]
    return f"{label}={';'.join(fields).rstrip(';')}"

class PluginOutput(BaseModel):
    """The single status line printed by the probe."""
    shortname: str
    result: StatusResult

    @property
    def exit_code(self) -> int:
        return int(self.result.status)

    @property
    def perfdata(self) -> Optional[str]:
        if self.result.metric is None:
            return None
        return format_perfdata(self.result.metric)

    def render(self) -> str:
        line = f"{self.shortname} {self.result.status.name} - {self.result.message}"
        if self.perfdata:
            line += f" | {self.perfdata}"
        return line
