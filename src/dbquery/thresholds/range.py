"""
Nagios plugin threshold ranges.

See https://nagios-plugins.org/doc/guidelines.html#THRESHOLDFORMAT

    10      alert if value < 0 or > 10
    10:     alert if value < 10
    ~:10    alert if value > 10 (":10" is accepted as a shorthand)
    10:20   alert if value < 10 or > 20
    @10:20  alert if 10 <= value <= 20
"""
import math
import re
from enum import Enum
from typing import Optional
from pydantic import BaseModel
from ..exceptions import ThresholdParseError

_VALUE = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_START_RE = re.compile(rf"^({_VALUE})?:")
_END_RE = re.compile(rf"^{_VALUE}$")

class RangeKind(str, Enum):
    BOUNDED = "bounded"
    UNBOUNDED_BELOW = "unbounded_below"
    UNBOUNDED_ABOVE = "unbounded_above"
    UNBOUNDED = "unbounded"

def _format_bound(value: float) -> str:
    if math.isfinite(value) and value == int(value):
        return str(int(value))
    return repr(value)

class ThresholdRange(BaseModel, frozen=True):
    """
    A parsed range. start/end of None mean -inf/+inf; bounds are inclusive.
    alert_inside flips the sense from "alert outside" to "alert inside".
    """
    start: Optional[float] = 0.0
    end: Optional[float] = None
    alert_inside: bool = False

    @classmethod
    def parse(cls, expression: str) -> "ThresholdRange":
        # "10 : 20" reads the same as "10:20"
        text = "".join(str(expression).split())
        remaining = text
        alert_inside = False
        start: Optional[float] = 0.0
        end: Optional[float] = None
        valid = False

        if remaining.startswith("@"):
            alert_inside = True
            remaining = remaining[1:]

        start_infinite = remaining.startswith("~")
        if start_infinite:
            remaining = remaining[1:]
            start = None

        match = _START_RE.match(remaining)
        if match:
            if match.group(1) is not None:
                if start_infinite:
                    raise ThresholdParseError(f"Invalid threshold range '{text}'")
                start = float(match.group(1))
            elif not start_infinite and not remaining[match.end():]:
                # a lone ":" names neither bound
                raise ThresholdParseError(f"Invalid threshold range '{text}'")
            else:
                start = None
            remaining = remaining[match.end():]
            valid = True

        if remaining:
            if not _END_RE.match(remaining):
                raise ThresholdParseError(f"Invalid threshold range '{text}'")
            end = float(remaining)
            valid = True
        elif not match:
            valid = False

        if not valid:
            raise ThresholdParseError(f"Invalid threshold range '{text}'")
        if start is not None and end is not None and start > end:
            raise ThresholdParseError(
                f"Invalid threshold range '{text}': start {_format_bound(start)} is greater than end {_format_bound(end)}"
            )
        return cls(start=start, end=end, alert_inside=alert_inside)

    @property
    def kind(self) -> RangeKind:
        if self.start is not None and self.end is not None:
            return RangeKind.BOUNDED
        if self.start is None and self.end is not None:
            return RangeKind.UNBOUNDED_BELOW
        if self.start is not None:
            return RangeKind.UNBOUNDED_ABOVE
        return RangeKind.UNBOUNDED

    def contains(self, value: float) -> bool:
        if self.start is not None and not value >= self.start:
            return False
        if self.end is not None and not value <= self.end:
            return False
        return True

    def breaches(self, value: float) -> bool:
        """True when value lies in the alerting region of this range."""
        inside = self.contains(value)
        return inside if self.alert_inside else not inside

    def __str__(self) -> str:
        text = "@" if self.alert_inside else ""
        if self.start is None:
            text += "~:"
        elif self.start != 0 or self.end is None:
            text += f"{_format_bound(self.start)}:"
        if self.end is not None:
            text += _format_bound(self.end)
        return text

class Thresholds(BaseModel, frozen=True):
    warning: Optional[ThresholdRange] = None
    critical: Optional[ThresholdRange] = None

    @classmethod
    def parse(cls, warning: Optional[str] = None, critical: Optional[str] = None) -> "Thresholds":
        return cls(
            warning=ThresholdRange.parse(warning) if warning not in (None, "") else None,
            critical=ThresholdRange.parse(critical) if critical not in (None, "") else None,
        )
