from .range import RangeKind, ThresholdRange, Thresholds
from .evaluator import ThresholdEvaluator, UNDEFINED, format_value

__all__ = ["RangeKind", "ThresholdRange", "Thresholds", "ThresholdEvaluator", "UNDEFINED", "format_value"]
