"""Run a configured SQL query and check its result against Nagios thresholds."""

__version__ = "1.0.0"
