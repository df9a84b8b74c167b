"""Cognitive-state telemetry: stamped local event logs and a sync aggregator."""

__version__ = "1.0.0"
