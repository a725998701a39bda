"""Expand OpsGenie configuration blocks for integration actions, schedules, notification policies and rules, and maintenance windows into API requests, and flatten API results back into state."""

__version__ = "0.1.0"