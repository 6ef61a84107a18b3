"""Timeboard: a resilient read/write front for a rate-limited time-tracking API."""

__version__ = "0.1.0"
