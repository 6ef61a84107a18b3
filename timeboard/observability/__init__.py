"""Observability: structured logging, metrics and request context.

Uses structlog for logging and Prometheus for metrics.
"""
