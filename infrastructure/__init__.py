"""Infrastructure layer — runtime observability for live pitch tracking.

Modules:
    metrics     Prometheus metrics registry and latency timer.
"""
