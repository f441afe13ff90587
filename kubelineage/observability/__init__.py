"""Logging and metrics for kubelineage.

Submodules:
    logging -- structlog configuration and component-bound loggers.
    metrics -- Prometheus counters and histograms for graph builds.
"""
