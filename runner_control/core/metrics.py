"""
Prometheus Metrics for GitHub API Calls

Counters and histograms for every outbound call made by the gateway and the
credential provider. Registered on the default prometheus_client REGISTRY so
a host process can expose them with its own /metrics endpoint.
"""

import logging

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)

# =============================================================================
# External API Metrics
# =============================================================================

external_api_requests_total = Counter(
    "runner_control_external_api_requests_total",
    "Total external API requests by service",
    ["service"],
)

external_api_errors_total = Counter(
    "runner_control_external_api_errors_total",
    "Total external API errors by service",
    ["service"],
)

external_api_duration_seconds = Histogram(
    "runner_control_external_api_duration_seconds",
    "External API request duration in seconds",
    ["service"],
    buckets=(0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)

# =============================================================================
# Credential Metrics
# =============================================================================

credential_mints_total = Counter(
    "runner_control_credential_mints_total",
    "Installation token mints by outcome",
    ["outcome"],
)
