"""Prometheus metrics for the Multicluster Observability Addon."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "observability_addon_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "observability_addon_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0],
)

# Options build metrics
options_build_total = Counter(
    "observability_addon_options_build_total",
    "Total number of options builds",
    ["signal", "result"],
)

classified_resources_total = Counter(
    "observability_addon_classified_resources_total",
    "Total number of classified ConfigMaps and Secrets",
    ["signal", "resource", "classification"],
)

classification_conflicts_total = Counter(
    "observability_addon_classification_conflicts_total",
    "Total number of duplicate single-slot candidates",
    ["signal", "slot"],
)

secrets_provisioned_total = Counter(
    "observability_addon_secrets_provisioned_total",
    "Total number of resolved target secrets",
    ["signal", "method"],
)

# API call metrics
api_call_total = Counter(
    "observability_addon_api_call_total",
    "Total number of API calls",
    ["api_type", "operation", "result"],
)

api_call_duration_seconds = Histogram(
    "observability_addon_api_call_duration_seconds",
    "Duration of API calls in seconds",
    ["api_type", "operation"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0],
)

error_total = Counter(
    "observability_addon_error_total",
    "Total number of errors",
    ["kind", "error_type"],
)
