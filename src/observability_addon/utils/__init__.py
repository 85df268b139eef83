"""Utility functions for the Multicluster Observability Addon."""

from .conditions import (
    set_config_invalid_condition,
    set_ready_condition,
    set_template_not_found_condition,
    update_condition,
)
from .errors import (
    AddonError,
    ClassificationConflict,
    MalformedConfigError,
    MissingFieldError,
    NotFoundError,
    SecretNotReadyError,
    UnsupportedAuthMethodError,
    sanitize_exception,
)
from .events import emit_event
from .rate_limit import rate_limit_k8s
from .secrets import build_secret, read_secret_data

__all__ = [
    "update_condition",
    "set_ready_condition",
    "set_config_invalid_condition",
    "set_template_not_found_condition",
    "AddonError",
    "ClassificationConflict",
    "MalformedConfigError",
    "MissingFieldError",
    "NotFoundError",
    "SecretNotReadyError",
    "UnsupportedAuthMethodError",
    "sanitize_exception",
    "emit_event",
    "rate_limit_k8s",
    "build_secret",
    "read_secret_data",
]
