"""Structured logging configuration for the Multicluster Observability Addon."""

import json
import logging
import sys
from typing import Any

from .utils.errors import SENSITIVE_FIELDS


def setup_structured_logging(level: int = logging.INFO) -> None:
    """Configure structured JSON logging."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def log_resource_event(
    logger: logging.Logger,
    controller: str,
    resource_kind: str,
    resource_name: str,
    namespace: str,
    uid: str,
    event: str,
    reason: str,
    message: str,
    level: int = logging.INFO,
    **kwargs: Any,
) -> None:
    """Log a structured resource event."""
    log_data = {
        "controller": controller,
        "resource": resource_kind,
        "name": resource_name,
        "namespace": namespace,
        "uid": uid,
        "event": event,
        "reason": reason,
        "message": message,
    }
    log_data.update(sanitize_secrets(kwargs))
    logger.log(level, json.dumps(log_data, default=str))


def sanitize_secrets(log_data: dict[str, Any]) -> dict[str, Any]:
    """Redact certificate and key material from log fields.

    Only fields named after secret data keys are redacted; other fields are
    passed through untouched.
    """
    secret_fields = SENSITIVE_FIELDS | {"ca_to_inject", "secret_data"}
    return {
        key: "***REDACTED***" if key.lower() in secret_fields else value
        for key, value in log_data.items()
    }
