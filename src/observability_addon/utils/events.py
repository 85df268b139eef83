"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_OPTIONS_BUILT,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_SECRETS_PROVISIONED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_options_built(meta: dict[str, Any], signal: str, exporters: int) -> None:
    """Emit options built event."""
    emit_event(
        meta,
        EVENT_REASON_OPTIONS_BUILT,
        f"Options for {signal} built with {exporters} exporter resources",
    )


def emit_secrets_provisioned(meta: dict[str, Any], signal: str, count: int) -> None:
    """Emit secrets provisioned event."""
    emit_event(meta, EVENT_REASON_SECRETS_PROVISIONED, f"{count} {signal} secrets provisioned")
