"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_CONFIG_INVALID,
    COND_READY,
    COND_SECRETS_NOT_READY,
    COND_TEMPLATE_NOT_FOUND,
)

FAILURE_CONDITIONS = (COND_CONFIG_INVALID, COND_TEMPLATE_NOT_FOUND, COND_SECRETS_NOT_READY)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        New list of conditions; the input list is not modified
    """
    now = datetime.now(timezone.utc).isoformat()
    updated = [dict(cond) for cond in conditions]

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }
    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    for idx, existing in enumerate(updated):
        if existing.get("type") == condition_type:
            # Only move lastTransitionTime when the status flips
            if existing.get("status") == status:
                new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
            updated[idx] = new_condition
            return updated

    updated.append(new_condition)
    return updated


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return update_condition(
        conditions,
        COND_READY,
        "True" if status else "False",
        "ReconcileSucceeded" if status else "ReconcileFailed",
        message,
        observed_generation,
    )


def set_config_invalid_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ConfigInvalid condition and mark the addon as not ready."""
    conditions = update_condition(
        conditions, COND_CONFIG_INVALID, "True", "InvalidConfiguration", message, observed_generation
    )
    return set_ready_condition(conditions, False, message, observed_generation)


def set_template_not_found_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the TemplateNotFound condition and mark the addon as not ready."""
    conditions = update_condition(
        conditions, COND_TEMPLATE_NOT_FOUND, "True", "TemplateNotFound", message, observed_generation
    )
    return set_ready_condition(conditions, False, message, observed_generation)


def set_secrets_not_ready_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the SecretsNotReady condition and mark the addon as not ready."""
    conditions = update_condition(
        conditions, COND_SECRETS_NOT_READY, "True", "SecretsNotIssued", message, observed_generation
    )
    return set_ready_condition(conditions, False, message, observed_generation)


def clear_failure_conditions(
    conditions: list[dict[str, Any]],
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Flip failure conditions left by earlier reconciliations to "False".

    Failure conditions that were never set are not added.
    """
    present = {cond.get("type") for cond in conditions}
    for condition_type in FAILURE_CONDITIONS:
        if condition_type in present:
            conditions = update_condition(
                conditions, condition_type, "False", "Resolved", "Condition no longer applies", observed_generation
            )
    return conditions
