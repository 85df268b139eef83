"""Handler for the observability ManagedClusterAddOn."""

from __future__ import annotations

from typing import Any, Callable

import kopf

from .. import metrics
from ..classifier import exporter_name
from ..constants import (
    ADDON_GROUP,
    ADDON_GROUP_VERSION,
    ADDON_NAME,
    ADDON_VERSION,
    KIND_MANAGED_CLUSTER_ADDON,
    RESOURCE_ADDON_DEPLOYMENT_CONFIGS,
)
from ..options import Options, build_options, template_reference
from ..render import render_values
from ..signals import PROFILES, SignalProfile
from ..tracing import trace_span
from ..utils.conditions import (
    clear_failure_conditions,
    set_config_invalid_condition,
    set_ready_condition,
    set_secrets_not_ready_condition,
    set_template_not_found_condition,
)
from ..utils.errors import (
    MalformedConfigError,
    MissingFieldError,
    NotFoundError,
    SecretNotReadyError,
    UnsupportedAuthMethodError,
    sanitize_exception,
)
from ..utils.events import emit_options_built, emit_secrets_provisioned
from .base import BaseHandler
from .shared import KubeClient, get_k8s_client

TEMPLATE_RETRY_DELAY_SECONDS = 60
SECRETS_RETRY_DELAY_SECONDS = 15
CONFIG_RETRY_DELAY_SECONDS = 30


class AddonHandler(BaseHandler):
    """Handler for the ManagedClusterAddOn of the observability addon."""

    def __init__(self, api_factory: Callable[[], KubeClient] = get_k8s_client):
        """Initialize addon handler.

        Args:
            api_factory: Returns the Kubernetes client used per reconciliation
        """
        super().__init__(KIND_MANAGED_CLUSTER_ADDON)
        self.api_factory = api_factory

    def get_deployment_config(self, api: KubeClient, body: dict[str, Any]) -> dict[str, Any] | None:
        """Fetch the AddOnDeploymentConfig referenced by the addon, if any."""
        meta = body.get("metadata", {})
        for config in body.get("spec", {}).get("configs", []) or []:
            if config.get("resource") != RESOURCE_ADDON_DEPLOYMENT_CONFIGS:
                continue
            try:
                return api.get_custom_object(
                    group=ADDON_GROUP,
                    version=ADDON_VERSION,
                    plural=RESOURCE_ADDON_DEPLOYMENT_CONFIGS,
                    namespace=config.get("namespace", ""),
                    name=config.get("name", ""),
                )
            except NotFoundError as e:
                self.log_warning(meta, "AddOnDeploymentConfig not found", reason="DeploymentConfigNotFound",
                                 error=sanitize_exception(e))
        return None

    def summarize(self, options: Options, profile: SignalProfile) -> dict[str, Any]:
        exporters = set()
        for obj in [*options.config_maps, *options.secrets]:
            name = exporter_name(obj, profile)
            if name is not None:
                exporters.add(name)
        return {
            "exporters": sorted(exporters),
            "configMaps": [cm.metadata.name for cm in options.config_maps],
            "secrets": [secret.metadata.name for secret in options.secrets],
        }

    def reconcile(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> dict[str, Any]:
        """Build and render options for every signal the addon references.

        Returns:
            Per-signal summary of exporters, ConfigMaps and secrets
        """
        api = self.api_factory()
        generation = meta.get("generation", 0)
        conditions = status.get("conditions", [])
        deployment_config = self.get_deployment_config(api, body)

        summary: dict[str, Any] = {}
        for profile in PROFILES:
            if template_reference(body, profile) is None:
                continue
            signal = profile.signal.value

            with trace_span("build_options", kind=self.kind, attributes={"signal": signal}):
                try:
                    options = build_options(api, body, deployment_config, profile)
                    values = render_values(options, profile)
                except SecretNotReadyError as e:
                    metrics.options_build_total.labels(signal=signal, result="secrets_not_ready").inc()
                    message = f"{signal} secrets not ready: {sanitize_exception(e)}"
                    patch.status["conditions"] = set_secrets_not_ready_condition(conditions, message, generation)
                    raise kopf.TemporaryError(message, delay=SECRETS_RETRY_DELAY_SECONDS) from e
                except NotFoundError as e:
                    metrics.options_build_total.labels(signal=signal, result="not_found").inc()
                    message = f"{signal} template unavailable: {sanitize_exception(e)}"
                    patch.status["conditions"] = set_template_not_found_condition(conditions, message, generation)
                    raise kopf.TemporaryError(message, delay=TEMPLATE_RETRY_DELAY_SECONDS) from e
                except (MissingFieldError, MalformedConfigError, UnsupportedAuthMethodError) as e:
                    # Referenced ConfigMaps and Secrets are not watched, so fixes there only show up on retry
                    metrics.options_build_total.labels(signal=signal, result="invalid").inc()
                    message = f"{signal} configuration invalid: {sanitize_exception(e)}"
                    patch.status["conditions"] = set_config_invalid_condition(conditions, message, generation)
                    raise kopf.TemporaryError(message, delay=CONFIG_RETRY_DELAY_SECONDS) from e

            metrics.options_build_total.labels(signal=signal, result="success").inc()
            emit_options_built(meta, signal, len(options.config_maps) + len(options.secrets))
            if options.secrets:
                emit_secrets_provisioned(meta, signal, len(options.secrets))

            summary[signal] = self.summarize(options, profile)
            self.log_info(
                meta,
                f"Rendered {signal} values",
                event="render",
                reason="OptionsBuilt",
                exporters=summary[signal]["exporters"],
                volumes=len(values["spec"].get("volumes", [])),
            )

        conditions = clear_failure_conditions(conditions, generation)
        patch.status["conditions"] = set_ready_condition(
            conditions, True, "Observability configuration rendered", generation
        )
        return summary


def is_observability_addon(name: str, **_: Any) -> bool:
    """Only the addon named after this project is reconciled."""
    return name == ADDON_NAME


# Global handler instance
_handler = AddonHandler()


@kopf.on.create(ADDON_GROUP_VERSION, KIND_MANAGED_CLUSTER_ADDON, when=is_observability_addon)
@kopf.on.update(ADDON_GROUP_VERSION, KIND_MANAGED_CLUSTER_ADDON, when=is_observability_addon)
@kopf.on.resume(ADDON_GROUP_VERSION, KIND_MANAGED_CLUSTER_ADDON, when=is_observability_addon)
def handle_addon(
    body: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle ManagedClusterAddOn reconciliation.

    Only ``status.conditions`` is written; the per-signal summary is logged
    because the addon status schema has no field for it.
    """
    summary = _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(body, meta, status, patch))
    _handler.log_info(meta, "Reconciliation finished", event="reconcile", reason="Reconciled", signals=summary)
