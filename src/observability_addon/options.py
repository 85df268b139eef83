"""Options aggregation for one signal family of a ManagedClusterAddOn."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from kubernetes import client

from . import metrics
from .authentication import SecretsProvider, build_authentication_map
from .classifier import ResourceKind, classify
from .constants import RESOURCE_CONFIGMAPS, RESOURCE_SECRETS
from .utils.errors import AddonError, ClassificationConflict, NotFoundError

if TYPE_CHECKING:
    from .handlers.shared import KubeClient
    from .signals import SignalProfile

logger = logging.getLogger(__name__)


@dataclass
class Options:
    """Everything the chart renderer needs for one signal of one cluster."""

    cluster_name: str
    template: dict[str, Any] = field(default_factory=dict)
    config_maps: list[client.V1ConfigMap] = field(default_factory=list)
    secrets: list[client.V1Secret] = field(default_factory=list)
    deployment_config: dict[str, Any] | None = None


def _object_ref(obj: Any) -> str:
    return f"{obj.metadata.namespace}/{obj.metadata.name}"


def _check_slot(current: Any, candidate: Any, slot: str) -> None:
    if current is not None:
        raise ClassificationConflict(
            f"{slot} already set",
            current=_object_ref(current),
            new=_object_ref(candidate),
        )


def template_reference(addon: dict[str, Any], profile: SignalProfile) -> dict[str, Any] | None:
    """Return the config reference of the signal template, if the addon has one."""
    template = profile.template
    for ref in (addon.get("status") or {}).get("configReferences") or []:
        if ref.get("group") == template.group and ref.get("resource") == template.plural:
            return ref
    return None


def get_template(api: KubeClient, addon: dict[str, Any], profile: SignalProfile) -> dict[str, Any]:
    """Fetch the template referenced by the addon for a signal family.

    Raises:
        NotFoundError: If the addon does not reference a template or it does not exist
    """
    template = profile.template
    ref = template_reference(addon, profile)
    if ref is None:
        raise NotFoundError(
            "no template referenced by the addon",
            kind=template.kind,
            addon=addon.get("metadata", {}).get("name"),
        )

    logger.info(f"Retrieving {template.kind} template {ref.get('namespace')}/{ref.get('name')}")
    return api.get_custom_object(
        group=template.group,
        version=template.version,
        plural=template.plural,
        namespace=ref.get("namespace", ""),
        name=ref.get("name", ""),
    )


def _read_config(api: KubeClient, config: dict[str, Any]) -> client.V1ConfigMap | client.V1Secret | None:
    resource = config.get("resource")
    namespace, name = config.get("namespace", ""), config.get("name", "")
    try:
        if resource == RESOURCE_CONFIGMAPS:
            logger.info(f"processing cm {namespace}/{name}")
            return api.get_config_map(namespace, name)
        if resource == RESOURCE_SECRETS:
            logger.info(f"processing secret {namespace}/{name}")
            return api.get_secret(namespace, name)
    except (AddonError, client.exceptions.ApiException) as e:
        logger.error(f"there was a problem processing {resource} '{namespace}/{name}': {e}")
    return None


def build_options(
    api: KubeClient,
    addon: dict[str, Any],
    deployment_config: dict[str, Any] | None,
    profile: SignalProfile,
) -> Options:
    """Build the Options of one signal family for a ManagedClusterAddOn.

    Args:
        api: Kubernetes client collaborator
        addon: ManagedClusterAddOn object
        deployment_config: Referenced AddOnDeploymentConfig, if any
        profile: Signal family to build for

    Returns:
        A fresh Options value

    Raises:
        NotFoundError: If the template cannot be fetched
        MissingFieldError: If the CA secret lacks ``ca.crt``
        UnsupportedAuthMethodError: If the auth ConfigMap names an unknown method
    """
    cluster_namespace = addon.get("metadata", {}).get("namespace", "")
    signal = profile.signal.value

    template = get_template(api, addon, profile)
    logger.info(f"{profile.template.kind} template found")

    options = Options(
        cluster_name=cluster_namespace,
        template=template,
        deployment_config=deployment_config,
    )

    auth_cm: client.V1ConfigMap | None = None
    ca_secret: client.V1Secret | None = None
    exporter_secrets: list[client.V1Secret] = []

    for config in addon.get("spec", {}).get("configs", []) or []:
        obj = _read_config(api, config)
        if obj is None:
            continue

        kind = classify(obj, profile)
        metrics.classified_resources_total.labels(
            signal=signal, resource=config.get("resource"), classification=kind.value
        ).inc()

        if kind == ResourceKind.IRRELEVANT:
            continue
        if kind == ResourceKind.AUTH_DEFINITION:
            try:
                _check_slot(auth_cm, obj, "auth ConfigMap")
            except ClassificationConflict as conflict:
                logger.warning(str(conflict))
                metrics.classification_conflicts_total.labels(signal=signal, slot="auth").inc()
            auth_cm = obj
            logger.info(f"auth ConfigMap set: {_object_ref(obj)}")
        elif kind == ResourceKind.CA_BUNDLE:
            try:
                _check_slot(ca_secret, obj, "CA secret")
            except ClassificationConflict as conflict:
                logger.warning(str(conflict))
                metrics.classification_conflicts_total.labels(signal=signal, slot="ca").inc()
            ca_secret = obj
            logger.info(f"CA secret set: {_object_ref(obj)}")
        elif isinstance(obj, client.V1ConfigMap):
            options.config_maps.append(obj)
        else:
            exporter_secrets.append(obj)

    if ca_secret is None:
        logger.warning("no CA was found")

    options.secrets.extend(exporter_secrets)

    if auth_cm is not None:
        provider = SecretsProvider(
            api,
            cluster_namespace,
            profile,
            profile.auth_default_config,
            ca_secret=ca_secret,
        )
        requests = provider.generate_secrets(build_authentication_map(auth_cm.data))
        options.secrets.extend(provider.fetch_secrets(requests, profile.target_output_annotation))

    return options
