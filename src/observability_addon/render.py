"""Rendering of Options into the values handed to the chart renderer."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

import yaml
from kubernetes import client

from .document import expect_mapping
from .overlay import configure_exporters_endpoints, configure_exporters_secrets, secret_mount_path
from .utils.errors import MalformedConfigError

if TYPE_CHECKING:
    from .options import Options
    from .signals import SignalProfile


def configure_volumes(collector_spec: dict[str, Any], secret: client.V1Secret) -> None:
    """Mount a secret into the collector at ``/<secret-name>``.

    Calling it again for the same secret leaves the spec unchanged.
    """
    name = secret.metadata.name
    volumes = collector_spec.setdefault("volumes", [])
    if not any(v.get("name") == name for v in volumes):
        volumes.append({"name": name, "secret": {"secretName": name}})

    mounts = collector_spec.setdefault("volumeMounts", [])
    if not any(m.get("name") == name for m in mounts):
        mounts.append({"name": name, "mountPath": secret_mount_path(name)})


def _load_config(raw: Any) -> dict[str, Any]:
    if raw is None:
        raw = {}
    if isinstance(raw, str):
        try:
            raw = yaml.safe_load(raw) or {}
        except yaml.YAMLError as e:
            raise MalformedConfigError("collector config is not valid YAML", error=str(e)) from e
    return expect_mapping(raw, "spec.config")


def render_collector(options: Options, profile: SignalProfile) -> dict[str, Any]:
    """Return the template spec with exporters and volumes configured.

    The template held by ``options`` is not modified.
    """
    spec = copy.deepcopy(options.template.get("spec", {}) or {})
    if not profile.configures_exporters:
        return spec

    was_string = isinstance(spec.get("config"), str)
    cfg = _load_config(spec.get("config"))
    annotation = profile.target_output_annotation

    for config_map in options.config_maps:
        configure_exporters_endpoints(cfg, config_map, annotation)
    for secret in options.secrets:
        configure_exporters_secrets(cfg, secret, annotation)
        configure_volumes(spec, secret)

    spec["config"] = yaml.safe_dump(cfg, sort_keys=False) if was_string else cfg
    return spec


def render_values(options: Options, profile: SignalProfile) -> dict[str, Any]:
    """Build the values document for one signal family."""
    return {
        "clusterName": options.cluster_name,
        "signal": profile.signal.value,
        "spec": render_collector(options, profile),
        "secrets": [
            {
                "name": secret.metadata.name,
                "namespace": secret.metadata.namespace,
                "annotations": dict(secret.metadata.annotations or {}),
                "data": dict(secret.data or {}),
            }
            for secret in options.secrets
        ],
        "deploymentConfig": (options.deployment_config or {}).get("spec", {}),
    }
