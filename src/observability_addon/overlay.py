"""Overlay of endpoint and TLS settings onto collector exporters."""

from __future__ import annotations

from typing import Any

from kubernetes import client

from .constants import KEY_CA_BUNDLE, KEY_ENDPOINT, KEY_TLS_CERT, KEY_TLS_KEY
from .document import exporter_entry, exporters_section
from .utils.errors import MissingFieldError


def _annotation(obj: client.V1ConfigMap | client.V1Secret, key: str) -> str | None:
    annotations = (obj.metadata.annotations if obj.metadata else None) or {}
    return annotations.get(key)


def secret_mount_path(secret_name: str) -> str:
    """Directory the renderer mounts a secret at."""
    return f"/{secret_name}"


def tls_settings(secret_name: str) -> dict[str, Any]:
    folder = secret_mount_path(secret_name)
    return {
        "insecure": False,
        "cert_file": f"{folder}/{KEY_TLS_CERT}",
        "key_file": f"{folder}/{KEY_TLS_KEY}",
        "ca_file": f"{folder}/{KEY_CA_BUNDLE}",
    }


def configure_exporters_endpoints(
    cfg: dict[str, Any],
    config_map: client.V1ConfigMap,
    annotation_key: str,
) -> None:
    """Set the endpoint of the exporter named by the ConfigMap annotation.

    Args:
        cfg: Collector configuration, modified in place
        config_map: ConfigMap holding ``endpoint``
        annotation_key: Annotation naming the target exporter

    Raises:
        MalformedConfigError: If the configuration has no usable exporters section
        MissingFieldError: If the ConfigMap has no ``endpoint`` value
    """
    name = _annotation(config_map, annotation_key)
    if name is None:
        return

    exporters = exporters_section(cfg)
    url = (config_map.data or {}).get(KEY_ENDPOINT)
    if not url:
        raise MissingFieldError(
            f"no value for '{KEY_ENDPOINT}' in configmap", name=config_map.metadata.name
        )
    exporter_entry(exporters, name)["endpoint"] = url


def configure_exporters_secrets(
    cfg: dict[str, Any],
    secret: client.V1Secret,
    annotation_key: str,
) -> None:
    """Point the TLS settings of the annotated exporter at the secret mount.

    Raises:
        MalformedConfigError: If the configuration has no usable exporters section
    """
    name = _annotation(secret, annotation_key)
    if name is None:
        return

    exporter = exporter_entry(exporters_section(cfg), name)
    exporter["tls"] = tls_settings(secret.metadata.name)
