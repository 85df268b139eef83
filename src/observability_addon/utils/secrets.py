"""Utilities for reading and building Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii

from kubernetes import client


def decode_secret_value(value: str | bytes) -> bytes:
    """Decode a single value of ``V1Secret.data``.

    The API returns base64 encoded strings; values that are already raw bytes
    (different versions of the kubernetes client) are returned as-is.
    """
    if isinstance(value, bytes):
        return value
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        return value.encode("utf-8")


def read_secret_data(secret: client.V1Secret) -> dict[str, bytes]:
    """Return the decoded data of a secret.

    Args:
        secret: Kubernetes secret

    Returns:
        Dictionary of secret data (decoded)
    """
    return {key: decode_secret_value(value) for key, value in (secret.data or {}).items()}


def encode_secret_data(data: dict[str, bytes]) -> dict[str, str]:
    """Encode raw bytes into the base64 strings expected by ``V1Secret.data``."""
    return {key: base64.b64encode(value).decode("utf-8") for key, value in data.items()}


def build_secret(
    name: str,
    namespace: str,
    data: dict[str, bytes],
    annotations: dict[str, str] | None = None,
    labels: dict[str, str] | None = None,
    secret_type: str = "Opaque",
) -> client.V1Secret:
    """Build a new secret object.

    Args:
        name: Name of the secret
        namespace: Namespace of the secret
        data: Raw secret data (will be base64 encoded)
        annotations: Annotations for the secret
        labels: Labels for the secret
        secret_type: Kubernetes secret type

    Returns:
        Secret object, not yet persisted
    """
    return client.V1Secret(
        api_version="v1",
        kind="Secret",
        metadata=client.V1ObjectMeta(
            name=name,
            namespace=namespace,
            annotations=dict(annotations or {}),
            labels=dict(labels or {}),
        ),
        type=secret_type,
        data=encode_secret_data(data),
    )
