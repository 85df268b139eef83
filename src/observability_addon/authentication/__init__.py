"""Authentication material provisioning for target outputs."""

from .config import (
    AuthConfig,
    AuthMethod,
    MTLSConfig,
    ObjectKey,
    X509Subject,
    build_authentication_map,
)
from .provider import SecretsProvider, TargetSecretRequest

__all__ = [
    "AuthConfig",
    "AuthMethod",
    "MTLSConfig",
    "ObjectKey",
    "X509Subject",
    "build_authentication_map",
    "SecretsProvider",
    "TargetSecretRequest",
]
