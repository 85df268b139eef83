"""Authentication templates and the authentication map."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import Enum

from kubernetes import client

from ..constants import KEY_CA_BUNDLE
from ..utils.errors import MissingFieldError, UnsupportedAuthMethodError
from ..utils.secrets import read_secret_data

DEFAULT_ISSUER_NAME = os.getenv("CERT_ISSUER_NAME", "mcoa-ca-issuer")


class AuthMethod(str, Enum):
    """Authentication method declared for a target output."""

    STATIC = "StaticAuthentication"
    MTLS = "mTLS"


@dataclass(frozen=True)
class ObjectKey:
    """Namespace-qualified name of a Kubernetes object."""

    namespace: str
    name: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class X509Subject:
    """Subject fields of a requested certificate."""

    organizations: tuple[str, ...] = ()
    organizational_units: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        subject: dict[str, list[str]] = {}
        if self.organizations:
            subject["organizations"] = list(self.organizations)
        if self.organizational_units:
            subject["organizationalUnits"] = list(self.organizational_units)
        return subject


@dataclass(frozen=True)
class MTLSConfig:
    """Template for mutual-TLS material requested per target.

    Instances are immutable; per-cluster values are derived with
    :meth:`with_common_name` and :meth:`with_ca`.
    """

    common_name: str = ""
    subject: X509Subject = field(default_factory=X509Subject)
    dns_names: tuple[str, ...] = ()
    ca_to_inject: bytes | None = None
    issuer_name: str = DEFAULT_ISSUER_NAME
    issuer_kind: str = "ClusterIssuer"

    def with_common_name(self, common_name: str) -> MTLSConfig:
        return replace(self, common_name=common_name)

    def with_ca(self, ca: bytes | None) -> MTLSConfig:
        return replace(self, ca_to_inject=ca)


@dataclass(frozen=True)
class AuthConfig:
    """Default authentication template of a signal family."""

    static_existing_secret: ObjectKey
    mtls: MTLSConfig

    def for_cluster(
        self,
        cluster_namespace: str,
        ca_secret: client.V1Secret | None = None,
    ) -> AuthConfig:
        """Derive the configuration used for one managed cluster.

        Args:
            cluster_namespace: Namespace of the managed cluster, used as Common Name
            ca_secret: Optional secret holding the CA bundle to inject

        Returns:
            A new configuration; ``self`` is left untouched

        Raises:
            MissingFieldError: If the CA secret has data but no ``ca.crt`` key
        """
        mtls = self.mtls.with_common_name(cluster_namespace)
        if ca_secret is not None:
            data = read_secret_data(ca_secret)
            if data:
                if KEY_CA_BUNDLE not in data:
                    raise MissingFieldError(
                        "missing ca bundle in secret",
                        key=KEY_CA_BUNDLE,
                        name=ca_secret.metadata.name,
                    )
                mtls = mtls.with_ca(data[KEY_CA_BUNDLE])
        return replace(self, mtls=mtls)


def build_authentication_map(data: dict[str, str] | None) -> dict[str, AuthMethod]:
    """Build the target-output-name to authentication method mapping.

    Args:
        data: Data of the authentication ConfigMap

    Returns:
        Mapping preserving the order of the ConfigMap data

    Raises:
        UnsupportedAuthMethodError: If a value is not a known method
    """
    auth_map: dict[str, AuthMethod] = {}
    for target, method in (data or {}).items():
        try:
            auth_map[target] = AuthMethod(method.strip())
        except ValueError as e:
            raise UnsupportedAuthMethodError(
                "unsupported authentication method", target=target, method=method
            ) from e
    return auth_map


STATIC_AUTHENTICATION_SECRET = ObjectKey(
    namespace="open-cluster-management",
    name="static-authentication",
)

LOGGING_AUTH_DEFAULT_CONFIG = AuthConfig(
    static_existing_secret=STATIC_AUTHENTICATION_SECRET,
    mtls=MTLSConfig(
        subject=X509Subject(organizational_units=("logging-ocm-addon",)),
        dns_names=("collector.openshift-logging.svc",),
    ),
)

OPENTELEMETRY_AUTH_DEFAULT_CONFIG = AuthConfig(
    static_existing_secret=STATIC_AUTHENTICATION_SECRET,
    mtls=MTLSConfig(
        subject=X509Subject(organizational_units=("opentelemetry-ocm-addon",)),
        dns_names=("otel-collector.spoke-otelcol.svc",),
    ),
)
