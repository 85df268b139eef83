"""Per-target secret provisioning."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kubernetes import client

from .. import metrics
from ..constants import (
    CERT_MANAGER_GROUP,
    CERT_MANAGER_VERSION,
    FIELD_MANAGER,
    KEY_CA_BUNDLE,
    KIND_CERTIFICATE,
    LABEL_MANAGED_BY,
)
from ..utils.errors import NotFoundError, SecretNotReadyError
from ..utils.secrets import build_secret, read_secret_data
from .config import AuthConfig, AuthMethod, ObjectKey

if TYPE_CHECKING:
    from ..handlers.shared import KubeClient
    from ..signals import SignalProfile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetSecretRequest:
    """Secret material that must exist for one target output."""

    target: str
    method: AuthMethod
    secret_key: ObjectKey
    source: ObjectKey
    certificate: dict[str, Any] | None = None


class SecretsProvider:
    """Turns an authentication map into resolved per-target secrets."""

    def __init__(
        self,
        api: KubeClient,
        cluster_namespace: str,
        profile: SignalProfile,
        auth_config: AuthConfig,
        ca_secret: client.V1Secret | None = None,
    ):
        """Initialize the provider.

        Args:
            api: Kubernetes client collaborator
            cluster_namespace: Namespace of the managed cluster on the hub
            profile: Signal family the secrets are provisioned for
            auth_config: Shared default template; never modified
            ca_secret: Optional secret holding the CA bundle to inject
        """
        self.api = api
        self.cluster_namespace = cluster_namespace
        self.profile = profile
        self.auth_config = auth_config
        self.ca_secret = ca_secret

    def secret_name(self, target: str) -> str:
        return f"{self.profile.signal.value}-{target}-auth"

    def generate_secrets(self, auth_map: dict[str, AuthMethod]) -> list[TargetSecretRequest]:
        """Produce one secret request per target output.

        Raises:
            MissingFieldError: If the CA secret lacks ``ca.crt``; no request is produced
        """
        config = self.auth_config.for_cluster(self.cluster_namespace, self.ca_secret)

        requests = []
        for target, method in auth_map.items():
            secret_key = ObjectKey(namespace=self.cluster_namespace, name=self.secret_name(target))
            if method == AuthMethod.STATIC:
                requests.append(
                    TargetSecretRequest(
                        target=target,
                        method=method,
                        secret_key=secret_key,
                        source=config.static_existing_secret,
                    )
                )
            else:
                requests.append(
                    TargetSecretRequest(
                        target=target,
                        method=method,
                        secret_key=secret_key,
                        source=secret_key,
                        certificate=self._build_certificate(config, secret_key),
                    )
                )
        return requests

    def _build_certificate(self, config: AuthConfig, secret_key: ObjectKey) -> dict[str, Any]:
        mtls = config.mtls
        spec: dict[str, Any] = {
            "commonName": mtls.common_name,
            "secretName": secret_key.name,
            "dnsNames": list(mtls.dns_names),
            "usages": ["client auth", "key encipherment", "digital signature"],
            "privateKey": {"algorithm": "RSA", "encoding": "PKCS8", "size": 4096},
            "issuerRef": {
                "name": mtls.issuer_name,
                "kind": mtls.issuer_kind,
                "group": CERT_MANAGER_GROUP,
            },
        }
        subject = mtls.subject.to_dict()
        if subject:
            spec["subject"] = subject
        return {
            "apiVersion": f"{CERT_MANAGER_GROUP}/{CERT_MANAGER_VERSION}",
            "kind": KIND_CERTIFICATE,
            "metadata": {
                "name": secret_key.name,
                "namespace": secret_key.namespace,
                "labels": {LABEL_MANAGED_BY: FIELD_MANAGER},
            },
            "spec": spec,
        }

    def fetch_secrets(
        self,
        requests: list[TargetSecretRequest],
        annotation_key: str,
    ) -> list[client.V1Secret]:
        """Resolve every request to a concrete secret, in request order.

        Args:
            requests: Output of :meth:`generate_secrets`
            annotation_key: Annotation carrying the target output name

        Returns:
            New secret objects annotated with their target output name

        Raises:
            SecretNotReadyError: If a referenced or issued secret does not exist yet
        """
        ca = self.auth_config.for_cluster(self.cluster_namespace, self.ca_secret).mtls.ca_to_inject

        resolved = []
        for request in requests:
            if request.certificate is not None:
                self.api.apply_certificate(request.certificate)
            try:
                source = self.api.get_secret(request.source.namespace, request.source.name)
            except NotFoundError as e:
                raise SecretNotReadyError(
                    f"{request.method.value} secret not available yet",
                    target=request.target,
                    secret=f"{request.source.namespace}/{request.source.name}",
                ) from e
            data = read_secret_data(source)
            if request.method == AuthMethod.MTLS and ca is not None:
                data[KEY_CA_BUNDLE] = ca

            resolved.append(
                build_secret(
                    name=request.secret_key.name,
                    namespace=request.secret_key.namespace,
                    data=data,
                    annotations={annotation_key: request.target},
                    labels={LABEL_MANAGED_BY: FIELD_MANAGER},
                    secret_type=source.type or "Opaque",
                )
            )
            metrics.secrets_provisioned_total.labels(
                signal=self.profile.signal.value, method=request.method.value
            ).inc()
            logger.info(f"resolved {request.method.value} secret {request.secret_key} for target {request.target}")
        return resolved
