"""Kubernetes read/write interface shared by the handlers."""

from __future__ import annotations

import time
from typing import Any, Callable

from kubernetes import client
from kubernetes.client.exceptions import ApiException

from .. import metrics
from ..constants import (
    CERT_MANAGER_GROUP,
    CERT_MANAGER_PLURAL,
    CERT_MANAGER_VERSION,
    FIELD_MANAGER,
)
from ..utils.errors import NotFoundError
from ..utils.rate_limit import is_rate_limit_error, rate_limit_k8s

MAX_RATE_LIMIT_RETRIES = 3


class KubeClient:
    """Thin wrapper around the Kubernetes API used by the addon.

    Every call is rate limited, retried on throttling, and recorded in the
    ``api_call_*`` metrics. A 404 from the API is raised as
    :class:`NotFoundError`.
    """

    def __init__(
        self,
        core_api: client.CoreV1Api | None = None,
        custom_api: client.CustomObjectsApi | None = None,
    ):
        self.core_api = core_api or client.CoreV1Api()
        self.custom_api = custom_api or client.CustomObjectsApi()

    def _call(self, operation: str, func: Callable[..., Any], **kwargs: Any) -> Any:
        start_time = time.time()
        try:
            for attempt in range(MAX_RATE_LIMIT_RETRIES + 1):
                try:
                    result = rate_limit_k8s(func)(**kwargs)
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="success").inc()
                    return result
                except ApiException as e:
                    if is_rate_limit_error(e) and attempt < MAX_RATE_LIMIT_RETRIES:
                        # Exponential backoff: 1s, 2s, 4s
                        time.sleep(2 ** attempt)
                        continue
                    metrics.api_call_total.labels(api_type="k8s", operation=operation, result="error").inc()
                    if e.status == 404:
                        raise NotFoundError(
                            "object not found",
                            operation=operation,
                            namespace=kwargs.get("namespace"),
                            name=kwargs.get("name"),
                        ) from e
                    raise
        finally:
            duration = time.time() - start_time
            metrics.api_call_duration_seconds.labels(api_type="k8s", operation=operation).observe(duration)

    def get_config_map(self, namespace: str, name: str) -> client.V1ConfigMap:
        return self._call(
            "get_configmap", self.core_api.read_namespaced_config_map, name=name, namespace=namespace
        )

    def get_secret(self, namespace: str, name: str) -> client.V1Secret:
        return self._call(
            "get_secret", self.core_api.read_namespaced_secret, name=name, namespace=namespace
        )

    def get_custom_object(
        self,
        group: str,
        version: str,
        plural: str,
        namespace: str,
        name: str,
    ) -> dict[str, Any]:
        return self._call(
            f"get_{plural}",
            self.custom_api.get_namespaced_custom_object,
            group=group,
            version=version,
            plural=plural,
            namespace=namespace,
            name=name,
        )

    def apply_certificate(self, certificate: dict[str, Any]) -> dict[str, Any]:
        """Create a cert-manager Certificate, patching it if it already exists."""
        meta = certificate["metadata"]
        try:
            return self._call(
                "create_certificate",
                self.custom_api.create_namespaced_custom_object,
                group=CERT_MANAGER_GROUP,
                version=CERT_MANAGER_VERSION,
                plural=CERT_MANAGER_PLURAL,
                namespace=meta["namespace"],
                body=certificate,
                field_manager=FIELD_MANAGER,
            )
        except ApiException as e:
            if e.status != 409:
                raise
        return self._call(
            "patch_certificate",
            self.custom_api.patch_namespaced_custom_object,
            group=CERT_MANAGER_GROUP,
            version=CERT_MANAGER_VERSION,
            plural=CERT_MANAGER_PLURAL,
            namespace=meta["namespace"],
            name=meta["name"],
            body=certificate,
            field_manager=FIELD_MANAGER,
        )


def get_k8s_client() -> KubeClient:
    """Get the addon Kubernetes client.

    Returns:
        KubeClient backed by in-cluster config, or the local kubeconfig
    """
    from kubernetes import config

    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()

    return KubeClient()
