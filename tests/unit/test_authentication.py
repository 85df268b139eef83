"""Tests for authentication templates and secret provisioning."""

from __future__ import annotations

import base64
from unittest.mock import Mock

import pytest
from kubernetes import client

from observability_addon.authentication import (
    AuthMethod,
    ObjectKey,
    SecretsProvider,
    build_authentication_map,
)
from observability_addon.authentication.config import (
    LOGGING_AUTH_DEFAULT_CONFIG,
    OPENTELEMETRY_AUTH_DEFAULT_CONFIG,
)
from observability_addon.signals import OPENTELEMETRY_PROFILE
from observability_addon.utils.errors import (
    MissingFieldError,
    NotFoundError,
    SecretNotReadyError,
    UnsupportedAuthMethodError,
)
from observability_addon.utils.secrets import read_secret_data

ANNOTATION = OPENTELEMETRY_PROFILE.target_output_annotation


def b64(value: bytes) -> str:
    return base64.b64encode(value).decode("utf-8")


def ca_secret(data: dict[str, bytes]) -> client.V1Secret:
    return client.V1Secret(
        metadata=client.V1ObjectMeta(name="mcoa-ca", namespace="open-cluster-management"),
        data={key: b64(value) for key, value in data.items()},
    )


def issued_secret(name: str, namespace: str) -> client.V1Secret:
    return client.V1Secret(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace),
        type="kubernetes.io/tls",
        data={
            "tls.crt": b64(b"cert"),
            "tls.key": b64(b"key"),
            "ca.crt": b64(b"issuer-ca"),
        },
    )


class TestBuildAuthenticationMap:
    """Test cases for build_authentication_map."""

    def test_known_methods(self):
        """Test that methods are parsed in ConfigMap order."""
        auth_map = build_authentication_map({"otlphttp": "mTLS", "loki": "StaticAuthentication"})

        assert list(auth_map.items()) == [("otlphttp", AuthMethod.MTLS), ("loki", AuthMethod.STATIC)]

    def test_empty(self):
        """Test that a ConfigMap without data yields an empty map."""
        assert build_authentication_map(None) == {}

    def test_unknown_method(self):
        """Test that an unknown method is rejected."""
        with pytest.raises(UnsupportedAuthMethodError, match="otlphttp"):
            build_authentication_map({"otlphttp": "Kerberos"})


class TestAuthConfigForCluster:
    """Test cases for AuthConfig.for_cluster."""

    def test_sets_common_name_without_touching_default(self):
        """Test that the shared default template is never modified."""
        config = OPENTELEMETRY_AUTH_DEFAULT_CONFIG.for_cluster("cluster-1")

        assert config.mtls.common_name == "cluster-1"
        assert OPENTELEMETRY_AUTH_DEFAULT_CONFIG.mtls.common_name == ""
        assert config.mtls.dns_names == OPENTELEMETRY_AUTH_DEFAULT_CONFIG.mtls.dns_names

    def test_injects_ca(self):
        """Test that the CA bundle is read from ca.crt."""
        config = LOGGING_AUTH_DEFAULT_CONFIG.for_cluster("cluster-1", ca_secret({"ca.crt": b"custom-ca"}))

        assert config.mtls.ca_to_inject == b"custom-ca"
        assert LOGGING_AUTH_DEFAULT_CONFIG.mtls.ca_to_inject is None

    def test_missing_ca_key(self):
        """Test that a CA secret without ca.crt is rejected."""
        with pytest.raises(MissingFieldError, match="ca.crt"):
            OPENTELEMETRY_AUTH_DEFAULT_CONFIG.for_cluster("cluster-1", ca_secret({"tls.crt": b"x"}))

    def test_empty_ca_secret(self):
        """Test that an empty CA secret means no injection."""
        config = OPENTELEMETRY_AUTH_DEFAULT_CONFIG.for_cluster("cluster-1", ca_secret({}))

        assert config.mtls.ca_to_inject is None


class TestGenerateSecrets:
    """Test cases for SecretsProvider.generate_secrets."""

    def make_provider(self, api=None, ca=None) -> SecretsProvider:
        return SecretsProvider(
            api or Mock(),
            "cluster-1",
            OPENTELEMETRY_PROFILE,
            OPENTELEMETRY_AUTH_DEFAULT_CONFIG,
            ca_secret=ca,
        )

    def test_static_request(self):
        """Test that static targets reference the shared static secret."""
        requests = self.make_provider().generate_secrets({"loki": AuthMethod.STATIC})

        assert len(requests) == 1
        request = requests[0]
        assert request.target == "loki"
        assert request.secret_key == ObjectKey("cluster-1", "opentelemetry-loki-auth")
        assert request.source == ObjectKey("open-cluster-management", "static-authentication")
        assert request.certificate is None

    def test_mtls_request(self):
        """Test that mTLS targets carry a Certificate for the cluster."""
        requests = self.make_provider().generate_secrets({"otlphttp": AuthMethod.MTLS})

        certificate = requests[0].certificate
        assert certificate["kind"] == "Certificate"
        assert certificate["metadata"] == {
            "name": "opentelemetry-otlphttp-auth",
            "namespace": "cluster-1",
            "labels": {"app.kubernetes.io/managed-by": "multicluster-observability-addon"},
        }
        assert certificate["spec"]["commonName"] == "cluster-1"
        assert certificate["spec"]["secretName"] == "opentelemetry-otlphttp-auth"
        assert certificate["spec"]["subject"] == {"organizationalUnits": ["opentelemetry-ocm-addon"]}
        assert requests[0].source == requests[0].secret_key

    def test_preserves_order(self):
        """Test that requests follow the authentication map order."""
        auth_map = {"b": AuthMethod.MTLS, "a": AuthMethod.STATIC, "c": AuthMethod.MTLS}

        requests = self.make_provider().generate_secrets(auth_map)

        assert [r.target for r in requests] == ["b", "a", "c"]

    def test_idempotent(self):
        """Test that identical inputs yield identical requests."""
        provider = self.make_provider(ca=ca_secret({"ca.crt": b"custom-ca"}))
        auth_map = {"otlphttp": AuthMethod.MTLS, "loki": AuthMethod.STATIC}

        assert provider.generate_secrets(auth_map) == provider.generate_secrets(auth_map)

    def test_missing_ca_key_fails_every_time(self):
        """Test that a CA secret without ca.crt fails deterministically without side effects."""
        api = Mock()
        provider = self.make_provider(api=api, ca=ca_secret({"tls.crt": b"x"}))
        auth_map = {"otlphttp": AuthMethod.MTLS}

        for _ in range(2):
            with pytest.raises(MissingFieldError, match="missing ca bundle"):
                provider.generate_secrets(auth_map)

        assert api.method_calls == []


class TestFetchSecrets:
    """Test cases for SecretsProvider.fetch_secrets."""

    def test_resolves_in_request_order(self):
        """Test that secrets are annotated with their target and keep request order."""
        api = Mock()
        api.get_secret.side_effect = lambda namespace, name: issued_secret(name, namespace)
        provider = SecretsProvider(api, "cluster-1", OPENTELEMETRY_PROFILE, OPENTELEMETRY_AUTH_DEFAULT_CONFIG)
        requests = provider.generate_secrets({"otlphttp": AuthMethod.MTLS, "loki": AuthMethod.STATIC})

        secrets = provider.fetch_secrets(requests, ANNOTATION)

        assert [s.metadata.name for s in secrets] == ["opentelemetry-otlphttp-auth", "opentelemetry-loki-auth"]
        assert all(s.metadata.namespace == "cluster-1" for s in secrets)
        assert secrets[0].metadata.annotations == {ANNOTATION: "otlphttp"}
        assert secrets[1].metadata.annotations == {ANNOTATION: "loki"}
        api.apply_certificate.assert_called_once_with(requests[0].certificate)
        api.get_secret.assert_any_call("open-cluster-management", "static-authentication")

    def test_injects_ca_into_mtls_secrets(self):
        """Test that the injected CA replaces the issuer CA."""
        api = Mock()
        api.get_secret.side_effect = lambda namespace, name: issued_secret(name, namespace)
        provider = SecretsProvider(
            api,
            "cluster-1",
            OPENTELEMETRY_PROFILE,
            OPENTELEMETRY_AUTH_DEFAULT_CONFIG,
            ca_secret=ca_secret({"ca.crt": b"custom-ca"}),
        )
        requests = provider.generate_secrets({"otlphttp": AuthMethod.MTLS, "loki": AuthMethod.STATIC})

        mtls_secret, static_secret = provider.fetch_secrets(requests, ANNOTATION)

        assert read_secret_data(mtls_secret)["ca.crt"] == b"custom-ca"
        assert read_secret_data(mtls_secret)["tls.key"] == b"key"
        assert read_secret_data(static_secret)["ca.crt"] == b"issuer-ca"

    def test_not_issued_yet(self):
        """Test that a missing issued secret is reported as not ready."""
        api = Mock()
        api.get_secret.side_effect = NotFoundError("object not found")
        provider = SecretsProvider(api, "cluster-1", OPENTELEMETRY_PROFILE, OPENTELEMETRY_AUTH_DEFAULT_CONFIG)
        requests = provider.generate_secrets({"otlphttp": AuthMethod.MTLS})

        with pytest.raises(SecretNotReadyError, match="target=otlphttp"):
            provider.fetch_secrets(requests, ANNOTATION)
