"""Tests for the options aggregator."""

from __future__ import annotations

import base64
import logging
import threading
from unittest.mock import Mock

import pytest
from kubernetes import client

from observability_addon.authentication.config import OPENTELEMETRY_AUTH_DEFAULT_CONFIG
from observability_addon.constants import ANNOTATION_OTEL_CA, ANNOTATION_OTEL_TARGET_OUTPUT_NAME, LABEL_SIGNAL
from observability_addon.options import build_options, get_template, template_reference
from observability_addon.signals import LOGGING_PROFILE, OPENTELEMETRY_PROFILE
from observability_addon.utils.errors import MissingFieldError, NotFoundError

OTEL_LABELS = {LABEL_SIGNAL: "opentelemetry"}
HUB_NS = "open-cluster-management"
TEMPLATE = {"metadata": {"name": "mcoa-instance"}, "spec": {"config": "exporters:\n  otlphttp:\n"}}


def b64(value: bytes) -> str:
    return base64.b64encode(value).decode("utf-8")


def config_map(name, labels=OTEL_LABELS, annotations=None, data=None) -> client.V1ConfigMap:
    return client.V1ConfigMap(
        metadata=client.V1ObjectMeta(name=name, namespace=HUB_NS, labels=labels, annotations=annotations),
        data=data,
    )


def secret(name, namespace=HUB_NS, labels=OTEL_LABELS, annotations=None, data=None) -> client.V1Secret:
    return client.V1Secret(
        metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels, annotations=annotations),
        data={key: b64(value) for key, value in (data or {}).items()},
    )


def make_addon(cluster: str, configs: list[tuple[str, str]]) -> dict:
    return {
        "metadata": {"name": "multicluster-observability-addon", "namespace": cluster},
        "spec": {
            "configs": [
                {"group": "", "resource": resource, "namespace": HUB_NS, "name": name}
                for resource, name in configs
            ]
        },
        "status": {
            "configReferences": [
                {
                    "group": "opentelemetry.io",
                    "resource": "opentelemetrycollectors",
                    "namespace": HUB_NS,
                    "name": "mcoa-instance",
                }
            ]
        },
    }


def make_api(config_maps=(), secrets=()) -> Mock:
    """Mock KubeClient serving the given objects; issued secrets are generated on read."""
    cms = {cm.metadata.name: cm for cm in config_maps}
    hub_secrets = {s.metadata.name: s for s in secrets}

    def get_config_map(namespace, name):
        if name not in cms:
            raise NotFoundError("object not found", name=name)
        return cms[name]

    def get_secret(namespace, name):
        if namespace == HUB_NS:
            if name not in hub_secrets:
                raise NotFoundError("object not found", name=name)
            return hub_secrets[name]
        return secret(name, namespace=namespace, labels=None, data={"tls.crt": b"c", "tls.key": b"k"})

    api = Mock()
    api.get_custom_object.return_value = TEMPLATE
    api.get_config_map.side_effect = get_config_map
    api.get_secret.side_effect = get_secret
    return api


class TestGetTemplate:
    """Test cases for template lookup."""

    def test_reference_found(self):
        """Test that the template reference matching the family is used."""
        api = make_api()

        assert get_template(api, make_addon("cluster-1", []), OPENTELEMETRY_PROFILE) == TEMPLATE
        api.get_custom_object.assert_called_once_with(
            group="opentelemetry.io",
            version="v1alpha1",
            plural="opentelemetrycollectors",
            namespace=HUB_NS,
            name="mcoa-instance",
        )

    def test_no_reference(self):
        """Test that a family without a referenced template is not found."""
        addon = make_addon("cluster-1", [])

        assert template_reference(addon, LOGGING_PROFILE) is None
        with pytest.raises(NotFoundError, match="ClusterLogForwarder"):
            get_template(make_api(), addon, LOGGING_PROFILE)


class TestBuildOptions:
    """Test cases for build_options."""

    def test_template_not_found_is_fatal(self):
        """Test that a missing template aborts before any config is read."""
        api = make_api()
        api.get_custom_object.side_effect = NotFoundError("object not found")

        with pytest.raises(NotFoundError):
            build_options(api, make_addon("cluster-1", [("configmaps", "endpoint")]), None, OPENTELEMETRY_PROFILE)
        api.get_config_map.assert_not_called()

    def test_accumulates_in_declaration_order(self):
        """Test that exporter resources keep the order declared on the addon."""
        annotations = {ANNOTATION_OTEL_TARGET_OUTPUT_NAME: "otlphttp"}
        cms = [
            config_map("second", annotations=annotations, data={"endpoint": "https://b"}),
            config_map("first", annotations=annotations, data={"endpoint": "https://a"}),
        ]
        creds = [secret("creds", annotations=annotations, data={"tls.crt": b"x"})]
        addon = make_addon(
            "cluster-1", [("configmaps", "first"), ("secrets", "creds"), ("configmaps", "second")]
        )

        options = build_options(make_api(cms, creds), addon, {"spec": {}}, OPENTELEMETRY_PROFILE)

        assert options.cluster_name == "cluster-1"
        assert options.template == TEMPLATE
        assert options.deployment_config == {"spec": {}}
        assert [cm.metadata.name for cm in options.config_maps] == ["first", "second"]
        assert [s.metadata.name for s in options.secrets] == ["creds"]

    def test_irrelevant_and_unreadable_resources_are_skipped(self):
        """Test that unlabeled and missing resources do not reach the options."""
        cms = [config_map("other-signal", labels={LABEL_SIGNAL: "logging"})]
        addon = make_addon("cluster-1", [("configmaps", "other-signal"), ("configmaps", "missing")])

        options = build_options(make_api(cms), addon, None, OPENTELEMETRY_PROFILE)

        assert options.config_maps == []
        assert options.secrets == []

    def test_no_auth_definition_means_no_secrets(self):
        """Test that authentication is optional."""
        cms = [config_map("endpoint", annotations={ANNOTATION_OTEL_TARGET_OUTPUT_NAME: "otlphttp"})]

        options = build_options(
            make_api(cms), make_addon("cluster-1", [("configmaps", "endpoint")]), None, OPENTELEMETRY_PROFILE
        )

        assert options.secrets == []

    def test_auth_definition_provisions_secrets(self, caplog):
        """Test that the auth ConfigMap drives secret provisioning."""
        cms = [config_map("auth", data={"otlphttp": "mTLS"})]
        api = make_api(cms)

        with caplog.at_level(logging.WARNING):
            options = build_options(
                api, make_addon("cluster-1", [("configmaps", "auth")]), None, OPENTELEMETRY_PROFILE
            )

        assert [s.metadata.name for s in options.secrets] == ["opentelemetry-otlphttp-auth"]
        assert options.secrets[0].metadata.annotations == {ANNOTATION_OTEL_TARGET_OUTPUT_NAME: "otlphttp"}
        assert options.config_maps == []
        assert "no CA was found" in caplog.text
        certificate = api.apply_certificate.call_args[0][0]
        assert certificate["spec"]["commonName"] == "cluster-1"

    def test_duplicate_auth_definition_last_wins(self, caplog):
        """Test that a second auth ConfigMap replaces the first with a warning."""
        cms = [
            config_map("auth-a", data={"first": "mTLS"}),
            config_map("auth-b", data={"second": "mTLS"}),
        ]
        addon = make_addon("cluster-1", [("configmaps", "auth-a"), ("configmaps", "auth-b")])

        with caplog.at_level(logging.WARNING):
            options = build_options(make_api(cms), addon, None, OPENTELEMETRY_PROFILE)

        assert [s.metadata.name for s in options.secrets] == ["opentelemetry-second-auth"]
        assert "auth ConfigMap already set" in caplog.text

    def test_duplicate_ca_bundle_last_wins(self):
        """Test that the last CA secret is the one injected."""
        cms = [config_map("auth", data={"otlphttp": "mTLS"})]
        cas = [
            secret("ca-a", annotations={ANNOTATION_OTEL_CA: ""}, data={"ca.crt": b"ca-a"}),
            secret("ca-b", annotations={ANNOTATION_OTEL_CA: ""}, data={"ca.crt": b"ca-b"}),
        ]
        addon = make_addon("cluster-1", [("secrets", "ca-a"), ("secrets", "ca-b"), ("configmaps", "auth")])

        options = build_options(make_api(cms, cas), addon, None, OPENTELEMETRY_PROFILE)

        assert base64.b64decode(options.secrets[0].data["ca.crt"]) == b"ca-b"

    def test_ca_without_bundle_key_fails(self):
        """Test that a CA secret without ca.crt aborts the build."""
        cms = [config_map("auth", data={"otlphttp": "mTLS"})]
        cas = [secret("ca", annotations={ANNOTATION_OTEL_CA: ""}, data={"tls.crt": b"x"})]
        addon = make_addon("cluster-1", [("secrets", "ca"), ("configmaps", "auth")])
        api = make_api(cms, cas)

        with pytest.raises(MissingFieldError):
            build_options(api, addon, None, OPENTELEMETRY_PROFILE)
        api.apply_certificate.assert_not_called()

    def test_concurrent_builds_keep_their_common_name(self):
        """Test that concurrent builds never see each other's cluster namespace."""
        cms = [config_map("auth", data={"otlphttp": "mTLS", "jaeger": "mTLS"})]
        clusters = [f"cluster-{i}" for i in range(8)]
        apis = {cluster: make_api(cms) for cluster in clusters}
        barrier = threading.Barrier(len(clusters))
        errors = []

        def build(cluster):
            try:
                barrier.wait()
                for _ in range(20):
                    build_options(
                        apis[cluster], make_addon(cluster, [("configmaps", "auth")]), None, OPENTELEMETRY_PROFILE
                    )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=build, args=(cluster,)) for cluster in clusters]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        for cluster, api in apis.items():
            common_names = {call.args[0]["spec"]["commonName"] for call in api.apply_certificate.call_args_list}
            assert common_names == {cluster}
        assert OPENTELEMETRY_AUTH_DEFAULT_CONFIG.mtls.common_name == ""
