"""Signal families and the label/annotation contract of each one."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .authentication.config import (
    LOGGING_AUTH_DEFAULT_CONFIG,
    OPENTELEMETRY_AUTH_DEFAULT_CONFIG,
    AuthConfig,
)
from .constants import (
    ANNOTATION_LOGGING_CA,
    ANNOTATION_LOGGING_TARGET_OUTPUT_NAME,
    ANNOTATION_OTEL_CA,
    ANNOTATION_OTEL_TARGET_OUTPUT_NAME,
)


class Signal(str, Enum):
    """Observability signal configured by a resource."""

    LOGGING = "logging"
    OPENTELEMETRY = "opentelemetry"


@dataclass(frozen=True)
class TemplateResource:
    """Custom resource used as the per-signal template."""

    group: str
    version: str
    plural: str
    kind: str


@dataclass(frozen=True)
class SignalProfile:
    """Everything the core needs to know about one signal family."""

    signal: Signal
    target_output_annotation: str
    ca_annotation: str
    template: TemplateResource
    auth_default_config: AuthConfig
    configures_exporters: bool = False

    @property
    def label_value(self) -> str:
        return self.signal.value


LOGGING_PROFILE = SignalProfile(
    signal=Signal.LOGGING,
    target_output_annotation=ANNOTATION_LOGGING_TARGET_OUTPUT_NAME,
    ca_annotation=ANNOTATION_LOGGING_CA,
    template=TemplateResource(
        group="logging.openshift.io",
        version="v1",
        plural="clusterlogforwarders",
        kind="ClusterLogForwarder",
    ),
    auth_default_config=LOGGING_AUTH_DEFAULT_CONFIG,
)

OPENTELEMETRY_PROFILE = SignalProfile(
    signal=Signal.OPENTELEMETRY,
    target_output_annotation=ANNOTATION_OTEL_TARGET_OUTPUT_NAME,
    ca_annotation=ANNOTATION_OTEL_CA,
    template=TemplateResource(
        group="opentelemetry.io",
        version="v1alpha1",
        plural="opentelemetrycollectors",
        kind="OpenTelemetryCollector",
    ),
    auth_default_config=OPENTELEMETRY_AUTH_DEFAULT_CONFIG,
    configures_exporters=True,
)

PROFILES = (LOGGING_PROFILE, OPENTELEMETRY_PROFILE)
