"""Classification of ConfigMaps and Secrets referenced by the addon.

Classification looks at labels and annotations only, never at the data
payload, and never fails: anything it cannot make sense of is irrelevant.

- Without the expected signal label an object is ``IRRELEVANT``.
- A ConfigMap without the target-output-name annotation is the
  ``AUTH_DEFINITION``; with it, it is ``EXPORTER_CONFIG``.
- A Secret with the CA annotation is the ``CA_BUNDLE``; otherwise it is
  ``EXPORTER_CONFIG``.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from kubernetes import client

from .constants import LABEL_SIGNAL

if TYPE_CHECKING:
    from .signals import SignalProfile


class ResourceKind(str, Enum):
    """Role of a resource in an options build."""

    IRRELEVANT = "irrelevant"
    AUTH_DEFINITION = "auth_definition"
    CA_BUNDLE = "ca_bundle"
    EXPORTER_CONFIG = "exporter_config"


def _metadata_maps(obj: Any) -> tuple[dict[str, str], dict[str, str]] | None:
    meta = getattr(obj, "metadata", None)
    if meta is None:
        return None
    labels = meta.labels if isinstance(meta.labels, dict) else {}
    annotations = meta.annotations if isinstance(meta.annotations, dict) else {}
    return labels, annotations


def is_signal_resource(obj: Any, profile: SignalProfile) -> bool:
    """Return True if the object carries the signal label of the profile."""
    maps = _metadata_maps(obj)
    if maps is None:
        return False
    labels, _ = maps
    return labels.get(LABEL_SIGNAL) == profile.label_value


def classify(obj: Any, profile: SignalProfile) -> ResourceKind:
    """Classify a ConfigMap or Secret for the given signal family."""
    if not is_signal_resource(obj, profile):
        return ResourceKind.IRRELEVANT

    _, annotations = _metadata_maps(obj)
    if isinstance(obj, client.V1ConfigMap):
        if profile.target_output_annotation not in annotations:
            return ResourceKind.AUTH_DEFINITION
        return ResourceKind.EXPORTER_CONFIG
    if isinstance(obj, client.V1Secret):
        if profile.ca_annotation in annotations:
            return ResourceKind.CA_BUNDLE
        return ResourceKind.EXPORTER_CONFIG
    return ResourceKind.IRRELEVANT


def exporter_name(obj: Any, profile: SignalProfile) -> str | None:
    """Return the exporter a resource configures, if it names one."""
    maps = _metadata_maps(obj)
    if maps is None:
        return None
    _, annotations = maps
    return annotations.get(profile.target_output_annotation)
