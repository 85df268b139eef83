"""Checked access to the untyped collector configuration document.

The collector config is a YAML-like tree where every value is one of
``NodeKind``. Accessors here expect a given kind at a given path and raise
:class:`MalformedConfigError` on any other shape.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from .utils.errors import MalformedConfigError

EXPORTERS_KEY = "exporters"


class NodeKind(str, Enum):
    """Shape of a value in the configuration document."""

    NULL = "null"
    SCALAR = "scalar"
    MAPPING = "mapping"
    SEQUENCE = "sequence"


def node_kind(value: Any) -> NodeKind:
    if value is None:
        return NodeKind.NULL
    if isinstance(value, dict):
        return NodeKind.MAPPING
    if isinstance(value, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def expect_mapping(value: Any, path: str) -> dict[Any, Any]:
    """Return ``value`` if it is a mapping, else raise MalformedConfigError."""
    kind = node_kind(value)
    if kind != NodeKind.MAPPING:
        raise MalformedConfigError("expected a mapping", path=path, found=kind.value)
    return value


def exporters_section(cfg: Any) -> dict[Any, Any]:
    """Return the ``exporters`` mapping of a collector configuration.

    The section itself is never created.
    """
    cfg = expect_mapping(cfg, "")
    if EXPORTERS_KEY not in cfg:
        raise MalformedConfigError("no exporters available as part of the configuration")
    if node_kind(cfg[EXPORTERS_KEY]) != NodeKind.MAPPING:
        raise MalformedConfigError(
            "exporters field doesn't contain valid components",
            found=node_kind(cfg[EXPORTERS_KEY]).value,
        )
    return cfg[EXPORTERS_KEY]


def exporter_entry(exporters: dict[Any, Any], name: str) -> dict[Any, Any]:
    """Return the mapping of one exporter, creating or upgrading it if needed.

    An absent or null entry becomes an empty mapping stored in ``exporters``.
    """
    value = exporters.get(name)
    if node_kind(value) == NodeKind.NULL:
        value = {}
        exporters[name] = value
    return expect_mapping(value, f"{EXPORTERS_KEY}.{name}")
