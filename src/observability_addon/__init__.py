"""Multicluster Observability Addon."""

__version__ = "0.1.0"
