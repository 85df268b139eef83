"""Error types and sanitization utilities for the addon."""

from __future__ import annotations

import re
from typing import Any


class AddonError(Exception):
    """Base class for addon errors.

    Keyword arguments are kept as context and rendered after the message,
    e.g. ``no value for 'endpoint' in configmap (name=otlp-endpoint)``.
    """

    def __init__(self, message: str, **context: Any):
        self.message = message
        self.context = context
        super().__init__(self._format())

    def _format(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{key}={value}" for key, value in self.context.items())
        return f"{self.message} ({details})"


class MissingFieldError(AddonError):
    """A contractually required data key is absent or empty."""


class MalformedConfigError(AddonError):
    """The configuration document does not have the expected shape."""


class NotFoundError(AddonError):
    """A required upstream object cannot be fetched."""


class SecretNotReadyError(NotFoundError):
    """A target secret has not been issued or created yet."""


class UnsupportedAuthMethodError(AddonError):
    """The authentication ConfigMap names a method the addon does not know."""


class ClassificationConflict(AddonError):
    """More than one candidate was found for a single-slot resource.

    Never fails a build: raised and recovered where the slot is assigned.
    """


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"-----BEGIN [A-Z ]+-----[A-Za-z0-9+/=\s]+-----END [A-Z ]+-----",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "tls.key",
    "tls.crt",
    "ca.crt",
    "password",
    "token",
    "private_key",
}


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove certificate and key material.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message

    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED PEM]", sanitized)

    for field in SENSITIVE_FIELDS:
        sanitized = re.sub(
            rf"{re.escape(field)}['\"]?[:=\s]+([^\s,;\)]+)",
            f"{field}: [REDACTED]",
            sanitized,
            flags=re.IGNORECASE,
        )

    return sanitized


def sanitize_exception(error: Exception) -> str:
    """Sanitize exception message.

    Args:
        error: Exception object

    Returns:
        Sanitized error message
    """
    return sanitize_error_message(str(error))
