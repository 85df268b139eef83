"""Handler modules for addon resources."""

# Import handlers to register them - handlers register themselves via @kopf decorators
from . import addon  # noqa: F401
