# =============================================================================
# classpoll_core/errors/__init__.py
# Centralized Error Handling for ClassPoll+
# =============================================================================

from .exceptions import (
    ClassPollError,
    RemoteStoreError,
    InitialLoadError,
    MutationError,
    ReferentialIntegrityError,
    AuthenticationError,
    ConfigurationError,
)

from .handlers import (
    handle_error,
    ErrorContext,
)

__all__ = [
    # Exceptions
    "ClassPollError",
    "RemoteStoreError",
    "InitialLoadError",
    "MutationError",
    "ReferentialIntegrityError",
    "AuthenticationError",
    "ConfigurationError",
    # Handlers
    "handle_error",
    "ErrorContext",
]
