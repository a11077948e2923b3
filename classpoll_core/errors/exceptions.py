# =============================================================================
# classpoll_core/errors/exceptions.py
# Custom Exception Hierarchy for ClassPoll+
# =============================================================================

from typing import Optional, Dict, Any


class ClassPollError(Exception):
    """
    Base exception for all ClassPoll+ errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code (e.g., "STORE_001")
        details: Additional context as a dictionary
        recoverable: Whether the session can continue after the error
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or "CP_000"
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"[{self.code}] {self.message}"
        if self.details:
            base += f" | Details: {self.details}"
        return base

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization"""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
            "recoverable": self.recoverable,
        }


# =============================================================================
# REMOTE STORE EXCEPTIONS
# =============================================================================

class RemoteStoreError(ClassPollError):
    """
    Raised (or returned) when a Supabase table operation fails.

    ``db_code`` is the PostgREST/PostgreSQL error code when the backend
    supplied one (e.g. "23503" for a foreign-key violation).
    """

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        db_code: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if table:
            details["table"] = table
        if operation:
            details["operation"] = operation
        if db_code:
            details["db_code"] = db_code
        self.db_code = db_code

        super().__init__(
            message=message,
            code="STORE_001",
            details=details,
            **kwargs,
        )


class InitialLoadError(ClassPollError):
    """Raised when the startup bulk load cannot complete"""

    def __init__(self, message: str, table: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if table:
            details["table"] = table

        super().__init__(
            message=message,
            code="LOAD_001",
            details=details,
            recoverable=False,
            **kwargs,
        )


class MutationError(ClassPollError):
    """Raised when an optimistic mutation was rejected by the remote store"""

    def __init__(
        self,
        message: str,
        entity: Optional[str] = None,
        action: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if entity:
            details["entity"] = entity
        if action:
            details["action"] = action

        super().__init__(
            message=message,
            code="MUT_001",
            details=details,
            **kwargs,
        )


class ReferentialIntegrityError(MutationError):
    """Raised when a delete is blocked by rows that still reference the target"""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.code = "MUT_002"


# =============================================================================
# AUTHENTICATION EXCEPTIONS
# =============================================================================

class AuthenticationError(ClassPollError):
    """Raised when credentials or a stored session cannot be validated"""

    def __init__(self, message: str, email: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if email:
            details["email"] = email

        super().__init__(
            message=message,
            code="AUTH_001",
            details=details,
            **kwargs,
        )


# =============================================================================
# CONFIGURATION EXCEPTIONS
# =============================================================================

class ConfigurationError(ClassPollError):
    """Raised when configuration is invalid or missing"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        expected_type: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if config_key:
            details["config_key"] = config_key
        if expected_type:
            details["expected_type"] = expected_type

        super().__init__(
            message=message,
            code="CONFIG_001",
            details=details,
            recoverable=False,
            **kwargs,
        )
