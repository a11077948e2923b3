# =============================================================================
# classpoll_core/errors/handlers.py
# Error Handling Utilities for ClassPoll+
# =============================================================================

from __future__ import annotations
import traceback
from typing import Optional
import streamlit as st

from classpoll_core.logging import get_logger
from .exceptions import ClassPollError

logger = get_logger(__name__)


def handle_error(
    error: Exception,
    show_user_message: bool = True,
    log_error: bool = True,
    user_message: Optional[str] = None,
) -> None:
    """
    Centralized error handling function.

    Args:
        error: The exception to handle
        show_user_message: Whether to display error to user via st.error
        log_error: Whether to log the error
        user_message: Custom message to show user (uses error message if None)
    """
    if isinstance(error, ClassPollError):
        message = user_message or error.message
        code = error.code
        details = error.details
        recoverable = error.recoverable
    else:
        message = user_message or str(error)
        code = "UNKNOWN"
        details = {"traceback": traceback.format_exc()}
        recoverable = True

    if log_error:
        logger.error(
            f"[{code}] {message}",
            extra={"details": details},
            exc_info=True,
        )

    if show_user_message:
        if recoverable:
            st.error(f"Erreur : {message}")
        else:
            st.error(f"Erreur critique : {message}")

        if details and st.session_state.get("debug_mode", False):
            with st.expander("Détails de l'erreur", expanded=False):
                st.json(details)


class ErrorContext:
    """
    Context manager for error handling with automatic logging and user feedback.

    Usage:
        with ErrorContext("Connexion à Supabase", recoverable=False):
            controller = get_controller()
    """

    def __init__(
        self,
        operation: str,
        recoverable: bool = True,
        show_success: bool = False,
        success_message: Optional[str] = None,
    ):
        self.operation = operation
        self.recoverable = recoverable
        self.show_success = show_success
        self.success_message = success_message

    def __enter__(self) -> ErrorContext:
        logger.info(f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        if exc_type is not None:
            if isinstance(exc_val, ClassPollError):
                handle_error(exc_val)
            else:
                handle_error(
                    exc_val,
                    user_message=f"Erreur pendant : {self.operation}",
                )
            return self.recoverable

        logger.info(f"Completed: {self.operation}")
        if self.show_success:
            st.success(self.success_message or f"{self.operation} : terminé")
        return False
