"""
Error types raised by the protocol model and the function dispatcher.
"""

from typing import Optional


class ChatWireError(Exception):
    """Base class for all chatwire errors."""


class DecodeError(ChatWireError, ValueError):
    """
    Raised when a payload cannot be decoded.

    Covers responses, streaming frames and model-issued function arguments.
    `context` names the entity, field or function involved.
    """

    def __init__(self, message: str, context: Optional[str] = None):
        super().__init__(message)
        self.context = context


class FunctionNotFoundError(ChatWireError, LookupError):
    """Raised when a function call names a function that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Function '{name}' not defined.")
        self.name = name


class InvariantViolation(ChatWireError):
    """Raised when encoding an entity that breaks one of its invariants."""
