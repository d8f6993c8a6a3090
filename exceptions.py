"""
Custom Exception Hierarchy - Domain-specific error types

Typed exceptions for the failure modes of the vote tally service.
All custom exceptions inherit from TallyError for easy catching.

Design Philosophy:
- Exceptions are data: Include context for debugging
- Fail explicitly: Better to raise specific exception than generic
- Catch specifically: Handler can distinguish error types
"""

from typing import Optional, Dict, Any


class TallyError(Exception):
    """Base exception for all vote tally errors

    All custom exceptions inherit from this, enabling:
    - Catch all tally errors with single except clause
    - Distinguish our errors from library errors
    - Add common attributes (context)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def __str__(self):
        base_msg = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{base_msg} (context: {context_str})"
        return base_msg


# ========== Validation Errors ==========


class ValidationError(TallyError):
    """Vote input validation failures

    Examples:
    - Missing subject id or vote value
    - Value empty after stripping whitespace
    - Value too long or containing control characters
    """

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        self.field = field
        self.value = value

        context = {}
        if field:
            context['field'] = field
        if value is not None:
            context['value'] = str(value)

        super().__init__(message, context)


# ========== Store Errors ==========


class InternalError(TallyError):
    """Unexpected failure inside the tally store

    Examples:
    - Graph projection failed on a snapshot
    - Result could not be serialized
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None
    ):
        self.operation = operation
        self.original_error = original_error

        context = {}
        if operation:
            context['operation'] = operation
        if original_error:
            context['original_error'] = str(original_error)

        super().__init__(message, context)


# ========== Configuration Errors ==========


class ConfigurationError(TallyError):
    """Configuration or environment errors

    Examples:
    - Port out of range
    - Non-positive length limits
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        context = {}
        if config_key:
            context['config_key'] = config_key
        super().__init__(message, context)
