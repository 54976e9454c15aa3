"""Central application exception hierarchy.

This module defines the base application exception ``AppError`` and the
specialized subclasses raised by the baking pipeline. Only two failure kinds
ever reach a caller of the page and index assemblers:

- ``NotFoundError``: the requested content row does not exist (a 404).
- ``ExternalServiceError``: the CMS query layer or the visualization store is
  unreachable; transient, so the caller may retry.

Everything else (a missing export, a malformed formatting directive, an
unresolvable thumbnail) is recovered locally with a fallback value and logged.
"""

from __future__ import annotations

from typing import Any, Mapping


class AppError(Exception):
    """Base exception for all application-level errors.

    Parameters
    ----------
    code : str
        Machine-readable error code (e.g., ``'DATA_VALIDATION_ERROR'``).
    message : str
        Human-readable message describing the error.
    context : Mapping[str, Any] | None, optional
        Optional structured context for logging.
    transient : bool, optional
        Whether the error is temporary and may be retried.

    Attributes
    ----------
    code : str
        Stable machine-readable error code.
    message : str
        Human-readable message.
    context : dict
        Structured, non-sensitive context for logging.
    transient : bool
        True if the error is transient.

    Examples
    --------
    >>> e = AppError('CODE', 'message', context={'k': 'v'}, transient=True)
    >>> e.code
    'CODE'
    """

    __slots__ = ("code", "message", "context", "transient")

    def __init__(
        self,
        code: str,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.context = dict(context or {})
        self.transient = bool(transient)

    def __str__(self) -> str:
        """Return a compact string representation of the error."""
        return f"{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Return a log-safe dictionary representation of the error."""
        return {
            "error_code": self.code,
            "message": self.message,
            "context": self.context,
            "is_transient": self.transient,
        }


class ConfigurationError(AppError):
    """Raised for invalid or missing configuration."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "CONFIGURATION_ERROR", message, context=context, transient=False
        )


class DataValidationError(AppError):
    """Raised for CMS rows that fail validation at the query boundary."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "DATA_VALIDATION_ERROR", message, context=context, transient=False
        )


class NotFoundError(AppError):
    """Raised when a requested content row does not exist.

    Callers translate this into a 404 response; it is never retried.
    """

    status_code = 404

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__("NOT_FOUND", message, context=context, transient=False)


class TimeoutExceededError(AppError):
    """Raised when a configured timeout or deadline is exceeded."""

    def __init__(
        self, message: str, *, context: Mapping[str, Any] | None = None
    ) -> None:
        super().__init__(
            "TIMEOUT_EXCEEDED_ERROR", message, context=context, transient=True
        )


class ExternalServiceError(AppError):
    """Raised when an upstream collaborator (CMS, visualization store) fails."""

    def __init__(
        self,
        message: str,
        *,
        context: Mapping[str, Any] | None = None,
        transient: bool = True,
    ) -> None:
        super().__init__(
            "EXTERNAL_SERVICE_ERROR", message, context=context, transient=transient
        )
