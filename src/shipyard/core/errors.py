"""
Structured error hierarchy for shipyard.

Every error raised by shipyard itself extends :class:`ShipyardError`, which
carries a category, retry semantics and an :class:`ErrorContext` of
structured metadata suitable for logging.

Storage failures are not part of this hierarchy: exceptions raised by
SQLAlchemy (``IntegrityError``, ``OperationalError`` ...) reach the caller
unchanged.

Architecture:
    ::

        ShipyardError
        ├── ConfigError
        │   ├── MissingConfigError
        │   └── InvalidConfigError
        └── ReleaseError
            ├── ReleaseIncompleteError   (release persisted, later step failed)
            └── SchedulingError          (raised by Scheduler implementations)

Examples:
    >>> err = ReleaseIncompleteError("scheduling failed", release=r, stage="schedule")
    >>> err.to_dict()["context"]["stage"]
    'schedule'

Tags:
    errors, exceptions, error-context, shipyard-core
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from shipyard.core.models import Release


class ErrorCategory(str, Enum):
    """Error categories used for routing and reporting."""

    CONFIG = "CONFIG"
    RELEASE = "RELEASE"
    SCHEDULER = "SCHEDULER"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only fields that are set end up in :meth:`to_dict`, so the dict can be
    splatted straight into a structured log call.

    Attributes:
        app: Application the operation was acting on
        release_id: Release identifier, once one exists
        version: Release version, once assigned
        stage: Step of a multi-step operation that failed
        metadata: Additional key-value pairs
    """

    app: str | None = None
    release_id: str | None = None
    version: int | None = None
    stage: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["app", "release_id", "version", "stage"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ShipyardError(Exception):
    """
    Base exception for all shipyard errors.

    Subclasses set ``default_category`` and ``default_retryable`` to give
    sensible defaults for their domain.  ``cause`` is chained onto
    ``__cause__`` so tracebacks show the underlying failure.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ShipyardError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ReleaseError("bad slug").with_context(app="api", slug_id="s1")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION
# =============================================================================


class ConfigError(ShipyardError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """A required setting is missing."""

    def __init__(self, setting: str, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Missing required setting: {setting}", **kwargs)
        self.setting = setting


class InvalidConfigError(ConfigError):
    """A setting has an unusable value."""

    def __init__(self, setting: str, value: Any, message: str | None = None, **kwargs: Any):
        super().__init__(message or f"Invalid value for {setting}: {value!r}", **kwargs)
        self.setting = setting
        self.value = value


# =============================================================================
# RELEASES
# =============================================================================


class ReleaseError(ShipyardError):
    """Base class for release-domain errors."""

    default_category = ErrorCategory.RELEASE


class ReleaseIncompleteError(ReleaseError):
    """
    The release row was committed but a later step failed.

    Raised when persisting the derived formation or handing the release to
    the scheduler fails.  Nothing is rolled back: :attr:`release` is the
    committed release, and whatever processes were written before the
    failure stay written.  Re-triggering the failed step is up to the
    caller.

    ``stage`` is ``"formation"`` or ``"schedule"``.
    """

    def __init__(
        self,
        message: str,
        *,
        release: Release,
        stage: str,
        cause: Exception | None = None,
        **kwargs: Any,
    ):
        context = kwargs.pop("context", None) or ErrorContext(
            app=release.app_name,
            release_id=release.id,
            version=release.version,
            stage=stage,
        )
        super().__init__(message, context=context, cause=cause, **kwargs)
        self.release = release
        self.stage = stage


class SchedulingError(ReleaseError):
    """Raised by scheduler implementations when a hand-off is refused."""

    default_category = ErrorCategory.SCHEDULER
    default_retryable = True


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, ShipyardError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ShipyardError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "ReleaseError",
    "ReleaseIncompleteError",
    "SchedulingError",
    "is_retryable",
]
