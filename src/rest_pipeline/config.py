"""Pipeline configuration.

PipelineConfig is a frozen dataclass, immutable after creation,
IDE-autocompletable, no string-key dict lookups. The dispatcher merges it
into each route definition per request; nothing reads it from a global.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rest_pipeline._internal.types import (
    REQUIRE_PRINCIPAL,
    UNSET,
    AuthenticationSpec,
    AuthorizationSpec,
    ErrorClassifier,
    RoleChecker,
)
from rest_pipeline.auth.specs import validate_authentication, validate_authorization
from rest_pipeline.errors import ConfigurationError
from rest_pipeline.sinks import NullSink, Sink, default_error_sink, default_trace_sink

if TYPE_CHECKING:
    from rest_pipeline.auth.schemes import AuthenticatorProvider


def deny_all_roles(principal: Any, role: str) -> bool:  # noqa: ARG001
    """Default role checker: no principal holds any role."""
    return False


def never_validation_error(exc: BaseException) -> bool:  # noqa: ARG001
    """Default classifier: no error is a validation error."""
    return False


def validation_error_types(*types: type[BaseException]) -> ErrorClassifier:
    """Build a classifier recognizing instances of *types*.

    Usage::

        config = PipelineConfig(
            is_validation_error=validation_error_types(pydantic.ValidationError),
        )
    """

    def classify(exc: BaseException) -> bool:
        return isinstance(exc, types)

    return classify


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Pipeline configuration. Immutable after creation.

    All fields have defaults. Override what you need::

        config = PipelineConfig(
            default_authentication="bearer",
            authenticator=SchemeAuthenticator({"bearer": bearer_scheme(verify)}),
            role_checker=lambda user, role: role in user.roles,
        )

    Attributes:
        default_authentication: Used for routes that leave
            ``authentication`` unset. ``None`` means no authentication.
        default_authorization: Used for routes that leave
            ``authorization`` unset. ``REQUIRE_PRINCIPAL`` means any
            authenticated principal is allowed.
        authenticator: Provider for named authentication schemes. When
            ``None``, every named-scheme route fails closed with 401.
        role_checker: ``(principal, role) -> bool``, sync or async.
        trace_sink: Receives trace events. ``None`` silences them. The
            default logs at INFO on ``rest_pipeline.trace``; with logging
            unconfigured Python only prints WARNING and above, so call
            ``logging.basicConfig(level=logging.INFO)`` (or attach a
            handler to that logger) to see them on the console.
        error_sink: Receives unhandled action errors. ``None`` silences them.
        is_validation_error: Classifies an action error as a validation
            error (400 with details) instead of an internal one (500).
    """

    # Auth defaults
    default_authentication: AuthenticationSpec = None
    default_authorization: AuthorizationSpec = REQUIRE_PRINCIPAL

    # External collaborators
    authenticator: AuthenticatorProvider | None = None
    role_checker: RoleChecker = deny_all_roles
    is_validation_error: ErrorClassifier = never_validation_error

    # Sinks
    trace_sink: Sink | None = field(default_factory=default_trace_sink)
    error_sink: Sink | None = field(default_factory=default_error_sink)

    def __post_init__(self) -> None:
        if self.default_authentication is UNSET or self.default_authorization is UNSET:
            msg = "PipelineConfig defaults cannot be UNSET; use None to disable a stage."
            raise ConfigurationError(msg)
        validate_authentication(self.default_authentication, allow_unset=False)
        validate_authorization(self.default_authorization, allow_unset=False)
        # None selects the no-op variant so callers never check for it
        if self.trace_sink is None:
            object.__setattr__(self, "trace_sink", NullSink())
        if self.error_sink is None:
            object.__setattr__(self, "error_sink", NullSink())

    def trace(self, message: str, *args: Any) -> None:
        """Send a trace event to the configured sink."""
        self.trace_sink(message, *args)  # type: ignore[misc]

    def report(self, message: str, *args: Any, exc: BaseException | None = None) -> None:
        """Send an error event to the configured sink."""
        self.error_sink(message, *args, exc=exc)  # type: ignore[misc]
