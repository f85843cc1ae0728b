"""Shared type aliases and sentinels used across rest_pipeline modules."""

from collections.abc import Callable, Sequence
from typing import Any, Final, TypeAlias


class _Marker:
    """A named singleton marker with a readable repr."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


UNSET: Final = _Marker("UNSET")
"""An auth field left out of a route definition. Filled from config."""

REQUIRE_PRINCIPAL: Final = _Marker("REQUIRE_PRINCIPAL")
"""Default authorization policy: the request must carry a principal."""

# Action: application-supplied handler with an injected signature
Action: TypeAlias = Callable[..., Any]

# Predicate: (request) -> None | bool, sync or async
Predicate: TypeAlias = Callable[..., Any]

# Authentication spec: UNSET | None | scheme name | predicate
AuthenticationSpec: TypeAlias = _Marker | str | Predicate | None

# Authorization spec: UNSET | REQUIRE_PRINCIPAL | None | role | predicate | any-of list
AuthorizationSpec: TypeAlias = (
    _Marker | str | Predicate | Sequence["AuthorizationSpec"] | None
)

# Role checker: (principal, role) -> bool, sync or async
RoleChecker: TypeAlias = Callable[[Any, str], Any]

# Validation error classifier: (exception) -> bool
ErrorClassifier: TypeAlias = Callable[[BaseException], bool]
