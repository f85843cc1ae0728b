"""Authentication and authorization stages.

``authenticate`` answers "who is making this request?" and ``authorize``
answers "is this principal allowed?". Both raise a typed ``HTTPError``
(``Unauthenticated`` / ``Unauthorized``) on failure and return ``None``
on success.
"""

from rest_pipeline.auth.authentication import authenticate
from rest_pipeline.auth.authorization import authorize
from rest_pipeline.auth.schemes import (
    AuthenticatorProvider,
    SchemeAuthenticator,
    bearer_scheme,
    extract_token,
)

__all__ = [
    "AuthenticatorProvider",
    "SchemeAuthenticator",
    "authenticate",
    "authorize",
    "bearer_scheme",
    "extract_token",
]
