"""Authentication package: session context, providers and route guard."""

from wealthai.auth.guard import PUBLIC_PAGES, Page, RouteDecision, guard_route
from wealthai.auth.provider import (
    AuthenticationError,
    AuthProvider,
    LocalAuthProvider,
    StreamlitAuthProvider,
    local_uid,
)
from wealthai.auth.session import Identity, NotAuthenticatedError, SessionContext

__all__ = [
    "AuthenticationError",
    "AuthProvider",
    "Identity",
    "LocalAuthProvider",
    "NotAuthenticatedError",
    "PUBLIC_PAGES",
    "Page",
    "RouteDecision",
    "SessionContext",
    "StreamlitAuthProvider",
    "guard_route",
    "local_uid",
]
