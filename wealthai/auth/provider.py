"""
Authentication Providers

Authentication is an opaque collaborator: the app only asks who is signed
in, and asks for login / logout.

- StreamlitAuthProvider: Streamlit's built-in OIDC login (st.login /
  st.user / st.logout). Requires an [auth] section in .streamlit/secrets.toml.
- LocalAuthProvider: sign in with just an email, for development and
  demos (APP_AUTH_MODE=local).
"""

from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any, Optional
from uuid import NAMESPACE_URL, uuid5

import streamlit as st

from wealthai.auth.session import Identity


class AuthenticationError(Exception):
    """Sign-in was refused."""
    pass


class AuthProvider(ABC):
    """What the app needs from an authentication service."""

    requires_email: bool = False

    @abstractmethod
    def current_identity(self) -> Optional[Identity]:
        """The signed-in user, or None."""
        pass

    @abstractmethod
    def login(self, email: Optional[str] = None) -> None:
        """Start sign-in."""
        pass

    @abstractmethod
    def logout(self) -> None:
        """Sign out of the provider."""
        pass


class StreamlitAuthProvider(AuthProvider):
    """OIDC sign-in through Streamlit's st.login."""

    def __init__(self, provider_name: Optional[str] = None):
        self._provider_name = provider_name

    def current_identity(self) -> Optional[Identity]:
        user = st.user
        if not user.is_logged_in:
            return None
        uid = user.get("sub") or user.get("email")
        if not uid:
            return None
        return Identity(uid=str(uid), email=str(user.get("email") or ""))

    def login(self, email: Optional[str] = None) -> None:
        if self._provider_name:
            st.login(self._provider_name)
        else:
            st.login()

    def logout(self) -> None:
        st.logout()


LOCAL_IDENTITY_KEY = "local_auth_identity"


def local_uid(email: str) -> str:
    """Deterministic user id for an email, so a returning user finds their profile."""
    return str(uuid5(NAMESPACE_URL, f"wealthai:{email.strip().lower()}"))


class LocalAuthProvider(AuthProvider):
    """
    Email-only sign-in kept in session state.

    No password check: this is for local development only.
    """

    requires_email = True

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None):
        self._state = state if state is not None else st.session_state

    def current_identity(self) -> Optional[Identity]:
        return self._state.get(LOCAL_IDENTITY_KEY)

    def login(self, email: Optional[str] = None) -> None:
        email = (email or "").strip()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise AuthenticationError("Please enter a valid email address")
        self._state[LOCAL_IDENTITY_KEY] = Identity(uid=local_uid(email), email=email)

    def logout(self) -> None:
        self._state.pop(LOCAL_IDENTITY_KEY, None)
