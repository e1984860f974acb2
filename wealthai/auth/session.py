"""
Session Context

Who is signed in, as an explicit object. The Streamlit app keeps one per
browser session in st.session_state and hands it to every page controller.
Only sign_in / sign_out change it; pages just read it.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class NotAuthenticatedError(Exception):
    """A page needed the current user but nobody is signed in."""
    pass


class Identity(BaseModel):
    """The authenticated user as seen by the app."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    uid: str = Field(..., min_length=1, description="Stable user id; keys the profile")
    email: str = Field(default="", description="Sign-in email")


class SessionContext:
    """
    Current-session identity with a sign-in / sign-out lifecycle.
    """

    def __init__(self):
        self._identity: Optional[Identity] = None
        self._signed_in_at: Optional[datetime] = None

    @property
    def identity(self) -> Optional[Identity]:
        return self._identity

    @property
    def signed_in_at(self) -> Optional[datetime]:
        return self._signed_in_at

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None

    def require_identity(self) -> Identity:
        """The signed-in identity; raises NotAuthenticatedError if none."""
        if self._identity is None:
            raise NotAuthenticatedError("No user is signed in")
        return self._identity

    def sign_in(self, identity: Identity) -> None:
        self._identity = identity
        self._signed_in_at = datetime.now(timezone.utc)

    def sign_out(self) -> Optional[Identity]:
        """Clear the session. Returns whoever was signed in."""
        previous = self._identity
        self._identity = None
        self._signed_in_at = None
        return previous

    def sync(self, current: Optional[Identity]) -> Optional[str]:
        """
        Align the context with what the auth provider reports.

        Returns "signed_in", "signed_out" or None when nothing changed.
        """
        if current is not None and current != self._identity:
            self.sign_in(current)
            return "signed_in"
        if current is None and self._identity is not None:
            self.sign_out()
            return "signed_out"
        return None
