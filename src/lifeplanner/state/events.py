"""Session-change events.

The client reports every change of the active session as a
:class:`SessionChange`. The store reacts to nothing else, which keeps the
"set identity, then bulk-load" sequence on a single path.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from lifeplanner.models.identity import Identity
from lifeplanner.session import Session


class AuthEvent(StrEnum):
    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


class AuthState(StrEnum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"


class SessionChange(BaseModel):
    """A change of the active session, as delivered to subscribers."""

    model_config = ConfigDict(frozen=True)

    event: AuthEvent
    session: Session | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def identity(self) -> Identity | None:
        return self.session.user if self.session is not None else None
