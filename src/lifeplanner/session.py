"""Session state for authenticated API calls."""

from __future__ import annotations

import time
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeplanner.models.identity import Identity


class Session(BaseModel):
    """Tokens returned by the auth service after sign-in or refresh.

    Parameters
    ----------
    access_token : str
        Bearer token sent with every table request.
    refresh_token : str
        Single-use token exchanged for a new session before expiry.
    token_type : str
        Always ``"bearer"`` for the hosted backend.
    expires_at : float
        Expiry of ``access_token`` in epoch seconds. Derived from
        ``expires_in`` when the server omits it.
    user : Identity
        The account the tokens belong to.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        validate_default=True,
        str_strip_whitespace=True,
    )

    access_token: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)
    token_type: str = "bearer"
    expires_at: float
    user: Identity

    @model_validator(mode="before")
    @classmethod
    def _derive_expires_at(cls, values: Any) -> Any:
        if not isinstance(values, dict) or values.get("expires_at") is not None:
            return values
        merged = dict(values)
        expires_in = merged.get("expires_in")
        if expires_in is not None:
            merged["expires_at"] = time.time() + float(expires_in)
        return merged

    @property
    def expires_in(self) -> float:
        """Seconds until the access token expires (negative once expired)."""
        return self.expires_at - time.time()

    @property
    def is_expired(self) -> bool:
        return self.expires_in <= 0

    def expires_within(self, margin: float) -> bool:
        """Whether the access token expires within *margin* seconds."""
        return self.expires_in <= margin
