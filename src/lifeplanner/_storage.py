"""Session persistence.

The hosted backend's browser SDK keeps the session in local storage so a
page reload finds the user still signed in. These storages play that role
for a Python process.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import ValidationError

from lifeplanner.session import Session

_logger = logging.getLogger(__name__)


class SessionStorage(Protocol):
    """Where the client keeps the current session between restores."""

    def load(self) -> Session | None:
        ...

    def save(self, session: Session) -> None:
        ...

    def clear(self) -> None:
        ...


class MemorySessionStorage:
    """Keeps the session for the lifetime of the object only."""

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    def load(self) -> Session | None:
        return self._session

    def save(self, session: Session) -> None:
        self._session = session

    def clear(self) -> None:
        self._session = None


class FileSessionStorage:
    """Keeps the session in a JSON file."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Session | None:
        if not self._path.is_file():
            return None
        try:
            return Session.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError, json.JSONDecodeError):
            _logger.warning("Ignoring unreadable session file %s", self._path, exc_info=True)
            return None

    def save(self, session: Session) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(session.model_dump_json(), encoding="utf-8")

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
