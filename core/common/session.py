"""
core/common/session.py

Explicit installer session: bearer token, expiry and username.

One instance is created by the application shell and handed by reference to
the API client and the services that need it. There is no global
"is authenticated" flag anywhere else.
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from core.common.session_events import SessionEvent, SessionEventType
from core.helpers.date_time_helper import parse_api_datetime

SessionObserver = Callable[[SessionEvent], None]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _to_epoch_ms(value: int | float | str) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return int(parse_api_datetime(str(value)).timestamp() * 1000)


class InstallerSession:
    """Holds the authentication state of one technician."""

    def __init__(self, *, clock: Callable[[], int] = _now_ms) -> None:
        self._clock = clock
        self._token: str = ""
        self._expires_at: Optional[int] = None
        self._username: Optional[str] = None
        self._observers: List[SessionObserver] = []

    # ---------- state ---------------------------------------------------
    @property
    def username(self) -> Optional[str]:
        return self._username

    @property
    def expires_at(self) -> Optional[int]:
        """Expiry as epoch milliseconds (as sent by the backend)."""
        return self._expires_at

    @property
    def token(self) -> str:
        """Current token, or "" once it is missing or expired."""
        return self._token if self.is_authenticated else ""

    @property
    def is_authenticated(self) -> bool:
        if not self._token or self._expires_at is None:
            return False
        return self._clock() < self._expires_at

    # ---------- transitions ---------------------------------------------
    def start(self, token: str, expires_at: int | str, *, username: Optional[str] = None) -> None:
        """*expires_at*: epoch milliseconds, as a number or numeric/ISO string."""
        self._token = str(token)
        self._expires_at = _to_epoch_ms(expires_at)
        self._username = username
        self._emit("login", reason="login")

    def end(self, *, reason: str = "logout") -> None:
        """Forget the token. Ending an already ended session emits nothing."""
        if not self._token:
            return
        username = self._username
        self._token = ""
        self._expires_at = None
        self._username = None
        event_type: SessionEventType = "expired" if reason == "expired" else "logout"
        self._emit(event_type, reason=reason, username=username)

    # ---------- observers -----------------------------------------------
    def subscribe(self, callback: SessionObserver) -> None:
        if callback not in self._observers:
            self._observers.append(callback)

    def unsubscribe(self, callback: SessionObserver) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def _emit(self, event_type: SessionEventType, *, reason: str, username: Optional[str] = None) -> None:
        event = SessionEvent(
            type=event_type,
            username=username if username is not None else self._username,
            reason=reason,
            ts_utc=datetime.now(timezone.utc),
        )
        for callback in list(self._observers):
            callback(event)
