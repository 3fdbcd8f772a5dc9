"""
core/common/session_events.py

Defines event objects for installer session changes.

The session is owned by whoever created the InstallerSession (usually the main
window). Other components subscribe to these events to react to
login/logout/expiry without direct coupling.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional


SessionEventType = Literal["login", "logout", "expired"]


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """Represents a session change event."""

    type: SessionEventType
    username: Optional[str]
    reason: str
    ts_utc: datetime
