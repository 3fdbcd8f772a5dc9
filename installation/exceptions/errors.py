"""Installation feature exceptions."""
from __future__ import annotations

from typing import Dict, Optional


class InstallationError(Exception):
    """Base exception for the installation feature."""


class HttpError(InstallationError):
    """Non-2xx answer from the installer API; *message* is user-presentable."""

    def __init__(self, message: str, status: int) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class SessionExpiredError(HttpError):
    """The backend rejected the token as expired; the user has to log in again."""

    def __init__(self, message: str = "jwt expired", status: int = 403) -> None:
        super().__init__(message, status)


class NotAuthenticatedError(InstallationError):
    """An authenticated call was attempted without a valid session."""


class FormValidationError(InstallationError):
    """The installation form is incomplete; *errors* maps field -> message."""

    def __init__(self, errors: Dict[str, str], *, needs_client_email: bool = False,
                 message: Optional[str] = None) -> None:
        super().__init__(message or "; ".join(errors.values()) or "Formulaire incomplet")
        self.errors = dict(errors)
        self.needs_client_email = needs_client_email
