# installation/logic/auth_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from ..exceptions.errors import HttpError
from .api_client import InstallerApiClient

logger = logging.getLogger(__name__)

_FEATURE_ID = "Auth"

MSG_LOGGED_IN = "Vous êtes connecté"
MSG_UNAVAILABLE = "Impossible de vous authentifier, veuillez réessayer plus tard"
MSG_BAD_CREDENTIALS = ("Impossible de vous authentifier, vérifiez vos informations "
                       "d'identification et réessayez")
MSG_CONNECTION = "Erreur de connexion, veuillez réessayer"


@dataclass(frozen=True)
class LoginResult:
    success: bool
    message: str


class AuthService:
    """Logs a technician in and out of the session owned by the API client."""

    def __init__(self, client: InstallerApiClient, *, logger: Optional[Any] = None) -> None:
        self._client = client
        self._audit = logger

    def login(self, username: str, password: str) -> LoginResult:
        username = username.strip()
        try:
            res = self._client.login(username, password)
        except HttpError as ex:
            self._log("LoginFailed", username, level="WARNING", message=f"{ex.status}")
            return LoginResult(False, ex.message or MSG_UNAVAILABLE)
        except requests.RequestException as ex:
            logger.error("Login request failed: %s", ex)
            return LoginResult(False, MSG_CONNECTION)

        if res.get("authentificated") and res.get("token") and res.get("expiresAt") is not None:
            self._client.session.start(res["token"], res["expiresAt"], username=username)
            self._log("Login", username)
            return LoginResult(True, MSG_LOGGED_IN)

        self._log("LoginRejected", username, level="WARNING")
        return LoginResult(False, MSG_BAD_CREDENTIALS)

    def logout(self) -> None:
        username = self._client.session.username
        self._client.session.end(reason="logout")
        self._log("Logout", username)

    def _log(self, event: str, username: Optional[str], *, level: str = "INFO",
             message: Optional[str] = None) -> None:
        if self._audit is not None:
            self._audit.log(_FEATURE_ID, event, username=username, level=level, message=message)
