# installation/logic/api_client.py
"""
HTTP client for the installer endpoints of the backend.

No UI code here; errors propagate as HttpError / SessionExpiredError and the
views decide what to show.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from core.common.session import InstallerSession

from ..exceptions.errors import HttpError, NotAuthenticatedError, SessionExpiredError
from ..models.purchase_order import PurchaseOrder

logger = logging.getLogger(__name__)

_JWT_EXPIRED = "jwt expired"


def _bool_param(value: bool) -> str:
    return "true" if value else "false"


class InstallerApiClient:
    def __init__(self, base_url: str, session: InstallerSession, *,
                 timeout: float = 30.0, http: Optional[requests.Session] = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._session = session
        self._timeout = timeout
        self._http = http or requests.Session()

    @classmethod
    def from_config(cls, session: InstallerSession) -> "InstallerApiClient":
        from core.config.config_service import config_service  # lazy
        return cls(config_service.api.base_url, session, timeout=config_service.api.timeout_s)

    @property
    def session(self) -> InstallerSession:
        return self._session

    # ---------- core request --------------------------------------------
    def _request(self, method: str, endpoint: str, *, json: Any = None,
                 params: Optional[Dict[str, str]] = None, accept: Optional[str] = None,
                 authenticated: bool = True) -> Any:
        headers: Dict[str, str] = {}
        if authenticated:
            token = self._session.token
            if not token:
                raise NotAuthenticatedError("Session expirée, veuillez vous reconnecter")
            headers["Authorization"] = f"Bearer {token}"
        if accept:
            headers["Accept"] = accept

        response = self._http.request(method, f"{self._base_url}{endpoint}", json=json,
                                      params=params, headers=headers, timeout=self._timeout)
        data = self._parse_body(response)

        if response.status_code == 403 and isinstance(data, dict) and data.get("message") == _JWT_EXPIRED:
            self._session.end(reason="expired")
            raise SessionExpiredError()

        if not response.ok:
            logger.error("%s %s -> %s %s", method, endpoint, response.status_code, response.reason)
            if isinstance(data, str) and data:
                raise HttpError(data, response.status_code)
            message = data.get("message") if isinstance(data, dict) else None
            raise HttpError(message or f"{response.reason} {response.status_code}", response.status_code)

        return data

    @staticmethod
    def _parse_body(response: requests.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError:
                logger.warning("Invalid JSON body from %s", response.url)
                return None
        if "text/html" in content_type or "text/plain" in content_type:
            return response.text
        return response.content

    # ---------- auth ----------------------------------------------------
    def login(self, username: str, password: str) -> Dict[str, Any]:
        """Raw login answer: {"authentificated": bool, "token": str, "expiresAt": ...}."""
        data = self._request("POST", "/installer/login",
                             json={"username": username, "password": password},
                             authenticated=False)
        return data if isinstance(data, dict) else {}

    # ---------- purchase orders -----------------------------------------
    def fetch_purchase_orders(self, is_installed: Optional[bool] = None) -> List[PurchaseOrder]:
        params = None if is_installed is None else {"isInstalled": _bool_param(is_installed)}
        data = self._request("GET", "/installer/purchase-orders", params=params)
        return PurchaseOrder.list_from_api(data or [])

    def fetch_purchase_order(self, order_id: int, is_installed: Optional[bool] = None) -> PurchaseOrder:
        params = None if is_installed is None else {"isInstalled": _bool_param(is_installed)}
        data = self._request("GET", f"/installer/purchase-orders/{int(order_id)}", params=params)
        return PurchaseOrder.from_api(data)

    def complete_installation(self, order_id: int, payload: Dict[str, Any]) -> PurchaseOrder:
        data = self._request("PUT", f"/installer/purchase-orders/{int(order_id)}/complete", json=payload)
        return PurchaseOrder.from_api(data)

    def download_installation_pdf(self, order_id: int) -> bytes:
        data = self._request("GET", f"/installer/purchase-orders/{int(order_id)}/installation-pdf",
                             accept="application/pdf")
        if isinstance(data, str):
            return data.encode("utf-8")
        return bytes(data or b"")
