# installation/logic/installation_service.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from signature.logic.data_url import get_data_url_size
from signature.logic.signature_service import SignatureService

from ..exceptions.errors import FormValidationError, NotAuthenticatedError, SessionExpiredError
from ..models.installation_form import InstallationForm
from ..models.purchase_order import PurchaseOrder
from ..models.submission_policy import SubmissionPolicy
from .api_client import InstallerApiClient
from .draft_repository import DraftRepository
from .form_validation import validate_form

logger = logging.getLogger(__name__)

_FEATURE_ID = "Installation"


@dataclass(frozen=True)
class SubmissionResult:
    order: PurchaseOrder
    signature_bytes: int
    compressed: bool


class InstallationService:
    """
    Completion flow of one order (no UI): validate, compress the signature
    once, send, forget the draft.
    """

    def __init__(self, *, client: InstallerApiClient, signatures: SignatureService,
                 policy: SubmissionPolicy = SubmissionPolicy(),
                 drafts: Optional[DraftRepository] = None,
                 logger: Optional[Any] = None) -> None:
        self._client = client
        self._signatures = signatures
        self._policy = policy
        self._drafts = drafts
        self._audit = logger

    @property
    def policy(self) -> SubmissionPolicy:
        return self._policy

    def default_installer_name(self) -> str:
        return self._client.session.username or ""

    # -------- drafts --------------------------------------------------------
    def save_draft(self, order_id: int, form: InstallationForm) -> None:
        if self._drafts is not None:
            self._drafts.save(order_id, form)

    def load_draft(self, order_id: int) -> Optional[InstallationForm]:
        return self._drafts.load(order_id) if self._drafts is not None else None

    # -------- submission ----------------------------------------------------
    async def submit(self, order: PurchaseOrder, form: InstallationForm) -> SubmissionResult:
        """
        Raises FormValidationError when the form is incomplete (nothing is sent)
        and lets HttpError/SessionExpiredError from the API through. On an
        expired session the form is kept as a draft before the error surfaces.
        """
        username = self._client.session.username
        result = validate_form(form, self._policy, order)
        if not result.is_valid:
            raise FormValidationError(result.errors, needs_client_email=result.needs_client_email)

        self._log("SubmitStart", username, order.id)
        signature = await self._signatures.compress_for_upload(
            form.client_signature, reference_id=str(order.id), username=username)
        payload = form.to_payload(signature=signature)

        try:
            updated = await asyncio.to_thread(self._client.complete_installation, order.id, payload)
        except Exception as ex:
            self._log("SubmitFailed", username, order.id, level="ERROR", message=str(ex))
            if isinstance(ex, (SessionExpiredError, NotAuthenticatedError)):
                self.save_draft(order.id, form)
            raise

        if self._drafts is not None:
            self._drafts.delete(order.id)
        self._log("SubmitSuccess", username, order.id)
        return SubmissionResult(
            order=updated,
            signature_bytes=get_data_url_size(signature),
            compressed=signature is not form.client_signature,
        )

    def download_pdf(self, order_id: int) -> bytes:
        return self._client.download_installation_pdf(order_id)

    def _log(self, event: str, username: Optional[str], order_id: int, *,
             level: str = "INFO", message: Optional[str] = None) -> None:
        if level == "ERROR":
            logger.error("%s for order %s: %s", event, order_id, message)
        if self._audit is not None:
            self._audit.log(_FEATURE_ID, event, username=username, level=level,
                            reference_id=str(order_id), message=message)
