"""
installation/tests/test_installation_service.py

End-to-end submission flow with a mocked API client.
"""

from __future__ import annotations

import asyncio
import io
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from PIL import Image

from core.config.config_service import SignatureConfig
from installation.exceptions.errors import FormValidationError, HttpError, SessionExpiredError
from installation.logic.api_client import InstallerApiClient
from installation.logic.draft_repository import DraftRepository
from installation.logic.installation_service import InstallationService
from installation.models.installation_form import InstallationForm
from installation.models.purchase_order import PurchaseOrder
from installation.models.submission_policy import SubmissionPolicy
from signature.logic.data_url import decode_data_url
from signature.logic.signature_service import SignatureService

from ._fixtures import RecordingLogger, authenticated_session, order_json, signature_data_url


class TestInstallationService(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = TemporaryDirectory()
        self.drafts = DraftRepository(Path(self._tmp.name))
        self.client = mock.Mock(spec=InstallerApiClient)
        self.client.session = authenticated_session("tech1")
        self.client.complete_installation.return_value = PurchaseOrder.from_api(
            order_json(isInstalled=True, installationCompletedAt="2025-03-01T10:00:00Z"))
        self.audit = RecordingLogger()
        self.order = PurchaseOrder.from_api(order_json())
        self.service = self._service(SubmissionPolicy())

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _service(self, policy: SubmissionPolicy) -> InstallationService:
        return InstallationService(
            client=self.client,
            signatures=SignatureService(config=SignatureConfig(), logger=self.audit),
            policy=policy,
            drafts=self.drafts,
            logger=self.audit,
        )

    def _form(self, **kwargs) -> InstallationForm:
        values = {"robot_installed": True, "installer_name": "Paul",
                  "client_signature": signature_data_url(1600, 800)}
        values.update(kwargs)
        return InstallationForm(**values)

    # -------- success -------------------------------------------------------
    def test_submit_sends_compressed_signature(self) -> None:
        form = self._form()
        self.drafts.save(self.order.id, form)

        result = asyncio.run(self.service.submit(self.order, form))

        self.assertTrue(result.order.is_installed)
        self.assertTrue(result.compressed)
        order_id, payload = self.client.complete_installation.call_args[0]
        self.assertEqual(order_id, 42)
        self.assertTrue(payload["robotInstalled"])
        self.assertEqual(payload["installerName"], "Paul")
        signature = decode_data_url(payload["clientInstallationSignature"])
        self.assertEqual(signature.mime, "image/jpeg")
        self.assertEqual(Image.open(io.BytesIO(signature.payload)).size, (400, 200))
        self.assertAlmostEqual(result.signature_bytes, len(signature.payload), delta=2)

        # draft forgotten, form keeps the original signature
        self.assertIsNone(self.drafts.load(self.order.id))
        self.assertTrue(form.client_signature.startswith("data:image/png"))
        self.assertEqual(self.audit.events("Installation"), ["SubmitStart", "SubmitSuccess"])
        self.assertEqual(self.audit.events("Signature"), ["Compressed"])

    def test_uncompressible_signature_is_sent_as_is(self) -> None:
        form = self._form(client_signature="data:image/png;base64,aGVsbG8=")
        result = asyncio.run(self.service.submit(self.order, form))
        self.assertFalse(result.compressed)
        payload = self.client.complete_installation.call_args[0][1]
        self.assertEqual(payload["clientInstallationSignature"], "data:image/png;base64,aGVsbG8=")

    # -------- validation ----------------------------------------------------
    def test_missing_signature_sends_nothing(self) -> None:
        with self.assertRaises(FormValidationError) as ctx:
            asyncio.run(self.service.submit(self.order, self._form(client_signature="")))
        self.assertIn("client_signature", ctx.exception.errors)
        self.client.complete_installation.assert_not_called()
        self.assertEqual(self.audit.calls, [])

    def test_missing_email_is_requested(self) -> None:
        service = self._service(SubmissionPolicy(prompt_missing_email=True))
        order = PurchaseOrder.from_api(order_json(clientEmail=None))
        with self.assertRaises(FormValidationError) as ctx:
            asyncio.run(service.submit(order, self._form()))
        self.assertTrue(ctx.exception.needs_client_email)
        self.assertEqual(ctx.exception.errors, {})

        asyncio.run(service.submit(order, self._form(client_email="client@example.fr")))
        payload = self.client.complete_installation.call_args[0][1]
        self.assertEqual(payload["clientEmail"], "client@example.fr")

    # -------- failures ------------------------------------------------------
    def test_http_error_keeps_draft(self) -> None:
        form = self._form()
        self.drafts.save(self.order.id, form)
        self.client.complete_installation.side_effect = HttpError("Commande déjà installée", 409)

        with self.assertRaises(HttpError):
            asyncio.run(self.service.submit(self.order, form))

        self.assertIsNotNone(self.drafts.load(self.order.id))
        self.assertEqual(self.audit.events("Installation"), ["SubmitStart", "SubmitFailed"])
        failed = self.audit.calls[-1][2]
        self.assertEqual(failed["level"], "ERROR")
        self.assertEqual(failed["reference_id"], "42")

    def test_session_expiry_saves_form_as_draft(self) -> None:
        form = self._form(installation_notes="Câble posé")
        self.assertIsNone(self.drafts.load(self.order.id))
        self.client.complete_installation.side_effect = SessionExpiredError()

        with self.assertRaises(SessionExpiredError):
            asyncio.run(self.service.submit(self.order, form))

        draft = self.drafts.load(self.order.id)
        self.assertIsNotNone(draft)
        self.assertEqual(draft.installer_name, "Paul")
        self.assertEqual(draft.installation_notes, "Câble posé")
        self.assertEqual(draft.client_signature, form.client_signature)
        self.assertEqual(self.audit.events("Installation"), ["SubmitStart", "SubmitFailed"])

    # -------- helpers -------------------------------------------------------
    def test_default_installer_name_is_session_user(self) -> None:
        self.assertEqual(self.service.default_installer_name(), "tech1")

    def test_drafts_round_trip_through_service(self) -> None:
        form = self._form(installation_notes="Abri à monter")
        self.service.save_draft(7, form)
        self.assertEqual(self.service.load_draft(7), form)

    def test_without_draft_store(self) -> None:
        service = InstallationService(client=self.client,
                                      signatures=SignatureService(config=SignatureConfig()))
        service.save_draft(7, self._form())
        self.assertIsNone(service.load_draft(7))

    def test_download_pdf(self) -> None:
        self.client.download_installation_pdf.return_value = b"%PDF"
        self.assertEqual(self.service.download_pdf(42), b"%PDF")


if __name__ == "__main__":
    unittest.main()
