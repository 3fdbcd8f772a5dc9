# core/common/app_context.py
"""
Runtime context & service wiring for the installer client.

Built once by the application shell; views receive the services they need
from here instead of constructing their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from core.app_logging.logic.logger import get_logger
from core.common.session import InstallerSession
from core.config.config_service import ConfigService, config_service
from installation.logic.api_client import InstallerApiClient
from installation.logic.auth_service import AuthService
from installation.logic.draft_repository import DraftRepository
from installation.logic.installation_service import InstallationService
from installation.models.submission_policy import SubmissionPolicy
from signature.logic.signature_service import SignatureService


@dataclass
class AppContext:
    """Central runtime context (no GUI state)."""

    config: ConfigService
    session: InstallerSession
    client: InstallerApiClient
    auth: AuthService
    signatures: SignatureService
    installations: InstallationService

    @classmethod
    def build(cls, *, config: Optional[ConfigService] = None, logger: Optional[Any] = None,
              session: Optional[InstallerSession] = None,
              client: Optional[InstallerApiClient] = None,
              drafts: Optional[DraftRepository] = None) -> "AppContext":
        config = config or config_service
        audit = logger if logger is not None else get_logger()
        session = session or InstallerSession()
        client = client or InstallerApiClient(config.api.base_url, session, timeout=config.api.timeout_s)
        signatures = SignatureService(config=config.signature, logger=audit)
        installations = InstallationService(
            client=client,
            signatures=signatures,
            policy=SubmissionPolicy.from_config(config.submission),
            drafts=drafts or DraftRepository(config.storage.drafts_dir),
            logger=audit,
        )
        return cls(
            config=config,
            session=session,
            client=client,
            auth=AuthService(client, logger=audit),
            signatures=signatures,
            installations=installations,
        )
