# installation/logic/draft_repository.py
"""
Encrypted per-order drafts of the installation form.

A technician may leave the form (phone call, lost network) and come back
later; the draft restores checklist, notes and the signature serialization.
Drafts hold client data, so they are Fernet-encrypted at rest.

Key file layout ({base_dir}/draft.keys): one base64 key per line, the first
is current (encrypt), the others are legacy (decrypt only).
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from cryptography.fernet import Fernet, InvalidToken, MultiFernet

from ..models.installation_form import InstallationForm

logger = logging.getLogger(__name__)

_KEY_FILE = "draft.keys"


class DraftRepository:
    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_config(cls) -> "DraftRepository":
        from core.config.config_service import config_service  # lazy
        return cls(config_service.storage.drafts_dir)

    # -------- keys ----------------------------------------------------------
    def _key_path(self) -> Path:
        return self._base_dir / _KEY_FILE

    def _load_keys(self) -> List[bytes]:
        path = self._key_path()
        keys: List[bytes] = []
        if path.exists():
            keys = [line.strip().encode("ascii")
                    for line in path.read_text(encoding="ascii").splitlines() if line.strip()]
        if not keys:
            # one-time key creation
            keys = [Fernet.generate_key()]
            self._write_keys(keys)
        return keys

    def _write_keys(self, keys: List[bytes]) -> None:
        path = self._key_path()
        tmp = path.with_suffix(".tmp")
        tmp.write_text("\n".join(k.decode("ascii") for k in keys) + "\n", encoding="ascii")
        os.replace(tmp, path)
        try:
            os.chmod(path, 0o600)
        except OSError:
            logger.debug("Could not restrict permissions of %s", path)

    def _fernet(self) -> MultiFernet:
        return MultiFernet([Fernet(k) for k in self._load_keys()])

    def rotate_key(self) -> int:
        """New current key; existing drafts are re-encrypted. Returns the number of drafts."""
        keys = [Fernet.generate_key()] + self._load_keys()
        self._write_keys(keys)
        fernet = MultiFernet([Fernet(k) for k in keys])
        count = 0
        for path in self._base_dir.glob("order-*.draft"):
            try:
                path.write_bytes(fernet.rotate(path.read_bytes()))
                count += 1
            except InvalidToken:
                logger.warning("Skipping unreadable draft %s during key rotation", path.name)
        return count

    # -------- drafts --------------------------------------------------------
    def _draft_path(self, order_id: int) -> Path:
        return self._base_dir / f"order-{int(order_id)}.draft"

    def save(self, order_id: int, form: InstallationForm) -> None:
        doc = {
            "order_id": int(order_id),
            "saved_at": datetime.now(timezone.utc).isoformat(),
            "form": form.to_dict(),
        }
        token = self._fernet().encrypt(json.dumps(doc, ensure_ascii=False).encode("utf-8"))
        path = self._draft_path(order_id)
        tmp = path.with_suffix(".tmp")
        tmp.write_bytes(token)
        os.replace(tmp, path)

    def load(self, order_id: int) -> Optional[InstallationForm]:
        """The stored draft, or None if absent or unreadable (treated as absent)."""
        path = self._draft_path(order_id)
        if not path.exists():
            return None
        try:
            doc = json.loads(self._fernet().decrypt(path.read_bytes()).decode("utf-8"))
            return InstallationForm.from_dict(doc["form"])
        except (InvalidToken, ValueError, KeyError, TypeError) as ex:
            logger.warning("Ignoring unreadable draft for order %s: %s", order_id, type(ex).__name__)
            return None

    def delete(self, order_id: int) -> bool:
        path = self._draft_path(order_id)
        if path.exists():
            path.unlink()
            return True
        return False
