# installation/models/installation_form.py
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional, Tuple

# (attribute, API key) for each checklist line, in display order
CHECKLIST_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("robot_installed", "robotInstalled"),
    ("plugin_installed", "pluginInstalled"),
    ("antenna_installed", "antennaInstalled"),
    ("shelter_installed", "shelterInstalled"),
    ("wire_installed", "wireInstalled"),
    ("antenna_support_installed", "antennaSupportInstalled"),
    ("placement_completed", "placementCompleted"),
)

CHECKLIST_LABELS: Dict[str, str] = {
    "robot_installed": "Robot installé",
    "plugin_installed": "Prise connectée installée",
    "antenna_installed": "Antenne installée",
    "shelter_installed": "Abri installé",
    "wire_installed": "Câble périphérique posé",
    "antenna_support_installed": "Support d'antenne installé",
    "placement_completed": "Mise en place terminée",
}


@dataclass
class InstallationForm:
    """What the technician fills in for one order."""
    robot_installed: bool = False
    plugin_installed: bool = False
    antenna_installed: bool = False
    shelter_installed: bool = False
    wire_installed: bool = False
    antenna_support_installed: bool = False
    placement_completed: bool = False

    installation_notes: str = ""
    missing_items: str = ""
    additional_comments: str = ""

    # data URL, "" while the pad is empty
    client_signature: str = ""
    installer_name: str = ""
    client_email: str = ""

    def to_payload(self, *, signature: Optional[str] = None,
                   client_email: Optional[str] = None) -> Dict[str, Any]:
        """
        JSON body of the completion call.

        *signature* replaces the captured value (the compressed copy is sent,
        the form keeps the original). clientEmail is only sent when known.
        """
        payload: Dict[str, Any] = {
            "installationNotes": self.installation_notes.strip(),
            "installerName": self.installer_name.strip(),
            "clientInstallationSignature": self.client_signature if signature is None else signature,
        }
        for attr, api_key in CHECKLIST_FIELDS:
            payload[api_key] = bool(getattr(self, attr))
        payload["missingItems"] = self.missing_items.strip()
        payload["additionalComments"] = self.additional_comments.strip()
        email = (client_email if client_email is not None else self.client_email).strip()
        if email:
            payload["clientEmail"] = email
        return payload

    # -------- drafts --------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallationForm":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
