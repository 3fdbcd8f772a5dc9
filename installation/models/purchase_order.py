# installation/models/purchase_order.py
"""
Purchase orders as returned by the installer API (camelCase JSON).

Only the fields the installation client reads are modelled; unknown keys are
ignored so backend additions don't break parsing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from core.helpers.date_time_helper import parse_api_datetime


class InventoryCategory(str, Enum):
    ROBOT = "ROBOT"
    PLUGIN = "PLUGIN"
    ANTENNA = "ANTENNA"
    SHELTER = "SHELTER"
    WIRE = "WIRE"
    SUPPORT = "SUPPORT"


def _dt(value: Any) -> Optional[datetime]:
    if value in (None, ""):
        return None
    return parse_api_datetime(value)


def _float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


@dataclass
class RobotInventory:
    id: int
    name: str
    category: InventoryCategory
    reference: Optional[str] = None
    selling_price: Optional[float] = None

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["RobotInventory"]:
        if not data:
            return None
        return cls(
            id=int(data["id"]),
            name=data.get("name", ""),
            category=InventoryCategory(data.get("category", "ROBOT")),
            reference=data.get("reference"),
            selling_price=_float(data.get("sellingPrice")),
        )


@dataclass
class PurchaseOrder:
    id: int

    # Client
    client_first_name: str = ""
    client_last_name: str = ""
    client_address: str = ""
    client_city: str = ""
    client_phone: str = ""
    client_email: str = ""
    deposit: float = 0.0

    # Equipment
    robot_inventory: Optional[RobotInventory] = None
    serial_number: Optional[str] = None
    plugin: Optional[RobotInventory] = None
    antenna: Optional[RobotInventory] = None
    shelter: Optional[RobotInventory] = None
    has_wire: bool = False
    wire_length: Optional[float] = None
    has_antenna_support: bool = False
    has_placement: bool = False

    # Installation
    installation_date: Optional[datetime] = None
    needs_installer: bool = False
    installation_notes: Optional[str] = None
    installer_name: Optional[str] = None
    installation_completed_at: Optional[datetime] = None
    missing_items: Optional[str] = None
    additional_comments: Optional[str] = None
    installed_items: Dict[str, Optional[bool]] = field(default_factory=dict)

    # Status
    has_appointment: bool = False
    is_installed: bool = False
    is_invoiced: bool = False

    # Signature
    client_installation_signature: Optional[str] = None
    signature_timestamp: Optional[datetime] = None

    @property
    def client_name(self) -> str:
        return f"{self.client_first_name} {self.client_last_name}".strip()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "PurchaseOrder":
        from .installation_form import CHECKLIST_FIELDS  # avoid cycle at import time

        return cls(
            id=int(data["id"]),
            client_first_name=data.get("clientFirstName") or "",
            client_last_name=data.get("clientLastName") or "",
            client_address=data.get("clientAddress") or "",
            client_city=data.get("clientCity") or "",
            client_phone=data.get("clientPhone") or "",
            client_email=data.get("clientEmail") or "",
            deposit=float(data.get("deposit") or 0),
            robot_inventory=RobotInventory.from_api(data.get("robotInventory")),
            serial_number=data.get("serialNumber"),
            plugin=RobotInventory.from_api(data.get("plugin")),
            antenna=RobotInventory.from_api(data.get("antenna")),
            shelter=RobotInventory.from_api(data.get("shelter")),
            has_wire=bool(data.get("hasWire")),
            wire_length=_float(data.get("wireLength")),
            has_antenna_support=bool(data.get("hasAntennaSupport")),
            has_placement=bool(data.get("hasPlacement")),
            installation_date=_dt(data.get("installationDate")),
            needs_installer=bool(data.get("needsInstaller")),
            installation_notes=data.get("installationNotes"),
            installer_name=data.get("installerName"),
            installation_completed_at=_dt(data.get("installationCompletedAt")),
            missing_items=data.get("missingItems"),
            additional_comments=data.get("additionalComments"),
            installed_items={api_key: data.get(api_key) for _, api_key in CHECKLIST_FIELDS},
            has_appointment=bool(data.get("hasAppointment")),
            is_installed=bool(data.get("isInstalled")),
            is_invoiced=bool(data.get("isInvoiced")),
            client_installation_signature=data.get("clientInstallationSignature"),
            signature_timestamp=_dt(data.get("signatureTimestamp")),
        )

    @classmethod
    def list_from_api(cls, items: List[Dict[str, Any]]) -> List["PurchaseOrder"]:
        return [cls.from_api(item) for item in items or []]
