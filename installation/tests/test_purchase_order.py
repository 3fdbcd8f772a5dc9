"""Parsing of purchase orders and the completion payload."""
from __future__ import annotations

from datetime import datetime, timezone

from installation.models.installation_form import CHECKLIST_FIELDS, InstallationForm
from installation.models.purchase_order import InventoryCategory, PurchaseOrder

from ._fixtures import order_json


def test_from_api_parses_camel_case() -> None:
    order = PurchaseOrder.from_api(order_json())
    assert order.id == 42
    assert order.client_name == "Marie Durand"
    assert order.client_city == "Lyon"
    assert order.robot_inventory.name == "Mower X500"
    assert order.robot_inventory.category is InventoryCategory.ROBOT
    assert order.robot_inventory.selling_price == 1499.9
    assert order.antenna.category is InventoryCategory.ANTENNA
    assert order.plugin is None
    assert order.has_wire and order.wire_length == 150.0
    assert order.installation_date == datetime(2025, 3, 1, 8, 0, tzinfo=timezone.utc)
    assert order.needs_installer and not order.is_installed


def test_from_api_tolerates_missing_and_unknown_keys() -> None:
    order = PurchaseOrder.from_api({"id": "7", "somethingNew": 1, "clientFirstName": None})
    assert order.id == 7
    assert order.client_name == ""
    assert order.robot_inventory is None
    assert order.installation_date is None
    assert set(order.installed_items) == {api_key for _, api_key in CHECKLIST_FIELDS}


def test_list_from_api() -> None:
    orders = PurchaseOrder.list_from_api([order_json(id=1), order_json(id=2)])
    assert [o.id for o in orders] == [1, 2]
    assert PurchaseOrder.list_from_api(None) == []


def test_payload_uses_api_keys() -> None:
    form = InstallationForm(robot_installed=True, wire_installed=True,
                            installation_notes="  RAS  ", installer_name=" Paul ",
                            client_signature="data:image/png;base64,AAAA")
    payload = form.to_payload()
    assert payload["robotInstalled"] is True
    assert payload["pluginInstalled"] is False
    assert payload["wireInstalled"] is True
    assert payload["installationNotes"] == "RAS"
    assert payload["installerName"] == "Paul"
    assert payload["clientInstallationSignature"] == "data:image/png;base64,AAAA"
    assert "clientEmail" not in payload


def test_payload_signature_and_email_overrides() -> None:
    form = InstallationForm(client_signature="original", client_email="a@b.fr")
    payload = form.to_payload(signature="compressed")
    assert payload["clientInstallationSignature"] == "compressed"
    assert payload["clientEmail"] == "a@b.fr"
    assert form.to_payload(client_email="c@d.fr")["clientEmail"] == "c@d.fr"


def test_form_dict_ignores_unknown_keys() -> None:
    form = InstallationForm(robot_installed=True, installer_name="Paul")
    data = form.to_dict()
    data["legacy_field"] = "x"
    assert InstallationForm.from_dict(data) == form
