"""Home-screen order filtering and selection toggling."""
from __future__ import annotations

from installation.logic.order_filter import pending_orders, toggle_selection
from installation.models.purchase_order import PurchaseOrder

from ._fixtures import order_json


def test_pending_orders_keeps_uninstalled_orders_needing_installer() -> None:
    orders = PurchaseOrder.list_from_api([
        order_json(id=1),
        order_json(id=2, isInstalled=True),
        order_json(id=3, needsInstaller=False),
        order_json(id=4),
    ])
    assert [o.id for o in pending_orders(orders)] == [1, 4]


def test_toggle_selection() -> None:
    assert toggle_selection(None, 5) == 5
    assert toggle_selection(5, 5) is None
    assert toggle_selection(5, 6) == 6
