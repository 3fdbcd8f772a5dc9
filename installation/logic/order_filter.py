"""Order list helpers for the home screen."""
from __future__ import annotations

from typing import Iterable, List, Optional

from ..models.purchase_order import PurchaseOrder


def pending_orders(orders: Iterable[PurchaseOrder]) -> List[PurchaseOrder]:
    """Orders still waiting for a technician: not installed and installer requested."""
    return [o for o in orders if not o.is_installed and o.needs_installer]


def toggle_selection(current: Optional[int], order_id: int) -> Optional[int]:
    """Clicking the selected order again deselects it."""
    return None if current == order_id else order_id
