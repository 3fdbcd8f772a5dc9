# installation/gui/order_list_view.py
from __future__ import annotations

from tkinter import ttk
from typing import Callable, Dict, List, Optional

import requests

from core.helpers.date_time_helper import format_date
from ..exceptions.errors import HttpError, NotAuthenticatedError, SessionExpiredError
from ..logic.api_client import InstallerApiClient
from ..logic.order_filter import pending_orders, toggle_selection
from ..models.purchase_order import PurchaseOrder

MSG_LOAD_ERROR = "Erreur lors du chargement des commandes"


class OrderListView(ttk.Frame):
    """
    "Commandes à installer": pending orders, click to select, click again to
    deselect, then start the installation of the selected one.
    """

    COLUMNS = ("id", "client", "city", "robot", "date")

    def __init__(self, parent, *, client: InstallerApiClient,
                 on_start: Callable[[PurchaseOrder], None],
                 on_session_expired: Callable[[], None], **kwargs) -> None:
        super().__init__(parent, padding=12, **kwargs)
        self._client = client
        self._on_start = on_start
        self._on_session_expired = on_session_expired
        self._orders: Dict[int, PurchaseOrder] = {}
        self._selected: Optional[int] = None

        head = ttk.Frame(self)
        head.pack(fill="x")
        ttk.Label(head, text="Commandes à installer", font=("TkDefaultFont", 13, "bold")).pack(side="left")
        self._count = ttk.Label(head, text="")
        self._count.pack(side="right")

        self.tree = ttk.Treeview(self, columns=self.COLUMNS, show="headings", selectmode="none", height=14)
        for col, text, width in (
            ("id", "Commande", 90), ("client", "Client", 200), ("city", "Ville", 140),
            ("robot", "Robot", 180), ("date", "Installation prévue", 140),
        ):
            self.tree.heading(col, text=text)
            self.tree.column(col, width=width, anchor="w")
        self.tree.pack(fill="both", expand=True, pady=8)
        self.tree.bind("<ButtonRelease-1>", self._on_click)

        self._error = ttk.Label(self, foreground="#b91c1c")
        self._error.pack(fill="x")

        bar = ttk.Frame(self)
        bar.pack(fill="x")
        ttk.Button(bar, text="Réessayer", command=self.refresh).pack(side="left")
        self._start_btn = ttk.Button(bar, text="Commencer l'installation", command=self._start,
                                     state="disabled")
        self._start_btn.pack(side="right")

        self.refresh()

    # ------------------------------------------------------------------ data
    def refresh(self) -> None:
        self._error.config(text="")
        try:
            orders = pending_orders(self._client.fetch_purchase_orders())
        except (SessionExpiredError, NotAuthenticatedError):
            self._on_session_expired()
            return
        except HttpError as ex:
            self._error.config(text=ex.message)
            return
        except requests.RequestException:
            self._error.config(text=MSG_LOAD_ERROR)
            return
        self._fill(orders)

    def _fill(self, orders: List[PurchaseOrder]) -> None:
        self.tree.delete(*self.tree.get_children())
        self._orders = {o.id: o for o in orders}
        if self._selected not in self._orders:
            self._selected = None
        for o in orders:
            self.tree.insert("", "end", iid=str(o.id), values=(
                f"#{o.id}",
                o.client_name,
                o.client_city,
                o.robot_inventory.name if o.robot_inventory else "",
                format_date(o.installation_date) if o.installation_date else "",
            ))
        self._count.config(text=f"{len(orders)} en attente")
        self._sync_selection()

    # ------------------------------------------------------------------ selection
    def _on_click(self, e) -> None:
        row = self.tree.identify_row(e.y)
        if not row:
            return
        self._selected = toggle_selection(self._selected, int(row))
        self._sync_selection()

    def _sync_selection(self) -> None:
        self.tree.selection_set(() if self._selected is None else (str(self._selected),))
        self._start_btn.config(state="normal" if self._selected is not None else "disabled")

    def _start(self) -> None:
        if self._selected is not None and self._selected in self._orders:
            self._on_start(self._orders[self._selected])
