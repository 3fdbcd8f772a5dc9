"""
framework/gui/main_window.py
============================

Root window of the installer client.
– Login view until the session is authenticated, then the order list.
– Session expiry (backend "jwt expired") brings the login view back.
"""

from __future__ import annotations

import tkinter as tk
from tkinter import Frame, Label, Button, X, RIGHT
from typing import Optional

from core.common.app_context import AppContext
from core.common.session_events import SessionEvent
from framework.gui.login_view import LoginView
from installation.gui.installation_form_view import InstallationFormView
from installation.gui.order_list_view import OrderListView
from installation.models.purchase_order import PurchaseOrder


class MainWindow(tk.Tk):
    """Main application window."""

    def __init__(self, ctx: AppContext) -> None:
        super().__init__()
        self.ctx = ctx
        self.active_view: Optional[tk.Widget] = None

        self.title(ctx.config.general.app_name)
        self.geometry("1000x820")

        # ---------- Frames ---------------------------------------------
        self.nav_frame = Frame(self, height=40, bg="#dddddd")
        self.nav_frame.pack(side="top", fill=X)

        self.display_area = Frame(self, bg="white")
        self.display_area.pack(fill="both", expand=True)

        self.status_bar = Label(self, text="Bienvenue", anchor="w", bg="#eeeeee")
        self.status_bar.pack(side="bottom", fill=X)

        self.logout_button = Button(self.nav_frame, text="Déconnexion", command=self.logout, padx=12, pady=2)

        ctx.session.subscribe(self._on_session_event)
        self.load_login_view()

    # ------------------------------------------------------------------ #
    # Views                                                              #
    # ------------------------------------------------------------------ #
    def clear_display_area(self) -> None:
        for widget in self.display_area.winfo_children():
            widget.destroy()
        self.active_view = None

    def _show(self, view: tk.Widget) -> None:
        self.active_view = view
        view.pack(fill="both", expand=True)

    def load_login_view(self) -> None:
        self.clear_display_area()
        self.logout_button.pack_forget()
        self._show(LoginView(self.display_area, auth=self.ctx.auth, login_callback=self.on_login_result))

    def load_orders_view(self) -> None:
        self.clear_display_area()
        self._show(OrderListView(self.display_area, client=self.ctx.client,
                                 on_start=self.load_installation_view,
                                 on_session_expired=self._session_lost))

    def load_installation_view(self, order: PurchaseOrder) -> None:
        self.clear_display_area()
        self._show(InstallationFormView(
            self.display_area,
            order=order,
            service=self.ctx.installations,
            signatures=self.ctx.signatures,
            on_done=self.load_orders_view,
            on_session_expired=self._session_lost,
        ))
        self.set_status(f"Installation de la commande #{order.id}")

    # ------------------------------------------------------------------ #
    # Login / logout                                                     #
    # ------------------------------------------------------------------ #
    def on_login_result(self, success: bool) -> None:
        if success:
            self.logout_button.pack(side=RIGHT, padx=10, pady=5)
            self.load_orders_view()
            self.set_status(f"Connecté : {self.ctx.session.username}")
        else:
            self.set_status("Échec de la connexion")

    def logout(self) -> None:
        self.ctx.auth.logout()

    def _session_lost(self) -> None:
        # token already gone or never valid; the session emits nothing in that case
        self.ctx.session.end(reason="expired")
        self.load_login_view()
        self.set_status("Session expirée, veuillez vous reconnecter")

    def _on_session_event(self, event: SessionEvent) -> None:
        # may fire from a submission worker thread
        self.after(0, lambda: self._apply_session_event(event))

    def _apply_session_event(self, event: SessionEvent) -> None:
        if event.type == "logout":
            self.load_login_view()
            self.set_status("Déconnecté")
        elif event.type == "expired":
            self.load_login_view()
            self.set_status("Session expirée, veuillez vous reconnecter")

    # ------------------------------------------------------------------ #
    # Helpers                                                            #
    # ------------------------------------------------------------------ #
    def set_status(self, message: str) -> None:
        self.status_bar.config(text=message)
