"""
login_view.py – Tkinter login form (GUI layer).

The view writes no log entries; AuthService handles the audit trail and the
session, keeping the GUI decoupled from both.
"""
from __future__ import annotations

from tkinter import ttk, StringVar
from typing import Callable

from installation.logic.auth_service import AuthService


class LoginView(ttk.Frame):
    """Username / password form that delegates to AuthService and reports
    the outcome via *login_callback(success)*.
    """

    def __init__(self, parent, *, auth: AuthService, login_callback: Callable[[bool], None], **kwargs):
        super().__init__(parent, padding=24, **kwargs)
        self._auth = auth
        self._login_callback = login_callback

        self._username_var = StringVar()
        self._password_var = StringVar()
        self._message_var = StringVar()

        ttk.Label(self, text="Espace installateur", font=("TkDefaultFont", 14, "bold")).grid(
            row=0, column=0, columnspan=2, pady=(0, 12))

        ttk.Label(self, text="Identifiant :").grid(row=1, column=0, sticky="e", padx=5, pady=5)
        user_entry = ttk.Entry(self, textvariable=self._username_var)
        user_entry.grid(row=1, column=1, padx=5, pady=5)

        ttk.Label(self, text="Mot de passe :").grid(row=2, column=0, sticky="e", padx=5, pady=5)
        pwd_entry = ttk.Entry(self, show="*", textvariable=self._password_var)
        pwd_entry.grid(row=2, column=1, padx=5, pady=5)
        pwd_entry.bind("<Return>", lambda _e: self._attempt_login())

        self._btn = ttk.Button(self, text="Se connecter", command=self._attempt_login)
        self._btn.grid(row=3, column=0, columnspan=2, pady=10)
        ttk.Label(self, textvariable=self._message_var, foreground="#b91c1c").grid(
            row=4, column=0, columnspan=2)

        user_entry.focus_set()

    # ------------------------------------------------------------------ #
    # Internals                                                          #
    # ------------------------------------------------------------------ #
    def _attempt_login(self) -> None:
        username = self._username_var.get().strip()
        password = self._password_var.get()
        if not username or not password:
            self._message_var.set("Veuillez renseigner vos identifiants")
            return

        self._btn.config(state="disabled")
        try:
            result = self._auth.login(username, password)
        finally:
            self._btn.config(state="normal")

        self._password_var.set("")
        self._message_var.set("" if result.success else result.message)
        self._login_callback(result.success)
