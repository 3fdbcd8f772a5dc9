# installation/gui/installation_form_view.py
"""
Installation form of one purchase order.

Layout: order summary, equipment checklist, free-text fields, installer name
and the client signature pad. Submission runs the async InstallationService
flow in a worker thread; results come back to Tk via ``after``.
"""
from __future__ import annotations

import asyncio
import threading
import tkinter as tk
from tkinter import filedialog, messagebox, simpledialog, ttk
from typing import Any, Callable, Dict

import requests

from core.helpers.date_time_helper import format_date, format_date_time
from signature.gui.signature_pad_view import SignaturePadView
from signature.logic.data_url import format_bytes
from signature.logic.signature_service import SignatureService

from ..exceptions.errors import (
    FormValidationError,
    HttpError,
    NotAuthenticatedError,
    SessionExpiredError,
)
from ..logic.installation_service import InstallationService, SubmissionResult
from ..models.installation_form import CHECKLIST_FIELDS, CHECKLIST_LABELS, InstallationForm
from ..models.purchase_order import PurchaseOrder

MSG_CONNECTION = "Erreur de connexion, veuillez réessayer"
MSG_SUCCESS = "Installation validée. Le rapport PDF a été envoyé au client."


def _applies(order: PurchaseOrder, attr: str) -> bool:
    """Checklist lines only for equipment that is part of the order."""
    return {
        "robot_installed": order.robot_inventory is not None,
        "plugin_installed": order.plugin is not None,
        "antenna_installed": order.antenna is not None,
        "shelter_installed": order.shelter is not None,
        "wire_installed": order.has_wire,
        "antenna_support_installed": order.has_antenna_support,
        "placement_completed": order.has_placement,
    }.get(attr, True)


class InstallationFormView(ttk.Frame):
    def __init__(self, parent, *, order: PurchaseOrder, service: InstallationService,
                 signatures: SignatureService, on_done: Callable[[], None],
                 on_session_expired: Callable[[], None], **kwargs) -> None:
        super().__init__(parent, padding=12, **kwargs)
        self._order = order
        self._service = service
        self._on_done = on_done
        self._on_session_expired = on_session_expired
        self._busy = False

        draft = service.load_draft(order.id) or InstallationForm(
            installer_name=service.default_installer_name())
        self._signature = draft.client_signature
        self._client_email = draft.client_email

        self._build_summary()

        # -------- checklist -------------------------------------------------
        box = ttk.LabelFrame(self, text="Équipements installés", padding=8)
        box.pack(fill="x", pady=(8, 0))
        self._checks: Dict[str, tk.BooleanVar] = {}
        for attr, _api_key in CHECKLIST_FIELDS:
            var = tk.BooleanVar(value=bool(getattr(draft, attr)))
            self._checks[attr] = var
            if _applies(order, attr):
                ttk.Checkbutton(box, text=CHECKLIST_LABELS[attr], variable=var).pack(anchor="w")

        # -------- free text -------------------------------------------------
        texts = ttk.Frame(self)
        texts.pack(fill="x", pady=(8, 0))
        notes_label = "Notes d'installation *" if service.policy.notes_required else "Notes d'installation"
        self._notes = self._text_field(texts, notes_label, draft.installation_notes, 0)
        self._missing = self._text_field(texts, "Éléments manquants", draft.missing_items, 1)
        self._comments = self._text_field(texts, "Commentaires", draft.additional_comments, 2)

        row = ttk.Frame(self)
        row.pack(fill="x", pady=(8, 0))
        ttk.Label(row, text="Nom de l'installateur *").pack(side="left")
        self._installer_var = tk.StringVar(value=draft.installer_name)
        ttk.Entry(row, textvariable=self._installer_var, width=32).pack(side="left", padx=6)

        # -------- signature -------------------------------------------------
        self._pad = SignaturePadView(self, service=signatures, value=draft.client_signature or None,
                                     on_signature_change=self._on_signature_change)
        self._pad.pack(fill="x", pady=(12, 0))

        # -------- actions ---------------------------------------------------
        bar = ttk.Frame(self)
        bar.pack(fill="x", pady=(12, 0))
        ttk.Button(bar, text="Retour", command=self._back).pack(side="left")
        ttk.Button(bar, text="Enregistrer le brouillon", command=self._save_draft).pack(side="left", padx=6)
        self._submit_btn = ttk.Button(bar, text="Valider l'installation", command=self._submit)
        self._submit_btn.pack(side="right")
        self._status = ttk.Label(bar)
        self._status.pack(side="right", padx=8)

    # ------------------------------------------------------------------ layout
    def _build_summary(self) -> None:
        o = self._order
        box = ttk.LabelFrame(self, text=f"Commande #{o.id}", padding=8)
        box.pack(fill="x")
        lines = [
            o.client_name,
            f"{o.client_address}, {o.client_city}".strip(", "),
            o.client_phone,
        ]
        if o.robot_inventory:
            robot = o.robot_inventory.name
            if o.serial_number:
                robot += f" (n° {o.serial_number})"
            lines.append(robot)
        if o.installation_date:
            lines.append(f"Installation prévue le {format_date(o.installation_date)}")
        for line in lines:
            if line:
                ttk.Label(box, text=line).pack(anchor="w")

    @staticmethod
    def _text_field(parent, label: str, value: str, column: int) -> tk.Text:
        ttk.Label(parent, text=label).grid(row=0, column=column, sticky="w", padx=(0, 8))
        text = tk.Text(parent, width=28, height=4, wrap="word")
        text.grid(row=1, column=column, sticky="nsew", padx=(0, 8))
        text.insert("1.0", value or "")
        parent.columnconfigure(column, weight=1)
        return text

    # ------------------------------------------------------------------ form
    def _on_signature_change(self, value: str) -> None:
        self._signature = value

    def _collect(self) -> InstallationForm:
        values: Dict[str, Any] = {attr: var.get() for attr, var in self._checks.items()}
        return InstallationForm(
            installation_notes=self._notes.get("1.0", "end-1c"),
            missing_items=self._missing.get("1.0", "end-1c"),
            additional_comments=self._comments.get("1.0", "end-1c"),
            client_signature=self._signature,
            installer_name=self._installer_var.get(),
            client_email=self._client_email,
            **values,
        )

    def _save_draft(self) -> None:
        self._service.save_draft(self._order.id, self._collect())
        self._status.config(text="Brouillon enregistré")

    def _back(self) -> None:
        if not self._busy:
            self._save_draft()
            self._on_done()

    # ------------------------------------------------------------------ submit
    def _submit(self) -> None:
        if self._busy:
            return
        self._set_busy(True)
        form = self._collect()
        self._run_async(lambda: self._service.submit(self._order, form),
                        self._on_submitted, self._on_submit_error)

    def _run_async(self, coro_factory, on_done, on_error) -> None:
        # daemon thread, never joined; callbacks are scheduled on the toplevel
        # so they outlive this view and can bail out once it is destroyed
        root = self.winfo_toplevel()

        def worker() -> None:
            try:
                result = asyncio.run(coro_factory())
            except Exception as ex:
                root.after(0, lambda e=ex: on_error(e))
                return
            root.after(0, lambda: on_done(result))

        threading.Thread(target=worker, daemon=True).start()

    def _set_busy(self, busy: bool) -> None:
        self._busy = busy
        self._submit_btn.config(state="disabled" if busy else "normal")
        self._pad.set_disabled(busy)
        self._status.config(text="Envoi en cours…" if busy else "")

    def _on_submitted(self, result: SubmissionResult) -> None:
        if not self.winfo_exists():
            return
        self._set_busy(False)
        done_at = result.order.installation_completed_at
        detail = f"\nTerminée le {format_date_time(done_at)}" if done_at else ""
        messagebox.showinfo("Installation", f"{MSG_SUCCESS}{detail}\nSignature : "
                            f"{format_bytes(result.signature_bytes)}", parent=self)
        if messagebox.askyesno("Rapport", "Télécharger le rapport d'installation (PDF) ?", parent=self):
            self._download_pdf()
        self._on_done()

    def _on_submit_error(self, ex: Exception) -> None:
        # an expired session may already have replaced this view; the service kept the draft
        if not self.winfo_exists():
            return
        self._set_busy(False)
        if isinstance(ex, FormValidationError):
            if ex.needs_client_email and not ex.errors:
                email = simpledialog.askstring(
                    "Email du client", "Aucune adresse email connue pour ce client.\n"
                    "Adresse à laquelle envoyer le rapport :", parent=self)
                if email and email.strip():
                    self._client_email = email.strip()
                    self._submit()
                return
            messagebox.showerror("Formulaire incomplet", "\n".join(ex.errors.values()), parent=self)
        elif isinstance(ex, (SessionExpiredError, NotAuthenticatedError)):
            messagebox.showwarning("Session", "Votre session a expiré, veuillez vous reconnecter.", parent=self)
            self._on_session_expired()
        elif isinstance(ex, HttpError):
            messagebox.showerror("Erreur", ex.message, parent=self)
        elif isinstance(ex, requests.RequestException):
            messagebox.showerror("Erreur", MSG_CONNECTION, parent=self)
        else:
            messagebox.showerror("Erreur", str(ex), parent=self)

    def _download_pdf(self) -> None:
        target = filedialog.asksaveasfilename(
            parent=self, defaultextension=".pdf", filetypes=[("PDF", "*.pdf")],
            initialfile=f"installation-{self._order.id}.pdf")
        if not target:
            return
        try:
            data = self._service.download_pdf(self._order.id)
        except HttpError as ex:
            messagebox.showerror("Erreur", ex.message, parent=self)
            return
        except requests.RequestException:
            messagebox.showerror("Erreur", MSG_CONNECTION, parent=self)
            return
        with open(target, "wb") as fh:
            fh.write(data)
