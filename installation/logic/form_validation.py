# installation/logic/form_validation.py
"""Validation of the installation form before it is sent."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Optional

from ..models.installation_form import InstallationForm
from ..models.purchase_order import PurchaseOrder
from ..models.submission_policy import SubmissionPolicy

SIGNATURE_REQUIRED = "La signature du client est obligatoire"
INSTALLER_REQUIRED = "Le nom de l'installateur est obligatoire"
NOTES_REQUIRED = "Les notes d'installation sont obligatoires"
EMAIL_INVALID = "L'adresse email du client est invalide"

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)
    needs_client_email: bool = False

    @property
    def is_valid(self) -> bool:
        return not self.errors and not self.needs_client_email


def resolve_client_email(order: Optional[PurchaseOrder], form: InstallationForm) -> str:
    """The form's email wins over the order's."""
    return (form.client_email or (order.client_email if order else "") or "").strip()


def validate_form(form: InstallationForm, policy: SubmissionPolicy,
                  order: Optional[PurchaseOrder] = None) -> ValidationResult:
    result = ValidationResult()

    if not form.client_signature:
        result.errors["client_signature"] = SIGNATURE_REQUIRED
    if len(form.installer_name.strip()) < 2:
        result.errors["installer_name"] = INSTALLER_REQUIRED
    if policy.notes_required and not form.installation_notes.strip():
        result.errors["installation_notes"] = NOTES_REQUIRED

    email = resolve_client_email(order, form)
    if form.client_email.strip() and not _EMAIL_RE.match(form.client_email.strip()):
        result.errors["client_email"] = EMAIL_INVALID
    elif policy.prompt_missing_email and not email:
        result.needs_client_email = True

    return result
