from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class SubmissionPolicy:
    """
    Product-level variations of the completion flow.

    notes_required:       installation notes must be filled in.
    prompt_missing_email: when neither the order nor the form has a client
                          email, the UI asks for one before sending.
    """
    notes_required: bool = False
    prompt_missing_email: bool = False

    @classmethod
    def from_config(cls, cfg) -> "SubmissionPolicy":
        return cls(notes_required=bool(cfg.notes_required),
                   prompt_missing_email=bool(cfg.prompt_missing_email))
