"""Domain layer: ledger states, phone rules, templates and case projection."""

from .case_mapping import MappingError, project_case_update
from .phone import validate_phone_number
from .states import (
    AgreementState,
    AgreementStatus,
    InstructionState,
    Party,
    PartyIdentity,
    UnknownState,
)
from .templates import SMSTemplate, resolve_template

__all__ = [
    "AgreementState",
    "AgreementStatus",
    "InstructionState",
    "MappingError",
    "Party",
    "PartyIdentity",
    "SMSTemplate",
    "UnknownState",
    "project_case_update",
    "resolve_template",
    "validate_phone_number",
]
