"""Typed ledger states observed on the update feed.

Each known state kind is its own frozen dataclass; `UnknownState` carries
anything the ledger produces that this package does not recognize yet, so the
router can log it and move on.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

AGREEMENT_STATE_TYPE = "LandAgreementState"
INSTRUCTION_STATE_TYPE = "CaseInstructionState"


class AgreementStatus(str, enum.Enum):
    CREATED = "CREATED"
    APPROVED = "APPROVED"
    SIGNED = "SIGNED"
    COMPLETED = "COMPLETED"
    TRANSFERRED = "TRANSFERRED"


@dataclass(frozen=True)
class PartyIdentity:
    """X.500-style ledger participant name, compared by value."""

    organisation: str
    locality: str
    country: str
    state: str | None = None
    organisational_unit: str | None = None
    common_name: str | None = None

    def __str__(self) -> str:
        parts = [
            ("CN", self.common_name),
            ("OU", self.organisational_unit),
            ("O", self.organisation),
            ("L", self.locality),
            ("ST", self.state),
            ("C", self.country),
        ]
        return ", ".join(f"{key}={value}" for key, value in parts if value)


@dataclass(frozen=True)
class Party:
    phone: str
    forename: str
    surname: str

    @property
    def full_name(self) -> str:
        return f"{self.forename} {self.surname}"


@dataclass(frozen=True)
class AgreementState:
    title_id: str
    seller: Party
    buyer: Party
    seller_conveyancer: PartyIdentity
    buyer_conveyancer: PartyIdentity
    status: AgreementStatus | str
    timestamp: datetime | None = None

    @property
    def status_name(self) -> str:
        """Wire name of the status; statuses outside `AgreementStatus` stay raw strings."""
        return self.status.value if isinstance(self.status, AgreementStatus) else self.status


@dataclass(frozen=True)
class InstructionState:
    title_id: str
    case_reference_number: str
    conveyancer: PartyIdentity
    user: str
    timestamp: datetime | None = None


@dataclass(frozen=True)
class UnknownState:
    type_name: str
    data: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None


LedgerState = AgreementState | InstructionState | UnknownState
