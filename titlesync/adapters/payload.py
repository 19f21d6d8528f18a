"""Feed payload adapter functions.

Mental model refresher:
- This is an adapter/edge module.
- It translates one produced-state entry of a ledger update batch into the typed
  states from `domain.states`.
- It validates shape and required fields; it does not decide what to do with a
  state.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from ..domain.states import (
    AGREEMENT_STATE_TYPE,
    INSTRUCTION_STATE_TYPE,
    AgreementState,
    AgreementStatus,
    InstructionState,
    LedgerState,
    Party,
    PartyIdentity,
    UnknownState,
)
from ..types import Payload


def parse_state_record(record: Payload) -> LedgerState:
    """Normalize `{"type", "data", "timestamp"}` into a typed ledger state."""
    if not isinstance(record, Mapping):
        raise ValueError("produced state must be a JSON object")

    type_name = _as_required_str(record.get("type"), "type")
    data = record.get("data")
    if not isinstance(data, Mapping):
        raise ValueError("produced state data must be a JSON object")
    timestamp = _as_optional_timestamp(record.get("timestamp"))

    if _short_type_name(type_name) == AGREEMENT_STATE_TYPE:
        return parse_agreement_state(data, timestamp=timestamp)
    if _short_type_name(type_name) == INSTRUCTION_STATE_TYPE:
        return parse_instruction_state(data, timestamp=timestamp)
    return UnknownState(type_name=type_name, data=dict(data), timestamp=timestamp)


def parse_agreement_state(
    data: Payload, *, timestamp: datetime | None = None
) -> AgreementState:
    raw_status = _as_required_str(data.get("status"), "status").upper()
    status: AgreementStatus | str
    try:
        status = AgreementStatus(raw_status)
    except ValueError:
        status = raw_status

    return AgreementState(
        title_id=_as_required_str(data.get("titleID"), "titleID"),
        seller=parse_party(data.get("seller"), "seller"),
        buyer=parse_party(data.get("buyer"), "buyer"),
        seller_conveyancer=parse_party_identity(
            data.get("sellerConveyancer"), "sellerConveyancer"
        ),
        buyer_conveyancer=parse_party_identity(
            data.get("buyerConveyancer"), "buyerConveyancer"
        ),
        status=status,
        timestamp=timestamp,
    )


def parse_instruction_state(
    data: Payload, *, timestamp: datetime | None = None
) -> InstructionState:
    return InstructionState(
        title_id=_as_required_str(data.get("titleID"), "titleID"),
        case_reference_number=_as_required_str(
            data.get("caseReferenceNumber"), "caseReferenceNumber"
        ),
        conveyancer=parse_party_identity(data.get("conveyancer"), "conveyancer"),
        user=_as_required_str(data.get("user"), "user"),
        timestamp=timestamp,
    )


def parse_party(value: Any, field_name: str) -> Party:
    if not isinstance(value, Mapping):
        raise ValueError(f"Missing required field: {field_name}")
    return Party(
        phone=_as_required_str(value.get("phone"), f"{field_name}.phone"),
        forename=_as_required_str(value.get("forename"), f"{field_name}.forename"),
        surname=_as_required_str(value.get("surname"), f"{field_name}.surname"),
    )


def parse_party_identity(value: Any, field_name: str) -> PartyIdentity:
    if not isinstance(value, Mapping):
        raise ValueError(f"Missing required field: {field_name}")
    return PartyIdentity(
        organisation=_as_required_str(value.get("organisation"), f"{field_name}.organisation"),
        locality=_as_required_str(value.get("locality"), f"{field_name}.locality"),
        country=_as_required_str(value.get("country"), f"{field_name}.country"),
        state=_as_optional_str(value.get("state")),
        organisational_unit=_as_optional_str(value.get("organisational_unit")),
        common_name=_as_optional_str(value.get("common_name")),
    )


def _short_type_name(type_name: str) -> str:
    # Ledger type names may arrive fully qualified, e.g. com.example.states.LandAgreementState.
    return type_name.rsplit(".", 1)[-1]


def _as_required_str(value: Any, field_name: str) -> str:
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ValueError(f"Missing required field: {field_name}")
    return text


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_optional_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    text = str(value).strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid timestamp: {value!r}") from exc
