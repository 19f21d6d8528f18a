"""Projection of a fetched case record into the update payload we push back.

Mental model refresher:
- Pure function over plain dictionaries.
- Top-level scalars and the address block are copied verbatim.
- Optional counterparty-organisation fields are dropped when null instead of
  being sent as explicit nulls.
- `title_number` is the only field this package adds.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..types import CaseRecord, CaseUpdatePayload

CASE_SCALAR_FIELDS: tuple[str, ...] = (
    "case_reference",
    "case_type",
    "status",
    "assigned_staff_id",
    "client_id",
    "counterparty_id",
    "counterparty_conveyancer_contact_id",
)
ADDRESS_FIELDS: tuple[str, ...] = (
    "house_name_number",
    "street",
    "town_city",
    "county",
    "country",
    "postcode",
)
ORG_REQUIRED_FIELDS: tuple[str, ...] = ("organisation", "locality", "country")
ORG_OPTIONAL_FIELDS: tuple[str, ...] = ("state", "organisational_unit", "common_name")


class MappingError(ValueError):
    """Raised when a case record is missing fields or has the wrong shape."""


def project_case_update(source: CaseRecord, title_number: str) -> CaseUpdatePayload:
    if not isinstance(source, Mapping):
        raise MappingError("case record must be a JSON object")

    payload: CaseUpdatePayload = {}
    for name in CASE_SCALAR_FIELDS:
        payload[name] = _required_scalar(source, name, name)

    address = _required_object(source, "address")
    payload["address"] = {
        name: _required_scalar(address, name, f"address.{name}") for name in ADDRESS_FIELDS
    }

    org = _required_object(source, "counterparty_conveyancer_org")
    org_payload = {
        name: _required_scalar(org, name, f"counterparty_conveyancer_org.{name}")
        for name in ORG_REQUIRED_FIELDS
    }
    for name in ORG_OPTIONAL_FIELDS:
        value = org.get(name)
        if value is None:
            continue
        org_payload[name] = _scalar(value, f"counterparty_conveyancer_org.{name}")
    payload["counterparty_conveyancer_org"] = org_payload

    payload["title_number"] = title_number
    return payload


def _required_object(source: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    if name not in source:
        raise MappingError(f"Missing required field: {name}")
    value = source[name]
    if not isinstance(value, Mapping):
        raise MappingError(f"Field {name} must be an object, got {type(value).__name__}")
    return value


def _required_scalar(source: Mapping[str, Any], name: str, path: str) -> Any:
    if name not in source:
        raise MappingError(f"Missing required field: {path}")
    return _scalar(source[name], path)


def _scalar(value: Any, path: str) -> Any:
    if isinstance(value, (Mapping, list, tuple)):
        raise MappingError(f"Field {path} must be a scalar, got {type(value).__name__}")
    return value
