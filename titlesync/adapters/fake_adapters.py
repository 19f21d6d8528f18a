"""Fake outbound adapters for local demos.

Mental model refresher:
- Same call shape as `SMSDispatcher` and `CaseManagementClient`.
- Nothing leaves the process: SMS bodies are printed, cases live in a dict.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping

from ..config import Settings
from ..domain.phone import validate_phone_number
from ..domain.states import Party
from ..domain.templates import SMSTemplate, resolve_template
from ..errors import CaseAPIError
from ..types import SMSResult


class ConsoleSMSDispatcher:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.sent: list[dict[str, str]] = []

    def send_agreement_sign_request_seller(self, recipient: Party, title_number: str) -> SMSResult:
        return self.send(recipient.phone, SMSTemplate.AGREEMENT_SIGN_REQUEST_SELLER,
                         self.settings.agreement_sign_url(title_number), recipient.full_name)

    def send_agreement_sign_request_buyer(self, recipient: Party, title_number: str) -> SMSResult:
        return self.send(recipient.phone, SMSTemplate.AGREEMENT_SIGN_REQUEST_BUYER,
                         self.settings.agreement_sign_url(title_number), recipient.full_name)

    def send_title_transferred(self, recipient: Party, title_number: str) -> SMSResult:
        return self.send(recipient.phone, SMSTemplate.TITLE_TRANSFERRED,
                         self.settings.title_transferred_url(title_number), recipient.full_name)

    def send_identity_verification_request(self, recipient: Party, url: str) -> SMSResult:
        return self.send(recipient.phone, SMSTemplate.IDENTITY_VERIFICATION_REQUEST,
                         url, recipient.full_name)

    def send(self, recipient_phone: str, template: SMSTemplate, *infills: str) -> SMSResult:
        body = resolve_template(template, self.settings.twilio_is_trial, infills)
        validation = validate_phone_number(recipient_phone)
        if not validation["accepted"]:
            print(f"[SMS REJECTED] to={recipient_phone} reason={validation['reason']}")
            print(f"body={body!r}")
            return {"status": "failed", "reason": validation["reason"]}

        self.sent.append({"to": recipient_phone, "body": body})
        print("[SMS]")
        print(f"to={recipient_phone}")
        print(f"message={body}")
        return {
            "status": "sent",
            "provider_id": f"console-{len(self.sent)}",
            "segments": 1,
            "delivery_status": "printed",
            "reason": None,
        }


class InMemoryCaseClient:
    def __init__(self, cases: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self.cases: dict[str, dict[str, Any]] = {
            reference: copy.deepcopy(dict(record)) for reference, record in (cases or {}).items()
        }

    def get_case(self, reference: str) -> dict[str, Any]:
        if reference not in self.cases:
            raise CaseAPIError(f"GET case {reference} returned HTTP 404", status=404, body="")
        return copy.deepcopy(self.cases[reference])

    def update_case(self, reference: str, payload: Mapping[str, Any]) -> None:
        if reference not in self.cases:
            raise CaseAPIError(f"PUT case {reference} returned HTTP 404", status=404, body="")
        self.cases[reference].update(copy.deepcopy(dict(payload)))
        print(f"[CASE] reference={reference} updated title_number={payload.get('title_number')}")
