"""Twilio SMS dispatch.

Mental model refresher:
- This module is an outbound adapter around the Twilio Messages API.
- Every send returns a plain result dictionary; nothing is raised to callers.
- Order of steps: body resolution, phone validation, credentials, network.
  The first three never touch the network.
- After Twilio has answered 201 nothing is retried.

Result shapes:
- `{"status": "sent", "provider_id", "segments", "delivery_status", "reason": None}`
- `{"status": "failed", "reason": ...}`
- `{"status": "unknown_outcome", "reason": ...}` when Twilio answered 201 but
  the body could not be read; the message may or may not have gone out.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ..config import Settings
from ..domain.phone import validate_phone_number
from ..domain.states import Party
from ..domain.templates import SMSTemplate, resolve_template
from ..errors import ResponseBodyError, TransportError
from ..resilience import call_with_transport_retry
from ..types import SMSResult
from .http import form_request, send_request

logger = logging.getLogger(__name__)

TWILIO_UNVERIFIED_TRIAL_NUMBER = 21608

REASON_MISSING_CONFIGURATION = "missing configuration"
REASON_NOT_VERIFIED_FOR_TRIAL = "number not verified for trial sending"
REASON_PROVIDER_REJECTED = "provider rejected"
REASON_PROVIDER_ERROR = "provider error"
REASON_TRANSPORT_ERROR = "transport error"
REASON_UNREADABLE_RESPONSE = "unreadable provider response"


class SMSDispatcher:
    """Sends templated SMS through Twilio using process settings."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def send_agreement_sign_request_seller(
        self, recipient: Party, title_number: str
    ) -> SMSResult:
        return self.send(
            recipient.phone,
            SMSTemplate.AGREEMENT_SIGN_REQUEST_SELLER,
            self.settings.agreement_sign_url(title_number),
            recipient.full_name,
        )

    def send_agreement_sign_request_buyer(
        self, recipient: Party, title_number: str
    ) -> SMSResult:
        return self.send(
            recipient.phone,
            SMSTemplate.AGREEMENT_SIGN_REQUEST_BUYER,
            self.settings.agreement_sign_url(title_number),
            recipient.full_name,
        )

    def send_title_transferred(self, recipient: Party, title_number: str) -> SMSResult:
        return self.send(
            recipient.phone,
            SMSTemplate.TITLE_TRANSFERRED,
            self.settings.title_transferred_url(title_number),
            recipient.full_name,
        )

    def send_identity_verification_request(self, recipient: Party, url: str) -> SMSResult:
        return self.send(
            recipient.phone,
            SMSTemplate.IDENTITY_VERIFICATION_REQUEST,
            url,
            recipient.full_name,
        )

    def send(self, recipient_phone: str, template: SMSTemplate, *infills: str) -> SMSResult:
        body = resolve_template(template, self.settings.twilio_is_trial, infills)

        validation = validate_phone_number(recipient_phone)
        if not validation["accepted"]:
            logger.error(
                "[SMS REJECTED] to=%r reason=%s template=%s body=%r",
                recipient_phone,
                validation["reason"],
                template.name,
                body,
            )
            return _failed(validation["reason"])

        missing = _missing_credentials(self.settings)
        if missing:
            reason = f"{REASON_MISSING_CONFIGURATION}: {', '.join(missing)}"
            logger.error("[SMS NOT SENT] to=%r reason=%s body=%r", recipient_phone, reason, body)
            return _failed(reason)

        account_sid = self.settings.twilio_account_sid or ""
        endpoint = (
            f"{self.settings.twilio_api_base_url}/2010-04-01/Accounts/{account_sid}/Messages.json"
        )
        request = form_request(
            endpoint,
            {"From": self.settings.twilio_phone_number or "", "To": recipient_phone, "Body": body},
            username=account_sid,
            password=self.settings.twilio_auth_token or "",
        )

        try:
            status, response_text = call_with_transport_retry(
                send_request,
                request,
                timeout=self.settings.sms_timeout_seconds,
                max_attempts=self.settings.retry_attempts,
                min_wait=self.settings.retry_min_wait_seconds,
                max_wait=self.settings.retry_max_wait_seconds,
            )
        except TransportError as exc:
            reason = f"{REASON_TRANSPORT_ERROR}: {exc}"
            logger.error("[SMS NOT SENT] to=%r reason=%s body=%r", recipient_phone, reason, body)
            return _failed(reason)
        except ResponseBodyError as exc:
            if exc.status == 201:
                return _unknown_outcome(
                    recipient_phone, body, f"{REASON_UNREADABLE_RESPONSE}: {exc}"
                )
            reason = f"{REASON_PROVIDER_ERROR}: {exc}"
            logger.error("[SMS NOT SENT] to=%r reason=%s body=%r", recipient_phone, reason, body)
            return _failed(reason)

        if status != 201:
            reason = _interpret_error_response(status, response_text)
            logger.error("[SMS NOT SENT] to=%r reason=%s body=%r", recipient_phone, reason, body)
            return _failed(reason)

        try:
            parsed = json.loads(response_text)
            provider_id = str(parsed["sid"])
            segments = int(parsed["num_segments"])
            delivery_status = str(parsed["status"])
        except (ValueError, TypeError, KeyError) as exc:
            return _unknown_outcome(
                recipient_phone,
                body,
                f"{REASON_UNREADABLE_RESPONSE}: {exc}",
                response_text=response_text,
            )

        logger.info(
            "[SMS SENT] sid=%s to=%r segments=%d status=%s",
            provider_id,
            recipient_phone,
            segments,
            delivery_status,
        )
        return {
            "status": "sent",
            "provider_id": provider_id,
            "segments": segments,
            "delivery_status": delivery_status,
            "reason": None,
        }


def _missing_credentials(settings: Settings) -> list[str]:
    required = {
        "TWILIO_ACCOUNT_SID": settings.twilio_account_sid,
        "TWILIO_AUTH_TOKEN": settings.twilio_auth_token,
        "TWILIO_PHONE_NUMBER": settings.twilio_phone_number,
    }
    return [name for name, value in required.items() if not value]


def _interpret_error_response(status: int, response_text: str) -> str:
    if status == 400:
        code = _error_code(response_text)
        if code == TWILIO_UNVERIFIED_TRIAL_NUMBER:
            return REASON_NOT_VERIFIED_FOR_TRIAL
        if code is not None:
            return f"{REASON_PROVIDER_REJECTED} (code {code})"
    return f"{REASON_PROVIDER_ERROR}: HTTP {status}: {response_text[:300]}"


def _error_code(response_text: str) -> int | None:
    try:
        parsed: Any = json.loads(response_text)
        return int(parsed["code"])
    except (ValueError, TypeError, KeyError):
        return None


def _failed(reason: str | None) -> SMSResult:
    return {"status": "failed", "reason": reason}


def _unknown_outcome(
    recipient_phone: str, body: str, reason: str, *, response_text: str = ""
) -> SMSResult:
    logger.error(
        "[SMS UNKNOWN OUTCOME] to=%r reason=%s body=%r response=%r",
        recipient_phone,
        reason,
        body,
        response_text[:500],
    )
    return {"status": "unknown_outcome", "reason": reason}
