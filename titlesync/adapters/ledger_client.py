"""Ledger node lookups needed by the listener.

The node's identity is read once at startup and treated as immutable for the
life of the process.
"""

from __future__ import annotations

import json
import logging

from ..config import Settings
from ..domain.states import PartyIdentity
from ..errors import ResponseBodyError
from ..resilience import service_startup_retry
from .http import json_request, send_request
from .payload import parse_party_identity

logger = logging.getLogger(__name__)


class LedgerLookupError(RuntimeError):
    """The ledger node answered but the identity could not be read."""


def fetch_local_identity(settings: Settings) -> PartyIdentity:
    """Fetch this node's legal identity from `GET /api/me`."""
    identity = _fetch_local_identity(settings)
    logger.info("[LEDGER] local identity=%s", identity)
    return identity


@service_startup_retry
def _fetch_local_identity(settings: Settings) -> PartyIdentity:
    request = json_request(
        f"{settings.ledger_base_url}/api/me",
        username=settings.ledger_username,
        password=settings.ledger_password,
    )
    try:
        status, body = send_request(request, timeout=settings.ledger_timeout_seconds)
    except ResponseBodyError as exc:
        raise LedgerLookupError(f"ledger identity response unreadable: {exc}") from exc
    if status != 200:
        raise LedgerLookupError(f"ledger identity lookup returned HTTP {status}: {body[:300]}")
    try:
        payload = json.loads(body)
        return parse_party_identity(payload["me"], "me")
    except (ValueError, KeyError, TypeError) as exc:
        raise LedgerLookupError(f"ledger identity response unreadable: {exc}") from exc
