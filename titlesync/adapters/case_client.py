"""HTTP client for the case-management API.

Mental model refresher:
- Outbound adapter: `GET /cases/{reference}` and `PUT /cases/{reference}`.
- Non-200 answers and unreadable bodies raise `CaseAPIError`; transport
  failures are retried and then raise `TransportError`. Turning those into
  sync results is the caller's job.
"""

from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Mapping

from ..config import Settings
from ..errors import CaseAPIError, ResponseBodyError
from ..resilience import call_with_transport_retry
from .http import json_request, send_request

logger = logging.getLogger(__name__)


class CaseManagementClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 15.0,
        retry_attempts: int = 3,
        retry_min_wait: float = 1.0,
        retry_max_wait: float = 8.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_attempts = retry_attempts
        self.retry_min_wait = retry_min_wait
        self.retry_max_wait = retry_max_wait

    @classmethod
    def from_settings(cls, settings: Settings) -> CaseManagementClient:
        return cls(
            settings.case_management_api_url,
            timeout=settings.case_timeout_seconds,
            retry_attempts=settings.retry_attempts,
            retry_min_wait=settings.retry_min_wait_seconds,
            retry_max_wait=settings.retry_max_wait_seconds,
        )

    def get_case(self, reference: str) -> dict[str, Any]:
        status, body = self._call(json_request(self._case_url(reference)))
        if status != 200:
            raise CaseAPIError(
                f"GET case {reference} returned HTTP {status}", status=status, body=body
            )
        try:
            record = json.loads(body)
        except ValueError as exc:
            raise CaseAPIError(
                f"GET case {reference} returned invalid JSON", status=status, body=body
            ) from exc
        if not isinstance(record, dict):
            raise CaseAPIError(
                f"GET case {reference} did not return a JSON object", status=status, body=body
            )
        return record

    def update_case(self, reference: str, payload: Mapping[str, Any]) -> None:
        request = json_request(self._case_url(reference), method="PUT", payload=payload)
        status, body = self._call(request)
        if status != 200:
            raise CaseAPIError(
                f"PUT case {reference} returned HTTP {status}: {body[:300]}",
                status=status,
                body=body,
            )
        logger.debug("[CASE PUT] reference=%s status=%s", reference, status)

    def _case_url(self, reference: str) -> str:
        return f"{self.base_url}/cases/{urllib.parse.quote(str(reference), safe='')}"

    def _call(self, request: Any) -> tuple[int, str]:
        try:
            return call_with_transport_retry(
                send_request,
                request,
                timeout=self.timeout,
                max_attempts=self.retry_attempts,
                min_wait=self.retry_min_wait,
                max_wait=self.retry_max_wait,
            )
        except ResponseBodyError as exc:
            raise CaseAPIError(str(exc), status=exc.status, body="") from exc
