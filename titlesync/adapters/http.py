"""Thin urllib helpers shared by the outbound adapters.

Mental model refresher:
- Every outbound call goes through `send_request`, which returns
  `(status, body_text)` for any response the server actually produced.
- 4xx responses come back as plain values so callers can read provider error
  bodies.
- Connection failures, timeouts and 5xx responses raise `TransportError`; that is
  the only exception the retry policy retries.
- Once the status line has arrived, a body that cannot be read raises
  `ResponseBodyError` instead; the server has already acted on the request.
"""

from __future__ import annotations

import base64
import http.client
import json
import socket
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Mapping

from ..errors import ResponseBodyError, TransportError


def send_request(request: urllib.request.Request, *, timeout: float) -> tuple[int, str]:
    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            status = int(response.getcode())
            try:
                raw = response.read()
            except (http.client.HTTPException, OSError) as exc:
                raise ResponseBodyError(
                    f"HTTP {status} from {request.full_url} but the body could not be read: {exc}",
                    status=status,
                ) from exc
            return status, raw.decode("utf-8", errors="replace")
    except urllib.error.HTTPError as exc:
        details = _read_error_body(exc)
        if exc.code >= 500:
            raise TransportError(
                f"HTTP {exc.code} from {request.full_url}: {details[:300]}",
                status=exc.code,
                body=details,
            ) from exc
        return int(exc.code), details
    except urllib.error.URLError as exc:
        raise TransportError(f"request to {request.full_url} failed: {exc.reason}") from exc
    except (TimeoutError, socket.timeout) as exc:
        raise TransportError(f"request to {request.full_url} timed out after {timeout}s") from exc


def form_request(
    url: str,
    fields: Mapping[str, str],
    *,
    username: str,
    password: str,
) -> urllib.request.Request:
    payload = urllib.parse.urlencode(dict(fields)).encode("utf-8")
    request = urllib.request.Request(url, data=payload, method="POST")
    request.add_header("Authorization", basic_auth_header(username, password))
    request.add_header("Content-Type", "application/x-www-form-urlencoded")
    return request


def json_request(
    url: str,
    *,
    method: str = "GET",
    payload: Mapping[str, Any] | None = None,
    username: str | None = None,
    password: str | None = None,
) -> urllib.request.Request:
    data = None
    if payload is not None:
        data = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    request = urllib.request.Request(url, data=data, method=method)
    request.add_header("Accept", "application/json")
    if data is not None:
        request.add_header("Content-Type", "application/json")
    if username is not None and password is not None:
        request.add_header("Authorization", basic_auth_header(username, password))
    return request


def basic_auth_header(username: str, password: str) -> str:
    token = f"{username}:{password}".encode("utf-8")
    encoded = base64.b64encode(token).decode("ascii")
    return f"Basic {encoded}"


def _read_error_body(exc: urllib.error.HTTPError) -> str:
    raw = exc.read() or b""
    return raw.decode("utf-8", errors="replace")
