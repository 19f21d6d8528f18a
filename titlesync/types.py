"""Shared type aliases for the titlesync package."""

from __future__ import annotations

from typing import Any, Callable, Mapping

Payload = Mapping[str, Any]
CaseRecord = Mapping[str, Any]
CaseUpdatePayload = dict[str, Any]

SMSResult = dict[str, Any]
SyncResult = dict[str, Any]
RouteResult = dict[str, Any]
UpdateResult = dict[str, Any]

StateHandler = Callable[..., Any]
