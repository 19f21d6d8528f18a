"""Case synchronization use-case.

Mental model refresher:
- Application layer: fetch, verify ownership, project, push.
- Every outcome is a plain result dictionary; nothing propagates to the feed
  loop.
- The fetch and the push are not guarded by any version token, so a change made
  in the case system between the two calls is overwritten.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from ..domain.case_mapping import MappingError, project_case_update
from ..domain.states import InstructionState, PartyIdentity
from ..errors import CaseAPIError, TransportError
from ..types import SyncResult

logger = logging.getLogger(__name__)

REASON_CASE_NOT_RETRIEVABLE = "case not retrievable"
REASON_NOT_INSTRUCTED_CONVEYANCER = "not the instructed conveyancer"
REASON_CLIENT_MISMATCH = "client mismatch"
REASON_MAPPING_FAILED = "mapping failed"
REASON_UPDATE_FAILED = "case update failed"


class CaseClient(Protocol):
    def get_case(self, reference: str) -> dict[str, Any]: ...

    def update_case(self, reference: str, payload: dict[str, Any]) -> None: ...


def sync_case_instruction(
    instruction: InstructionState,
    local_identity: PartyIdentity,
    case_client: CaseClient,
) -> SyncResult:
    reference = instruction.case_reference_number

    try:
        record = case_client.get_case(reference)
    except (CaseAPIError, TransportError) as exc:
        logger.error("[CASE SYNC FAILED] reference=%s reason=%s error=%s",
                     reference, REASON_CASE_NOT_RETRIEVABLE, exc)
        return _result("failed", reference, f"{REASON_CASE_NOT_RETRIEVABLE}: {exc}")

    if instruction.conveyancer != local_identity:
        logger.info("[CASE SYNC SKIPPED] reference=%s reason=%s conveyancer=%s",
                    reference, REASON_NOT_INSTRUCTED_CONVEYANCER, instruction.conveyancer)
        return _result("skipped", reference, REASON_NOT_INSTRUCTED_CONVEYANCER)

    client_id = _as_int(instruction.user)
    if client_id is None or client_id != _as_int(record.get("client_id")):
        logger.info("[CASE SYNC SKIPPED] reference=%s reason=%s user=%r client_id=%r",
                    reference, REASON_CLIENT_MISMATCH, instruction.user, record.get("client_id"))
        return _result("skipped", reference, REASON_CLIENT_MISMATCH)

    try:
        payload = project_case_update(record, instruction.title_id)
    except MappingError as exc:
        logger.error("[CASE SYNC FAILED] reference=%s reason=%s error=%s",
                     reference, REASON_MAPPING_FAILED, exc)
        return _result("failed", reference, f"{REASON_MAPPING_FAILED}: {exc}")

    try:
        case_client.update_case(reference, payload)
    except CaseAPIError as exc:
        logger.error("[CASE SYNC FAILED] reference=%s reason=%s status=%s body=%r",
                     reference, REASON_UPDATE_FAILED, exc.status, exc.body[:300])
        return _result("failed", reference, f"{REASON_UPDATE_FAILED}: {exc.body}")
    except TransportError as exc:
        logger.error("[CASE SYNC FAILED] reference=%s reason=%s error=%s",
                     reference, REASON_UPDATE_FAILED, exc)
        return _result("failed", reference, f"{REASON_UPDATE_FAILED}: {exc}")

    logger.info("[CASE SYNCED] reference=%s title_number=%s", reference, instruction.title_id)
    return _result("updated", reference, None)


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def _result(status: str, reference: str, reason: str | None) -> SyncResult:
    return {"status": status, "case_reference": reference, "reason": reason}
