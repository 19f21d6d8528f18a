"""Feed-handler adapter functions (ledger update batches without Kafka).

Mental model refresher:
- This is the controller-like entrypoint for update processing.
- Kafka code calls this after decoding a record into an update batch.
- Flow:
  update batch -> parse adapter -> application routing -> per-state result
- A failure on one produced state is logged and recorded; the next state is
  still processed.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from ..application.routing import RoutingTable, route_state
from ..domain.states import PartyIdentity
from ..types import UpdateResult
from .payload import parse_state_record

logger = logging.getLogger(__name__)

Update = Mapping[str, Any]


def handle_update(
    update: Update,
    *,
    local_identity: PartyIdentity,
    routing_table: RoutingTable,
) -> UpdateResult:
    """Route every produced state of one update batch, in order."""
    if update.get("snapshot"):
        logger.debug("[FEED] ignoring vault snapshot")
        return {"status": "snapshot_ignored", "results": []}

    produced = update.get("produced") or []
    if not isinstance(produced, Sequence) or isinstance(produced, (str, bytes)):
        logger.error("[FEED] update has malformed produced list: %r", produced)
        return {"status": "malformed", "results": []}

    if not produced:
        logger.warning("[FEED] update contained no produced states")
        return {"status": "empty", "results": []}

    logger.info("[FEED] update with %d produced state(s)", len(produced))
    results: list[dict[str, Any]] = []
    for index, record in enumerate(produced):
        try:
            state = parse_state_record(record)
        except ValueError as exc:
            logger.error("[FEED] produced[%d] parse_failed: %s", index, exc)
            results.append({"index": index, "status": "parse_failed", "error": str(exc),
                            "route": None})
            continue

        try:
            route = route_state(state, local_identity, routing_table)
        except Exception as exc:
            logger.exception("[FEED] produced[%d] route_failed", index)
            results.append({"index": index, "status": "route_failed", "error": str(exc),
                            "route": None})
            continue

        results.append({"index": index, "status": "routed", "error": None, "route": route})

    return {"status": "processed", "results": results}


def handle_updates(
    updates: Sequence[Update],
    *,
    local_identity: PartyIdentity,
    routing_table: RoutingTable,
) -> list[UpdateResult]:
    """Handle update batches sequentially using `handle_update`."""
    results: list[UpdateResult] = []
    for update in updates:
        result = handle_update(
            update,
            local_identity=local_identity,
            routing_table=routing_table,
        )
        results.append(result)
    return results
