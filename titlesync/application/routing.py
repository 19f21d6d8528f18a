"""State routing: which outbound action, if any, a ledger state triggers.

Mental model refresher:
- Application layer: maps (state kind, local role, status) to one action.
- A routing table maps state classes to handlers. Each subscriber owns its own
  table; states whose class is not in the table fall through to a logged no-op.
"""

from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Mapping, Protocol

from ..domain.states import (
    AgreementState,
    AgreementStatus,
    InstructionState,
    Party,
    PartyIdentity,
    UnknownState,
)
from ..types import RouteResult, SMSResult, StateHandler
from .case_sync import CaseClient, sync_case_instruction

logger = logging.getLogger(__name__)

ROLE_SELLER = "seller"
ROLE_BUYER = "buyer"


class Notifier(Protocol):
    def send_agreement_sign_request_seller(
        self, recipient: Party, title_number: str
    ) -> SMSResult: ...

    def send_agreement_sign_request_buyer(
        self, recipient: Party, title_number: str
    ) -> SMSResult: ...

    def send_title_transferred(self, recipient: Party, title_number: str) -> SMSResult: ...


RoutingTable = Mapping[type, StateHandler]

# (role, status) -> notifier method name
AGREEMENT_NOTIFICATIONS: dict[tuple[str, AgreementStatus], str] = {
    (ROLE_SELLER, AgreementStatus.APPROVED): "send_agreement_sign_request_seller",
    (ROLE_SELLER, AgreementStatus.TRANSFERRED): "send_title_transferred",
    (ROLE_BUYER, AgreementStatus.SIGNED): "send_agreement_sign_request_buyer",
    (ROLE_BUYER, AgreementStatus.TRANSFERRED): "send_title_transferred",
}


def route_state(
    state: Any,
    local_identity: PartyIdentity,
    routing_table: RoutingTable,
) -> RouteResult:
    """Dispatch one state through `routing_table`; unknown kinds are a no-op."""
    handler = routing_table.get(type(state))
    if handler is None:
        type_name = state.type_name if isinstance(state, UnknownState) else type(state).__name__
        logger.info("[ROUTE] no handler for state type=%s", type_name)
        return {"action": None, "reason": f"unhandled state type {type_name}", "result": None}
    return handler(state, local_identity)


def route_agreement_state(
    state: AgreementState,
    local_identity: PartyIdentity,
    notifier: Notifier,
) -> RouteResult:
    if local_identity == state.seller_conveyancer:
        role, recipient = ROLE_SELLER, state.seller
    elif local_identity == state.buyer_conveyancer:
        role, recipient = ROLE_BUYER, state.buyer
    else:
        logger.info("[ROUTE] title=%s not a party: neither seller nor buyer conveyancer",
                    state.title_id)
        return {"action": None, "reason": "not a party to this agreement", "result": None}

    if not isinstance(state.status, AgreementStatus):
        logger.info("[ROUTE] title=%s role=%s unrecognised status=%s no notification",
                    state.title_id, role, state.status)
        return {"action": None, "reason": f"unrecognised status {state.status}", "result": None}

    action = AGREEMENT_NOTIFICATIONS.get((role, state.status))
    if action is None:
        logger.debug("[ROUTE] title=%s role=%s status=%s no notification",
                     state.title_id, role, state.status_name)
        return {"action": None, "reason": f"no notification for {role} at {state.status_name}",
                "result": None}

    logger.info("[ROUTE] title=%s role=%s status=%s action=%s",
                state.title_id, role, state.status_name, action)
    send: Callable[[Party, str], SMSResult] = getattr(notifier, action)
    return {"action": action, "reason": None, "result": send(recipient, state.title_id)}


def route_instruction_state(
    state: InstructionState,
    local_identity: PartyIdentity,
    case_client: CaseClient,
) -> RouteResult:
    result = sync_case_instruction(state, local_identity, case_client)
    return {"action": "sync_case", "reason": None, "result": result}


def agreement_routing_table(notifier: Notifier) -> dict[type, StateHandler]:
    return {AgreementState: partial(route_agreement_state, notifier=notifier)}


def instruction_routing_table(case_client: CaseClient) -> dict[type, StateHandler]:
    return {InstructionState: partial(route_instruction_state, case_client=case_client)}


def default_routing_table(notifier: Notifier, case_client: CaseClient) -> dict[type, StateHandler]:
    """Both known state kinds, for a single subscriber handling every type."""
    return agreement_routing_table(notifier) | instruction_routing_table(case_client)
