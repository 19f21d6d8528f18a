"""Application layer: state routing and case synchronization."""

from .case_sync import sync_case_instruction
from .routing import (
    agreement_routing_table,
    default_routing_table,
    instruction_routing_table,
    route_agreement_state,
    route_instruction_state,
    route_state,
)

__all__ = [
    "agreement_routing_table",
    "default_routing_table",
    "instruction_routing_table",
    "route_agreement_state",
    "route_instruction_state",
    "route_state",
    "sync_case_instruction",
]
