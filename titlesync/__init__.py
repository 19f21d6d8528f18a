"""Ledger state-change listener: SMS notifications and case-record sync."""

from .adapters.feed_handler import handle_update, handle_updates
from .adapters.kafka_runtime import (
    build_subscriptions,
    publish_ledger_update,
    run_listener_forever,
)
from .adapters.sms_dispatcher import SMSDispatcher
from .application import default_routing_table, route_state, sync_case_instruction
from .config import ConfigError, Settings, load_settings_from_env
from .domain import project_case_update, resolve_template, validate_phone_number

__all__ = [
    "ConfigError",
    "SMSDispatcher",
    "Settings",
    "build_subscriptions",
    "default_routing_table",
    "handle_update",
    "handle_updates",
    "load_settings_from_env",
    "project_case_update",
    "publish_ledger_update",
    "resolve_template",
    "route_state",
    "run_listener_forever",
    "sync_case_instruction",
]
