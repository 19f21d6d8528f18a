"""Adapter layer: HTTP clients, feed payload mapping and local fakes.

`feed_handler` and `kafka_runtime` sit on top of the application layer and are
imported from their modules directly.
"""

from .case_client import CaseAPIError, CaseManagementClient
from .fake_adapters import ConsoleSMSDispatcher, InMemoryCaseClient
from .ledger_client import LedgerLookupError, fetch_local_identity
from .payload import parse_party_identity, parse_state_record
from .sms_dispatcher import SMSDispatcher

__all__ = [
    "CaseAPIError",
    "CaseManagementClient",
    "ConsoleSMSDispatcher",
    "InMemoryCaseClient",
    "LedgerLookupError",
    "SMSDispatcher",
    "fetch_local_identity",
    "parse_party_identity",
    "parse_state_record",
]
