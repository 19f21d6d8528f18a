#!/usr/bin/env python3
"""Run sample ledger update batches through the handler without Kafka.

SMS bodies are printed and cases live in memory, so this needs no credentials.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from titlesync.adapters.fake_adapters import (  # noqa: E402
    ConsoleSMSDispatcher,
    InMemoryCaseClient,
)
from titlesync.adapters.feed_handler import handle_updates  # noqa: E402
from titlesync.application.routing import default_routing_table  # noqa: E402
from titlesync.config import Settings  # noqa: E402
from titlesync.domain.states import PartyIdentity  # noqa: E402
from titlesync.logging_config import configure_logging  # noqa: E402

SELLER_CONVEYANCER = {"organisation": "Conveyancer1", "locality": "Plymouth", "country": "GB"}
BUYER_CONVEYANCER = {"organisation": "Conveyancer2", "locality": "Plymouth", "country": "GB"}


def main() -> int:
    configure_logging()
    settings = demo_settings()
    local_identity = PartyIdentity(**SELLER_CONVEYANCER)
    dispatcher = ConsoleSMSDispatcher(settings)
    case_client = InMemoryCaseClient({"CASE-1": sample_case()})

    results = handle_updates(
        sample_updates(),
        local_identity=local_identity,
        routing_table=default_routing_table(dispatcher, case_client),
    )

    print("")
    print("[UPDATE SUMMARY]")
    for position, result in enumerate(results):
        print(f"update={position} status={result['status']}")
        for item in result["results"]:
            route = item["route"] or {}
            print(
                f"  state={item['index']} status={item['status']} "
                f"action={route.get('action')} reason={route.get('reason')} "
                f"error={item['error']}"
            )

    print("")
    print(f"[CASE] CASE-1 title_number={case_client.cases['CASE-1'].get('title_number')}")
    return 0


def demo_settings() -> Settings:
    return Settings(
        ledger_host="localhost",
        ledger_port=10006,
        ledger_username="user1",
        ledger_password="test",
        case_management_api_url="http://localhost:8080",
        ui_url_agreement_sign="http://localhost:3000/titles/%titleNumber%/sign",
        ui_url_title_transferred="http://localhost:3000/titles/%titleNumber%/complete",
        kafka_bootstrap_servers=("localhost:9092",),
    )


def agreement(status: str, *, seller_phone: str = "+447911123456") -> dict[str, Any]:
    return {
        "type": "LandAgreementState",
        "data": {
            "titleID": "ZQV888860",
            "status": status,
            "seller": {"phone": seller_phone, "forename": "Lisa", "surname": "White"},
            "buyer": {"phone": "+447911654321", "forename": "Alex", "surname": "Smith"},
            "sellerConveyancer": SELLER_CONVEYANCER,
            "buyerConveyancer": BUYER_CONVEYANCER,
        },
    }


def sample_updates() -> list[dict[str, Any]]:
    return [
        {"snapshot": True, "produced": [agreement("CREATED")]},
        {"produced": [agreement("APPROVED")]},
        {"produced": []},
        {"produced": [agreement("TRANSFERRED", seller_phone="+447700900123")]},
        {
            "produced": [
                {
                    "type": "CaseInstructionState",
                    "data": {
                        "titleID": "ZQV888860",
                        "caseReferenceNumber": "CASE-1",
                        "conveyancer": SELLER_CONVEYANCER,
                        "user": "42",
                    },
                },
                {"type": "ChargeState", "data": {"titleID": "ZQV888860"}},
            ]
        },
    ]


def sample_case() -> dict[str, Any]:
    return {
        "case_reference": "CASE-1",
        "case_type": "Sell",
        "status": "active",
        "assigned_staff_id": 7,
        "client_id": 42,
        "counterparty_id": 43,
        "counterparty_conveyancer_contact_id": 9,
        "address": {
            "house_name_number": "10",
            "street": "High Street",
            "town_city": "Plymouth",
            "county": "Devon",
            "country": "England",
            "postcode": "PL1 1AA",
        },
        "counterparty_conveyancer_org": {
            "organisation": "Conveyancer2",
            "locality": "Plymouth",
            "country": "GB",
            "state": None,
            "organisational_unit": None,
            "common_name": None,
        },
    }


if __name__ == "__main__":
    sys.exit(main())
