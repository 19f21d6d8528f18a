#!/usr/bin/env python3
"""Publish one land-agreement update batch to Kafka for local testing."""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, datetime
from pathlib import Path

# Allow running this file directly from repository root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from titlesync.adapters.kafka_runtime import publish_ledger_update  # noqa: E402
from titlesync.config import load_env_file, load_settings_from_env  # noqa: E402


def main() -> int:
    load_env_file(REPO_ROOT / ".env")
    args = parse_args()
    settings = load_settings_from_env()
    payload = build_payload(args)
    metadata = publish_ledger_update(payload, settings=settings, topic=args.topic)

    print("[PUBLISHED]")
    print(f"topic={metadata['topic']}")
    print(f"partition={metadata['partition']}")
    print(f"offset={metadata['offset']}")
    print(f"title_id={args.title_id} status={args.status}")
    return 0


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Publish one LandAgreementState update batch for Kafka testing."
    )
    parser.add_argument("--title-id", default="ZQV888860", help="Title number.")
    parser.add_argument(
        "--status",
        default="APPROVED",
        choices=["CREATED", "APPROVED", "SIGNED", "COMPLETED", "TRANSFERRED"],
        help="Agreement status.",
    )
    parser.add_argument("--seller-phone", required=True, help="Seller phone in E.164 format.")
    parser.add_argument("--buyer-phone", required=True, help="Buyer phone in E.164 format.")
    parser.add_argument(
        "--seller-org",
        default="Conveyancer1",
        help="Organisation of the seller's conveyancer node.",
    )
    parser.add_argument(
        "--buyer-org",
        default="Conveyancer2",
        help="Organisation of the buyer's conveyancer node.",
    )
    parser.add_argument(
        "--topic",
        default=None,
        help="Override Kafka topic (defaults to KAFKA_TOPIC_AGREEMENTS).",
    )
    return parser.parse_args()


def build_payload(args: argparse.Namespace) -> dict[str, object]:
    return {
        "snapshot": False,
        "produced": [
            {
                "type": "LandAgreementState",
                "timestamp": datetime.now(tz=UTC).isoformat(),
                "data": {
                    "titleID": args.title_id,
                    "status": args.status,
                    "seller": {"phone": args.seller_phone, "forename": "Lisa", "surname": "White"},
                    "buyer": {"phone": args.buyer_phone, "forename": "Alex", "surname": "Smith"},
                    "sellerConveyancer": {
                        "organisation": args.seller_org,
                        "locality": "Plymouth",
                        "country": "GB",
                    },
                    "buyerConveyancer": {
                        "organisation": args.buyer_org,
                        "locality": "Plymouth",
                        "country": "GB",
                    },
                },
            }
        ],
        "consumed": [],
    }


if __name__ == "__main__":
    sys.exit(main())
