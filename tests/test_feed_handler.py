from __future__ import annotations

import unittest
import urllib.parse
from typing import Any
from unittest import mock

from titlesync.adapters.feed_handler import handle_update, handle_updates
from titlesync.adapters.sms_dispatcher import SMSDispatcher
from titlesync.application.routing import agreement_routing_table
from titlesync.config import Settings
from titlesync.domain.states import Party, PartyIdentity

SELLER_CONVEYANCER = {"organisation": "Conveyancer1", "locality": "Plymouth", "country": "GB"}
BUYER_CONVEYANCER = {"organisation": "Conveyancer2", "locality": "Plymouth", "country": "GB"}
ME = PartyIdentity(**SELLER_CONVEYANCER)


def make_agreement_record(status: str, **data_overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "titleID": "ZQV888860",
        "status": status,
        "seller": {"phone": "+447911123456", "forename": "Lisa", "surname": "White"},
        "buyer": {"phone": "+447911654321", "forename": "Alex", "surname": "Smith"},
        "sellerConveyancer": SELLER_CONVEYANCER,
        "buyerConveyancer": BUYER_CONVEYANCER,
    }
    return {"type": "LandAgreementState", "data": data | data_overrides}


class RecordingNotifier:
    def __init__(self, *, fail_for_title: str | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self.fail_for_title = fail_for_title

    def _record(self, name: str, recipient: Party, title_number: str) -> dict[str, Any]:
        if title_number == self.fail_for_title:
            raise RuntimeError("notifier exploded")
        self.calls.append((name, title_number))
        return {"status": "sent", "reason": None}

    def send_agreement_sign_request_seller(self, recipient: Party, title_number: str) -> dict[str, Any]:
        return self._record("sign_seller", recipient, title_number)

    def send_agreement_sign_request_buyer(self, recipient: Party, title_number: str) -> dict[str, Any]:
        return self._record("sign_buyer", recipient, title_number)

    def send_title_transferred(self, recipient: Party, title_number: str) -> dict[str, Any]:
        return self._record("transferred", recipient, title_number)


class FeedHandlerTests(unittest.TestCase):
    def test_snapshot_is_ignored(self) -> None:
        notifier = RecordingNotifier()

        result = handle_update(
            {"snapshot": True, "produced": [make_agreement_record("APPROVED")]},
            local_identity=ME,
            routing_table=agreement_routing_table(notifier),
        )

        self.assertEqual(result["status"], "snapshot_ignored")
        self.assertEqual(notifier.calls, [])

    def test_empty_update_logs_warning(self) -> None:
        notifier = RecordingNotifier()

        with self.assertLogs("titlesync.adapters.feed_handler", level="WARNING") as logs:
            result = handle_update(
                {"produced": []},
                local_identity=ME,
                routing_table=agreement_routing_table(notifier),
            )

        self.assertEqual(result["status"], "empty")
        self.assertIn("no produced states", "\n".join(logs.output))

    def test_states_are_routed_in_order(self) -> None:
        notifier = RecordingNotifier()
        update = {
            "produced": [
                make_agreement_record("APPROVED", titleID="T-1"),
                make_agreement_record("TRANSFERRED", titleID="T-2"),
                make_agreement_record("CREATED", titleID="T-3"),
            ]
        }

        result = handle_update(
            update, local_identity=ME, routing_table=agreement_routing_table(notifier)
        )

        self.assertEqual(result["status"], "processed")
        self.assertEqual(notifier.calls, [("sign_seller", "T-1"), ("transferred", "T-2")])
        self.assertEqual([item["status"] for item in result["results"]], ["routed"] * 3)

    def test_parse_failure_does_not_stop_later_states(self) -> None:
        notifier = RecordingNotifier()
        broken = make_agreement_record("APPROVED", titleID="T-1")
        del broken["data"]["seller"]
        update = {"produced": [broken, make_agreement_record("APPROVED", titleID="T-2")]}

        result = handle_update(
            update, local_identity=ME, routing_table=agreement_routing_table(notifier)
        )

        self.assertEqual(result["results"][0]["status"], "parse_failed")
        self.assertEqual(result["results"][1]["status"], "routed")
        self.assertEqual(notifier.calls, [("sign_seller", "T-2")])

    def test_unrecognised_status_is_routed_without_action(self) -> None:
        notifier = RecordingNotifier()
        update = {"produced": [make_agreement_record("WITHDRAWN")]}

        result = handle_update(
            update, local_identity=ME, routing_table=agreement_routing_table(notifier)
        )

        self.assertEqual(result["results"][0]["status"], "routed")
        self.assertIsNone(result["results"][0]["route"]["action"])
        self.assertEqual(notifier.calls, [])

    def test_routing_exception_does_not_stop_later_states(self) -> None:
        notifier = RecordingNotifier(fail_for_title="T-1")
        update = {
            "produced": [
                make_agreement_record("APPROVED", titleID="T-1"),
                make_agreement_record("APPROVED", titleID="T-2"),
            ]
        }

        with self.assertLogs("titlesync.adapters.feed_handler", level="ERROR"):
            result = handle_update(
                update, local_identity=ME, routing_table=agreement_routing_table(notifier)
            )

        self.assertEqual(result["results"][0]["status"], "route_failed")
        self.assertIn("notifier exploded", result["results"][0]["error"])
        self.assertEqual(notifier.calls, [("sign_seller", "T-2")])

    def test_handle_updates_processes_each_batch(self) -> None:
        notifier = RecordingNotifier()
        updates = [
            {"snapshot": True, "produced": [make_agreement_record("APPROVED", titleID="T-0")]},
            {"produced": [make_agreement_record("APPROVED", titleID="T-1")]},
            {"produced": []},
        ]

        results = handle_updates(
            updates, local_identity=ME, routing_table=agreement_routing_table(notifier)
        )

        self.assertEqual(
            [result["status"] for result in results], ["snapshot_ignored", "processed", "empty"]
        )
        self.assertEqual(notifier.calls, [("sign_seller", "T-1")])


class AgreementEndToEndTests(unittest.TestCase):
    @mock.patch("titlesync.adapters.http.urllib.request.urlopen")
    def test_approved_agreement_sends_one_sms_to_seller(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 201
        response.read.return_value = b'{"sid":"SM1","num_segments":"1","status":"queued"}'
        settings = Settings(
            ledger_host="localhost",
            ledger_port=10006,
            ledger_username="user1",
            ledger_password="test",
            case_management_api_url="http://cases.local",
            ui_url_agreement_sign="https://ui.local/titles/%titleNumber%/sign",
            ui_url_title_transferred="https://ui.local/titles/%titleNumber%/done",
            kafka_bootstrap_servers=("localhost:9092",),
            twilio_account_sid="AC123",
            twilio_auth_token="token-xyz",
            twilio_phone_number="+15555550111",
            retry_attempts=1,
        )
        table = agreement_routing_table(SMSDispatcher(settings))

        result = handle_update(
            {"produced": [make_agreement_record("APPROVED")]},
            local_identity=ME,
            routing_table=table,
        )

        self.assertEqual(urlopen_mock.call_count, 1)
        request_obj = urlopen_mock.call_args.args[0]
        payload = urllib.parse.parse_qs((request_obj.data or b"").decode("utf-8"))
        self.assertEqual(payload["To"], ["+447911123456"])
        self.assertIn("Good news Lisa White!", payload["Body"][0])
        self.assertIn("https://ui.local/titles/ZQV888860/sign", payload["Body"][0])
        route = result["results"][0]["route"]
        self.assertEqual(route["action"], "send_agreement_sign_request_seller")
        self.assertEqual(route["result"]["status"], "sent")


if __name__ == "__main__":
    unittest.main()
