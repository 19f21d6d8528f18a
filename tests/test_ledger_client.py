from __future__ import annotations

import dataclasses
import io
import unittest
import urllib.error
from unittest import mock

from titlesync.adapters.ledger_client import LedgerLookupError, fetch_local_identity
from titlesync.config import Settings
from titlesync.domain.states import PartyIdentity

SETTINGS = Settings(
    ledger_host="corda-node",
    ledger_port=10006,
    ledger_username="user1",
    ledger_password="test",
    case_management_api_url="http://cases.local",
    ui_url_agreement_sign="https://ui.local/%titleNumber%",
    ui_url_title_transferred="https://ui.local/%titleNumber%",
    kafka_bootstrap_servers=("localhost:9092",),
)


class LedgerIdentityTests(unittest.TestCase):
    @mock.patch("titlesync.adapters.http.urllib.request.urlopen")
    def test_fetch_local_identity_reads_me(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 200
        response.read.return_value = (
            b'{"me":{"organisation":"Conveyancer1","locality":"Plymouth","country":"GB"}}'
        )

        identity = fetch_local_identity(SETTINGS)

        self.assertEqual(
            identity,
            PartyIdentity(organisation="Conveyancer1", locality="Plymouth", country="GB"),
        )
        request_obj = urlopen_mock.call_args.args[0]
        self.assertEqual(request_obj.full_url, "http://corda-node:10006/api/me")
        self.assertTrue((request_obj.get_header("Authorization") or "").startswith("Basic "))

    @mock.patch("titlesync.adapters.http.urllib.request.urlopen")
    def test_rejected_lookup_is_not_retried(self, urlopen_mock: mock.Mock) -> None:
        urlopen_mock.side_effect = urllib.error.HTTPError(
            url="http://corda-node:10006/api/me",
            code=401,
            msg="Unauthorized",
            hdrs=None,
            fp=io.BytesIO(b"denied"),
        )

        with self.assertRaises(LedgerLookupError):
            fetch_local_identity(SETTINGS)

        self.assertEqual(urlopen_mock.call_count, 1)

    @mock.patch("titlesync.adapters.http.urllib.request.urlopen")
    def test_unreadable_identity_raises(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 200
        response.read.return_value = b'{"you":{}}'

        with self.assertRaises(LedgerLookupError):
            fetch_local_identity(SETTINGS)

    @mock.patch("titlesync.adapters.http.urllib.request.urlopen")
    def test_lookup_uses_ledger_timeout(self, urlopen_mock: mock.Mock) -> None:
        response = urlopen_mock.return_value.__enter__.return_value
        response.getcode.return_value = 200
        response.read.return_value = (
            b'{"me":{"organisation":"Conveyancer1","locality":"Plymouth","country":"GB"}}'
        )

        fetch_local_identity(dataclasses.replace(SETTINGS, ledger_timeout_seconds=4.0))

        self.assertEqual(urlopen_mock.call_args.kwargs["timeout"], 4.0)


if __name__ == "__main__":
    unittest.main()
