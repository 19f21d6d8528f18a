from __future__ import annotations

import unittest
from typing import Any

from titlesync.domain.case_mapping import MappingError, project_case_update


def make_case(**overrides: Any) -> dict[str, Any]:
    base: dict[str, Any] = {
        "id": 1001,
        "case_reference": "CASE-1",
        "case_type": "Sell",
        "status": "active",
        "assigned_staff_id": 7,
        "client_id": 42,
        "counterparty_id": 43,
        "counterparty_conveyancer_contact_id": 9,
        "created_at": "2026-01-01T00:00:00Z",
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
    return base | overrides


class CaseProjectionTests(unittest.TestCase):
    def test_projects_allow_listed_fields_and_adds_title_number(self) -> None:
        payload = project_case_update(make_case(), "ZQV888860")

        self.assertEqual(payload["case_reference"], "CASE-1")
        self.assertEqual(payload["client_id"], 42)
        self.assertEqual(payload["counterparty_conveyancer_contact_id"], 9)
        self.assertEqual(payload["address"]["postcode"], "PL1 1AA")
        self.assertEqual(payload["title_number"], "ZQV888860")
        self.assertNotIn("id", payload)
        self.assertNotIn("created_at", payload)

    def test_null_optional_org_fields_are_omitted(self) -> None:
        payload = project_case_update(make_case(), "ZQV888860")

        self.assertEqual(
            payload["counterparty_conveyancer_org"],
            {"organisation": "Conveyancer2", "locality": "Plymouth", "country": "GB"},
        )

    def test_absent_optional_org_fields_are_omitted(self) -> None:
        case = make_case(
            counterparty_conveyancer_org={
                "organisation": "Conveyancer2",
                "locality": "Plymouth",
                "country": "GB",
            }
        )
        payload = project_case_update(case, "ZQV888860")
        org = payload["counterparty_conveyancer_org"]
        for name in ("state", "organisational_unit", "common_name"):
            self.assertNotIn(name, org)

    def test_present_optional_org_fields_are_copied(self) -> None:
        case = make_case(
            counterparty_conveyancer_org={
                "organisation": "Conveyancer2",
                "locality": "Plymouth",
                "country": "GB",
                "state": "Devon",
                "organisational_unit": "Residential",
                "common_name": "Conveyancer Two",
            }
        )
        org = project_case_update(case, "ZQV888860")["counterparty_conveyancer_org"]

        self.assertEqual(org["state"], "Devon")
        self.assertEqual(org["organisational_unit"], "Residential")
        self.assertEqual(org["common_name"], "Conveyancer Two")

    def test_source_record_is_not_modified(self) -> None:
        case = make_case()
        project_case_update(case, "ZQV888860")
        self.assertNotIn("title_number", case)
        self.assertIn("state", case["counterparty_conveyancer_org"])

    def test_missing_scalar_field_raises(self) -> None:
        case = make_case()
        del case["client_id"]
        with self.assertRaises(MappingError) as exc:
            project_case_update(case, "ZQV888860")
        self.assertIn("client_id", str(exc.exception))

    def test_missing_address_field_raises(self) -> None:
        case = make_case()
        del case["address"]["postcode"]
        with self.assertRaises(MappingError) as exc:
            project_case_update(case, "ZQV888860")
        self.assertIn("address.postcode", str(exc.exception))

    def test_wrong_shape_address_raises(self) -> None:
        with self.assertRaises(MappingError):
            project_case_update(make_case(address="10 High Street"), "ZQV888860")

    def test_missing_required_org_field_raises(self) -> None:
        case = make_case()
        del case["counterparty_conveyancer_org"]["locality"]
        with self.assertRaises(MappingError):
            project_case_update(case, "ZQV888860")

    def test_nested_value_in_scalar_field_raises(self) -> None:
        with self.assertRaises(MappingError):
            project_case_update(make_case(status={"code": "active"}), "ZQV888860")

    def test_mapping_error_is_a_value_error(self) -> None:
        self.assertTrue(issubclass(MappingError, ValueError))


if __name__ == "__main__":
    unittest.main()
