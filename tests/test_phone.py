from __future__ import annotations

import unittest

from titlesync.domain.phone import (
    OFCOM_MEDIA_NUMBER_PREFIXES,
    REASON_INVALID_FORMAT,
    REASON_RESERVED_MEDIA_NUMBER,
    validate_phone_number,
)


class PhoneValidationTests(unittest.TestCase):
    def test_accepts_e164_numbers(self) -> None:
        for number in ("+447911123456", "+15555550123", "+1", "+123456789012345"):
            with self.subTest(number=number):
                self.assertEqual(
                    validate_phone_number(number), {"accepted": True, "reason": None}
                )

    def test_rejects_malformed_numbers(self) -> None:
        for number in (
            "12345",
            "",
            "+",
            "447911123456",
            "+44 7911 123456",
            "+44-7911123456",
            "+1234567890123456",
            "+447911123456\n",
            "tel:+447911123456",
            "+44791112345a",
            "+４４７９１１",
        ):
            with self.subTest(number=number):
                result = validate_phone_number(number)
                self.assertFalse(result["accepted"])
                self.assertEqual(result["reason"], REASON_INVALID_FORMAT)

    def test_rejects_non_string_input(self) -> None:
        result = validate_phone_number(None)  # type: ignore[arg-type]
        self.assertEqual(result["reason"], REASON_INVALID_FORMAT)

    def test_rejects_ofcom_media_numbers(self) -> None:
        for number in ("+447700900123", "+447700900999", "+442079460000", "+441632960001"):
            with self.subTest(number=number):
                result = validate_phone_number(number)
                self.assertFalse(result["accepted"])
                self.assertEqual(result["reason"], REASON_RESERVED_MEDIA_NUMBER)

    def test_every_reserved_prefix_is_rejected(self) -> None:
        self.assertEqual(len(OFCOM_MEDIA_NUMBER_PREFIXES), 20)
        for prefix in OFCOM_MEDIA_NUMBER_PREFIXES:
            with self.subTest(prefix=prefix):
                result = validate_phone_number(f"{prefix}123")
                self.assertEqual(result["reason"], REASON_RESERVED_MEDIA_NUMBER)

    def test_neighbouring_ranges_are_not_reserved(self) -> None:
        self.assertTrue(validate_phone_number("+447700800123")["accepted"])
        self.assertTrue(validate_phone_number("+442079470000")["accepted"])


if __name__ == "__main__":
    unittest.main()
