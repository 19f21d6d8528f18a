"""Phone number checks applied before any SMS leaves the process.

Mental model refresher:
- Pure predicate, no I/O.
- Format is checked first (E.164: `+` then 1-15 ASCII digits).
- Only well-formed numbers are checked against the Ofcom drama/media ranges,
  which must never receive real traffic.
"""

from __future__ import annotations

import re
from typing import Any

E164_PATTERN = re.compile(r"\+[0-9]{1,15}")

REASON_INVALID_FORMAT = "invalid format"
REASON_RESERVED_MEDIA_NUMBER = "reserved media number"

# Ofcom ranges reserved for TV, radio and film use.
OFCOM_MEDIA_NUMBER_PREFIXES: tuple[str, ...] = (
    "+441134960", "+441144960", "+441154960", "+441164960",
    "+441174960", "+441184960", "+441214960", "+441314960",
    "+441414960", "+441514960", "+441614960", "+442079460",
    "+441914980", "+442896496", "+442920180", "+441632960",
    "+447700900", "+448081570", "+449098790", "+443069990",
)


def validate_phone_number(number: str) -> dict[str, Any]:
    """Return `{"accepted": bool, "reason": str | None}` for `number`."""
    if not isinstance(number, str) or E164_PATTERN.fullmatch(number) is None:
        return {"accepted": False, "reason": REASON_INVALID_FORMAT}

    if number.startswith(OFCOM_MEDIA_NUMBER_PREFIXES):
        return {"accepted": False, "reason": REASON_RESERVED_MEDIA_NUMBER}

    return {"accepted": True, "reason": None}
