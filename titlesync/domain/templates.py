"""SMS message templates and placeholder resolution."""

from __future__ import annotations

import enum
import re
from typing import Sequence

PLACEHOLDER_PATTERN = re.compile(r"%([0-9])")


class SMSTemplate(enum.Enum):
    """Message patterns. `%0` is the link, `%1` the recipient's full name."""

    IDENTITY_VERIFICATION_REQUEST = (
        "Hi %1.\nPlease verify your identity using Yoti. "
        "You'll need to do this before we can proceed with the sale.\nContinue at %0"
    )
    AGREEMENT_SIGN_REQUEST_SELLER = (
        "Good news %1!\nYour sales and transfer agreements are ready to sign.\n"
        "Continue at %0"
    )
    AGREEMENT_SIGN_REQUEST_BUYER = (
        "Good news %1!\nYour sales, mortgage and transfer agreements are ready to sign.\n"
        "Continue at %0"
    )
    TITLE_TRANSFERRED = (
        "Hi %1. It's completion day!\nYour transfer of ownership is complete.\n"
        "You can view confirmation of this at %0"
    )

    @property
    def text(self) -> str:
        return self.value


def resolve_template(
    template: SMSTemplate | str,
    is_trial: bool,
    infills: Sequence[str],
) -> str:
    """Substitute `%d` markers with `infills[d]`.

    Markers without a matching infill are left in place so they show up in
    the sent text and in logs.
    """
    text = template.text if isinstance(template, SMSTemplate) else template

    def _replace(match: re.Match[str]) -> str:
        index = int(match.group(1))
        if index < len(infills):
            return str(infills[index])
        return match.group(0)

    body = PLACEHOLDER_PATTERN.sub(_replace, text)
    if is_trial:
        # Twilio trial accounts prepend their own notice to every message.
        body = f"\n{body}"
    return body
