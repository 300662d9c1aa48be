from __future__ import annotations

import re
from typing import Any, Literal

from core.fields import as_lower_text


Channel = Literal["linkedin", "email", "whatsapp", "other"]

CHANNELS: tuple[Channel, ...] = ("linkedin", "email", "whatsapp", "other")

EMAIL_MARKERS = ("email", "assunto:")
# Header line of an exported WhatsApp chat: "[14:32, 02/02/2024]".
WHATSAPP_TIMESTAMP = re.compile(r"\[\d{2}:\d{2}, \d{2}/\d{2}/\d{4}\]")


def classify_channel(text: Any) -> Channel:
    """Infer the outreach channel from touch content. First matching rule wins."""
    t = as_lower_text(text)
    if not t:
        return "other"
    if "linkedin" in t:
        return "linkedin"
    if any(marker in t for marker in EMAIL_MARKERS):
        return "email"
    if "whatsapp" in t or WHATSAPP_TIMESTAMP.search(t):
        return "whatsapp"
    return "other"
