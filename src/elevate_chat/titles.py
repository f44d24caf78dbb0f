from __future__ import annotations

from datetime import datetime

TITLE_PROMPT_CHARS = 30


def format_title_date(now: datetime) -> str:
    return now.strftime("%b %d, %Y")


def derive_title(prompt: str, now: datetime | None = None) -> str:
    """Build a history-list title from the first prompt of a chat.

    The first 30 characters of the prompt are kept verbatim and followed by
    the creation date, e.g. ``"Explain recursion in simple te - Oct 19, 2026"``.
    """
    moment = now or datetime.now()
    return f"{prompt[:TITLE_PROMPT_CHARS]} - {format_title_date(moment)}"
