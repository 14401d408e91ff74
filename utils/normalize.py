from __future__ import annotations

import re
import unicodedata
from typing import List, Optional

_NON_WORD_RE = re.compile(r"[^\w\s]")
_WS_RE = re.compile(r"\s+")


def normalize_text(text: Optional[str]) -> str:
    """Lowercase, strip punctuation and collapse whitespace into single spaces."""
    if not text:
        return ""
    cleaned = unicodedata.normalize("NFC", str(text)).lower()
    cleaned = _NON_WORD_RE.sub("", cleaned)
    return _WS_RE.sub(" ", cleaned).strip()


def normalize(text: Optional[str]) -> List[str]:
    """Split text into normalized word tokens.

    normalize("The LORD, my Shepherd!") -> ["the", "lord", "my", "shepherd"]
    """
    cleaned = normalize_text(text)
    if not cleaned:
        return []
    return cleaned.split(" ")
