"""Query and document tokenizer.

Tokens are lowercase ASCII words and digits. Every other character,
including punctuation and non-latin letters, acts as a separator.
"""

from __future__ import annotations

import re

_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9\s]")


def tokenize(text: str | None) -> list[str]:
    """Split ``text`` into normalised tokens.

    Order and duplicates are preserved; ``None`` and empty strings give
    an empty list.
    """

    cleaned = _NON_TOKEN_CHARS.sub(" ", (text or "").lower())
    return [t for t in cleaned.split() if t]
