from __future__ import annotations

import re
import string

MAC_PATTERN = re.compile(r"^[0-9A-Fa-f]{2}(:[0-9A-Fa-f]{2}){5}$")


def is_mac(value: str) -> bool:
    return bool(MAC_PATTERN.match(value))


def normalize_mac(value: str) -> str:
    """Return ``AA:BB:CC:DD:EE:FF`` for any common MAC spelling.

    Values that do not look like a MAC are returned unchanged.
    """
    cleaned = value.replace(":", "").replace("-", "").replace(".", "")
    if len(cleaned) == 12 and all(ch in string.hexdigits for ch in cleaned):
        pairs = [cleaned[i : i + 2] for i in range(0, 12, 2)]
        return ":".join(pair.upper() for pair in pairs)
    return value
