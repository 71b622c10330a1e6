"""License plate normalization."""

import re

_NON_PLATE_CHARS = re.compile(r"[^A-Z0-9]")


def normalize_plate(plate: str) -> str:
    """
    Normalize a license plate for storage and lookup.

    Uppercases the input and strips everything outside A-Z and 0-9, so
    "abc-123" and "ABC 123" both become "ABC123". Idempotent.
    """
    return _NON_PLATE_CHARS.sub("", plate.upper())
