"""
src/content/normalizer.py — Search term normalization

Canonicalizes raw search input. Numeric input is a product barcode
that may carry visual grouping ("4000176 5"); anything else is a
category name.
"""

from __future__ import annotations

import re

_SPACED_NUMBER = re.compile(r"[0-9 ]*")
_CODE = re.compile(r"[0-9]+")


def normalize(raw: str) -> str:
    """Normalize a raw search term.

    Digits-and-spaces input loses all spaces; any other input is trimmed
    and has internal whitespace runs collapsed to a single space.
    """
    if _SPACED_NUMBER.fullmatch(raw):
        return raw.replace(" ", "")
    return " ".join(raw.split())


def is_code(term: str) -> bool:
    """True if a normalized term should be looked up as a product code.

    Codes stay text: they can be longer than any fixed-width integer.
    """
    return bool(_CODE.fullmatch(term))
