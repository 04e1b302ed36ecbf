# jobscan/extractors/normalizers.py
from __future__ import annotations
from typing import Optional

from .patterns import MODERN_VRM_SHAPE, MODERN_VRM_LOOSE_SHAPE, WHITESPACE_RE

_TO_DIGIT = str.maketrans({"O": "0", "I": "1"})
_TO_LETTER = str.maketrans({"0": "O", "1": "I"})


def strip_upper(s: Optional[str]) -> str:
    return WHITESPACE_RE.sub("", s or "").upper()


def normalize_vrm(raw: Optional[str]) -> str:
    """
    Canonical plate form: no whitespace, uppercase.

    Modern plates (LL DD LLL) get position-aware O/0 and I/1 correction,
    digits in the middle span, letters in the outer spans. Anything else is
    passed through so legacy plates keep what OCR read.
    """
    s = strip_upper(raw)
    m = MODERN_VRM_LOOSE_SHAPE.match(s)
    if not m:
        return s
    letters1, digits, letters2 = m.groups()
    return letters1.translate(_TO_LETTER) + digits.translate(_TO_DIGIT) + letters2.translate(_TO_LETTER)


def format_vrm(raw: Optional[str]) -> str:
    s = normalize_vrm(raw)
    m = MODERN_VRM_SHAPE.match(s)
    if m:
        return f"{m.group(1)}{m.group(2)} {m.group(3)}"
    return s
