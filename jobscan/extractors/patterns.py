# jobscan/extractors/patterns.py
from __future__ import annotations
import re

PATTERNS_VERSION = "v1.0.0"

# Registration (UK VRM). re.ASCII keeps \d and IGNORECASE to Latin letters and 0-9.
MODERN_VRM_RE = re.compile(r"\b([A-Z]{2})(\d{2})\s?([A-Z]{3})\b", re.IGNORECASE | re.ASCII)
LEGACY_VRM_PATTERNS = (
    re.compile(r"\b(?!OI|IO)([A-Z]{1,3})\s?(\d{1,3})\s?([A-Z]{1,3})\b", re.IGNORECASE | re.ASCII),
)

# Exact shapes, applied to already stripped/uppercased strings
MODERN_VRM_SHAPE = re.compile(r"^([A-Z]{2})([0-9]{2})([A-Z]{3})$")
# OCR-confusable glyphs allowed per span. Second char excludes "1" so prefix
# plates like A123 BCD are left alone.
MODERN_VRM_LOOSE_SHAPE = re.compile(r"^([A-Z01][A-Z0])([0-9OI]{2})([A-Z01]{3})$")

# Job card labels: "WIP No. 20705", "WIP NO: 88921", "WIPNo20705", "Job No. 554333"
WIP_RE = re.compile(r"\bWIP\s*(?:Number|No\.?|#)?\s*:?\s*([A-Z0-9\-]{3,})", re.IGNORECASE | re.ASCII)
JOB_RE = re.compile(r"\bJob\s*(?:(?:Number|No\.?|#)\s*:?|:)\s*([A-Z0-9\-]{3,})", re.IGNORECASE | re.ASCII)

ALL_ZEROS_RE = re.compile(r"^0+$")
WHITESPACE_RE = re.compile(r"\s+")
