# jobscan/extractors/label_proximity.py
from __future__ import annotations
from typing import Dict, Tuple

from .candidates import PatternTag

BASE_CONF = 0.7
LABEL_BONUS = 0.2
MODERN_BONUS = 0.1
LABELED_CONF = 0.9
MAX_CONF = 0.95    # OCR output is never certain

LABELS: Dict[PatternTag, Tuple[str, ...]] = {
    PatternTag.MODERN: ("reg", "registration", "vehicle", "chassis"),
    PatternTag.LEGACY: ("reg", "registration", "vehicle", "chassis"),
    PatternTag.WIP:    ("wip",),
    PatternTag.JOB:    ("job",),
}


def near_label(tag: PatternTag, source_line: str) -> bool:
    low = (source_line or "").lower()
    return any(k in low for k in LABELS[tag])


def score(tag: PatternTag, source_line: str) -> float:
    """
    Plates: additive (label nearby, strict grammar), capped at MAX_CONF.
    WIP / job: binary, the label is the only signal that matters.
    """
    if tag in (PatternTag.WIP, PatternTag.JOB):
        return LABELED_CONF if near_label(tag, source_line) else BASE_CONF

    conf = BASE_CONF
    if near_label(tag, source_line):
        conf += LABEL_BONUS
    if tag is PatternTag.MODERN:
        conf += MODERN_BONUS
    return round(min(conf, MAX_CONF), 2)
