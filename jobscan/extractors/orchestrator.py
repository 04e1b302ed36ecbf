# jobscan/extractors/orchestrator.py
from __future__ import annotations
from typing import Callable, Dict, Iterable, List

from .candidates import Candidate, FieldResult
from .fields import extract_reg, extract_wip, extract_job
from .normalizers import strip_upper

EXTRACTORS: Dict[str, Callable[[str], List[Candidate]]] = {
    "registration": extract_reg,
    "wip":          extract_wip,
    "job_number":   extract_job,
}


def dedupe(cands: Iterable[Candidate]) -> List[Candidate]:
    """Keep the first candidate per spacing/case-insensitive value, order untouched."""
    uniq: List[Candidate] = []
    seen = set()
    for c in cands:
        key = strip_upper(c.value)
        if key in seen:
            continue
        seen.add(key)
        uniq.append(c)
    return uniq


def resolve_field(cands: Iterable[Candidate]) -> FieldResult:
    # extractors already return confidence-sorted lists; best is simply the head
    return FieldResult(tuple(dedupe(cands)))


def run_extractors(text: str) -> Dict[str, FieldResult]:
    # fields are independent and pure; sequential is enough
    return {name: resolve_field(fn(text)) for name, fn in EXTRACTORS.items()}
