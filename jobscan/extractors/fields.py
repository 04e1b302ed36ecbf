# jobscan/extractors/fields.py
from __future__ import annotations
import logging
import re
from typing import Callable, Iterable, List, Set

from .candidates import Candidate, PatternTag
from .label_proximity import score
from .normalizers import normalize_vrm, format_vrm
from .patterns import MODERN_VRM_RE, LEGACY_VRM_PATTERNS, WIP_RE, JOB_RE
from .validators import is_plausible

logger = logging.getLogger(__name__)


def _by_conf(cands: List[Candidate]) -> List[Candidate]:
    # sorted() is stable: equal scores keep first-seen order
    return sorted(cands, key=lambda c: c.confidence, reverse=True)


def _scan_lines(lines: Iterable[str], patterns: Iterable[re.Pattern], tag: PatternTag,
                seen: Set[str], group: int,
                normalize: Callable[[str], str], display: Callable[[str], str]) -> List[Candidate]:
    out: List[Candidate] = []
    for rx in patterns:
        for line in lines:
            for m in rx.finditer(line):
                raw = m.group(group)
                norm = normalize(raw)
                if not is_plausible(tag, norm):
                    continue
                if norm in seen:
                    continue
                seen.add(norm)
                conf = score(tag, line)
                out.append(Candidate(
                    value=display(raw),
                    normalized_value=norm,
                    confidence=conf,
                    source_line=line.strip(),
                    pattern_tag=tag,
                    raw=raw,
                ))
                logger.debug("found %s %r conf=%.2f", tag.value, norm, conf)
    return out


def extract_reg(text: str) -> List[Candidate]:
    lines = (text or "").splitlines()
    seen: Set[str] = set()

    cands = _scan_lines(lines, (MODERN_VRM_RE,), PatternTag.MODERN, seen, 0,
                        normalize_vrm, format_vrm)
    # loose grammar is noisy: only when the strict one found nothing
    if not cands:
        cands = _scan_lines(lines, LEGACY_VRM_PATTERNS, PatternTag.LEGACY, seen, 0,
                            normalize_vrm, format_vrm)

    logger.debug("registration: %d candidates from %d lines", len(cands), len(lines))
    return _by_conf(cands)


def _trim(s: str) -> str:
    return s.strip()


def extract_wip(text: str) -> List[Candidate]:
    lines = (text or "").splitlines()
    cands = _scan_lines(lines, (WIP_RE,), PatternTag.WIP, set(), 1, _trim, _trim)
    logger.debug("wip: %d candidates from %d lines", len(cands), len(lines))
    return _by_conf(cands)


def extract_job(text: str) -> List[Candidate]:
    lines = (text or "").splitlines()
    cands = _scan_lines(lines, (JOB_RE,), PatternTag.JOB, set(), 1, _trim, _trim)
    logger.debug("job_number: %d candidates from %d lines", len(cands), len(lines))
    return _by_conf(cands)
