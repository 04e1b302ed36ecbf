# jobscan/extractors/candidates.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PatternTag(str, Enum):
    MODERN = "modern"   # strict LLDD LLL plate grammar
    LEGACY = "legacy"   # loose fallback plate grammar
    WIP = "wip"
    JOB = "job"


@dataclass(frozen=True)
class Candidate:
    value: str                 # display form ("AB12 CDE", "88921")
    normalized_value: str      # canonical form ("AB12CDE")
    confidence: float          # (0, 0.95]
    source_line: str
    pattern_tag: PatternTag
    raw: str = ""              # text exactly as matched

    def to_dict(self) -> Dict[str, Any]:
        return {
            "value": self.value,
            "normalized": self.normalized_value,
            "conf": self.confidence,
            "source_line": self.source_line,
            "pattern": self.pattern_tag.value,
        }


@dataclass(frozen=True)
class FieldResult:
    candidates: Tuple[Candidate, ...] = ()

    @property
    def best(self) -> Optional[Candidate]:
        return self.candidates[0] if self.candidates else None

    def __len__(self) -> int:
        return len(self.candidates)

    def to_dict(self) -> Dict[str, Any]:
        best = self.best
        return {
            "best": best.to_dict() if best else None,
            "all": [c.to_dict() for c in self.candidates],
        }


@dataclass(frozen=True)
class OcrOutput:
    text: str
    confidence: float          # 0..1
    engine: str = "unknown"


@dataclass(frozen=True)
class ScanResult:
    registration: FieldResult
    wip: FieldResult
    job_number: FieldResult
    ocr_text: str
    ocr_confidence: float
    meta: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def empty(cls, meta: Optional[Dict[str, Any]] = None) -> "ScanResult":
        return cls(FieldResult(), FieldResult(), FieldResult(), "", 0.0, dict(meta or {}))

    def fields(self) -> Dict[str, FieldResult]:
        return {"registration": self.registration, "wip": self.wip, "job_number": self.job_number}

    def flat(self) -> Dict[str, Optional[str]]:
        return {k: (fr.best.value if fr.best else None) for k, fr in self.fields().items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flat": self.flat(),
            "fields": {k: fr.to_dict() for k, fr in self.fields().items()},
            "ocr": {"text": self.ocr_text, "conf": self.ocr_confidence},
            "meta": self.meta,
        }
