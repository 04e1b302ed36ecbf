# jobscan/pipeline.py
from __future__ import annotations
import logging
from dataclasses import replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .extractors.candidates import OcrOutput, ScanResult
from .extractors.io_image import ImageRef, ScanOptions, preprocessed
from .extractors.ocr_engines import get_engine
from .extractors.orchestrator import run_extractors
from .extractors.patterns import PATTERNS_VERSION

OcrFn = Callable[[Any], OcrOutput]

DEFAULT_OPTIONS = ScanOptions()
# plates are small in the frame: keep more pixels
REGISTRATION_OPTIONS = replace(DEFAULT_OPTIONS, target_width=2000, enhance_contrast=True)
JOB_CARD_OPTIONS = replace(DEFAULT_OPTIONS, target_width=1600)


class ScanState(str, Enum):
    IDLE = "idle"
    PREPROCESSING = "preprocessing"
    AWAITING_OCR = "awaiting_ocr"
    PARSING = "parsing"
    DONE = "done"
    FAILED = "failed"


class _Trail:
    """Per-scan state log; nothing here outlives one call."""

    def __init__(self, log: logging.Logger):
        self.log = log
        self.states: List[str] = [ScanState.IDLE.value]

    @property
    def current(self) -> ScanState:
        return ScanState(self.states[-1])

    def to(self, state: ScanState) -> None:
        self.log.debug("scan state %s -> %s", self.states[-1], state.value)
        self.states.append(state.value)


def scan_image(image: ImageRef,
               options: Optional[ScanOptions] = None,
               ocr: Optional[OcrFn] = None,
               logger: Optional[logging.Logger] = None) -> ScanResult:
    """
    idle -> preprocessing -> awaiting_ocr -> parsing -> done, or failed.

    Image and OCR errors (ImageProcessingError, OcrUnavailableError) are
    raised as-is. Empty OCR text is a normal outcome and gives an empty
    ScanResult. No retries here: retrying belongs to the OCR engine.
    """
    log = logger or logging.getLogger(__name__)
    opts = options or DEFAULT_OPTIONS
    engine = ocr or get_engine()
    trail = _Trail(log)
    meta: Dict[str, Any] = {"version": PATTERNS_VERSION, "source": str(image)}

    log.info("scan started: %s", image)
    try:
        trail.to(ScanState.PREPROCESSING)
        with preprocessed(image, opts) as processed:
            meta["preprocess"] = processed.info()
            trail.to(ScanState.AWAITING_OCR)
            out = engine(processed.path)
    except Exception as e:
        log.warning("scan failed during %s: %s: %s", trail.current.value, type(e).__name__, e)
        trail.to(ScanState.FAILED)
        raise

    meta["engine"] = out.engine
    trail.to(ScanState.PARSING)
    if not (out.text or "").strip():
        log.info("no text detected")
        trail.to(ScanState.DONE)
        meta["states"] = tuple(trail.states)
        return ScanResult.empty(meta)

    log.debug("ocr text: %d chars, conf=%.2f", len(out.text), out.confidence)
    fields = run_extractors(out.text)
    trail.to(ScanState.DONE)
    meta["states"] = tuple(trail.states)

    result = ScanResult(
        registration=fields["registration"],
        wip=fields["wip"],
        job_number=fields["job_number"],
        ocr_text=out.text,
        ocr_confidence=out.confidence,
        meta=meta,
    )
    log.info("scan complete: %s", result.flat())
    return result


def scan_registration(image: ImageRef, ocr: Optional[OcrFn] = None,
                      logger: Optional[logging.Logger] = None) -> ScanResult:
    return scan_image(image, REGISTRATION_OPTIONS, ocr=ocr, logger=logger)


def scan_job_card(image: ImageRef, ocr: Optional[OcrFn] = None,
                  logger: Optional[logging.Logger] = None) -> ScanResult:
    return scan_image(image, JOB_CARD_OPTIONS, ocr=ocr, logger=logger)
