# jobscan/errors.py
from __future__ import annotations


class ScanError(Exception):
    """Base class for anything that stops a scan before text is parsed."""


class ImageProcessingError(ScanError):
    """The source image could not be read, resized or re-encoded."""


class OcrUnavailableError(ScanError):
    """The OCR engine could not run (missing binary, model, backend error)."""
