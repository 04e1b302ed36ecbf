# jobscan/extractors/ocr_engines.py
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pytesseract
from PIL import Image

from .candidates import OcrOutput
from ..errors import OcrUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "tesseract"
NO_WORD_CONF = 0.5   # text came back but the engine gave no per-word confidence
PADDLE_MIN_SCORE = 0.5


def _provider() -> str:
    return (os.getenv("OCR_PROVIDER") or DEFAULT_PROVIDER).strip().lower()

def _tess_lang() -> str:
    return os.getenv("OCR_LANG", "eng")

def _tess_config() -> str:
    # LSTM, uniform block of text, no dictionary auto-corrections (plates aren't words)
    psm = os.getenv("OCR_PSM", "6")
    return (
        f"--oem 1 --psm {psm} "
        "-c load_system_dawg=0 -c load_freq_dawg=0 "
        "-c tessedit_char_blacklist=\"|{}[]<>\\/@~^*_`\""
    )

def _paddle_lang() -> str:
    return os.getenv("PADDLE_LANG", "en")


class OcrEngine:
    """performOCR collaborator: image path in, text + confidence out."""
    name: str = "base"

    def recognize(self, image_path: Path) -> OcrOutput:
        raise NotImplementedError

    def __call__(self, image_path) -> OcrOutput:
        out = self.recognize(Path(image_path))
        logger.info("[%s] %d chars, conf=%.2f", self.name, len(out.text), out.confidence)
        return out


# --------- Tesseract ---------

def _tess_lines(data: Dict[str, List[Any]]) -> Tuple[str, float]:
    lines: Dict[Tuple[int, int, int], List[str]] = {}
    confs: List[float] = []
    for i, word in enumerate(data.get("text") or []):
        word = (word or "").strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        try:
            c = float(data["conf"][i])
        except (TypeError, ValueError):
            continue
        if c > 0:
            confs.append(c / 100.0)
    text = "\n".join(" ".join(ws) for _, ws in sorted(lines.items(), key=lambda kv: kv[0]))
    if not text:
        return "", 0.0
    conf = sum(confs) / len(confs) if confs else NO_WORD_CONF
    return text, min(1.0, conf)


class TesseractEngine(OcrEngine):
    name = "tesseract"

    def __init__(self, lang: Optional[str] = None, config: Optional[str] = None):
        self.lang = lang or _tess_lang()
        self.config = config or _tess_config()

    def recognize(self, image_path: Path) -> OcrOutput:
        try:
            with Image.open(str(image_path)) as img:
                data = pytesseract.image_to_data(img, lang=self.lang, config=self.config,
                                                 output_type=pytesseract.Output.DICT)
        except pytesseract.TesseractNotFoundError as e:
            raise OcrUnavailableError("tesseract binary not found") from e
        except (pytesseract.TesseractError, RuntimeError, OSError) as e:
            raise OcrUnavailableError(f"tesseract_error:{e}") from e
        text, conf = _tess_lines(data)
        return OcrOutput(text.replace("\u00a0", " "), conf, self.name)


# --------- PaddleOCR ---------

_PADDLE_OCR = None  # type: ignore

def _get_paddle(lang: str):
    global _PADDLE_OCR
    if _PADDLE_OCR is None:
        from paddleocr import PaddleOCR  # optional, heavy: import on first use
        _PADDLE_OCR = PaddleOCR(lang=lang, use_angle_cls=True, show_log=False)
    return _PADDLE_OCR


class PaddleEngine(OcrEngine):
    name = "paddle"

    def __init__(self, lang: Optional[str] = None):
        self.lang = lang or _paddle_lang()

    def recognize(self, image_path: Path) -> OcrOutput:
        try:
            ocr = _get_paddle(self.lang)
            with Image.open(str(image_path)) as img:
                arr = np.array(img.convert("RGB"))
            result = ocr.ocr(arr, cls=True)
        except ImportError as e:
            raise OcrUnavailableError("paddleocr is not installed") from e
        except (RuntimeError, OSError, ValueError) as e:
            raise OcrUnavailableError(f"paddle_error:{e}") from e

        lines: List[str] = []
        scores: List[float] = []
        # result: list[pages] -> list[ [bbox, (text, score)], ... ]
        if result and result[0]:
            for det in result[0]:
                text, s = det[1]
                if text and s >= PADDLE_MIN_SCORE:
                    lines.append(text)
                    scores.append(float(s))
        conf = sum(scores) / len(scores) if scores else 0.0
        return OcrOutput("\n".join(lines).strip(), conf, self.name)


# --------- Mock ---------

MOCK_JOB_CARD = """Marshall Salisbury BMW Service
Authorised Workshop
JOB CARD
Vehicle name
WIP No. 88921
Invoice Name & Address
Fuel reading
For use by Service/BS
Job No. 554333
For use by Service/BS
Raised by operator: 0017
Chassis No. XYZ123456
Engine No. AB21 CDE
2.0 Sedan
Date
Customer Order No. 100020
Date. 10/03 29/02/2024
V.S. B. No. V.S.B. No. 123
Date Job Date Time Due Due Out
Color Color Last
Date Josn Time Due 060/2025
SUPPLY PART 12 20 Sedan 10/03/2022 10/0252 11.00
SUPPLY VEHICLE SUPPLY JUE 11/08/2625
SUPPLY TYRE CHECK 11/08/2025
Description of Work Carieed 42 175,00
Tyre Check"""


class MockEngine(OcrEngine):
    """Sample job card text, for demos and tests without an OCR backend."""
    name = "mock"

    def __init__(self, text: str = MOCK_JOB_CARD, confidence: float = 0.85):
        self.text = text
        self.confidence = confidence

    def recognize(self, image_path: Path) -> OcrOutput:
        return OcrOutput(self.text, self.confidence, self.name)


ENGINES = {
    "tesseract": TesseractEngine,
    "paddle":    PaddleEngine,
    "mock":      MockEngine,
}


def get_engine(name: Optional[str] = None) -> OcrEngine:
    key = (name or "").strip().lower()
    if key in ("", "auto"):
        key = _provider()
    if key == "auto":
        key = DEFAULT_PROVIDER
    try:
        return ENGINES[key]()
    except KeyError:
        raise ValueError(f"Unsupported OCR provider: {key}") from None
