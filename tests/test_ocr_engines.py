from unittest.mock import MagicMock, patch

import pytest
import pytesseract

from jobscan.errors import OcrUnavailableError
from jobscan.extractors.ocr_engines import (
    MockEngine, PaddleEngine, TesseractEngine, MOCK_JOB_CARD, _tess_lines, get_engine,
)

TESS_DATA = {
    "text":      ["", "Job", "No.", "554333", "WIP", "88921"],
    "block_num": [1, 1, 1, 1, 1, 1],
    "par_num":   [1, 1, 1, 1, 2, 2],
    "line_num":  [0, 1, 1, 1, 1, 1],
    "conf":      ["-1", "90", "80", "70", "95", "85"],
}


def test_tess_lines_rebuilds_text_and_averages_conf():
    text, conf = _tess_lines(TESS_DATA)
    assert text == "Job No. 554333\nWIP 88921"
    assert conf == pytest.approx(0.84)


def test_tess_lines_without_word_conf():
    data = dict(TESS_DATA, conf=["-1"] * 6)
    text, conf = _tess_lines(data)
    assert text
    assert conf == 0.5


def test_tess_lines_empty():
    assert _tess_lines({"text": [], "block_num": [], "par_num": [], "line_num": [], "conf": []}) == ("", 0.0)


def test_tesseract_engine(photo):
    with patch("jobscan.extractors.ocr_engines.pytesseract.image_to_data", return_value=TESS_DATA) as m:
        out = TesseractEngine(lang="eng", config="--psm 6")(photo)
    assert out.text == "Job No. 554333\nWIP 88921"
    assert out.engine == "tesseract"
    assert m.call_args.kwargs["lang"] == "eng"


def test_tesseract_missing_binary(photo):
    with patch("jobscan.extractors.ocr_engines.pytesseract.image_to_data",
               side_effect=pytesseract.TesseractNotFoundError()):
        with pytest.raises(OcrUnavailableError):
            TesseractEngine()(photo)


def test_tesseract_env_config(monkeypatch):
    monkeypatch.setenv("OCR_LANG", "eng+fra")
    monkeypatch.setenv("OCR_PSM", "7")
    eng = TesseractEngine()
    assert eng.lang == "eng+fra"
    assert "--psm 7" in eng.config


def test_paddle_engine_filters_low_scores(photo):
    fake = MagicMock()
    box = [[0, 0], [1, 0], [1, 1], [0, 1]]
    fake.ocr.return_value = [[[box, ("WIP No. 123", 0.9)], [box, ("smudge", 0.3)], [box, ("Job No. 456", 0.7)]]]
    with patch("jobscan.extractors.ocr_engines._get_paddle", return_value=fake):
        out = PaddleEngine()(photo)
    assert out.text == "WIP No. 123\nJob No. 456"
    assert out.confidence == pytest.approx(0.8)
    assert out.engine == "paddle"


def test_paddle_not_installed(photo):
    with patch("jobscan.extractors.ocr_engines._get_paddle", side_effect=ImportError("paddleocr")):
        with pytest.raises(OcrUnavailableError):
            PaddleEngine()(photo)


def test_mock_engine(photo):
    out = MockEngine()(photo)
    assert out.text == MOCK_JOB_CARD
    assert out.confidence == 0.85


def test_get_engine(monkeypatch):
    monkeypatch.delenv("OCR_PROVIDER", raising=False)
    assert isinstance(get_engine(), TesseractEngine)
    assert isinstance(get_engine("mock"), MockEngine)
    assert isinstance(get_engine("PADDLE"), PaddleEngine)
    monkeypatch.setenv("OCR_PROVIDER", "mock")
    assert isinstance(get_engine(), MockEngine)
    assert isinstance(get_engine("auto"), MockEngine)
    with pytest.raises(ValueError):
        get_engine("vision")
