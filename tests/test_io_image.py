import tempfile
from unittest.mock import patch

import pytest
from PIL import Image

from jobscan.errors import ImageProcessingError
from jobscan.extractors.io_image import ScanOptions, preprocess, preprocessed, FALLBACK_QUALITY


@pytest.fixture
def scratch(tmp_path, monkeypatch):
    d = tmp_path / "scratch"
    d.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(d))
    return d


def test_resize_to_target_width_keeps_aspect(photo, scratch):
    out = preprocess(photo, ScanOptions(target_width=600))
    assert (out.width, out.height) == (600, 400)
    assert out.passes == 1
    assert out.path.suffix == ".jpg"
    assert out.path.parent == scratch
    assert out.size == out.path.stat().st_size
    with Image.open(out.path) as im:
        assert im.size == (600, 400)
        assert im.format == "JPEG"
    assert photo.exists()


def test_small_images_are_scaled_up(tmp_path, scratch):
    src = tmp_path / "plate.png"
    Image.new("RGB", (400, 100), "white").save(src)
    out = preprocess(src, ScanOptions(target_width=1600))
    assert (out.width, out.height) == (1600, 400)


def test_contrast_flag_controls_mode(photo, scratch):
    with Image.open(preprocess(photo, ScanOptions(enhance_contrast=True)).path) as im:
        assert im.mode == "L"
    with Image.open(preprocess(photo, ScanOptions(enhance_contrast=False)).path) as im:
        assert im.mode == "RGB"


def test_one_extra_pass_when_over_budget(tmp_path, scratch):
    src = tmp_path / "noisy.png"
    Image.effect_noise((1600, 1200), 120).save(src)
    out = preprocess(src, ScanOptions(max_file_size=1000))
    # still over budget is fine: only one recompress is attempted
    assert out.passes == 2
    assert out.quality == FALLBACK_QUALITY


def test_no_extra_pass_within_budget(photo, scratch):
    out = preprocess(photo, ScanOptions(max_file_size=50 * 1024 * 1024))
    assert out.passes == 1
    assert out.quality == 0.8


def test_defaults(photo, scratch):
    out = preprocess(photo)
    assert out.width == 1600


def test_unreadable_image(tmp_path, scratch):
    bad = tmp_path / "bad.jpg"
    bad.write_bytes(b"not an image at all")
    with pytest.raises(ImageProcessingError):
        preprocess(bad)
    assert list(scratch.iterdir()) == []
    assert bad.exists()


def test_missing_image(tmp_path, scratch):
    with pytest.raises(ImageProcessingError):
        preprocess(tmp_path / "nope.png")
    assert list(scratch.iterdir()) == []


def test_preprocessed_context_removes_artifact(photo, scratch):
    with preprocessed(photo, ScanOptions(target_width=300)) as out:
        assert out.path.exists()
        path = out.path
    assert not path.exists()
    assert photo.exists()


@pytest.mark.parametrize("kwargs", [
    {"target_width": 0},
    {"target_width": -5},
    {"quality": 0},
    {"quality": 1.5},
    {"max_file_size": 0},
])
def test_invalid_options(kwargs):
    with pytest.raises(ValueError):
        ScanOptions(**kwargs)


def test_low_quality_skips_extra_pass(tmp_path, scratch):
    src = tmp_path / "noisy.png"
    Image.effect_noise((1600, 1200), 120).save(src)
    out = preprocess(src, ScanOptions(quality=0.3, max_file_size=1000))
    assert out.passes == 1
    assert out.quality == 0.3
    assert out.size == out.path.stat().st_size


def test_unexpected_error_still_removes_artifact(photo, scratch):
    with patch("jobscan.extractors.io_image._resize", side_effect=MemoryError):
        with pytest.raises(MemoryError):
            preprocess(photo)
    assert list(scratch.iterdir()) == []
