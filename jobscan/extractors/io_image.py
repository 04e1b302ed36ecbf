# jobscan/extractors/io_image.py
from __future__ import annotations
import logging
import os
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from PIL import Image, ImageOps

from ..errors import ImageProcessingError

logger = logging.getLogger(__name__)

ImageRef = Union[str, os.PathLike]

DEFAULT_TARGET_WIDTH = 1600
DEFAULT_QUALITY = 0.8
DEFAULT_MAX_FILE_SIZE = 2 * 1024 * 1024   # 2 MiB
FALLBACK_QUALITY = 0.6


@dataclass(frozen=True)
class ScanOptions:
    target_width: int = DEFAULT_TARGET_WIDTH
    quality: float = DEFAULT_QUALITY
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    enhance_contrast: bool = True
    deskew: bool = True          # accepted, no effect yet

    def __post_init__(self):
        if not isinstance(self.target_width, int) or self.target_width <= 0:
            raise ValueError(f"target_width must be a positive int, got {self.target_width!r}")
        if not (0 < self.quality <= 1):
            raise ValueError(f"quality must be in (0, 1], got {self.quality!r}")
        if not isinstance(self.max_file_size, int) or self.max_file_size <= 0:
            raise ValueError(f"max_file_size must be a positive int, got {self.max_file_size!r}")


@dataclass(frozen=True)
class ProcessedImage:
    path: Path
    width: int
    height: int
    size: int        # bytes on disk
    quality: float   # quality of the last encode
    passes: int      # 1, or 2 when the size budget forced a recompress

    def info(self) -> dict:
        return {"width": self.width, "height": self.height, "bytes": self.size,
                "quality": self.quality, "passes": self.passes}


def _load(src: Path, enhance_contrast: bool) -> Image.Image:
    with Image.open(str(src)) as im:
        im.load()
        im = ImageOps.exif_transpose(im)
    if enhance_contrast:
        # grayscale + stretch for faded job cards
        return ImageOps.autocontrast(ImageOps.grayscale(im))
    return im.convert("RGB")


def _resize(img: Image.Image, width: int) -> Image.Image:
    if img.width == width:
        return img
    height = max(1, round(img.height * width / img.width))
    return img.resize((width, height), Image.Resampling.LANCZOS)


def _encode(img: Image.Image, dest: Path, quality: float) -> int:
    img.save(str(dest), format="JPEG", quality=int(round(quality * 100)), optimize=True)
    return dest.stat().st_size


def preprocess(image: ImageRef, options: Optional[ScanOptions] = None) -> ProcessedImage:
    """
    Resize to options.target_width (aspect preserved) and JPEG-encode into a
    new temp file. One extra pass at FALLBACK_QUALITY if the file is still over
    options.max_file_size and options.quality is above FALLBACK_QUALITY.
    The source file is left alone.
    """
    opts = options or ScanOptions()
    src = Path(image)
    fd, tmp = tempfile.mkstemp(prefix="jobscan-", suffix=".jpg")
    os.close(fd)
    dest = Path(tmp)
    try:
        img = _resize(_load(src, opts.enhance_contrast), opts.target_width)
        logger.debug("resized %s to %dx%d", src, img.width, img.height)

        quality, passes = opts.quality, 1
        size = _encode(img, dest, quality)
        if size > opts.max_file_size:
            if opts.quality > FALLBACK_QUALITY:
                logger.info("processed image %d bytes > %d, recompressing at %.1f",
                            size, opts.max_file_size, FALLBACK_QUALITY)
                quality, passes = FALLBACK_QUALITY, 2
                size = _encode(img, dest, quality)
            else:
                # already at or below the fallback quality: a second pass can't shrink it
                logger.info("processed image %d bytes > %d at quality %.1f, keeping it",
                            size, opts.max_file_size, quality)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        dest.unlink(missing_ok=True)
        raise ImageProcessingError(f"cannot preprocess {src}: {type(e).__name__}: {e}") from e
    except BaseException:
        dest.unlink(missing_ok=True)
        raise

    logger.info("preprocessed %s -> %s (%d bytes, %d pass(es))", src, dest, size, passes)
    return ProcessedImage(dest, img.width, img.height, size, quality, passes)


@contextmanager
def preprocessed(image: ImageRef, options: Optional[ScanOptions] = None) -> Iterator[ProcessedImage]:
    out = preprocess(image, options)
    try:
        yield out
    finally:
        out.path.unlink(missing_ok=True)
