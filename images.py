from __future__ import annotations

import io
import logging
import math

from reportlab.lib.utils import ImageReader

from layout import RenderError
from models import ImageRef

logger = logging.getLogger(__name__)


class ImageOmitted(RenderError):
    """The image cannot be drawn; the document is produced without it."""


def fit_image(width, height, max_width, max_height=None) -> tuple[float, float]:
    """
    Scale (width, height) to fit max_width, then max_height if given,
    keeping the aspect ratio.
    """
    try:
        iw = float(width or 0)
        ih = float(height or 0)
    except (TypeError, ValueError):
        raise ImageOmitted(f"Bad intrinsic size: {width!r}x{height!r}")
    if not (math.isfinite(iw) and math.isfinite(ih)) or iw <= 0 or ih <= 0:
        raise ImageOmitted(f"Bad intrinsic size: {width!r}x{height!r}")

    ratio = iw / ih
    w = float(max_width)
    h = w / ratio
    if max_height is not None and h > max_height:
        h = float(max_height)
        w = h * ratio
    return w, h


def load_image(ref: ImageRef | None) -> ImageReader:
    if ref is None or not ref.data:
        raise ImageOmitted("No image data")
    try:
        reader = ImageReader(io.BytesIO(ref.data))
        reader.getSize()
    except Exception as e:
        logger.debug("Image could not be decoded: %s", e)
        raise ImageOmitted(f"Undecodable image ({e})") from e
    return reader
