"""Unit tests for image fitting and decoding."""

import itertools

import pytest

from conftest import png_bytes
from images import ImageOmitted, fit_image, load_image
from models import ImageRef

EPS = 1e-9


@pytest.mark.parametrize(
    "width,height,max_w,max_h",
    list(itertools.product([1, 37, 300, 4000], [1, 25, 200, 3000], [10, 35, 40], [None, 5, 25])),
)
def test_fit_preserves_ratio_and_bounds(width, height, max_w, max_h):
    w, h = fit_image(width, height, max_w, max_h)
    assert abs(w / h - width / height) < 1e-6
    assert w <= max_w + EPS
    if max_h is not None:
        assert h <= max_h + EPS


def test_width_constrained_when_height_fits():
    assert fit_image(300, 100, 35, 25) == pytest.approx((35, 35 / 3))


def test_height_constraint_recomputes_width():
    w, h = fit_image(100, 300, 40, 25)
    assert h == pytest.approx(25)
    assert w == pytest.approx(25 / 3)


def test_upscales_small_images_to_box_width():
    assert fit_image(10, 10, 30) == pytest.approx((30, 30))


@pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (None, 10), (-5, 10), (float("nan"), 10)])
def test_bad_intrinsic_size_is_omitted(width, height):
    with pytest.raises(ImageOmitted):
        fit_image(width, height, 35, 25)


def test_load_image_reads_size():
    reader = load_image(ImageRef(png_bytes(120, 60)))
    assert reader.getSize() == (120, 60)


def test_load_image_missing():
    with pytest.raises(ImageOmitted):
        load_image(None)
    with pytest.raises(ImageOmitted):
        load_image(ImageRef(b""))


def test_load_image_corrupt_bytes():
    with pytest.raises(ImageOmitted):
        load_image(ImageRef(b"definitely not an image"))
