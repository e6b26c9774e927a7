import cv2
import pytest
import numpy as np

from signature_extractor.preprocess import (
    binarize,
    exclude_right_region,
    line_kernel_width,
    remove_horizontal_lines,
    to_gray,
)


def test_dark_ink_on_white_becomes_foreground(page_factory):
    page = page_factory(200, 100)
    cv2.rectangle(page, (50, 40), (149, 59), (0, 0, 0), -1)

    bw = binarize(page)
    assert bw.shape == (100, 200)
    assert set(np.unique(bw)) <= {0, 255}
    assert bw[50, 100] == 255
    assert bw[5, 5] == 0


def test_light_ink_on_dark_page_keeps_ink_as_foreground():
    page = np.zeros((100, 200), dtype=np.uint8)
    cv2.rectangle(page, (50, 40), (149, 59), 255, -1)

    bw = binarize(page)
    assert bw[50, 100] == 255
    assert bw[5, 5] == 0


def test_blank_page_gives_empty_mask(page_factory):
    bw = binarize(page_factory(120, 80))
    assert not bw.any()


def test_to_gray_accepts_bgra_and_gray():
    bgra = np.full((10, 20, 4), 255, dtype=np.uint8)
    assert to_gray(bgra).shape == (10, 20)
    gray = np.zeros((10, 20), dtype=np.uint8)
    assert to_gray(gray) is gray


def test_line_kernel_width_has_floor_of_25():
    assert line_kernel_width(40) == 25
    assert line_kernel_width(800) == 200
    assert line_kernel_width(800, 0.5) == 400
    # 26.5 rounds up
    assert line_kernel_width(106) == 27


def test_long_rule_removed_short_strokes_kept():
    mask = np.zeros((200, 800), dtype=np.uint8)
    cv2.rectangle(mask, (20, 149), (760, 150), 255, -1)
    cv2.rectangle(mask, (100, 20), (104, 80), 255, -1)
    cv2.rectangle(mask, (300, 39), (420, 40), 255, -1)

    cleaned = remove_horizontal_lines(mask, 0.25)
    assert not cleaned[145:156, :].any()
    assert (cleaned[20:81, 100:105] == 255).all()
    # 120px is shorter than the 200px kernel
    assert (cleaned[40, 300:421] == 255).all()


@pytest.mark.parametrize("width", [100, 800, 804, 808])
def test_full_rule_leaves_no_residue_for_any_kernel_parity(width):
    mask = np.zeros((60, width), dtype=np.uint8)
    cv2.rectangle(mask, (5, 30), (width - 6, 31), 255, -1)

    cleaned = remove_horizontal_lines(mask, 0.25)
    assert not cleaned.any()


def test_input_mask_is_not_modified():
    mask = np.zeros((50, 400), dtype=np.uint8)
    cv2.line(mask, (0, 25), (399, 25), 255, 1)
    before = mask.copy()
    remove_horizontal_lines(mask)
    exclude_right_region(mask, 0.2)
    assert np.array_equal(mask, before)


def test_right_fraction_is_blanked():
    mask = np.full((10, 100), 255, dtype=np.uint8)
    masked = exclude_right_region(mask, 0.20)
    assert (masked[:, :80] == 255).all()
    assert not masked[:, 80:].any()


def test_zero_fraction_passes_through():
    mask = np.full((10, 100), 255, dtype=np.uint8)
    assert exclude_right_region(mask, 0.0) is mask
