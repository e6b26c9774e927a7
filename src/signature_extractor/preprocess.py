# src/signature_extractor/preprocess.py

import cv2
import numpy as np

from .models import round_half_up


def to_gray(img: np.ndarray) -> np.ndarray:
    """Single-channel intensity for gray, BGR or BGRA input."""
    if img.ndim == 2:
        return img
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2GRAY)
    if img.shape[2] == 1:
        return img[:, :, 0]
    return cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)


def binarize(img: np.ndarray) -> np.ndarray:
    """
    Blur + Otsu, then flip polarity if needed so ink is white (255) on black.
    Otsu does not say which class ends up high; ink is assumed to be the
    minority, so a mask with mean above mid-range gets inverted.
    """
    gray = to_gray(img)
    blur = cv2.GaussianBlur(gray, (3, 3), 0)
    _, bw = cv2.threshold(blur, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
    if cv2.mean(bw)[0] > 127:
        bw = cv2.bitwise_not(bw)
    return bw


def line_kernel_width(width: int, kernel_frac: float = 0.25) -> int:
    return max(25, round_half_up(width * kernel_frac))


def remove_horizontal_lines(binary_mask: np.ndarray, kernel_frac: float = 0.25) -> np.ndarray:
    """
    Removes long printed horizontal rules. Opening with a wide 1-pixel-high
    kernel keeps only runs at least that long; those are subtracted.
    The dilation uses the mirrored anchor of the erosion so an even kernel
    width does not shift the reconstructed rule.
    """
    k = line_kernel_width(binary_mask.shape[1], kernel_frac)
    kernel = cv2.getStructuringElement(cv2.MORPH_RECT, (k, 1))
    anchor = k // 2
    eroded = cv2.erode(binary_mask, kernel, anchor=(anchor, 0))
    lines = cv2.dilate(eroded, kernel, anchor=(k - 1 - anchor, 0))
    return cv2.subtract(binary_mask, lines)


def exclude_right_region(binary_mask: np.ndarray, frac: float = 0.20) -> np.ndarray:
    """Blanks the rightmost `frac` of the columns (date/stamp area)."""
    if frac <= 0:
        return binary_mask
    h, w = binary_mask.shape[:2]
    x_cut = round_half_up(w * (1 - frac))
    masked = np.zeros_like(binary_mask)
    masked[:, :x_cut] = binary_mask[:, :x_cut]
    return masked
