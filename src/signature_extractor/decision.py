# src/signature_extractor/decision.py

import logging
from typing import List, Optional, Tuple

import cv2
import numpy as np

from .config import Parameters
from .features import find_contours
from .models import (
    STRATEGY_FALLBACK_CONTOUR,
    STRATEGY_MERGED,
    STRATEGY_ROI,
    Candidate,
    Rect,
    round_half_up,
    union_rects,
)

logger = logging.getLogger(__name__)


def merge_candidates(candidates: List[Candidate]) -> Optional[Rect]:
    """Encloses every accepted candidate; one signature is often several strokes."""
    return union_rects(c.rect for c in candidates if c.accepted)


def widest_flat_contour(binary_mask: np.ndarray) -> Optional[Rect]:
    """Unfiltered contour maximizing w - 2h; the first one wins ties."""
    best, best_score = None, None
    for contour in find_contours(binary_mask):
        x, y, w, h = cv2.boundingRect(contour)
        score = w - 2 * h
        if best_score is None or score > best_score:
            best, best_score = Rect.from_xywh(x, y, w, h), score
    return best


def aggregate(
    candidates: List[Candidate], binary_mask: np.ndarray, params: Parameters
) -> Tuple[Rect, str]:
    """
    Chooses the final rectangle inside the ROI mask.

    1. Union of accepted candidates, padded by merge_padding_frac.
    2. Otherwise the widest-flattest contour, padded by fallback_padding_frac.
    3. Otherwise (blank mask) the whole ROI.
    """
    H, W = binary_mask.shape[:2]
    longest = max(W, H)

    merged = merge_candidates(candidates)
    if merged is not None:
        pad = round_half_up(params.merge_padding_frac * longest)
        return merged.pad(pad).clamp(W, H), STRATEGY_MERGED

    fallback = widest_flat_contour(binary_mask)
    if fallback is not None:
        logger.info("No signature-like contour, falling back to widest contour %s", fallback)
        pad = round_half_up(params.fallback_padding_frac * longest)
        return fallback.pad(pad).clamp(W, H), STRATEGY_FALLBACK_CONTOUR

    logger.info("Blank mask, returning the whole ROI")
    return Rect(0, 0, W, H).clamp(W, H), STRATEGY_ROI


def crop(img: np.ndarray, rect: Rect) -> np.ndarray:
    """
    Copies `rect` out of `img` into a new array of at least 1x1 pixels.
    Areas outside the source are left white.
    """
    w = max(1, round_half_up(rect.x1 - rect.x0))
    h = max(1, round_half_up(rect.y1 - rect.y0))
    out = np.full((h, w) + img.shape[2:], 255, dtype=img.dtype)

    src_h, src_w = img.shape[:2]
    x0, y0 = max(0, rect.x0), max(0, rect.y0)
    x1, y1 = min(src_w, rect.x0 + w), min(src_h, rect.y0 + h)
    if x1 > x0 and y1 > y0:
        out[y0 - rect.y0:y1 - rect.y0, x0 - rect.x0:x1 - rect.x0] = img[y0:y1, x0:x1]
    return out
