# src/signature_extractor/features.py

from typing import List, Tuple

import cv2
import numpy as np

from .config import Parameters
from .models import (
    ACCEPTED,
    REJECTED_DENSERECT,
    REJECTED_OTHER,
    REJECTED_SQUARELIKE,
    Candidate,
    ContourFeatures,
    Rect,
)

EPS = 1e-3
SCORE_EPS = 1e-4


def find_contours(binary_mask: np.ndarray) -> List[np.ndarray]:
    """Outer contours of the white (ink) shapes, in OpenCV's deterministic order."""
    contours, _ = cv2.findContours(binary_mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    return list(contours)


def contour_features(contour: np.ndarray) -> ContourFeatures:
    """
    Computes the geometric features used to tell handwriting from print.

    Args:
        contour (np.ndarray): A contour as returned by cv2.findContours.

    Returns:
        ContourFeatures: area, bounding box, perimeter, fill ratio
        (area / bbox area), aspect ratio (w / h) and thinness
        (area / perimeter^2).
    """
    area = float(cv2.contourArea(contour))
    x, y, w, h = cv2.boundingRect(contour)
    perimeter = float(cv2.arcLength(contour, True))
    return ContourFeatures(
        area=area,
        bbox=Rect.from_xywh(x, y, w, h),
        perimeter=perimeter,
        fill=area / (w * h + EPS),
        aspect=w / (h + EPS),
        thinness=area / (perimeter * perimeter + EPS),
    )


def is_square_like(f: ContourFeatures) -> bool:
    # stamps, boxes, check marks
    return 0.8 < f.aspect < 1.25 and f.fill > 0.35


def is_dense_rect(f: ContourFeatures) -> bool:
    # solid printed blocks, logos
    return f.fill > 0.55 and 0.5 < f.aspect < 2.0


def classify_contour(f: ContourFeatures, roi_width: int, params: Parameters) -> Tuple[str, float]:
    """Returns (tag, score); score is 0.0 for rejected shapes."""
    square_like = is_square_like(f)
    dense_rect = is_dense_rect(f)
    w = f.bbox.width
    likely = (
        (f.aspect > params.min_aspect_for_signature or w > 0.25 * roi_width)
        and f.fill < params.max_fill_for_signature
        and not square_like
        and not dense_rect
    )
    if likely:
        # wide, sparse, thin shapes (cursive) beat compact glyph blocks
        return ACCEPTED, w * (1 - f.fill) * (1 / (f.thinness + SCORE_EPS))
    if square_like:
        return REJECTED_SQUARELIKE, 0.0
    if dense_rect:
        return REJECTED_DENSERECT, 0.0
    return REJECTED_OTHER, 0.0


def extract_candidates(binary_mask: np.ndarray, params: Parameters) -> List[Candidate]:
    """
    Classifies every outer shape of the mask that is larger than the speckle
    limit. Rejected shapes are kept with their tag for diagnostics; callers
    aggregate the accepted ones.

    Args:
        binary_mask (np.ndarray): Ink-white mask after line removal and masking.
        params (Parameters): Thresholds (min_area_fraction, max fill, min aspect).

    Returns:
        List[Candidate]: One entry per non-speckle contour, in contour order.
    """
    h, w = binary_mask.shape[:2]
    min_area = params.min_area_fraction * (w * h)

    candidates = []
    for contour in find_contours(binary_mask):
        f = contour_features(contour)
        if f.area < min_area:
            continue
        tag, score = classify_contour(f, w, params)
        candidates.append(Candidate(rect=f.bbox, score=float(score), tag=tag, features=f))
    return candidates
