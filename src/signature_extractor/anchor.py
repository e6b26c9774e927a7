# src/signature_extractor/anchor.py

import logging
import math
import re
from typing import Iterable, Optional, Tuple

from .config import Parameters
from .models import Rect, TextItem, Transform, Viewport

logger = logging.getLogger(__name__)

SIGNATURE_KEYWORDS = re.compile(
    r"firma|firmado|signature|firmante|firma:|firmado por", re.IGNORECASE
)


def compose(m1: Transform, m2: Transform) -> Transform:
    """Affine product m1 x m2, i.e. m2 is applied first (pdf.js Util.transform)."""
    return (
        m1[0] * m2[0] + m1[2] * m2[1],
        m1[1] * m2[0] + m1[3] * m2[1],
        m1[0] * m2[2] + m1[2] * m2[3],
        m1[1] * m2[2] + m1[3] * m2[3],
        m1[0] * m2[4] + m1[2] * m2[5] + m1[4],
        m1[1] * m2[4] + m1[3] * m2[5] + m1[5],
    )


def find_anchor_y(items: Iterable[TextItem], viewport: Viewport) -> Optional[float]:
    """
    Page-space y of the lowest signature keyword on the page, or None.
    Pixel space is y-down, so the lowest occurrence has the greatest y.
    """
    best = None
    for item in items or ():
        if not item.text or not SIGNATURE_KEYWORDS.search(item.text):
            continue
        y = compose(viewport.transform, item.transform)[5]
        if not math.isfinite(y):
            continue
        if best is None or y > best:
            best = y
    return best


def anchor_roi(anchor_y: float, viewport: Viewport, params: Parameters) -> Rect:
    W, H = viewport.width, viewport.height
    y0 = max(0.0, anchor_y - params.anchor_above_pad_frac * H)
    y1 = min(H, anchor_y + params.anchor_below_pad_frac * H)
    return Rect.from_floats(0, y0, W, y1).clamp(W, H)


def bottom_roi(viewport: Viewport, frac: float = 0.35) -> Rect:
    W, H = viewport.width, viewport.height
    y0 = max(0.0, H * (1 - frac))
    return Rect.from_floats(0, y0, W, H * 0.98).clamp(W, H)


def locate_roi(
    items: Iterable[TextItem], viewport: Viewport, params: Parameters
) -> Tuple[Rect, Optional[float]]:
    """Returns (roi, anchor_y); anchor_y is None when the bottom band was used."""
    anchor_y = find_anchor_y(items, viewport)
    if anchor_y is None:
        logger.debug("No signature keyword found, using bottom %.0f%% band",
                     params.bottom_fallback_frac * 100)
        return bottom_roi(viewport, params.bottom_fallback_frac), None
    logger.debug("Signature anchor at y=%.1f", anchor_y)
    return anchor_roi(anchor_y, viewport, params), anchor_y
