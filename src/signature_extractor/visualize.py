# src/signature_extractor/visualize.py

import os
from typing import List

import cv2
import numpy as np

from .models import Candidate, Rect
from .preprocess import to_gray

TAG_COLORS = {
    "accepted": (0, 255, 0),
    "rejected-squarelike": (0, 165, 255),
    "rejected-denserect": (255, 0, 255),
    "rejected-other": (128, 128, 128),
}


def overlay_candidates(roi_img: np.ndarray, candidates: List[Candidate], final_rect: Rect) -> np.ndarray:
    """Draws candidate boxes colored by tag and the final rect (red, thick)."""
    out = cv2.cvtColor(to_gray(roi_img), cv2.COLOR_GRAY2BGR)

    for c in candidates:
        r = c.rect
        cv2.rectangle(out, (r.x0, r.y0), (r.x1 - 1, r.y1 - 1), TAG_COLORS.get(c.tag, (128, 128, 128)), 1)

    cv2.rectangle(out, (final_rect.x0, final_rect.y0), (final_rect.x1 - 1, final_rect.y1 - 1), (0, 0, 255), 2)
    return out


def save_debug_images(
    base_name: str,
    output_dir: str,
    roi_img: np.ndarray,
    binary_mask: np.ndarray,
    candidates: List[Candidate],
    final_rect: Rect,
) -> List[str]:
    """Saves the mask used for contouring and the candidate overlay."""
    os.makedirs(output_dir, exist_ok=True)

    mask_path = os.path.join(output_dir, f"{base_name}_debug_mask.png")
    cv2.imwrite(mask_path, binary_mask)

    overlay_path = os.path.join(output_dir, f"{base_name}_debug_overlay.png")
    cv2.imwrite(overlay_path, overlay_candidates(roi_img, candidates, final_rect))
    return [mask_path, overlay_path]
