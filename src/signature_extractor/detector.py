# src/signature_extractor/detector.py

import asyncio
import logging
from typing import Iterable, Optional

import numpy as np

from . import anchor
from . import decision
from . import features
from . import preprocess
from . import visualize
from .config import Parameters
from .models import ExtractionResult, TextItem, Viewport
from .runtime import VisionRuntime

logger = logging.getLogger(__name__)


def extract_signature(
    page: np.ndarray,
    text_items: Optional[Iterable[TextItem]] = None,
    viewport: Optional[Viewport] = None,
    params: Optional[Parameters] = None,
    debug_dir: Optional[str] = None,
    debug_name: str = "page",
) -> ExtractionResult:
    """
    Main pipeline for signature extraction on one rendered page.
    Anchor/ROI, binarization, line removal, right-side masking, contour
    classification, aggregation and crop. Deterministic for identical inputs.
    """
    params = params or Parameters()
    viewport = viewport or Viewport.for_image(page)

    # 1. Region of interest
    roi, anchor_y = anchor.locate_roi(text_items or (), viewport, params)
    roi_img = decision.crop(page, roi)

    # 2. Preprocessing
    bw = preprocess.binarize(roi_img)
    no_lines = preprocess.remove_horizontal_lines(bw, params.horizontal_line_kernel_frac)
    masked = preprocess.exclude_right_region(no_lines, params.exclude_right_frac)

    # 3. Candidates
    candidates = features.extract_candidates(masked, params)

    # 4. Decision
    rect, strategy = decision.aggregate(candidates, masked, params)
    result = ExtractionResult(
        image=decision.crop(roi_img, rect),
        roi=roi,
        rect=rect,
        strategy=strategy,
        anchor_y=anchor_y,
        candidates=candidates,
    )
    logger.debug(
        "ROI %s, %d/%d candidates accepted, strategy=%s, rect=%s",
        roi, len(result.accepted), len(candidates), strategy, rect,
    )

    # 5. Visualization (optional)
    if debug_dir:
        visualize.save_debug_images(debug_name, debug_dir, roi_img, masked, candidates, rect)

    return result


async def extract_signature_async(
    page: np.ndarray,
    text_items: Optional[Iterable[TextItem]] = None,
    viewport: Optional[Viewport] = None,
    params: Optional[Parameters] = None,
    runtime: Optional[VisionRuntime] = None,
    debug_dir: Optional[str] = None,
    debug_name: str = "page",
) -> ExtractionResult:
    """
    Waits (bounded by readiness_timeout_ms) for the vision runtime, then runs
    extract_signature off the event loop. Raises EnvironmentNotReady on timeout.
    """
    params = params or Parameters()
    runtime = runtime or VisionRuntime()
    await asyncio.to_thread(runtime.wait_until_ready, params.readiness_timeout_ms)
    return await asyncio.to_thread(
        extract_signature, page, text_items, viewport, params, debug_dir, debug_name
    )
