# src/signature_extractor/render.py

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

import cv2
import fitz  # PyMuPDF
import numpy as np
from PIL import Image

from .models import TextItem, Viewport

logger = logging.getLogger(__name__)

PDF_SUFFIXES = {".pdf"}
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff"}


@dataclass
class RenderedPage:
    """A page raster (BGR) with its optional text layout and viewport."""
    image: np.ndarray
    viewport: Viewport
    text_items: List[TextItem] = field(default_factory=list)
    source: str = ""
    page_number: int = 1


def resolve_page_index(page_index: int, page_count: int) -> int:
    """-1 (or any negative index) means the last page; past-the-end clamps to it."""
    if page_count <= 0:
        raise ValueError("PDF has no pages.")
    if page_index < 0:
        return page_count - 1
    return min(page_index, page_count - 1)


def extract_text_items(page: "fitz.Page") -> List[TextItem]:
    """
    One TextItem per text span. The transform places the span's baseline
    origin in PyMuPDF page space, which is already y-down.
    """
    items: List[TextItem] = []
    for block in page.get_text("dict").get("blocks", []):
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text.strip():
                    continue
                size = float(span.get("size", 0.0))
                ox, oy = span.get("origin", (0.0, 0.0))
                items.append(TextItem(text=text, transform=(size, 0.0, 0.0, size, float(ox), float(oy))))
    return items


def render_page(pdf_path: Union[str, Path], page_index: int = -1, scale: float = 2.8) -> RenderedPage:
    """Render one PDF page at `scale` and pull its text layer for anchoring.

    Args:
        pdf_path: Path to the input PDF file.
        page_index: 0-based page index; -1 selects the last page.
        scale: Pixels per PDF point.

    Returns:
        The rendered page in BGR with text items and a viewport whose
        transform maps page points onto raster pixels.
    """
    pdf_path = Path(pdf_path)
    doc = fitz.open(pdf_path)
    try:
        index = resolve_page_index(page_index, doc.page_count)
        page = doc.load_page(index)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        img = Image.frombytes("RGB", [pix.width, pix.height], pix.samples)
        bgr = cv2.cvtColor(np.array(img), cv2.COLOR_RGB2BGR)

        try:
            text_items = extract_text_items(page)
        except RuntimeError as e:
            logger.warning("Text extraction failed for %s page %d: %s", pdf_path.name, index + 1, e)
            text_items = []
    finally:
        doc.close()

    viewport = Viewport(
        width=float(pix.width),
        height=float(pix.height),
        transform=(scale, 0.0, 0.0, scale, 0.0, 0.0),
    )
    return RenderedPage(
        image=bgr,
        viewport=viewport,
        text_items=text_items,
        source=str(pdf_path),
        page_number=index + 1,
    )


def load_image(image_path: Union[str, Path]) -> RenderedPage:
    """Raster input (scan or photo): no text layer, so the bottom band is used."""
    image_path = Path(image_path)
    img = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if img is None:
        raise FileNotFoundError(f"Could not read image: {image_path}")
    return RenderedPage(image=img, viewport=Viewport.for_image(img), source=str(image_path))


def load_page(path: Union[str, Path], page_index: int = -1, scale: float = 2.8) -> RenderedPage:
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in PDF_SUFFIXES:
        return render_page(path, page_index, scale)
    if suffix in IMAGE_SUFFIXES:
        return load_image(path)
    raise ValueError(f"Unsupported input type '{suffix}' for {path.name}")
