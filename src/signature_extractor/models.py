# src/signature_extractor/models.py

import math
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np

Transform = Tuple[float, float, float, float, float, float]

IDENTITY: Transform = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)

ACCEPTED = "accepted"
REJECTED_SQUARELIKE = "rejected-squarelike"
REJECTED_DENSERECT = "rejected-denserect"
REJECTED_OTHER = "rejected-other"

STRATEGY_MERGED = "merged"
STRATEGY_FALLBACK_CONTOUR = "fallback_contour"
STRATEGY_ROI = "roi"


def round_half_up(x: float) -> int:
    """Rounds halves up; the builtin round() rounds them to even."""
    return int(math.floor(x + 0.5))


@dataclass(frozen=True)
class TextItem:
    """A run of text from the page's text layer, placed by an affine transform."""
    text: str
    transform: Transform


@dataclass(frozen=True)
class Viewport:
    """Rendered page size in pixels plus the text-space -> pixel-space transform."""
    width: float
    height: float
    transform: Transform = IDENTITY

    @classmethod
    def for_image(cls, image: np.ndarray) -> "Viewport":
        h, w = image.shape[:2]
        return cls(width=float(w), height=float(h))


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer box, y increasing downward."""
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @classmethod
    def from_xywh(cls, x: int, y: int, w: int, h: int) -> "Rect":
        return cls(int(x), int(y), int(x + w), int(y + h))

    @classmethod
    def from_floats(cls, x0: float, y0: float, x1: float, y1: float) -> "Rect":
        return cls(round_half_up(x0), round_half_up(y0), round_half_up(x1), round_half_up(y1))

    def pad(self, amount: int) -> "Rect":
        return Rect(self.x0 - amount, self.y0 - amount, self.x1 + amount, self.y1 + amount)

    def translate(self, dx: int, dy: int) -> "Rect":
        return Rect(self.x0 + dx, self.y0 + dy, self.x1 + dx, self.y1 + dy)

    def clamp(self, width: int, height: int) -> "Rect":
        """
        Clamps the box into a width x height area and keeps it at least 1x1.
        A zero-sized bound is treated as 1 so the result is never empty.
        """
        width = max(1, int(width))
        height = max(1, int(height))
        x0 = min(max(0, self.x0), width - 1)
        y0 = min(max(0, self.y0), height - 1)
        x1 = min(max(x0 + 1, self.x1), width)
        y1 = min(max(y0 + 1, self.y1), height)
        return Rect(x0, y0, x1, y1)

    def as_dict(self) -> dict:
        return {"x0": self.x0, "y0": self.y0, "x1": self.x1, "y1": self.y1}


def union_rects(rects: Iterable[Rect]) -> Optional[Rect]:
    """Smallest box enclosing every rect, or None for an empty input."""
    rects = list(rects)
    if not rects:
        return None
    return Rect(
        min(r.x0 for r in rects),
        min(r.y0 for r in rects),
        max(r.x1 for r in rects),
        max(r.y1 for r in rects),
    )


@dataclass(frozen=True)
class ContourFeatures:
    area: float
    bbox: Rect
    perimeter: float
    fill: float
    aspect: float
    thinness: float


@dataclass(frozen=True)
class Candidate:
    rect: Rect
    score: float
    tag: str
    features: Optional[ContourFeatures] = None

    @property
    def accepted(self) -> bool:
        return self.tag == ACCEPTED


@dataclass
class ExtractionResult:
    """
    Output of one page run. `roi` is in page pixels, `rect` is relative to the
    ROI; `page_rect` maps it back onto the page.
    """
    image: np.ndarray
    roi: Rect
    rect: Rect
    strategy: str
    anchor_y: Optional[float] = None
    candidates: List[Candidate] = field(default_factory=list)

    @property
    def page_rect(self) -> Rect:
        return self.rect.translate(self.roi.x0, self.roi.y0)

    @property
    def low_confidence(self) -> bool:
        return self.strategy != STRATEGY_MERGED

    @property
    def accepted(self) -> List[Candidate]:
        return [c for c in self.candidates if c.accepted]

    def summary(self) -> dict:
        h, w = self.image.shape[:2]
        return {
            "strategy": self.strategy,
            "low_confidence": self.low_confidence,
            "anchor_y": self.anchor_y,
            "roi": self.roi.as_dict(),
            "rect": self.rect.as_dict(),
            "page_rect": self.page_rect.as_dict(),
            "accepted_candidates": len(self.accepted),
            "crop_size": {"width": int(w), "height": int(h)},
        }
