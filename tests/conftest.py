# tests/conftest.py
from pathlib import Path
import sys

import cv2
import numpy as np
import pytest
import requests

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from signature_extractor.config import Parameters  # noqa: E402


def draw_signature(img, x, y, w, h, color=0, thickness=3):
    """A three-period sine stroke spanning w x h, a stand-in for cursive ink."""
    xs = np.arange(0, w, 2)
    ys = y + h / 2.0 + (h / 2.0 - 4) * np.sin(xs / float(w) * 6 * np.pi)
    pts = np.stack([x + xs, ys], axis=1).astype(np.int32).reshape(-1, 1, 2)
    cv2.polylines(img, [pts], False, color, thickness)
    return img


def blank_page(width=800, height=1000, channels=3):
    shape = (height, width, channels) if channels else (height, width)
    return np.full(shape, 255, dtype=np.uint8)


class FakeResponse:
    """Stands in for requests.Response in classifier HTTP tests."""

    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        return self.payload


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).resolve().parents[1]


@pytest.fixture
def params() -> Parameters:
    return Parameters()


@pytest.fixture
def signed_page() -> np.ndarray:
    """
    800x1000 white page: a signature stroke at (100, 780) 300x60, a printed
    rule below it, a filled box inside the analysed area and a stamp in the
    right-hand exclusion zone.
    """
    page = blank_page()
    draw_signature(page, 100, 780, 300, 60)
    cv2.line(page, (50, 870), (750, 870), (0, 0, 0), 2)
    cv2.rectangle(page, (500, 700), (569, 769), (0, 0, 0), -1)
    cv2.rectangle(page, (680, 720), (759, 799), (0, 0, 0), -1)
    return page


@pytest.fixture
def page_factory():
    return blank_page
