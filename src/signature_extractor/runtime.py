# src/signature_extractor/runtime.py

import logging
import time
from typing import Callable, Optional

import cv2

from .errors import EnvironmentNotReady

logger = logging.getLogger(__name__)

REQUIRED_PRIMITIVES = (
    "cvtColor",
    "GaussianBlur",
    "threshold",
    "morphologyEx",
    "findContours",
    "contourArea",
    "boundingRect",
    "arcLength",
)


def opencv_ready() -> bool:
    return all(hasattr(cv2, name) for name in REQUIRED_PRIMITIVES)


class VisionRuntime:
    """
    Readiness capability handed to the pipeline. `probe` reports whether the
    vision primitives can be used yet; `wait_until_ready` polls it for at most
    `timeout_ms`.
    """

    def __init__(self, probe: Optional[Callable[[], bool]] = None, poll_interval_s: float = 0.05):
        self._probe = probe or opencv_ready
        self._poll_interval_s = poll_interval_s

    def is_ready(self) -> bool:
        return bool(self._probe())

    def wait_until_ready(self, timeout_ms: float = 15000) -> None:
        deadline = time.monotonic() + timeout_ms / 1000.0
        while not self.is_ready():
            if time.monotonic() >= deadline:
                logger.error("Vision runtime not ready after %.0f ms", timeout_ms)
                raise EnvironmentNotReady(timeout_ms)
            time.sleep(self._poll_interval_s)
