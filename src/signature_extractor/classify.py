# src/signature_extractor/classify.py

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Union

import cv2
import numpy as np
import requests

logger = logging.getLogger(__name__)

# classify(png_bytes, threshold, tta) -> {"label", "p_real", "p_forge", ...}
Classifier = Callable[[bytes, float, int], Mapping[str, Any]]

MAX_TTA = 32
PREDICT_PATH = "/predict"


@dataclass(frozen=True)
class ClassificationResult:
    label: str
    p_real: float
    p_forge: float
    threshold_used: float
    tta: int
    latency_ms: Optional[float] = None

    @property
    def is_real(self) -> bool:
        return self.label == "REAL"

    def as_dict(self) -> dict:
        return {
            "label": self.label,
            "p_real": self.p_real,
            "p_forge": self.p_forge,
            "threshold_used": self.threshold_used,
            "tta": self.tta,
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class ClassificationError:
    error: str

    def as_dict(self) -> dict:
        return {"error": self.error}


def clamp_request(threshold: float, tta: int):
    threshold = max(0.0, min(1.0, float(threshold)))
    tta = max(0, min(MAX_TTA, int(tta)))
    return threshold, tta


def encode_png(image: np.ndarray) -> bytes:
    ok, buf = cv2.imencode(".png", image)
    if not ok:
        raise ValueError("Failed to encode crop as PNG")
    return buf.tobytes()


def parse_response(data: Mapping[str, Any], threshold: float, tta: int) -> ClassificationResult:
    if "error" in data:
        raise ValueError(str(data["error"]))
    label = str(data.get("label", "")).upper()
    if label not in ("REAL", "FORGED"):
        raise ValueError(f"Unexpected label {data.get('label')!r}")
    latency = data.get("latency_ms")
    return ClassificationResult(
        label=label,
        p_real=float(data.get("p_real", 0.0)),
        p_forge=float(data.get("p_forge", 0.0)),
        threshold_used=float(data.get("threshold_used", threshold)),
        tta=int(data.get("tta", tta)),
        latency_ms=float(latency) if latency is not None else None,
    )


def classify_crop(
    classify: Classifier,
    image: np.ndarray,
    threshold: float = 0.7,
    tta: int = 0,
) -> Union[ClassificationResult, ClassificationError]:
    """
    Sends one crop to the external classifier. Failures of any kind come back
    as a ClassificationError value; nothing is raised and nothing is retried.
    """
    threshold, tta = clamp_request(threshold, tta)
    try:
        data = classify(encode_png(image), threshold, tta)
        return parse_response(data, threshold, tta)
    except Exception as e:
        logger.warning("Classification failed: %s", e)
        return ClassificationError(error=str(e))


def http_classifier(base_url: str, timeout: float = 30.0) -> Classifier:
    """
    Builds a Classifier that POSTs the crop as multipart `file` to
    `<base_url>/predict` with `threshold` and `tta` query parameters and
    returns the decoded JSON body. HTTP errors raise; classify_crop turns
    them into a ClassificationError.
    """
    url = base_url.rstrip("/") + PREDICT_PATH

    def classify(png: bytes, threshold: float, tta: int) -> Mapping[str, Any]:
        resp = requests.post(
            url,
            params={"threshold": threshold, "tta": tta},
            files={"file": ("signature.png", png, "image/png")},
            timeout=timeout,
        )
        resp.raise_for_status()
        return resp.json()

    return classify
