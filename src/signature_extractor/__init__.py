from .config import Parameters, load_parameters
from .detector import extract_signature, extract_signature_async
from .errors import ConfigError, EnvironmentNotReady, SignatureExtractionError
from .models import Candidate, ExtractionResult, Rect, TextItem, Viewport
from .runtime import VisionRuntime

__all__ = [
    "Candidate",
    "ConfigError",
    "EnvironmentNotReady",
    "ExtractionResult",
    "Parameters",
    "Rect",
    "SignatureExtractionError",
    "TextItem",
    "Viewport",
    "VisionRuntime",
    "extract_signature",
    "extract_signature_async",
    "load_parameters",
]
