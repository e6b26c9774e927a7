# src/signature_extractor/config.py
# Central configuration for the signature extractor.

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import tomllib  # Python 3.11+

from .errors import ConfigError

logger = logging.getLogger(__name__)

# Keys whose values are fractions of a width/height and must stay in [0, 1].
FRACTION_KEYS = (
    "bottom_fallback_frac",
    "exclude_right_frac",
    "min_area_fraction",
    "max_fill_for_signature",
    "horizontal_line_kernel_frac",
    "merge_padding_frac",
    "fallback_padding_frac",
    "anchor_above_pad_frac",
    "anchor_below_pad_frac",
    "classifier_threshold",
)


@dataclass(frozen=True)
class Parameters:
    # ===================================================================
    #                      RENDERING & ANCHOR
    # ===================================================================
    render_scale: float = 2.8
    bottom_fallback_frac: float = 0.35
    anchor_above_pad_frac: float = 0.05
    anchor_below_pad_frac: float = 0.35

    # ===================================================================
    #                      PREPROCESSING
    # ===================================================================
    horizontal_line_kernel_frac: float = 0.25
    exclude_right_frac: float = 0.20

    # ===================================================================
    #                      CONTOUR CLASSIFICATION
    # ===================================================================
    min_area_fraction: float = 0.0008
    max_fill_for_signature: float = 0.42
    min_aspect_for_signature: float = 3.0

    # ===================================================================
    #                      AGGREGATION
    # ===================================================================
    merge_padding_frac: float = 0.06
    fallback_padding_frac: float = 0.05

    # ===================================================================
    #                      RUNTIME & CLASSIFIER
    # ===================================================================
    readiness_timeout_ms: float = 15000.0
    classifier_threshold: float = 0.7
    classifier_tta: int = 0

    def replace(self, **changes: Any) -> "Parameters":
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class DebugSettings:
    save_images: bool = False
    output_dir: str = "./debug_output"


def _read_toml(config_toml: Union[str, Path, None]) -> Dict[str, Any]:
    if config_toml is None:
        return {}
    try:
        with open(config_toml, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        logger.info("No config file at %s, using defaults", config_toml)
        return {}
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Cannot parse {config_toml}: {e}") from e


def _table(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    raw = cfg.get(name, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{name}] must be a table.")
    return raw


def parameters_from_mapping(raw: Dict[str, Any]) -> Parameters:
    """
    Builds Parameters from a flat mapping, coercing numbers and clamping
    fractions to [0, 1]. Unknown keys are an error.
    """
    known = {f.name: f for f in dataclasses.fields(Parameters)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            raise ConfigError(f"Unknown parameter '{key}'.")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"Parameter '{key}' must be a number, got {value!r}.")
        values[key] = value

    for key in FRACTION_KEYS:
        if key in values:
            values[key] = max(0.0, min(1.0, float(values[key])))
    if "classifier_tta" in values:
        values["classifier_tta"] = max(0, min(32, int(values["classifier_tta"])))
    for key in ("render_scale", "min_aspect_for_signature", "readiness_timeout_ms"):
        if key in values:
            values[key] = max(0.0, float(values[key]))
    return Parameters(**values)


def load_parameters(config_toml: Union[str, Path, None] = "config.toml") -> Parameters:
    """
    Reads [parameters] and [classifier] from config.toml.
    A missing file yields the defaults.
    """
    cfg = _read_toml(config_toml)
    raw = dict(_table(cfg, "parameters"))
    classifier = _table(cfg, "classifier")
    if "threshold" in classifier:
        raw["classifier_threshold"] = classifier["threshold"]
    if "tta" in classifier:
        raw["classifier_tta"] = classifier["tta"]
    return parameters_from_mapping(raw)


def load_debug_settings(config_toml: Union[str, Path, None] = "config.toml") -> DebugSettings:
    cfg = _read_toml(config_toml)
    debug = _table(cfg, "debug")
    return DebugSettings(
        save_images=bool(debug.get("save_images", False)),
        output_dir=str(debug.get("output_dir", "./debug_output")),
    )


def debug_dir_from_settings(settings: DebugSettings) -> Optional[str]:
    return settings.output_dir if settings.save_images else None
