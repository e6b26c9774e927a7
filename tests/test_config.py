import dataclasses

import pytest

from signature_extractor.config import (
    DebugSettings,
    Parameters,
    debug_dir_from_settings,
    load_debug_settings,
    load_parameters,
    parameters_from_mapping,
)
from signature_extractor.errors import ConfigError


def write_toml(tmp_path, text):
    p = tmp_path / "config.toml"
    p.write_text(text, encoding="utf-8")
    return p


def test_missing_file_gives_defaults(tmp_path):
    params = load_parameters(tmp_path / "nope.toml")
    assert params == Parameters()
    assert params.exclude_right_frac == 0.20
    assert params.readiness_timeout_ms == 15000


def test_parameters_and_classifier_tables_are_read(tmp_path):
    p = write_toml(tmp_path, """
[parameters]
exclude_right_frac = 0.0
min_aspect_for_signature = 4

[classifier]
threshold = 0.55
tta = 8
""")
    params = load_parameters(p)
    assert params.exclude_right_frac == 0.0
    assert params.min_aspect_for_signature == 4.0
    assert params.classifier_threshold == 0.55
    assert params.classifier_tta == 8
    assert params.merge_padding_frac == 0.06


def test_fractions_and_tta_are_clamped():
    params = parameters_from_mapping({
        "exclude_right_frac": 1.7,
        "min_area_fraction": -0.1,
        "classifier_tta": 100,
    })
    assert params.exclude_right_frac == 1.0
    assert params.min_area_fraction == 0.0
    assert params.classifier_tta == 32


def test_unknown_key_is_rejected():
    with pytest.raises(ConfigError):
        parameters_from_mapping({"exclude_left_frac": 0.1})


def test_non_numeric_value_is_rejected(tmp_path):
    p = write_toml(tmp_path, '[parameters]\nmerge_padding_frac = "wide"\n')
    with pytest.raises(ConfigError):
        load_parameters(p)


def test_table_must_be_a_table(tmp_path):
    p = write_toml(tmp_path, 'parameters = 3\n')
    with pytest.raises(ConfigError):
        load_parameters(p)


def test_parameters_are_immutable():
    params = Parameters()
    with pytest.raises(dataclasses.FrozenInstanceError):
        params.exclude_right_frac = 0.5
    changed = params.replace(exclude_right_frac=0.5)
    assert changed.exclude_right_frac == 0.5
    assert params.exclude_right_frac == 0.20


def test_debug_settings(tmp_path):
    p = write_toml(tmp_path, '[debug]\nsave_images = true\noutput_dir = "dbg"\n')
    settings = load_debug_settings(p)
    assert settings == DebugSettings(save_images=True, output_dir="dbg")
    assert debug_dir_from_settings(settings) == "dbg"
    assert debug_dir_from_settings(DebugSettings()) is None


def test_shipped_config_matches_defaults(project_root):
    assert load_parameters(project_root / "config.toml") == Parameters()
