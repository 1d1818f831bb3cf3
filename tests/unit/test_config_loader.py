from __future__ import annotations

import json
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from stratassign.config.loader import (
    ConfigError,
    _validate_config_schema,
    build_config,
    load_config,
    merge_overrides,
)


def test_load_config_success(write_config: Path):
    cfg = load_config(write_config)
    assert cfg.unit_column == "id"
    assert cfg.assignment_column == "arm"
    assert cfg.stratification_columns == ("region",)
    assert cfg.treatment_ratio == 0.5
    assert cfg.seed == 42
    assert (cfg.treatment_label, cfg.control_label) == ("T", "C")
    assert cfg.max_examples == 20


def test_load_config_missing_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        load_config(temp_workdir / "config" / "not_exists.yml")


def test_load_config_invalid_yaml(write_config: Path):
    write_config.write_text("unit_column: [unclosed\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(write_config)


def test_load_config_root_must_be_mapping(write_config: Path):
    write_config.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_config(write_config)


def test_load_config_extra_field(write_config: Path):
    text = write_config.read_text(encoding="utf-8") + "\nextra_field: not_allowed\n"
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError) as e:
        load_config(write_config)
    assert "config validation failed" in str(e.value)


def test_load_config_wrong_type(write_config: Path):
    text = write_config.read_text(encoding="utf-8").replace("stratification_columns: [region]", "stratification_columns: region")
    write_config.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(write_config)


def test_empty_file_uses_defaults(write_config: Path):
    write_config.write_text("", encoding="utf-8")
    cfg = load_config(write_config)
    assert cfg.unit_column == ""
    assert cfg.assignment_column == "assignment"
    assert cfg.treatment_ratio == 0.5
    assert cfg.seed is None


def test_overrides_win_over_file(write_config: Path):
    cfg = load_config(write_config, {"seed": "7", "stratification_columns": ["region", "segment"], "unit_column": None})
    assert cfg.seed == "7"
    assert cfg.stratification_columns == ("region", "segment")
    assert cfg.unit_column == "id"


def test_merge_overrides_defaults():
    merged = merge_overrides({}, {})
    cfg = build_config(merged)
    assert cfg.treatment_label == "treatment"
    assert cfg.control_label == "control"
    assert cfg.stratification_columns == ()


def test_validate_config_schema_missing_schema_file():
    with patch("stratassign.config.loader.SCHEMA_PATH", Path("/nonexistent/schema.json")):
        with pytest.raises(ConfigError) as e:
            _validate_config_schema({})
        assert "config schema not found" in str(e.value)


def test_validate_config_schema_invalid_json_schema():
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        f.write("{ invalid json }")
        temp_path = Path(f.name)
    try:
        with patch("stratassign.config.loader.SCHEMA_PATH", temp_path):
            with pytest.raises(ConfigError, match="invalid schema file"):
                _validate_config_schema({})
    finally:
        temp_path.unlink()


def test_schema_file_is_valid_json():
    from stratassign.config.loader import SCHEMA_PATH

    schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
    assert schema["additionalProperties"] is False
