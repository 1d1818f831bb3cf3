from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_MAX_EXAMPLES, RandomizationConfig

"""Config file loader.

Responsibilities:
- Load the YAML run configuration (default config/randomize.yml)
- Validate its structure against config_schema.json (types, unknown keys)
- Apply defaults and merge CLI overrides

Semantic checks (ratio range, header membership, ...) are done per run by
services.config_check so that all problems are reported together.
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "load_config_data",
    "load_config",
    "merge_overrides",
    "build_config",
]

DEFAULT_CONFIG_PATH = Path("config/randomize.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")

DEFAULTS: dict[str, Any] = {
    "unit_column": "",
    "assignment_column": "assignment",
    "stratification_columns": [],
    "treatment_ratio": 0.5,
    "seed": None,
    "treatment_label": "treatment",
    "control_label": "control",
    "max_examples": DEFAULT_MAX_EXAMPLES,
}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the data fails
            validation (wrong types, unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config_data(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    return data


def merge_overrides(data: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Defaults <- file values <- overrides (None values in overrides are ignored)."""
    merged = dict(DEFAULTS)
    merged.update(data)
    merged.update({k: v for k, v in overrides.items() if v is not None})
    return merged


def build_config(values: dict[str, Any]) -> RandomizationConfig:
    return RandomizationConfig(
        unit_column=values.get("unit_column") or "",
        assignment_column=values.get("assignment_column", DEFAULTS["assignment_column"]),
        stratification_columns=tuple(values.get("stratification_columns") or ()),
        treatment_ratio=values.get("treatment_ratio"),
        seed=values.get("seed"),
        treatment_label=values.get("treatment_label", DEFAULTS["treatment_label"]),
        control_label=values.get("control_label", DEFAULTS["control_label"]),
        max_examples=values.get("max_examples", DEFAULT_MAX_EXAMPLES),
    )


def load_config(path: Path, overrides: dict[str, Any] | None = None) -> RandomizationConfig:
    return build_config(merge_overrides(load_config_data(path), overrides or {}))
