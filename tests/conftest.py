# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from stratassign.models import Dataset, RandomizationConfig


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """unit_column: id
assignment_column: arm
stratification_columns: [region]
treatment_ratio: 0.5
seed: 42
treatment_label: T
control_label: C
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "randomize.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def sample_csv(temp_workdir: Path) -> Path:
    f = temp_workdir / "data" / "units.csv"
    f.write_text("id,region\n1,east\n2,east\n3,west\n4,west\n", encoding="utf-8")
    return f


@pytest.fixture()
def region_dataset() -> Dataset:
    return Dataset.from_records(
        ["id", "region"],
        [
            {"id": "1", "region": "east"},
            {"id": "2", "region": "east"},
            {"id": "3", "region": "west"},
            {"id": "4", "region": "west"},
        ],
    )


@pytest.fixture()
def region_config() -> RandomizationConfig:
    return RandomizationConfig(
        unit_column="id",
        assignment_column="arm",
        stratification_columns=("region",),
        treatment_ratio=0.5,
        seed=42,
        treatment_label="T",
        control_label="C",
    )
