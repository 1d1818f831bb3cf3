from __future__ import annotations

import pytest

from stratassign.models import IssueCategory, RandomizationConfig
from stratassign.services.config_check import check_config, coerce_ratio, coerce_seed, normalize_config

HEADER = ["id", "region", "segment"]


def _cfg(**kwargs) -> RandomizationConfig:
    base = dict(
        unit_column="id",
        assignment_column="arm",
        stratification_columns=("region",),
        treatment_ratio=0.5,
        seed=42,
        treatment_label="T",
        control_label="C",
    )
    base.update(kwargs)
    return RandomizationConfig(**base)


def test_valid_config_has_no_issues():
    assert check_config(_cfg(), HEADER) == []


def test_all_config_errors_collected_together():
    cfg = _cfg(
        unit_column="",
        assignment_column="region",
        treatment_ratio=1.5,
        seed="abc",
        treatment_label=" ",
    )
    issues = check_config(cfg, HEADER)
    messages = [i.message for i in issues]
    assert all(i.category is IssueCategory.CONFIG for i in issues)
    assert "Select a randomization unit column." in messages
    assert "Assignment column already exists in the CSV header." in messages
    assert "Treatment ratio must be a number between 0 and 1." in messages
    assert "Seed must be an integer." in messages
    assert "Treatment and control labels cannot be empty." in messages
    assert len(issues) == 5


def test_empty_assignment_column():
    issues = check_config(_cfg(assignment_column="   "), HEADER)
    assert [i.message for i in issues] == ["Assignment column name cannot be empty."]


def test_unknown_columns():
    issues = check_config(_cfg(unit_column="nope", stratification_columns=("region", "zip")), HEADER)
    messages = [i.message for i in issues]
    assert "Unit column 'nope' is not in the CSV header." in messages
    assert "Stratification columns not in the CSV header: zip" in messages


def test_duplicate_stratification_columns():
    issues = check_config(_cfg(stratification_columns=("region", "region")), HEADER)
    assert [i.message for i in issues] == ["Stratification columns listed more than once: region"]


def test_non_string_column_names_reported_as_text():
    issues = check_config(_cfg(stratification_columns=(7, 7, "region")), HEADER)
    assert [i.message for i in issues] == [
        "Stratification columns not in the CSV header: 7, 7",
        "Stratification columns listed more than once: 7",
    ]


@pytest.mark.parametrize("value", [0, 1, 0.25, "0.5", "1"])
def test_ratio_accepted(value):
    assert coerce_ratio(value) is not None


@pytest.mark.parametrize("value", [-0.01, 1.01, "nan", "abc", None, True, float("inf")])
def test_ratio_rejected(value):
    assert coerce_ratio(value) is None


@pytest.mark.parametrize("value,expected", [(42, 42), (-7, -7), ("42", 42), (" 13 ", 13), (3.0, 3), ("5.0", 5)])
def test_seed_accepted(value, expected):
    assert coerce_seed(value) == expected


@pytest.mark.parametrize("value", [4.5, "4.5", "", "x", None, True, float("nan")])
def test_seed_rejected(value):
    assert coerce_seed(value) is None


def test_max_examples_must_be_positive():
    issues = check_config(_cfg(max_examples=0), HEADER)
    assert [i.message for i in issues] == ["Max examples must be a positive integer."]


def test_normalize_config_coerces_and_trims():
    cfg = normalize_config(
        _cfg(assignment_column=" arm ", treatment_ratio="0.25", seed="7", treatment_label=" T ", control_label="C ")
    )
    assert cfg.assignment_column == "arm"
    assert cfg.treatment_ratio == 0.25
    assert cfg.seed == 7
    assert (cfg.treatment_label, cfg.control_label) == ("T", "C")


def test_normalize_config_rejects_unchecked_config():
    with pytest.raises(ValueError):
        normalize_config(_cfg(seed="x"))


def test_stratification_columns_list_becomes_tuple():
    cfg = RandomizationConfig(unit_column="id", stratification_columns=["region"])
    assert cfg.stratification_columns == ("region",)
    assert RandomizationConfig(unit_column="id", stratification_columns=None).stratification_columns == ()
