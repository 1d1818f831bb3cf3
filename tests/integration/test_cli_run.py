from __future__ import annotations

import json
import re
from pathlib import Path

import pandas as pd

from stratassign.cli import main as cli_main
from stratassign.logging.init import reset_logging

"""End-to-end CLI runs on temporary CSV files."""


def _run(argv: list[str], capsys) -> tuple[int, str]:
    reset_logging()
    code = cli_main(argv)
    out = capsys.readouterr().out
    reset_logging()
    return code, out


def test_run_with_config_file(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code, out = _run([str(sample_csv)], capsys)
    assert code == 0
    assert "SUMMARY rows=4 units=4 strata=2 treatment=2 control=2" in out

    output = temp_workdir / "data" / "randomized_units.csv"
    assert output.exists()
    df = pd.read_csv(output, dtype=str)
    assert list(df.columns) == ["id", "region", "arm"]
    assert sorted(df[df.region == "east"].arm) == ["C", "T"]
    assert sorted(df[df.region == "west"].arm) == ["C", "T"]


def test_rerun_reproduces_output(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    out_a = temp_workdir / "a.csv"
    out_b = temp_workdir / "b.csv"
    assert _run([str(sample_csv), "--output", str(out_a)], capsys)[0] == 0
    assert _run([str(sample_csv), "--output", str(out_b)], capsys)[0] == 0
    assert out_a.read_text(encoding="utf-8") == out_b.read_text(encoding="utf-8")


def test_flags_only_without_config_file(temp_workdir: Path, sample_csv: Path, capsys):
    out_path = temp_workdir / "out.csv"
    code, out = _run(
        [
            str(sample_csv),
            "--unit-column", "id",
            "--stratify", "region",
            "--seed", "42",
            "--ratio", "1",
            "--output", str(out_path),
        ],
        capsys,
    )
    assert code == 0
    df = pd.read_csv(out_path, dtype=str)
    assert set(df["assignment"]) == {"treatment"}


def test_cli_flags_override_config(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code, out = _run([str(sample_csv), "--ratio", "0", "--no-write"], capsys)
    assert code == 0
    assert "treatment=0 control=4" in out
    assert not (temp_workdir / "data" / "randomized_units.csv").exists()


def test_preview_prints_rows(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code, out = _run([str(sample_csv), "--preview", "2", "--no-write"], capsys)
    assert code == 0
    assert re.search(r"id\s+region\s+arm", out)


def test_blank_unit_rejected(temp_workdir: Path, write_config: Path, capsys):
    csv = temp_workdir / "data" / "blank.csv"
    csv.write_text("id,region\n1,east\n2,east\n,west\n", encoding="utf-8")
    code, out = _run([str(csv)], capsys)
    assert code == 2
    assert "ERROR [BLANK_UNIT] Randomization unit column has empty values." in out
    assert "ERROR [BLANK_UNIT] Example row numbers: 3" in out
    assert not (temp_workdir / "data" / "randomized_blank.csv").exists()


def test_mismatch_rejected_with_error_log(temp_workdir: Path, write_config: Path, capsys):
    csv = temp_workdir / "data" / "mismatch.csv"
    csv.write_text("id,region\nU1,east\nU1,west\nU2,west\n", encoding="utf-8")
    code, out = _run([str(csv), "--error-log"], capsys)
    assert code == 2
    assert "Example unit IDs: U1" in out
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["error_type"] == "STRATUM_MISMATCH"
    assert record["file"] == "mismatch.csv"


def test_config_issues_rejected(temp_workdir: Path, write_config: Path, sample_csv: Path, capsys):
    code, out = _run([str(sample_csv), "--assignment-column", "region", "--seed", "x"], capsys)
    assert code == 2
    assert "[CONFIG] Assignment column already exists in the CSV header." in out
    assert "[CONFIG] Seed must be an integer." in out


def test_parse_issue_rejected(temp_workdir: Path, write_config: Path, capsys):
    csv = temp_workdir / "data" / "bad.csv"
    csv.write_text("id,region\n1,east\n2,west,extra\n", encoding="utf-8")
    code, out = _run([str(csv)], capsys)
    assert code == 2
    assert "[PARSE] CSV parsing failed. Please check formatting." in out
    assert "Row 2: Too many fields: expected 2 fields but parsed 3" in out


def test_missing_input_is_fatal(temp_workdir: Path, write_config: Path, capsys):
    code, out = _run([str(temp_workdir / "nope.csv")], capsys)
    assert code == 1
    assert "ERROR input not found:" in out


def test_empty_csv_is_fatal(temp_workdir: Path, write_config: Path, capsys):
    csv = temp_workdir / "data" / "empty.csv"
    csv.write_text("", encoding="utf-8")
    code, out = _run([str(csv)], capsys)
    assert code == 1
    assert "CSV has no headers" in out


def test_explicit_missing_config_is_fatal(temp_workdir: Path, sample_csv: Path, capsys):
    code, out = _run([str(sample_csv), "--config", "config/missing.yml"], capsys)
    assert code == 1
    assert "ERROR config: config file not found" in out


def test_config_path_from_env(temp_workdir: Path, sample_csv: Path, sample_config_yaml: str, monkeypatch, capsys):
    alt = temp_workdir / "alt.yml"
    alt.write_text(sample_config_yaml, encoding="utf-8")
    monkeypatch.setenv("STRATASSIGN_CONFIG", str(alt))
    code, out = _run([str(sample_csv), "--no-write"], capsys)
    assert code == 0
    assert "strata=2" in out


def test_config_path_from_dotenv(temp_workdir: Path, sample_csv: Path, sample_config_yaml: str, monkeypatch, capsys):
    monkeypatch.delenv("STRATASSIGN_CONFIG", raising=False)
    alt = temp_workdir / "dotenv.yml"
    alt.write_text(sample_config_yaml, encoding="utf-8")
    (temp_workdir / ".env").write_text(f"STRATASSIGN_CONFIG={alt}\n", encoding="utf-8")
    code, out = _run([str(sample_csv), "--no-write"], capsys)
    monkeypatch.delenv("STRATASSIGN_CONFIG", raising=False)
    assert code == 0
    assert "strata=2" in out
