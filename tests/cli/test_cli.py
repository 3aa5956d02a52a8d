import json

import pytest
from typer.testing import CliRunner

from apsprofile.cli.cli import app

runner = CliRunner()


@pytest.fixture
def profile_file(tmp_path, profile_document):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(profile_document))
    return path


def test_show_prints_hourly_table(profile_file):
    result = runner.invoke(app, ["show", str(profile_file)])
    assert result.exit_code == 0, result.output
    assert "23:00" in result.output
    assert "Daily basal: 21.00 U" in result.output


def test_show_single_time(profile_file):
    result = runner.invoke(app, ["show", str(profile_file), "--percentage", "150", "--at", "03:00"])
    assert result.exit_code == 0, result.output
    assert "Basal:  0.75 U/h" in result.output


def test_show_rejects_bad_time(profile_file):
    result = runner.invoke(app, ["show", str(profile_file), "--at", "3pm"])
    assert result.exit_code == 1


def test_missing_profile_file(tmp_path):
    result = runner.invoke(app, ["show", str(tmp_path / "missing.json")])
    assert result.exit_code == 1
    assert result.output.startswith("Error")


def test_malformed_profile_document(tmp_path, profile_document):
    profile_document["dia"] = -1
    path = tmp_path / "broken.json"
    path.write_text(json.dumps(profile_document))
    result = runner.invoke(app, ["show", str(path)])
    assert result.exit_code == 1
    assert "dia" in result.output


def test_zero_percentage_rejected(profile_file):
    result = runner.invoke(app, ["show", str(profile_file), "--percentage", "0"])
    assert result.exit_code == 1


def test_validate_accepts_default_profile(profile_file):
    result = runner.invoke(app, ["validate", str(profile_file)])
    assert result.exit_code == 0, result.output
    assert "is valid" in result.output


def test_validate_reports_clamped_basal(tmp_path, profile_document):
    profile_document["basal"][0]["value"] = 0.01
    path = tmp_path / "low.json"
    path.write_text(json.dumps(profile_document))
    result = runner.invoke(app, ["validate", str(path)])
    assert result.exit_code == 1
    assert "minimum supported value" in result.output


def test_validate_with_child_preset(profile_file):
    result = runner.invoke(app, ["validate", str(profile_file), "--percentage", "300", "--preset", "child"])
    assert result.exit_code == 1
    assert "Basal value out of hard limits" in result.output


def test_validate_with_limits_file(tmp_path, profile_file):
    limits = tmp_path / "limits.yaml"
    limits.write_text("min_low_target: 110\n")
    result = runner.invoke(app, ["validate", str(profile_file), "--limits", str(limits)])
    assert result.exit_code == 1
    assert "Low target" in result.output


def test_validate_unknown_preset(profile_file):
    result = runner.invoke(app, ["validate", str(profile_file), "--preset", "astronaut"])
    assert result.exit_code == 1


def test_export_to_stdout(profile_file):
    result = runner.invoke(app, ["export", str(profile_file), "--percentage", "200"])
    assert result.exit_code == 0, result.output
    document = json.loads(result.output)
    assert list(document) == ["units", "dia", "timezone", "sens", "carbratio", "basal", "target_low", "target_high"]
    assert document["basal"][1]["value"] == 2.0


@pytest.mark.parametrize("arguments", [[], ["--percentage", "120"], ["--timeshift", "2"]])
def test_export_keeps_document_timezone(tmp_path, profile_document, arguments):
    profile_document["timezone"] = "Europe/Amsterdam"
    path = tmp_path / "amsterdam.json"
    path.write_text(json.dumps(profile_document))
    result = runner.invoke(app, ["export", str(path), *arguments])
    assert result.exit_code == 0, result.output
    assert json.loads(result.output)["timezone"] == "Europe/Amsterdam"


def test_export_to_file(tmp_path, profile_file):
    output = tmp_path / "out" / "canonical.json"
    result = runner.invoke(app, ["export", str(profile_file), "--output", str(output)])
    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text())["units"] == "mg/dl"


def test_presets_list():
    result = runner.invoke(app, ["presets", "list"])
    assert result.exit_code == 0, result.output
    assert "adult" in result.output
    assert "pregnant" in result.output
