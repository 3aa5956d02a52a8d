import json

import pytest
from pydantic import ValidationError

from apsprofile.core.units import GlucoseUnit
from apsprofile.validation import (
    format_validation_error,
    load_hard_limits,
    load_profile_json,
    load_pump_description,
    profile_document_warnings,
    pure_profile_from_dict,
    validate_hard_limits_dict,
    validate_profile_document,
)

HOUR_MS = 3600 * 1000


def test_document_becomes_blocks(profile_document):
    profile = pure_profile_from_dict(profile_document)
    assert [(b.duration, b.amount) for b in profile.basal_blocks] == [(6 * HOUR_MS, 0.5), (18 * HOUR_MS, 1.0)]
    assert [(b.duration, b.amount) for b in profile.isf_blocks] == [(12 * HOUR_MS, 50.0), (12 * HOUR_MS, 40.0)]
    assert profile.target_blocks[0].low_target == 100.0
    assert profile.target_blocks[0].high_target == 120.0
    assert profile.glucose_unit is GlucoseUnit.MGDL
    assert profile.dia == 5.0
    assert profile.json_object is profile_document


def test_time_only_entries_are_resolved(profile_document):
    profile_document["basal"] = [{"time": "00:00", "value": 0.4}, {"time": "13:30", "value": 0.9}]
    model = validate_profile_document(profile_document)
    assert [entry.timeAsSeconds for entry in model.basal] == [0, 48600]


def test_entries_are_sorted(profile_document):
    profile_document["basal"] = list(reversed(profile_document["basal"]))
    profile = pure_profile_from_dict(profile_document)
    assert profile.basal_blocks[0].amount == 0.5


@pytest.mark.parametrize("units, expected", [("mmol/L", GlucoseUnit.MMOL), ("mg/dL", GlucoseUnit.MGDL)])
def test_units_are_normalized(profile_document, units, expected):
    profile_document["units"] = units
    assert pure_profile_from_dict(profile_document).glucose_unit is expected


@pytest.mark.parametrize(
    "mutate, fragment",
    [
        (lambda doc: doc.update(units="furlongs"), "units"),
        (lambda doc: doc.update(dia=0), "dia"),
        (lambda doc: doc.update(basal=[]), "basal"),
        (lambda doc: doc["basal"].__setitem__(0, {"time": "01:00", "value": 0.5}), "00:00"),
        (lambda doc: doc["carbratio"].append({"timeAsSeconds": 0, "value": 12}), "duplicate"),
        (lambda doc: doc["target_high"].append({"time": "08:00", "value": 140}), "same entry times"),
        (lambda doc: doc["sens"].append({"time": "25:00", "value": 45}), "out of range"),
    ],
)
def test_malformed_documents_rejected(profile_document, mutate, fragment):
    mutate(profile_document)
    with pytest.raises(ValidationError) as excinfo:
        pure_profile_from_dict(profile_document)
    assert fragment in "\n".join(format_validation_error(excinfo.value))


def test_document_warnings(profile_document):
    profile_document["basal"].append({"time": "07:30", "value": 1.2})
    profile_document["target_low"] = [{"time": "00:00", "value": 130}]
    warnings = profile_document_warnings(validate_profile_document(profile_document))
    assert any(w.startswith("basal:") for w in warnings)
    assert any("above high" in w for w in warnings)


def test_load_profile_json(tmp_path, profile_document):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps(profile_document))
    assert load_profile_json(path).timezone == "UTC"


def test_load_hard_limits_yaml(tmp_path):
    path = tmp_path / "limits.yaml"
    path.write_text("max_basal: 4.0\nmin_low_target: 70\n")
    limits = load_hard_limits(path)
    assert limits.max_basal == 4.0
    assert limits.min_low_target == 70.0
    assert limits.max_isf == 1000.0


def test_empty_hard_limits_file_gives_defaults(tmp_path):
    path = tmp_path / "limits.yaml"
    path.write_text("")
    assert load_hard_limits(path).max_basal == 10.0


@pytest.mark.parametrize(
    "data",
    [{"min_dia": 9.0, "max_dia": 5.0}, {"max_basal": -1}, {"unknown": 1}],
)
def test_invalid_hard_limits(data):
    with pytest.raises(ValidationError):
        validate_hard_limits_dict(data)


def test_load_pump_description_yaml(tmp_path):
    path = tmp_path / "pump.yaml"
    path.write_text("name: omnipod\nsupports_sub_hour_basal: true\nbasal_minimum_rate: 0.05\nbasal_maximum_rate: 30\n")
    pump = load_pump_description(path)
    assert pump.name == "omnipod"
    assert pump.supports_sub_hour_basal
    assert pump.basal_maximum_rate == 30.0


def test_inverted_pump_range_rejected(tmp_path):
    path = tmp_path / "pump.yaml"
    path.write_text("basal_minimum_rate: 2\nbasal_maximum_rate: 1\n")
    with pytest.raises(ValidationError):
        load_pump_description(path)
