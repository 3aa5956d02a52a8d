import json
from datetime import timezone

import pytest

from apsprofile.core.profile import SealedProfile, to_pure_ns_json
from apsprofile.core.units import GlucoseUnit

EXPORT_KEYS = ["units", "dia", "timezone", "sens", "carbratio", "basal", "target_low", "target_high"]


def test_document_layout(make_switch):
    document = to_pure_ns_json(SealedProfile(make_switch(), tz=timezone.utc))
    assert list(document) == EXPORT_KEYS
    assert document["units"] == "mg/dl"
    assert document["dia"] == pytest.approx(5.0)
    assert document["timezone"] == "UTC"
    assert document["basal"] == [
        {"time": "00:00", "timeAsSeconds": 0, "value": 0.5},
        {"time": "06:00", "timeAsSeconds": 21600, "value": 1.0},
    ]
    assert document["target_low"] == [{"time": "00:00", "timeAsSeconds": 0, "value": 100.0}]
    assert document["target_high"] == [{"time": "00:00", "timeAsSeconds": 0, "value": 120.0}]


def test_document_is_json_serializable(make_switch):
    document = SealedProfile(make_switch(percentage=120)).to_pure_ns_json()
    assert json.loads(json.dumps(document)) == document


def test_values_are_scaled_but_keep_profile_units(make_switch):
    profile = SealedProfile(
        make_switch(percentage=200, isf=((24, 3.0),), targets=((24, 5.0, 6.0),), units=GlucoseUnit.MMOL)
    )
    document = profile.to_pure_ns_json()
    assert document["units"] == "mmol"
    assert document["basal"][1]["value"] == pytest.approx(2.0)
    assert document["carbratio"][0]["value"] == pytest.approx(5.0)
    assert document["sens"][0]["value"] == pytest.approx(1.5)
    assert document["target_low"][0]["value"] == 5.0


def test_timeshift_is_applied_to_sampled_values(make_switch):
    document = SealedProfile(make_switch(timeshift_hours=2)).to_pure_ns_json()
    # sample times follow the stored blocks, values follow the rotated schedule
    assert [entry["timeAsSeconds"] for entry in document["basal"]] == [0, 21600]
    assert [entry["value"] for entry in document["basal"]] == [1.0, 0.5]


def test_sub_hour_blocks_are_under_sampled(make_switch):
    document = SealedProfile(make_switch(basal=((0.5, 0.3), (23.5, 1.0)))).to_pure_ns_json()
    assert document["basal"] == [
        {"time": "00:00", "timeAsSeconds": 0, "value": 0.3},
        {"time": "00:00", "timeAsSeconds": 0, "value": 0.3},
    ]


def test_timezone_from_utc_offset(make_switch):
    document = SealedProfile(make_switch(utc_offset=-5 * 3600 * 1000)).to_pure_ns_json()
    assert document["timezone"] == "Etc/GMT+5"
