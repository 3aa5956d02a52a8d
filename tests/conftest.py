from pathlib import Path
import sys

import pytest

project_root = Path(__file__).resolve().parents[1]
src_path = project_root / "src"

if src_path.exists():
    sys.path.insert(0, str(src_path))

from apsprofile.core.profile.records import (  # noqa: E402
    EffectiveProfileSwitch,
    InsulinConfiguration,
    ProfileSwitch,
    PureProfile,
)
from apsprofile.core.schedule.blocks import Block, TargetBlock  # noqa: E402
from apsprofile.core.units import GlucoseUnit  # noqa: E402

HOUR_MS = 3600 * 1000


def hours(value: float) -> int:
    return int(value * HOUR_MS)


@pytest.fixture
def make_switch():
    """Factory for ProfileSwitch records with sensible adult defaults."""

    def _make(
        basal=((6, 0.5), (18, 1.0)),
        isf=((24, 50.0),),
        ic=((24, 10.0),),
        targets=((24, 100.0, 120.0),),
        percentage=100,
        timeshift_hours=0,
        dia=5.0,
        units=GlucoseUnit.MGDL,
        timestamp=0,
        duration=None,
        utc_offset=0,
    ) -> ProfileSwitch:
        return ProfileSwitch(
            timestamp=timestamp,
            basal_blocks=[Block(hours(h), v) for h, v in basal],
            isf_blocks=[Block(hours(h), v) for h, v in isf],
            ic_blocks=[Block(hours(h), v) for h, v in ic],
            target_blocks=[TargetBlock(hours(h), low, high) for h, low, high in targets],
            glucose_unit=units,
            profile_name="Test",
            insulin_configuration=InsulinConfiguration.from_dia_hours(dia, insulin_label="Rapid"),
            timeshift=timeshift_hours * HOUR_MS,
            percentage=percentage,
            duration=duration,
            utc_offset=utc_offset,
        )

    return _make


@pytest.fixture
def make_pure():
    def _make(
        basal=((6, 0.5), (18, 1.0)),
        isf=((24, 50.0),),
        ic=((24, 10.0),),
        targets=((24, 100.0, 120.0),),
        dia=5.0,
        units=GlucoseUnit.MGDL,
        timezone="UTC",
    ) -> PureProfile:
        return PureProfile(
            basal_blocks=[Block(hours(h), v) for h, v in basal],
            isf_blocks=[Block(hours(h), v) for h, v in isf],
            ic_blocks=[Block(hours(h), v) for h, v in ic],
            target_blocks=[TargetBlock(hours(h), low, high) for h, low, high in targets],
            glucose_unit=units,
            dia=dia,
            timezone=timezone,
        )

    return _make


@pytest.fixture
def make_effective_switch():
    def _make(basal=((6, 0.75), (18, 1.5)), original_percentage=150) -> EffectiveProfileSwitch:
        return EffectiveProfileSwitch(
            timestamp=1_000,
            basal_blocks=[Block(hours(h), v) for h, v in basal],
            isf_blocks=[Block(hours(24), 50.0)],
            ic_blocks=[Block(hours(24), 10.0)],
            target_blocks=[TargetBlock(hours(24), 100.0, 120.0)],
            glucose_unit=GlucoseUnit.MGDL,
            original_profile_name="Weekday",
            insulin_configuration=InsulinConfiguration.from_dia_hours(5.0),
            original_percentage=original_percentage,
        )

    return _make


@pytest.fixture
def profile_document():
    return {
        "units": "mg/dl",
        "dia": 5,
        "timezone": "UTC",
        "sens": [
            {"time": "00:00", "timeAsSeconds": 0, "value": 50},
            {"time": "12:00", "timeAsSeconds": 43200, "value": 40},
        ],
        "carbratio": [{"time": "00:00", "timeAsSeconds": 0, "value": 10}],
        "basal": [
            {"time": "00:00", "timeAsSeconds": 0, "value": 0.5},
            {"time": "06:00", "timeAsSeconds": 21600, "value": 1.0},
        ],
        "target_low": [{"time": "00:00", "timeAsSeconds": 0, "value": 100}],
        "target_high": [{"time": "00:00", "timeAsSeconds": 0, "value": 120}],
    }
