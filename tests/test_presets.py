import pytest

from apsprofile.core.safety import HardLimits
from apsprofile.presets import PresetError, get_preset, hard_limits_for, load_presets


def test_all_age_groups_present():
    names = [preset["name"] for preset in load_presets()]
    assert names == ["child", "teenage", "adult", "resistant_adult", "pregnant"]


@pytest.mark.parametrize(
    "name, max_basal",
    [("child", 2.0), ("teenage", 5.0), ("adult", 10.0), ("resistant_adult", 12.0), ("pregnant", 25.0)],
)
def test_max_basal_per_group(name, max_basal):
    limits = hard_limits_for(name)
    assert isinstance(limits, HardLimits)
    assert limits.max_basal == max_basal


def test_adult_matches_defaults():
    assert hard_limits_for("adult") == HardLimits()


def test_every_preset_has_ordered_bounds():
    for preset in load_presets():
        limits = HardLimits.from_dict(preset["limits"])
        for name in ("basal", "dia", "ic", "isf", "low_target", "high_target"):
            assert getattr(limits, f"min_{name}") <= getattr(limits, f"max_{name}"), preset["name"]


def test_unknown_preset():
    with pytest.raises(PresetError):
        get_preset("astronaut")
