import pytest

from apsprofile.analysis import compare_profiles, daily_basal_totals, hourly_profile_frame
from apsprofile.core.profile import SealedProfile


def test_hourly_frame_shape(make_switch):
    frame = hourly_profile_frame(SealedProfile(make_switch(percentage=150)))
    assert list(frame.columns) == ["hour", "time", "basal", "ic", "isf_mgdl", "target_low_mgdl", "target_high_mgdl"]
    assert len(frame) == 24
    assert frame.loc[3, "time"] == "03:00"
    assert frame.loc[3, "basal"] == pytest.approx(0.75)
    assert frame.loc[12, "basal"] == pytest.approx(1.5)
    assert frame.loc[0, "target_low_mgdl"] == 100.0


def test_hourly_frame_matches_getters(make_switch):
    profile = SealedProfile(make_switch(percentage=80, timeshift_hours=-3))
    frame = hourly_profile_frame(profile)
    for hour in range(24):
        assert frame.loc[hour, "basal"] == pytest.approx(profile.get_basal_time_from_midnight(hour * 3600))
        assert frame.loc[hour, "ic"] == pytest.approx(profile.get_ic_time_from_midnight(hour * 3600))


def test_daily_totals(make_switch):
    totals = daily_basal_totals(SealedProfile(make_switch(percentage=200)))
    assert totals == {
        "base_basal_sum": pytest.approx(21.0),
        "percentage_basal_sum": pytest.approx(42.0),
        "max_daily_basal": 1.0,
    }


def test_compare_identical_profiles(make_switch, make_pure):
    assert compare_profiles(SealedProfile(make_switch()), SealedProfile(make_pure())).empty


def test_compare_shows_differing_hours(make_switch):
    diff = compare_profiles(SealedProfile(make_switch()), SealedProfile(make_switch(timeshift_hours=1)))
    # shifting by one hour moves the 06:00 change to 07:00
    assert diff["hour"].tolist() == [0, 6]
    assert diff.loc[0, "basal_first"] == 0.5
    assert diff.loc[0, "basal_second"] == 1.0
