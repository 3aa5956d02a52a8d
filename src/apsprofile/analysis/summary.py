"""
Tabular views of a profile for reports and the CLI.
"""
from __future__ import annotations

from typing import Dict

import numpy as np
import pandas as pd

from apsprofile.core.clock import SECONDS_PER_HOUR
from apsprofile.core.profile.sealed import SealedProfile
from apsprofile.core.schedule.evaluator import block_values_by_seconds_array


def hourly_profile_frame(profile: SealedProfile) -> pd.DataFrame:
    """
    One row per whole hour with every scheduled value as the loop sees it.

    Basal and IC are in their own units; ISF and targets are in mg/dL.
    """
    seconds = np.arange(24, dtype=np.int64) * SECONDS_PER_HOUR
    basal = block_values_by_seconds_array(
        profile.basal_blocks, seconds, profile.percentage / 100.0, profile.timeshift
    )
    ic = block_values_by_seconds_array(
        profile.ic_blocks, seconds, 100.0 / profile.percentage, profile.timeshift
    )
    return pd.DataFrame(
        {
            "hour": np.arange(24),
            "time": [f"{hour:02d}:00" for hour in range(24)],
            "basal": basal,
            "ic": ic,
            "isf_mgdl": [profile.get_isf_mgdl_time_from_midnight(int(s)) for s in seconds],
            "target_low_mgdl": [profile.get_target_low_mgdl_time_from_midnight(int(s)) for s in seconds],
            "target_high_mgdl": [profile.get_target_high_mgdl_time_from_midnight(int(s)) for s in seconds],
        }
    )


def daily_basal_totals(profile: SealedProfile) -> Dict[str, float]:
    return {
        "base_basal_sum": float(profile.base_basal_sum()),
        "percentage_basal_sum": float(profile.percentage_basal_sum()),
        "max_daily_basal": float(profile.get_max_daily_basal()),
    }


def compare_profiles(first: SealedProfile, second: SealedProfile) -> pd.DataFrame:
    """Hours at which two profiles differ, with both sets of values side by side."""
    left = hourly_profile_frame(first).set_index("hour")
    right = hourly_profile_frame(second).set_index("hour")
    value_columns = ["basal", "ic", "isf_mgdl", "target_low_mgdl", "target_high_mgdl"]
    differs = (left[value_columns] != right[value_columns]).any(axis=1)
    joined = left[value_columns].join(right[value_columns], lsuffix="_first", rsuffix="_second")
    return joined[differs].reset_index()
