from .summary import compare_profiles, daily_basal_totals, hourly_profile_frame

__all__ = ["compare_profiles", "daily_basal_totals", "hourly_profile_frame"]
