"""
Canonical (Nightscout-style) JSON export of a profile.

The field names and layout are consumed by external log and sync tools
and must not change.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, List, Sequence

from apsprofile.core.clock import MS_PER_HOUR, SECONDS_PER_HOUR

if TYPE_CHECKING:
    from apsprofile.core.profile.sealed import SealedProfile


def _format_hour(hours: int) -> str:
    return f"{hours:02d}:00"


def _sample_entries(blocks: Sequence, value_at: Callable[[int], float]) -> List[Dict[str, Any]]:
    # Samples are taken at each block's start truncated to whole hours, so
    # sub-hour blocks are under-represented in the export.
    entries: List[Dict[str, Any]] = []
    elapsed_hours = 0
    for block in blocks:
        seconds = elapsed_hours * SECONDS_PER_HOUR
        entries.append(
            {
                "time": _format_hour(elapsed_hours),
                "timeAsSeconds": seconds,
                "value": value_at(seconds),
            }
        )
        elapsed_hours += block.duration // MS_PER_HOUR
    return entries


def to_pure_ns_json(profile: "SealedProfile") -> Dict[str, Any]:
    """
    Build the canonical export document for ``profile``.

    Values are scaled and shifted the same way the profile's time-of-day
    getters report them; ISF and targets stay in the profile's own units.
    """
    document: Dict[str, Any] = {
        "units": profile.units.as_text,
        "dia": profile.dia,
        "timezone": profile.timezone or "UTC",
    }
    document["sens"] = _sample_entries(profile.isf_blocks, profile.get_isf_time_from_midnight)
    document["carbratio"] = _sample_entries(profile.ic_blocks, profile.get_ic_time_from_midnight)
    document["basal"] = _sample_entries(profile.basal_blocks, profile.get_basal_time_from_midnight)
    document["target_low"] = _sample_entries(profile.target_blocks, profile.get_target_low_time_from_midnight)
    document["target_high"] = _sample_entries(profile.target_blocks, profile.get_target_high_time_from_midnight)
    return document
