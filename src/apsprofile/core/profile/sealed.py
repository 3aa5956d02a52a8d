"""
Sealed profile: one evaluation surface over every profile source.

``SealedProfile`` wraps exactly one of :class:`ProfileSwitch`,
:class:`EffectiveProfileSwitch` or :class:`PureProfile`. The fields that
differ between sources are extracted once in :func:`_extract_fields`;
everything else (scaling, timeshift, unit conversion) is shared, so
callers only need :attr:`SealedProfile.variant` for identity metadata.
"""
from __future__ import annotations

import copy
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import tzinfo
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Union

from apsprofile.core.clock import MS_PER_HOUR, SECONDS_PER_HOUR, now_millis, seconds_from_midnight, timezone_id_by_offset
from apsprofile.core.profile.records import EffectiveProfileSwitch, InsulinConfiguration, ProfileSwitch, PureProfile
from apsprofile.core.schedule.blocks import Block, TargetBlock
from apsprofile.core.schedule.evaluator import (
    block_value_by_seconds,
    high_target_block_value_by_seconds,
    low_target_block_value_by_seconds,
    target_block_value_by_seconds,
)
from apsprofile.core.schedule.normalizer import shift_block, shift_target_block
from apsprofile.core.units import GlucoseUnit, to_mgdl

ProfileSource = Union[ProfileSwitch, EffectiveProfileSwitch, PureProfile]


class ProfileConfigurationError(ValueError):
    """Raised when a profile source cannot be evaluated (e.g. non-positive percentage)."""


class ProfileVariant(Enum):
    PROFILE_SWITCH = "profile_switch"
    EFFECTIVE_PROFILE_SWITCH = "effective_profile_switch"
    PURE = "pure"


@dataclass(frozen=True)
class ProfileValue:
    time_as_seconds: int
    value: float


@dataclass
class _ProfileFields:
    variant: ProfileVariant
    id: int
    is_valid: bool
    timestamp: int
    profile_name: str
    duration: Optional[int]
    timeshift: int  # [hours]
    percentage: int
    insulin_configuration: InsulinConfiguration
    utc_offset: int
    units: GlucoseUnit
    timezone: str


def _millis_to_whole_hours(value: int) -> int:
    hours = abs(value) // MS_PER_HOUR
    return hours if value >= 0 else -hours


def _extract_fields(source: ProfileSource) -> _ProfileFields:
    if isinstance(source, ProfileSwitch):
        return _ProfileFields(
            variant=ProfileVariant.PROFILE_SWITCH,
            id=source.id,
            is_valid=source.is_valid,
            timestamp=source.timestamp,
            profile_name=source.profile_name,
            duration=source.duration,
            timeshift=_millis_to_whole_hours(source.timeshift),
            percentage=source.percentage,
            insulin_configuration=source.insulin_configuration,
            utc_offset=source.utc_offset,
            units=source.glucose_unit,
            timezone=timezone_id_by_offset(source.utc_offset),
        )
    if isinstance(source, EffectiveProfileSwitch):
        # blocks are already scaled and shifted
        return _ProfileFields(
            variant=ProfileVariant.EFFECTIVE_PROFILE_SWITCH,
            id=source.id,
            is_valid=source.is_valid,
            timestamp=source.timestamp,
            profile_name=source.original_profile_name,
            duration=None,
            timeshift=0,
            percentage=100,
            insulin_configuration=source.insulin_configuration,
            utc_offset=source.utc_offset,
            units=source.glucose_unit,
            timezone=timezone_id_by_offset(source.utc_offset),
        )
    if isinstance(source, PureProfile):
        return _ProfileFields(
            variant=ProfileVariant.PURE,
            id=0,
            is_valid=True,
            timestamp=0,
            profile_name="",
            duration=None,
            timeshift=0,
            percentage=100,
            insulin_configuration=InsulinConfiguration.from_dia_hours(source.dia),
            utc_offset=0,
            units=source.glucose_unit,
            timezone=source.timezone,
        )
    raise TypeError(f"Unsupported profile source: {type(source).__name__}")


class ExclusiveAccess:
    """
    Proof that the holder is the profile's only writer.

    The lock serializes writers and :meth:`SealedProfile.copy`; evaluation
    getters do not take it.
    """

    def __init__(self, profile: "SealedProfile") -> None:
        self.profile = profile
        self.active = True

    def grants(self, profile: "SealedProfile") -> bool:
        return self.active and self.profile is profile


class SealedProfile:
    """
    Evaluation view over a profile source.

    Basal values scale by ``percentage / 100``; IC and ISF scale by
    ``100 / percentage``. ISF and targets are converted to mg/dL by the
    ``*_mgdl`` getters; basal and IC never are.

    Args:
        source: The record to wrap.
        tz: Zone used to project instants onto time-of-day. ``None`` uses
            the host's local zone.
        timezone: Zone id reported by :attr:`timezone` and the export,
            overriding the one derived from the source.

    Raises:
        ProfileConfigurationError: If the percentage is not positive.
        TypeError: If ``source`` is not a known profile record.
    """

    def __init__(self, source: ProfileSource, tz: Optional[tzinfo] = None, timezone: Optional[str] = None) -> None:
        fields = _extract_fields(source)
        if timezone:
            fields.timezone = timezone
        if fields.percentage <= 0:
            raise ProfileConfigurationError(
                f"Profile percentage must be > 0, got {fields.percentage}"
            )
        self._source = source
        self._fields = fields
        self.tz = tz
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Identity and configuration
    # ------------------------------------------------------------------

    @property
    def source(self) -> ProfileSource:
        return self._source

    @property
    def variant(self) -> ProfileVariant:
        return self._fields.variant

    @property
    def id(self) -> int:
        return self._fields.id

    @property
    def is_valid(self) -> bool:
        return self._fields.is_valid

    @property
    def timestamp(self) -> int:
        return self._fields.timestamp

    @property
    def duration(self) -> Optional[int]:
        return self._fields.duration

    @property
    def profile_name(self) -> str:
        return self._fields.profile_name

    @property
    def percentage(self) -> int:
        return self._fields.percentage

    @property
    def timeshift(self) -> int:
        return self._fields.timeshift

    @property
    def units(self) -> GlucoseUnit:
        return self._fields.units

    @property
    def insulin_configuration(self) -> InsulinConfiguration:
        return self._fields.insulin_configuration

    @property
    def dia(self) -> float:
        return self._fields.insulin_configuration.dia_hours

    @property
    def utc_offset(self) -> int:
        return self._fields.utc_offset

    @property
    def timezone(self) -> str:
        return self._fields.timezone

    @property
    def basal_blocks(self) -> List[Block]:
        return self._source.basal_blocks

    @property
    def isf_blocks(self) -> List[Block]:
        return self._source.isf_blocks

    @property
    def ic_blocks(self) -> List[Block]:
        return self._source.ic_blocks

    @property
    def target_blocks(self) -> List[TargetBlock]:
        return self._source.target_blocks

    @property
    def _basal_multiplier(self) -> float:
        return self.percentage / 100.0

    @property
    def _ratio_multiplier(self) -> float:
        return 100.0 / self.percentage

    def _seconds(self, timestamp: Optional[int]) -> int:
        return seconds_from_midnight(timestamp, self.tz)

    def __repr__(self) -> str:
        return (
            f"SealedProfile(variant={self.variant.value}, name={self.profile_name!r}, "
            f"percentage={self.percentage}, timeshift={self.timeshift})"
        )

    # ------------------------------------------------------------------
    # Point-in-time queries (timestamp=None means now)
    # ------------------------------------------------------------------

    def get_basal(self, timestamp: Optional[int] = None) -> float:
        return self.get_basal_time_from_midnight(self._seconds(timestamp))

    def get_ic(self, timestamp: Optional[int] = None) -> float:
        return self.get_ic_time_from_midnight(self._seconds(timestamp))

    def get_isf_mgdl(self, timestamp: Optional[int] = None) -> float:
        return self.get_isf_mgdl_time_from_midnight(self._seconds(timestamp))

    def get_target_mgdl(self, timestamp: Optional[int] = None) -> float:
        return to_mgdl(target_block_value_by_seconds(self.target_blocks, self._seconds(timestamp), self.timeshift), self.units)

    def get_target_low_mgdl(self, timestamp: Optional[int] = None) -> float:
        return self.get_target_low_mgdl_time_from_midnight(self._seconds(timestamp))

    def get_target_high_mgdl(self, timestamp: Optional[int] = None) -> float:
        return self.get_target_high_mgdl_time_from_midnight(self._seconds(timestamp))

    # ------------------------------------------------------------------
    # Time-of-day queries
    # ------------------------------------------------------------------

    def get_basal_time_from_midnight(self, time_as_seconds: int) -> float:
        return block_value_by_seconds(self.basal_blocks, time_as_seconds, self._basal_multiplier, self.timeshift)

    def get_ic_time_from_midnight(self, time_as_seconds: int) -> float:
        return block_value_by_seconds(self.ic_blocks, time_as_seconds, self._ratio_multiplier, self.timeshift)

    def get_isf_time_from_midnight(self, time_as_seconds: int) -> float:
        return block_value_by_seconds(self.isf_blocks, time_as_seconds, self._ratio_multiplier, self.timeshift)

    def get_isf_mgdl_time_from_midnight(self, time_as_seconds: int) -> float:
        return to_mgdl(self.get_isf_time_from_midnight(time_as_seconds), self.units)

    def get_target_low_time_from_midnight(self, time_as_seconds: int) -> float:
        return low_target_block_value_by_seconds(self.target_blocks, time_as_seconds, self.timeshift)

    def get_target_high_time_from_midnight(self, time_as_seconds: int) -> float:
        return high_target_block_value_by_seconds(self.target_blocks, time_as_seconds, self.timeshift)

    def get_target_low_mgdl_time_from_midnight(self, time_as_seconds: int) -> float:
        return to_mgdl(self.get_target_low_time_from_midnight(time_as_seconds), self.units)

    def get_target_high_mgdl_time_from_midnight(self, time_as_seconds: int) -> float:
        return to_mgdl(self.get_target_high_time_from_midnight(time_as_seconds), self.units)

    # ------------------------------------------------------------------
    # Whole-day views
    # ------------------------------------------------------------------

    def is_equal(self, other: "SealedProfile") -> bool:
        """True when both profiles give the same values at every whole hour and share DIA."""
        if self.dia != other.dia:
            return False
        for hour in range(24):
            seconds = hour * SECONDS_PER_HOUR
            if self.get_basal_time_from_midnight(seconds) != other.get_basal_time_from_midnight(seconds):
                return False
            if self.get_isf_mgdl_time_from_midnight(seconds) != other.get_isf_mgdl_time_from_midnight(seconds):
                return False
            if self.get_ic_time_from_midnight(seconds) != other.get_ic_time_from_midnight(seconds):
                return False
            if self.get_target_low_mgdl_time_from_midnight(seconds) != other.get_target_low_mgdl_time_from_midnight(seconds):
                return False
            if self.get_target_high_mgdl_time_from_midnight(seconds) != other.get_target_high_mgdl_time_from_midnight(seconds):
                return False
        return True

    def is_in_progress(self, now: Optional[int] = None) -> bool:
        if now is None:
            now = now_millis()
        if self.duration is None:
            return now >= self.timestamp
        return self.timestamp <= now <= self.timestamp + self.duration

    def get_max_daily_basal(self) -> float:
        if not self.basal_blocks:
            return 0.0
        return max(block.amount for block in self.basal_blocks)

    def base_basal_sum(self) -> float:
        """Hourly basal total with the percentage undone."""
        return sum(
            self.get_basal_time_from_midnight(hour * SECONDS_PER_HOUR) / self._basal_multiplier
            for hour in range(24)
        )

    def percentage_basal_sum(self) -> float:
        return sum(self.get_basal_time_from_midnight(hour * SECONDS_PER_HOUR) for hour in range(24))

    def _values(self, blocks: List[Block], multiplier: float, mgdl: bool = False) -> List[ProfileValue]:
        values: List[ProfileValue] = []
        elapsed = 0
        for block in shift_block(blocks, multiplier, self.timeshift):
            amount = to_mgdl(block.amount, self.units) if mgdl else block.amount
            values.append(ProfileValue(elapsed, amount))
            elapsed += block.duration // 1000
        return values

    def get_basal_values(self) -> List[ProfileValue]:
        return self._values(self.basal_blocks, self._basal_multiplier)

    def get_ics_values(self) -> List[ProfileValue]:
        return self._values(self.ic_blocks, self._ratio_multiplier)

    def get_isfs_mgdl_values(self) -> List[ProfileValue]:
        return self._values(self.isf_blocks, self._ratio_multiplier, mgdl=True)

    def get_single_targets_mgdl(self) -> List[ProfileValue]:
        values: List[ProfileValue] = []
        elapsed = 0
        for block in shift_target_block(self.target_blocks, self.timeshift):
            values.append(ProfileValue(elapsed, to_mgdl(block.midpoint, self.units)))
            elapsed += block.duration // 1000
        return values

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def to_pure_ns_json(self) -> Dict[str, Any]:
        from apsprofile.core.profile.export import to_pure_ns_json

        return to_pure_ns_json(self)

    def convert_to_non_customized_profile(self) -> PureProfile:
        """Bake percentage and timeshift into a midnight-aligned :class:`PureProfile`."""
        return PureProfile(
            basal_blocks=shift_block(self.basal_blocks, self._basal_multiplier, self.timeshift),
            isf_blocks=shift_block(self.isf_blocks, self._ratio_multiplier, self.timeshift),
            ic_blocks=shift_block(self.ic_blocks, self._ratio_multiplier, self.timeshift),
            target_blocks=shift_target_block(self.target_blocks, self.timeshift),
            glucose_unit=self.units,
            dia=self.dia,
            timezone=self.timezone,
            json_object=self.to_pure_ns_json(),
        )

    def copy(self) -> "SealedProfile":
        """Independent profile over a deep copy of the source record."""
        with self._lock:
            return SealedProfile(copy.deepcopy(self._source), tz=self.tz, timezone=self.timezone)

    @contextmanager
    def exclusive_access(self) -> Iterator[ExclusiveAccess]:
        """Hold the profile's write lock; the yielded token authorizes in-place correction."""
        with self._lock:
            token = ExclusiveAccess(self)
            try:
                yield token
            finally:
                token.active = False
