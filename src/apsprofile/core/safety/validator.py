"""
Profile safety validation.

Checks a profile against the pump's basal capabilities and against
absolute hard limits before it may be activated. Basal values outside the
pump range are corrected (clamped); every other violation only marks the
profile invalid. Each category reports at most one reason per pass.

Validation gates activation, not evaluation: an invalid profile can still
be queried.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from apsprofile.core.clock import MS_PER_HOUR
from apsprofile.core.devices.models import PumpDescription
from apsprofile.core.profile.sealed import ExclusiveAccess, SealedProfile
from apsprofile.core.safety.config import HardLimits
from apsprofile.core.units import round_to, to_mgdl
from apsprofile.notifications import Notification, NotificationCode, NotificationSink, Severity

logger = logging.getLogger("apsprofile.safety")


class ValidationCategory(Enum):
    BASAL_NOT_ALIGNED = "basal_not_aligned"
    BASAL_BELOW_MINIMUM = "basal_below_minimum"
    BASAL_ABOVE_MAXIMUM = "basal_above_maximum"
    BASAL_HARD_LIMIT = "basal_hard_limit"
    DIA_HARD_LIMIT = "dia_hard_limit"
    IC_HARD_LIMIT = "ic_hard_limit"
    ISF_HARD_LIMIT = "isf_hard_limit"
    LOW_TARGET_HARD_LIMIT = "low_target_hard_limit"
    HIGH_TARGET_HARD_LIMIT = "high_target_hard_limit"


@dataclass
class ValidityResult:
    is_valid: bool = True
    reasons: List[str] = field(default_factory=list)
    categories: List[ValidationCategory] = field(default_factory=list)
    profile: Optional[SealedProfile] = None
    corrected_blocks: int = 0

    @property
    def ok(self) -> bool:
        return self.is_valid

    def has(self, category: ValidationCategory) -> bool:
        return category in self.categories

    def add(self, category: ValidationCategory, reason: str) -> bool:
        """Record ``reason`` unless ``category`` already failed. Returns True if recorded."""
        if category in self.categories:
            return False
        self.is_valid = False
        self.categories.append(category)
        self.reasons.append(reason)
        return True


def _out_of_hard_limits(label: str, value: float) -> str:
    return f"{label} value out of hard limits: {value:.2f}"


class ProfileValidator:
    """
    Validates profiles against pump capabilities and hard limits.

    Args:
        notifier: Receives a notification for every correcting category
            (and for misaligned basal when ``aps_mode`` is set).
        aps_mode: Whether the host runs closed loop; alignment problems are
            only announced in that mode.
    """

    def __init__(self, notifier: Optional[NotificationSink] = None, aps_mode: bool = True) -> None:
        self.notifier = notifier
        self.aps_mode = aps_mode

    def _notify(self, code: NotificationCode, message: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier(Notification(code=code, message=message, severity=Severity.NORMAL))
        except Exception as exc:
            logger.error("Notifier %r failed for %s: %s", self.notifier, code.name, exc)

    def validate(
        self,
        profile: SealedProfile,
        pump: PumpDescription,
        hard_limits: Optional[HardLimits] = None,
        source: str = "",
        token: Optional[ExclusiveAccess] = None,
    ) -> ValidityResult:
        """
        Run every check in order and return the outcome.

        Args:
            profile: Profile to check.
            pump: Basal capabilities of the target pump.
            hard_limits: Absolute limits; defaults to :class:`HardLimits`.
            source: Caller name included in human-readable reasons.
            token: When it grants ``profile``, basal corrections are written to
                ``profile`` itself. Otherwise a private copy is corrected and
                returned as ``result.profile``.

        Returns:
            ValidityResult: Validity flag, ordered reasons, corrected profile.

        Raises:
            ValueError: If ``token`` is given but does not grant ``profile``.
        """
        if hard_limits is None:
            hard_limits = HardLimits()

        if token is not None:
            if not token.grants(profile):
                raise ValueError("Exclusive access token does not grant this profile")
            target = profile
        else:
            target = profile.copy()

        result = ValidityResult(profile=target)
        self._check_basal(target, pump, hard_limits, source, result)
        self._check_hard_limits(target, hard_limits, result)

        if not result.is_valid:
            logger.info("Profile %r from %r invalid: %s", target.profile_name, source, "; ".join(result.reasons))
        return result

    def _check_basal(
        self,
        profile: SealedProfile,
        pump: PumpDescription,
        limits: HardLimits,
        source: str,
        result: ValidityResult,
    ) -> None:
        multiplier = profile.percentage / 100.0
        for block in profile.basal_blocks:
            # 1. Alignment to whole hours
            if not pump.supports_sub_hour_basal and block.duration % MS_PER_HOUR != 0:
                message = f"Basal values not aligned to hours: {source}"
                if result.add(ValidationCategory.BASAL_NOT_ALIGNED, message) and self.aps_mode:
                    self._notify(NotificationCode.BASAL_PROFILE_NOT_ALIGNED_TO_HOURS, message)

            # 2. Device range, corrected in place
            basal_amount = block.amount * multiplier
            if basal_amount < pump.basal_minimum_rate:
                logger.warning(
                    "Basal %.3f U/h below pump minimum %.3f U/h, replacing (%s)",
                    basal_amount, pump.basal_minimum_rate, source,
                )
                block.amount = pump.basal_minimum_rate / multiplier
                result.corrected_blocks += 1
                message = f"Basal value replaced by minimum supported value: {source}"
                if result.add(ValidationCategory.BASAL_BELOW_MINIMUM, message):
                    self._notify(NotificationCode.MINIMAL_BASAL_VALUE_REPLACED, message)
            elif basal_amount > pump.basal_maximum_rate:
                logger.warning(
                    "Basal %.3f U/h above pump maximum %.3f U/h, replacing (%s)",
                    basal_amount, pump.basal_maximum_rate, source,
                )
                block.amount = pump.basal_maximum_rate / multiplier
                result.corrected_blocks += 1
                message = f"Basal value replaced by maximum supported value: {source}"
                if result.add(ValidationCategory.BASAL_ABOVE_MAXIMUM, message):
                    self._notify(NotificationCode.MAXIMUM_BASAL_VALUE_REPLACED, message)

            # 3. Hard basal range, not corrected
            basal_amount = block.amount * multiplier
            if not limits.is_in_range(basal_amount, limits.min_basal, limits.max_basal):
                result.add(ValidationCategory.BASAL_HARD_LIMIT, _out_of_hard_limits("Basal", basal_amount))

    def _check_hard_limits(self, profile: SealedProfile, limits: HardLimits, result: ValidityResult) -> None:
        if not limits.is_in_range(profile.dia, limits.min_dia, limits.max_dia):
            result.add(ValidationCategory.DIA_HARD_LIMIT, _out_of_hard_limits("DIA", profile.dia))

        ratio_multiplier = 100.0 / profile.percentage
        for block in profile.ic_blocks:
            ic = block.amount * ratio_multiplier
            if not limits.is_in_range(ic, limits.min_ic, limits.max_ic):
                result.add(ValidationCategory.IC_HARD_LIMIT, _out_of_hard_limits("IC", ic))
                break

        for block in profile.isf_blocks:
            isf = block.amount * ratio_multiplier
            if not limits.is_in_range(to_mgdl(isf, profile.units), limits.min_isf, limits.max_isf):
                result.add(ValidationCategory.ISF_HARD_LIMIT, _out_of_hard_limits("ISF", isf))
                break

        for block in profile.target_blocks:
            low_mgdl = round_to(to_mgdl(block.low_target, profile.units), 0.1)
            high_mgdl = round_to(to_mgdl(block.high_target, profile.units), 0.1)
            if not limits.is_in_range(low_mgdl, limits.min_low_target, limits.max_low_target):
                result.add(ValidationCategory.LOW_TARGET_HARD_LIMIT, _out_of_hard_limits("Low target", block.low_target))
            if not limits.is_in_range(high_mgdl, limits.min_high_target, limits.max_high_target):
                result.add(ValidationCategory.HIGH_TARGET_HARD_LIMIT, _out_of_hard_limits("High target", block.high_target))


def validate_profile(
    profile: SealedProfile,
    pump: PumpDescription,
    hard_limits: Optional[HardLimits] = None,
    source: str = "",
    notifier: Optional[NotificationSink] = None,
    aps_mode: bool = True,
) -> ValidityResult:
    """Validate a private copy of ``profile`` with a one-off :class:`ProfileValidator`."""
    return ProfileValidator(notifier=notifier, aps_mode=aps_mode).validate(profile, pump, hard_limits, source)
