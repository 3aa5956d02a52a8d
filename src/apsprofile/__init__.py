# src/apsprofile/__init__.py

__version__ = "0.1.0"

# Schedule primitives
from .core.schedule import (
    Block,
    TargetBlock,
    block_value_by_seconds,
    shift_block,
    shift_target_block,
)
from .core.units import GlucoseUnit, to_mgdl

# Profiles
from .core.profile import (
    EffectiveProfileSwitch,
    InsulinConfiguration,
    ProfileConfigurationError,
    ProfileSwitch,
    ProfileValue,
    ProfileVariant,
    PureProfile,
    SealedProfile,
    to_pure_ns_json,
)

# Safety
from .core.devices.models import PumpDescription
from .core.safety import HardLimits
from .core.safety.validator import ProfileValidator, ValidationCategory, ValidityResult, validate_profile
from .notifications import Notification, NotificationBus, NotificationCode, Severity

# Overrides
from .core.temporary_basal import (
    ExtendedBolus,
    TemporaryBasal,
    TemporaryBasalType,
    active_temporary_basal,
)
from .core.basal_state import BasalSnapshot, take_basal_snapshot

# Documents and presets
from .validation import load_profile_json, pure_profile_from_dict
from .presets import hard_limits_for

__all__ = [
    # Schedule
    "Block", "TargetBlock", "block_value_by_seconds", "shift_block", "shift_target_block",
    "GlucoseUnit", "to_mgdl",
    # Profiles
    "EffectiveProfileSwitch",
    "InsulinConfiguration",
    "ProfileConfigurationError",
    "ProfileSwitch",
    "ProfileValue",
    "ProfileVariant",
    "PureProfile",
    "SealedProfile",
    "to_pure_ns_json",
    # Safety
    "PumpDescription",
    "HardLimits",
    "ProfileValidator",
    "ValidationCategory",
    "ValidityResult",
    "validate_profile",
    "Notification",
    "NotificationBus",
    "NotificationCode",
    "Severity",
    # Overrides
    "ExtendedBolus",
    "TemporaryBasal",
    "TemporaryBasalType",
    "active_temporary_basal",
    "BasalSnapshot",
    "take_basal_snapshot",
    # Documents and presets
    "load_profile_json",
    "pure_profile_from_dict",
    "hard_limits_for",
]
