from .records import EffectiveProfileSwitch, InsulinConfiguration, ProfileSwitch, PureProfile
from .sealed import (
    ExclusiveAccess,
    ProfileConfigurationError,
    ProfileValue,
    ProfileVariant,
    SealedProfile,
)
from .export import to_pure_ns_json

__all__ = [
    "EffectiveProfileSwitch",
    "InsulinConfiguration",
    "ProfileSwitch",
    "PureProfile",
    "ExclusiveAccess",
    "ProfileConfigurationError",
    "ProfileValue",
    "ProfileVariant",
    "SealedProfile",
    "to_pure_ns_json",
]
