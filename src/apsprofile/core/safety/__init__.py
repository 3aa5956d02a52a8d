from .config import HardLimits

__all__ = ["HardLimits", "ProfileValidator", "ValidityResult", "ValidationCategory", "validate_profile"]


def __getattr__(name: str):
    if name in ("ProfileValidator", "ValidityResult", "ValidationCategory", "validate_profile"):
        from . import validator

        return getattr(validator, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
