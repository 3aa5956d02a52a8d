from .models import PumpDescription

__all__ = ["PumpDescription"]
