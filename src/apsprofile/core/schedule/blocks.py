from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass
class Block:
    """One constant piece of a daily schedule."""
    duration: int  # [milliseconds]
    amount: float

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"Block duration must be >= 0 ms, got {self.duration}")
        self.duration = int(self.duration)
        self.amount = float(self.amount)

    def copy(self) -> "Block":
        return Block(duration=self.duration, amount=self.amount)


@dataclass
class TargetBlock:
    """
    One constant piece of a target range schedule.

    ``low_target <= high_target`` is expected but not enforced here; the
    safety validator is responsible for range checks.
    """
    duration: int  # [milliseconds]
    low_target: float
    high_target: float

    def __post_init__(self):
        if self.duration < 0:
            raise ValueError(f"TargetBlock duration must be >= 0 ms, got {self.duration}")
        self.duration = int(self.duration)
        self.low_target = float(self.low_target)
        self.high_target = float(self.high_target)

    @property
    def midpoint(self) -> float:
        return (self.low_target + self.high_target) / 2.0

    def copy(self) -> "TargetBlock":
        return TargetBlock(duration=self.duration, low_target=self.low_target, high_target=self.high_target)


def total_duration(blocks: Sequence) -> int:
    return sum(block.duration for block in blocks)
