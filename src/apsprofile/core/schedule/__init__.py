from .blocks import Block, TargetBlock, total_duration
from .evaluator import (
    block_value_by_seconds,
    block_values_by_seconds_array,
    high_target_block_value_by_seconds,
    low_target_block_value_by_seconds,
    target_block_value_by_seconds,
    target_range_by_seconds,
)
from .normalizer import normalize, normalize_targets, shift_block, shift_target_block

__all__ = [
    "Block",
    "TargetBlock",
    "total_duration",
    "block_value_by_seconds",
    "block_values_by_seconds_array",
    "high_target_block_value_by_seconds",
    "low_target_block_value_by_seconds",
    "target_block_value_by_seconds",
    "target_range_by_seconds",
    "normalize",
    "normalize_targets",
    "shift_block",
    "shift_target_block",
]
