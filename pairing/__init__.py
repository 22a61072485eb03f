"""
Original/remix key pairing.
"""

from .engine import KeyPair, pair_keys
from .rules import (
    DEFAULT_RULES,
    MatchRules,
    extract_number,
    final_segment,
    leading_number_sort_key,
    natural_sort_key,
    normalize_stem,
)

__all__ = [
    'KeyPair',
    'pair_keys',
    'DEFAULT_RULES',
    'MatchRules',
    'extract_number',
    'final_segment',
    'leading_number_sort_key',
    'natural_sort_key',
    'normalize_stem',
]
