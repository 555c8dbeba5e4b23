"""
Core functionality for SaltBloom.
"""

from saltbloom.core.base import MembershipFilter, RemovableFilter
from saltbloom.core.config import FilterConfig
from saltbloom.core.hash import HashDeriver, slot_index
from saltbloom.core.probability import false_positive_probability

__all__ = [
    # Base classes
    "MembershipFilter",
    "RemovableFilter",
    "FilterConfig",
    # Utility functions
    "HashDeriver",
    "slot_index",
    "false_positive_probability",
]
