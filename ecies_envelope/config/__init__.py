"""
ECIES Configuration Package

Centralizes limits, defaults and ambient settings for the ECIES core.
"""

from .ecies_config import (
    ECIES_CONSTANTS,
    ECIES_DEFAULTS,
    get_default_suite,
)

__all__ = [
    'ECIES_CONSTANTS',
    'ECIES_DEFAULTS',
    'get_default_suite',
]
