"""
Services package initializer.

Re-exports important service classes so callers can import from
`src.services` instead of deep module paths.
"""

from .navigation import SequentialNavigator, NavigationWindow, PAGE_SIZE
from .ownership import OwnedMutationGuard

__all__ = [
    "SequentialNavigator",
    "NavigationWindow",
    "PAGE_SIZE",
    "OwnedMutationGuard",
]
