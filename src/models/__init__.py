"""Import all models for Alembic."""
from .base import TimestampMixin
from .enums import OrderMode, AuthTier, EmptyAllowlistPolicy
from .allowlist import AllowlistEntry
from .poem import Poem

__all__ = [
    "TimestampMixin",
    "OrderMode",
    "AuthTier",
    "EmptyAllowlistPolicy",
    "AllowlistEntry",
    "Poem",
]
