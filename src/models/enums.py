"""Enums shared by models, services and schemas."""
import enum


class OrderMode(str, enum.Enum):
    """Ordering of a user's poems."""
    favorite_first = "favorite_first"
    date_only = "date_only"


class AuthTier(str, enum.Enum):
    """How a request's subject was established."""
    token = "token"
    param = "param"


class EmptyAllowlistPolicy(str, enum.Enum):
    """Behaviour of the allowlist check while the allowlist is empty."""
    open = "open"
    closed = "closed"
