from .poem import (
    PoemResponse,
    IndexedPoemResponse,
    PoemNavigationResponse,
    ToggleFavoriteRequest,
    ToggleFavoriteResponse,
    SuccessResponse,
    GeneratedPoemResponse,
    SketchRequest,
    SketchResponse,
)
from .settings import (
    SettingsResponse,
    SettingsUpdate,
    UpdateSettingsRequest,
    SetDisplayPoemRequest,
    UsesWebDisplayResponse,
)
from .admin import (
    AllowlistUserResponse,
    AdminUsersResponse,
    AddUserRequest,
    AddUserResponse,
)

__all__ = [
    "PoemResponse",
    "IndexedPoemResponse",
    "PoemNavigationResponse",
    "ToggleFavoriteRequest",
    "ToggleFavoriteResponse",
    "SuccessResponse",
    "GeneratedPoemResponse",
    "SketchRequest",
    "SketchResponse",
    "SettingsResponse",
    "SettingsUpdate",
    "UpdateSettingsRequest",
    "SetDisplayPoemRequest",
    "UsesWebDisplayResponse",
    "AllowlistUserResponse",
    "AdminUsersResponse",
    "AddUserRequest",
    "AddUserResponse",
]
