"""Recipe patch package: validate, apply and review assistant-proposed recipe edits."""

from .exceptions import PatchError, ValidationFailed
from .models import (
    ChangeSet,
    HiddenContext,
    Ingredient,
    Invalid,
    Patch,
    PatchSet,
    Recipe,
    Step,
    Valid,
)
from .services import (
    PatchLedger,
    apply_and_track,
    apply_patch_set,
    compose_user_message,
    reduce,
    validate_patch_set,
)
from .session import EditingSession

__all__ = [
    "ChangeSet",
    "EditingSession",
    "HiddenContext",
    "Ingredient",
    "Invalid",
    "Patch",
    "PatchError",
    "PatchLedger",
    "PatchSet",
    "Recipe",
    "Step",
    "Valid",
    "ValidationFailed",
    "apply_and_track",
    "apply_patch_set",
    "compose_user_message",
    "reduce",
    "validate_patch_set",
]
