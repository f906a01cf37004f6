"""
UI state and event models for the chat/review flow.

Exactly one `UIState` is live at a time. States are immutable values; the
reducer in `services.state_machine` builds a new one for every transition.
"""

from typing import Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from .patch import PatchSet
from .recipe import Recipe
from .validation import ValidationResult


class HiddenContext(BaseModel):
    """Facts silently prefixed onto the next outgoing message, never rendered."""

    model_config = ConfigDict(frozen=True)

    entries: Tuple[str, ...] = ()

    def appending(self, entry: str) -> 'HiddenContext':
        return HiddenContext(entries=self.entries + (entry,))

    def __bool__(self) -> bool:
        return bool(self.entries)


class _State(BaseModel):
    model_config = ConfigDict(frozen=True)

    recipe: Recipe


class RecipeOnly(_State):
    """No chat panel, recipe canvas visible."""


class ChatOpen(_State):
    """Chat panel open, user composing a message."""

    draft_text: str = ""
    hidden: HiddenContext = Field(default_factory=HiddenContext)


class PatchProposed(_State):
    """A patch set arrived from the assistant and has not been validated."""

    patch_set: PatchSet
    validation: Optional[ValidationResult] = None
    hidden: HiddenContext = Field(default_factory=HiddenContext)


class PatchReview(_State):
    """The patch set was validated and awaits accept or reject."""

    patch_set: PatchSet
    validation: ValidationResult
    hidden: HiddenContext = Field(default_factory=HiddenContext)


UIState = Union[RecipeOnly, ChatOpen, PatchProposed, PatchReview]


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)


class OpenChat(_Event):
    pass


class CloseChat(_Event):
    pass


class UserDraftChanged(_Event):
    text: str


class PatchReceived(_Event):
    patch_set: PatchSet


class ValidatePatch(_Event):
    pass


class AcceptPatch(_Event):
    pass


class RejectPatch(_Event):
    """Discard the proposal and return to chat with `user_text` as the new draft."""

    user_text: str = ""


UIEvent = Union[
    OpenChat,
    CloseChat,
    UserDraftChanged,
    PatchReceived,
    ValidatePatch,
    AcceptPatch,
    RejectPatch,
]
