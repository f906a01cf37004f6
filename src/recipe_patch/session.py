"""
Editing session - holds the live UI state and the visible chat transcript.

The session is the seam between the reducer and the assistant integration:
it feeds events through `reduce`, keeps a bounded transcript of what the user
can see, and builds the outgoing message (hidden facts included) that the
integration layer sends to the model.
"""

import logging
import time
from collections import deque
from typing import Deque, List, Literal, Optional

from pydantic import BaseModel, Field

from .constants import MAX_TRANSCRIPT_MESSAGES
from .models.patch import PatchSet, PatchSetStatus
from .models.recipe import Recipe, new_id
from .models.ui_state import (
    AcceptPatch,
    ChatOpen,
    HiddenContext,
    OpenChat,
    PatchProposed,
    PatchReceived,
    PatchReview,
    RecipeOnly,
    RejectPatch,
    UIEvent,
    UIState,
    ValidatePatch,
)
from .services.context_composer import compose_user_message
from .services.state_machine import reduce

logger = logging.getLogger(__name__)


class ChatMessage(BaseModel):
    """A message as rendered in the transcript. Never carries hidden context."""

    id: str = Field(default_factory=new_id)
    role: Literal["user", "assistant", "system"]
    text: str
    timestamp: float = Field(default_factory=time.time)


class EditingSession:
    """One user editing one recipe through chat."""

    def __init__(self, recipe: Recipe, max_messages: int = MAX_TRANSCRIPT_MESSAGES):
        self.state: UIState = RecipeOnly(recipe=recipe)
        self._transcript: Deque[ChatMessage] = deque(maxlen=max_messages)
        self.resolved_patch_sets: List[PatchSet] = []

    @property
    def recipe(self) -> Recipe:
        return self.state.recipe

    @property
    def hidden(self) -> HiddenContext:
        return getattr(self.state, "hidden", HiddenContext())

    @property
    def transcript(self) -> List[ChatMessage]:
        return list(self._transcript)

    @property
    def pending_patch_set(self) -> Optional[PatchSet]:
        if isinstance(self.state, (PatchProposed, PatchReview)):
            return self.state.patch_set
        return None

    def dispatch(self, event: UIEvent) -> UIState:
        previous = self.state
        self.state = reduce(self.state, event)
        if self.state is not previous:
            logger.debug(f"{type(previous).__name__} -> {type(self.state).__name__} on {type(event).__name__}")
        return self.state

    def open_chat(self) -> UIState:
        return self.dispatch(OpenChat())

    def send_user_message(self, text: str) -> Optional[str]:
        """
        Record a user message and build what goes to the assistant.

        Only the trimmed user text enters the transcript. The returned string
        carries the hidden context block when there is one.

        Returns:
            The composed outgoing message, or None for blank input.
        """
        trimmed = text.strip()
        if not trimmed:
            return None
        self._append(ChatMessage(role="user", text=trimmed))
        return compose_user_message(trimmed, self.hidden)

    def receive_assistant_message(self, text: str, patch_set: Optional[PatchSet] = None) -> UIState:
        """Record the assistant reply and hand any proposed patch set to the reducer."""
        if text.strip():
            self._append(ChatMessage(role="assistant", text=text.strip()))
        if patch_set is not None:
            return self.dispatch(PatchReceived(patch_set=patch_set))
        return self.state

    def accept(self) -> bool:
        """Validate if needed, then accept. Returns whether the patch set was applied."""
        patch_set = self.pending_patch_set
        if patch_set is None:
            return False
        if isinstance(self.state, PatchProposed):
            self.dispatch(ValidatePatch())
        self.dispatch(AcceptPatch())
        if isinstance(self.state, RecipeOnly):
            self.resolved_patch_sets.append(patch_set.with_status(PatchSetStatus.ACCEPTED))
            return True
        return False

    def reject(self, user_text: str = "") -> bool:
        """Reject the pending proposal and reopen the chat with `user_text` as draft."""
        patch_set = self.pending_patch_set
        if patch_set is None:
            return False
        if isinstance(self.state, PatchProposed):
            self.dispatch(ValidatePatch())
        self.dispatch(RejectPatch(user_text=user_text))
        if isinstance(self.state, ChatOpen):
            self.resolved_patch_sets.append(patch_set.with_status(PatchSetStatus.REJECTED))
            return True
        return False

    def _append(self, message: ChatMessage) -> None:
        self._transcript.append(message)
