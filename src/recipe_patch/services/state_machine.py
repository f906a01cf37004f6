"""
Deterministic reducer for the chat/review flow.

    RecipeOnly --OpenChat--> ChatOpen --PatchReceived--> PatchProposed
    PatchProposed --ValidatePatch--> PatchReview
    PatchReview --AcceptPatch (valid)--> RecipeOnly(applied recipe)
    PatchReview --RejectPatch--> ChatOpen (rejection fact appended to hidden)
    ChatOpen --CloseChat--> RecipeOnly

Any (state, event) pair not listed returns the state unchanged. That includes
a second PatchReceived while a proposal is pending and AcceptPatch on an
invalid review.
"""
import logging

from ..exceptions import ValidationFailed
from ..models.ui_state import (
    AcceptPatch,
    ChatOpen,
    CloseChat,
    HiddenContext,
    OpenChat,
    PatchProposed,
    PatchReceived,
    PatchReview,
    RecipeOnly,
    RejectPatch,
    UIEvent,
    UIState,
    UserDraftChanged,
    ValidatePatch,
)
from .applier import apply_patch_set
from .context_composer import rejection_fact
from .validator import validate_patch_set

logger = logging.getLogger(__name__)


def reduce(state: UIState, event: UIEvent) -> UIState:
    """Return the next state. Never raises for a well-formed state and event."""
    if isinstance(state, RecipeOnly):
        if isinstance(event, OpenChat):
            return ChatOpen(recipe=state.recipe, draft_text="", hidden=HiddenContext())

    elif isinstance(state, ChatOpen):
        if isinstance(event, CloseChat):
            return RecipeOnly(recipe=state.recipe)
        if isinstance(event, UserDraftChanged):
            return ChatOpen(recipe=state.recipe, draft_text=event.text, hidden=state.hidden)
        if isinstance(event, PatchReceived):
            return PatchProposed(
                recipe=state.recipe,
                patch_set=event.patch_set,
                validation=None,
                hidden=state.hidden,
            )

    elif isinstance(state, PatchProposed):
        if isinstance(event, ValidatePatch):
            return PatchReview(
                recipe=state.recipe,
                patch_set=state.patch_set,
                validation=validate_patch_set(state.patch_set, state.recipe),
                hidden=state.hidden,
            )

    elif isinstance(state, PatchReview):
        if isinstance(event, AcceptPatch):
            if not state.validation.is_valid:
                logger.debug(f"Ignoring accept of invalid patch set {state.patch_set.patch_set_id}")
                return state
            try:
                updated = apply_patch_set(state.patch_set, state.recipe)
            except ValidationFailed as e:
                logger.warning(f"Accepted patch set {state.patch_set.patch_set_id} failed to apply: {e}")
                return state
            return RecipeOnly(recipe=updated)
        if isinstance(event, RejectPatch):
            return ChatOpen(
                recipe=state.recipe,
                draft_text=event.user_text,
                hidden=state.hidden.appending(rejection_fact(state.patch_set.patch_set_id)),
            )

    logger.debug(f"No transition for {type(event).__name__} in {type(state).__name__}")
    return state
