"""
Review ledger - per-client bookkeeping around repeated patch application.

The ledger owns the live recipe between reviews. It layers three things on
top of the strict validator and applier:

- an undo stack of pre-application snapshots, bounded to `undo_capacity`
- soft deletes: removed ingredients stay visible (flagged) until the user
  approves or rejects the batch
- the ingredient-history guard: an ingredient whose text already appears in a
  completed step cannot be removed; a note is added in its place
"""

import logging
import re
from collections import deque
from typing import Deque, Dict, List, Optional, Set, Tuple

from ..constants import UNDO_STACK_CAPACITY
from ..exceptions import ValidationFailed
from ..models.change_set import ChangeSet, PatchResult, RejectedPatch
from ..models.patch import AddNote, Patch, PatchSet, RemoveIngredient, UpdateIngredient
from ..models.recipe import Ingredient, Recipe
from ..models.validation import InternalConflict
from .applier import apply_and_track
from .validator import validate_patch_set

logger = logging.getLogger(__name__)

# Leading quantities such as "2 ", "1/2 " or "½ "
_LEADING_QUANTITY = re.compile(r"^[\d\s/½¼¾⅓⅔]+")

USED_INGREDIENT_REASON = "Cannot remove ingredient already used in completed step"


def short_ingredient_name(text: str) -> str:
    """'2 cloves garlic, minced' -> 'cloves garlic'"""
    return _LEADING_QUANTITY.sub("", text).split(",")[0].strip()


def used_in_done_step(recipe: Recipe, ingredient: Ingredient) -> bool:
    """Whether the ingredient text appears, case-insensitively, in a completed step."""
    needle = ingredient.text.lower().strip()
    if not needle:
        return False
    return any(needle in step.text.lower() for step in recipe.done_steps())


def already_used_note(ingredient: Ingredient) -> AddNote:
    return AddNote(
        text=(
            f"{short_ingredient_name(ingredient.text)} was already used. "
            "If you already added it, proceed; otherwise skip it in future steps."
        )
    )


class PatchLedger:
    """Holds one recipe plus its undo history and pending review."""

    def __init__(self, recipe: Recipe, undo_capacity: int = UNDO_STACK_CAPACITY):
        if undo_capacity < 1:
            raise ValueError(f"undo_capacity must be at least 1, got {undo_capacity}")
        self._recipe = recipe.clone()
        self._undo_stack: Deque[Recipe] = deque(maxlen=undo_capacity)
        self._pending: Optional[ChangeSet] = None
        self._consumed_patch_set_ids: Set[str] = set()

    @property
    def recipe(self) -> Recipe:
        return self._recipe

    @property
    def pending_changes(self) -> Optional[ChangeSet]:
        """A copy of the change set awaiting review, if any."""
        return self._pending.model_copy(deep=True) if self._pending is not None else None

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    def apply(self, patch_set: PatchSet) -> PatchResult:
        """
        Validate, guard and apply a patch set, opening a review window.

        Raises:
            ValidationFailed: the batch was already consumed by this ledger, or
                does not validate against the current recipe. The ledger is
                unchanged.
        """
        if patch_set.patch_set_id in self._consumed_patch_set_ids:
            logger.warning(f"Patch set {patch_set.patch_set_id} was already applied, refusing replay")
            raise ValidationFailed([
                InternalConflict(message=f"Patch set {patch_set.patch_set_id} was already applied")
            ])

        result = validate_patch_set(patch_set, self._recipe)
        if not result.is_valid:
            logger.warning(
                f"Ledger refusing patch set {patch_set.patch_set_id}: "
                f"{[error.code for error in result.errors]}"
            )
            raise ValidationFailed(result.errors)

        patches, rejected = self._guard_history(patch_set)
        effective = patch_set.model_copy(update={"patches": patches})

        before = self._recipe.clone()
        updated, change_set = apply_and_track(effective, self._recipe, soft_delete=True)
        change_set.rejected_patches = rejected

        self._undo_stack.append(before)
        self._recipe = updated
        if self._pending is not None:
            logger.debug(f"Change set {self._pending.patch_set_id} superseded by {patch_set.patch_set_id}")
        self._pending = change_set
        self._consumed_patch_set_ids.add(patch_set.patch_set_id)

        logger.info(
            f"Ledger applied {patch_set.patch_set_id}: "
            f"{len(change_set.patches)} applied, {len(rejected)} rejected, "
            f"recipe now at version {updated.version}"
        )
        # Callers get copies; the pending change set backs reject_changes()
        exposed = change_set.model_copy(deep=True)
        return PatchResult(
            recipe=updated.clone(),
            applied_patches=list(exposed.patches),
            rejected_patches=list(exposed.rejected_patches),
            change_set=exposed,
        )

    def _guard_history(self, patch_set: PatchSet) -> Tuple[List[Patch], List[RejectedPatch]]:
        """
        Swap removals of already-used ingredients for an explanatory note.

        Removals are matched against the ingredient text as it stands at that
        point of the batch, so an earlier update_ingredient counts.
        """
        patches: List[Patch] = []
        rejected: List[RejectedPatch] = []

        if patch_set.replace_patch() is not None:
            return list(patch_set.patches), rejected

        current_texts: Dict[str, str] = {}
        for patch in patch_set.patches:
            if isinstance(patch, UpdateIngredient):
                current_texts[patch.id] = patch.text
            elif isinstance(patch, RemoveIngredient):
                ingredient = self._recipe.find_ingredient(patch.id)
                if ingredient is not None and patch.id in current_texts:
                    ingredient = ingredient.model_copy(update={"text": current_texts[patch.id]})
                if ingredient is not None and used_in_done_step(self._recipe, ingredient):
                    logger.warning(
                        f"Ingredient '{ingredient.text}' is used by a completed step, "
                        f"replacing its removal with a note"
                    )
                    rejected.append(RejectedPatch(patch=patch, reason=USED_INGREDIENT_REASON))
                    patches.append(already_used_note(ingredient))
                    continue
            patches.append(patch)

        return patches, rejected

    def approve_changes(self) -> Recipe:
        """Drop soft-deleted rows for good and close the review window."""
        purged = [ing for ing in self._recipe.ingredients if ing.removed]
        if purged:
            approved = self._recipe.clone()
            approved.ingredients = approved.live_ingredients()
            self._recipe = approved
        self._pending = None
        logger.info(f"Approved changes on recipe {self._recipe.id}, purged {len(purged)} ingredients")
        return self._recipe.clone()

    def reject_changes(self) -> Optional[ChangeSet]:
        """
        Revert the pending batch.

        Returns:
            The rejected change set, so the caller can report it upstream, or
            None when nothing is awaiting review.
        """
        if self._pending is None:
            logger.debug("Nothing to reject")
            return None

        rejected = self._pending
        self._recipe = rejected.previous_recipe.clone()
        # The snapshot pushed by apply() is now the live recipe
        if self._undo_stack:
            self._undo_stack.pop()
        self._pending = None
        logger.info(f"Rejected change set {rejected.patch_set_id}, recipe back to version {self._recipe.version}")
        return rejected

    def undo(self) -> Optional[Recipe]:
        """Restore the most recent snapshot. Returns None when there is nothing to undo."""
        if not self._undo_stack:
            logger.debug("Undo stack empty")
            return None
        self._recipe = self._undo_stack.pop()
        self._pending = None
        logger.info(f"Undo restored recipe {self._recipe.id} at version {self._recipe.version}")
        return self._recipe.clone()
