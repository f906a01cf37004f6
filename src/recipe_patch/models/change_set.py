"""ChangeSet models - what the last applied batch touched, for diff highlighting and revert."""

from typing import List, Literal

from pydantic import BaseModel, Field

from .patch import Patch
from .recipe import Recipe


class RejectedPatch(BaseModel):
    """A patch the ledger refused while still applying the rest of its batch."""

    patch: Patch
    reason: str


class ChangeSet(BaseModel):
    """
    Derived record of one successful application.

    Not authoritative: the recipe is. A change set is replaced by the next
    application and cleared on approve or reject.
    """

    kind: Literal["patches", "replace_recipe"] = Field(
        default="patches",
        description="replace_recipe change sets carry no per-item ids"
    )
    patch_set_id: str = Field(
        description="Patch set that produced these changes"
    )
    added_ingredient_ids: List[str] = Field(default_factory=list)
    changed_ingredient_ids: List[str] = Field(default_factory=list)
    removed_ingredient_ids: List[str] = Field(default_factory=list)
    added_step_ids: List[str] = Field(default_factory=list)
    changed_step_ids: List[str] = Field(default_factory=list)
    removed_step_ids: List[str] = Field(default_factory=list)
    added_note_indices: List[int] = Field(default_factory=list)
    patches: List[Patch] = Field(
        default_factory=list,
        description="Patches actually applied, substitutes included"
    )
    rejected_patches: List[RejectedPatch] = Field(default_factory=list)
    previous_recipe: Recipe = Field(
        description="Deep snapshot of the recipe before the batch"
    )

    @property
    def is_empty(self) -> bool:
        return not (
            self.added_ingredient_ids
            or self.changed_ingredient_ids
            or self.removed_ingredient_ids
            or self.added_step_ids
            or self.changed_step_ids
            or self.removed_step_ids
            or self.added_note_indices
        ) and self.kind == "patches"


class PatchResult(BaseModel):
    """Outcome of `PatchLedger.apply`."""

    recipe: Recipe
    applied_patches: List[Patch] = Field(default_factory=list)
    rejected_patches: List[RejectedPatch] = Field(default_factory=list)
    change_set: ChangeSet
