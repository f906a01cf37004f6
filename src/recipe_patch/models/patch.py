"""
Patch models - the closed set of edit operations an assistant may propose.

Each operation is its own model tagged by `op`, and `Patch` is the
discriminated union of all of them. Payloads coming from the assistant are
parsed with `PATCH_ADAPTER` (or as part of a `PatchSet`), so an unknown `op`
or a missing field is rejected by pydantic before the validator ever runs.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from .recipe import Recipe, new_id


class AddIngredient(BaseModel):
    op: Literal["add_ingredient"] = "add_ingredient"
    text: str = Field(description="Ingredient line to add")
    after_id: Optional[str] = Field(
        default=None,
        description="Insert right after this ingredient; append when null"
    )


class UpdateIngredient(BaseModel):
    op: Literal["update_ingredient"] = "update_ingredient"
    id: str = Field(description="Ingredient to rewrite")
    text: str = Field(description="Replacement text")


class RemoveIngredient(BaseModel):
    op: Literal["remove_ingredient"] = "remove_ingredient"
    id: str = Field(description="Ingredient to remove")


class AddStep(BaseModel):
    op: Literal["add_step"] = "add_step"
    text: str = Field(description="Instruction text")
    after_step_id: Optional[str] = Field(
        default=None,
        description="Insert right after this step; append when null"
    )


class UpdateStep(BaseModel):
    op: Literal["update_step"] = "update_step"
    step_id: str = Field(description="Step to rewrite, must still be todo")
    text: str = Field(description="Replacement text")


class RemoveStep(BaseModel):
    op: Literal["remove_step"] = "remove_step"
    id: str = Field(description="Step to remove, must still be todo")


class AddNote(BaseModel):
    op: Literal["add_note"] = "add_note"
    text: str = Field(description="Note text")


class ReplaceRecipe(BaseModel):
    """Rewrite the whole document. Wins over every other patch in its set."""

    op: Literal["replace_recipe"] = "replace_recipe"
    title: str = Field(description="New recipe title")
    ingredients: List[str] = Field(
        default_factory=list,
        description="Ingredient texts, in display order"
    )
    steps: List[str] = Field(
        default_factory=list,
        description="Step texts, in execution order"
    )


Patch = Annotated[
    Union[
        AddIngredient,
        UpdateIngredient,
        RemoveIngredient,
        AddStep,
        UpdateStep,
        RemoveStep,
        AddNote,
        ReplaceRecipe,
    ],
    Field(discriminator="op"),
]

PATCH_ADAPTER = TypeAdapter(Patch)


class PatchSetStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class PatchSet(BaseModel):
    """
    A batch of patches proposed together against one recipe version.

    A patch set is consumed once by validate-then-apply. `status` is review
    metadata only; the validator never looks at it.
    """

    patch_set_id: str = Field(
        default_factory=new_id,
        description="Unique per proposal"
    )
    base_recipe_id: str = Field(
        description="Recipe the batch was proposed against"
    )
    base_recipe_version: int = Field(
        description="Recipe version the batch was proposed against"
    )
    patches: List[Patch] = Field(
        default_factory=list,
        description="Operations, applied in order"
    )
    summary: Optional[str] = Field(
        default=None,
        description="Assistant's one-line description of the edit"
    )
    base_recipe_snapshot: Optional[Recipe] = Field(
        default=None,
        description="Copy of the base recipe, kept for audit"
    )
    status: PatchSetStatus = Field(
        default=PatchSetStatus.PENDING,
        description="Review outcome"
    )

    @classmethod
    def for_recipe(cls, recipe: Recipe, patches: List[Patch], **kwargs) -> 'PatchSet':
        """Build a patch set targeting the current id and version of `recipe`."""
        return cls(
            base_recipe_id=recipe.id,
            base_recipe_version=recipe.version,
            patches=patches,
            **kwargs,
        )

    def replace_patch(self) -> Optional[ReplaceRecipe]:
        """The first replace_recipe patch of the batch, if any."""
        for patch in self.patches:
            if isinstance(patch, ReplaceRecipe):
                return patch
        return None

    def with_status(self, status: PatchSetStatus) -> 'PatchSet':
        return self.model_copy(update={"status": status})
