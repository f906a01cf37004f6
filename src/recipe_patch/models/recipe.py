"""
Recipe models - the versioned document edited through patches.

A recipe is an ordered list of ingredients, an ordered list of steps and a
list of free-text notes. Every successful patch application bumps `version`
by exactly one; patch sets carry the version they were proposed against.
"""

import uuid
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, model_validator


def new_id() -> str:
    """Mint an opaque identifier for a recipe, ingredient or step."""
    return str(uuid.uuid4())


class Ingredient(BaseModel):
    """A single ingredient line as displayed to the cook."""

    id: str = Field(
        default_factory=new_id,
        description="Stable identifier, never reused within a recipe"
    )
    text: str = Field(
        description="Free-text ingredient line (e.g., '2 cups flour')"
    )
    checked: bool = Field(
        default=False,
        description="Whether the cook has ticked this ingredient off"
    )
    removed: bool = Field(
        default=False,
        description="Soft-delete flag, set while a removal awaits review"
    )


class Step(BaseModel):
    """A single preparation step."""

    id: str = Field(
        default_factory=new_id,
        description="Stable identifier"
    )
    text: str = Field(
        description="Instruction text"
    )
    status: Literal["todo", "done"] = Field(
        default="todo",
        description="Completed steps are immutable through patches"
    )

    @property
    def is_done(self) -> bool:
        return self.status == "done"


class Recipe(BaseModel):
    """
    Root aggregate edited by the patch protocol.

    Value equality compares every field, so two recipes with the same content
    and version are equal regardless of identity.
    """

    id: str = Field(
        default_factory=new_id,
        description="Document identifier, immutable for its lifetime"
    )
    version: int = Field(
        default=1,
        ge=0,
        description="Incremented by exactly one on every applied patch set"
    )
    title: str = Field(
        description="Recipe title"
    )
    ingredients: List[Ingredient] = Field(
        default_factory=list,
        description="Ingredients in display order"
    )
    steps: List[Step] = Field(
        default_factory=list,
        description="Steps in execution order"
    )
    notes: List[str] = Field(
        default_factory=list,
        description="Append-only free-text notes"
    )
    current_step_id: Optional[str] = Field(
        default=None,
        description="Step the cook is currently working on, if any"
    )

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'Recipe':
        """Reject documents whose ingredient or step ids collide."""
        errors: list[str] = []

        ingredient_ids = [ing.id for ing in self.ingredients]
        duplicated = sorted({i for i in ingredient_ids if ingredient_ids.count(i) > 1})
        if duplicated:
            errors.append(f"Duplicate ingredient ids: {duplicated}")

        step_ids = [step.id for step in self.steps]
        duplicated = sorted({i for i in step_ids if step_ids.count(i) > 1})
        if duplicated:
            errors.append(f"Duplicate step ids: {duplicated}")

        if errors:
            raise ValueError("Recipe validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

        return self

    def clone(self) -> 'Recipe':
        """Deep copy, safe to keep as an undo or revert snapshot."""
        return self.model_copy(deep=True)

    def live_ingredients(self) -> List[Ingredient]:
        return [ing for ing in self.ingredients if not ing.removed]

    def find_ingredient(self, ingredient_id: str) -> Optional[Ingredient]:
        """Return the live ingredient with this id, ignoring soft-deleted rows."""
        for ing in self.ingredients:
            if ing.id == ingredient_id and not ing.removed:
                return ing
        return None

    def find_step(self, step_id: str) -> Optional[Step]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None

    def done_steps(self) -> List[Step]:
        return [step for step in self.steps if step.is_done]
