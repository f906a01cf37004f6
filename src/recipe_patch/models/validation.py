"""Validation outcome models.

Errors are plain values: the validator collects every one it finds and hands
the whole list back, so a client can surface all violations at once.
"""

from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field


class VersionMismatch(BaseModel):
    """The batch was proposed against a stale recipe version."""
    code: Literal["VERSION_MISMATCH"] = "VERSION_MISMATCH"
    expected: int
    got: int


class RecipeIdMismatch(BaseModel):
    """The batch targets a different document."""
    code: Literal["RECIPE_ID_MISMATCH"] = "RECIPE_ID_MISMATCH"
    expected: str
    got: str


class InvalidIngredientId(BaseModel):
    """The id is unknown, or was already removed earlier in the batch."""
    code: Literal["INVALID_INGREDIENT_ID"] = "INVALID_INGREDIENT_ID"
    id: str


class InvalidStepId(BaseModel):
    code: Literal["INVALID_STEP_ID"] = "INVALID_STEP_ID"
    id: str


class StepDoneImmutable(BaseModel):
    """A completed step was targeted by an update or removal."""
    code: Literal["STEP_DONE_IMMUTABLE"] = "STEP_DONE_IMMUTABLE"
    id: str


class InternalConflict(BaseModel):
    """The batch contradicts itself or the ledger's history."""
    code: Literal["INTERNAL_CONFLICT"] = "INTERNAL_CONFLICT"
    message: str


PatchValidationError = Annotated[
    Union[
        VersionMismatch,
        RecipeIdMismatch,
        InvalidIngredientId,
        InvalidStepId,
        StepDoneImmutable,
        InternalConflict,
    ],
    Field(discriminator="code"),
]


class Valid(BaseModel):
    kind: Literal["valid"] = "valid"

    @property
    def is_valid(self) -> bool:
        return True

    @property
    def errors(self) -> List[PatchValidationError]:
        return []


class Invalid(BaseModel):
    kind: Literal["invalid"] = "invalid"
    errors: List[PatchValidationError] = Field(
        description="Every violation found, in discovery order"
    )

    @property
    def is_valid(self) -> bool:
        return False


ValidationResult = Annotated[Union[Valid, Invalid], Field(discriminator="kind")]


def describe_error(error: PatchValidationError) -> str:
    """Human readable one-liner for logs and the CLI."""
    if isinstance(error, VersionMismatch):
        return f"Recipe is at version {error.expected} but the patch set targets version {error.got}"
    if isinstance(error, RecipeIdMismatch):
        return f"Patch set targets recipe '{error.got}', not '{error.expected}'"
    if isinstance(error, InvalidIngredientId):
        return f"Ingredient '{error.id}' does not exist or was already removed"
    if isinstance(error, InvalidStepId):
        return f"Step '{error.id}' does not exist or was already removed"
    if isinstance(error, StepDoneImmutable):
        return f"Step '{error.id}' is done and cannot be changed"
    return error.message
