"""Service deciding whether a patch set may be applied to a recipe"""
import logging
from typing import List, Set

from ..models.patch import (
    AddIngredient,
    AddNote,
    AddStep,
    PatchSet,
    RemoveIngredient,
    RemoveStep,
    ReplaceRecipe,
    UpdateIngredient,
    UpdateStep,
)
from ..models.recipe import Recipe
from ..models.validation import (
    Invalid,
    InvalidIngredientId,
    InvalidStepId,
    PatchValidationError,
    RecipeIdMismatch,
    StepDoneImmutable,
    Valid,
    ValidationResult,
    VersionMismatch,
)

logger = logging.getLogger(__name__)


def validate_patch_set(patch_set: PatchSet, recipe: Recipe) -> ValidationResult:
    """
    Check a whole batch against a recipe without touching either.

    Every patch is inspected in order and every violation is collected; the
    walk never stops at the first problem. Ids removed earlier in the batch
    count as gone for the patches that follow them.

    Returns:
        Valid() when nothing was found, otherwise Invalid(errors) in
        discovery order. The same violation may appear more than once.
    """
    errors: List[PatchValidationError] = []

    if patch_set.base_recipe_version != recipe.version:
        errors.append(VersionMismatch(expected=recipe.version, got=patch_set.base_recipe_version))

    if patch_set.base_recipe_id != recipe.id:
        errors.append(RecipeIdMismatch(expected=recipe.id, got=patch_set.base_recipe_id))

    removed_ingredient_ids: Set[str] = set()
    removed_step_ids: Set[str] = set()

    def ingredient_available(ingredient_id: str) -> bool:
        return recipe.find_ingredient(ingredient_id) is not None and ingredient_id not in removed_ingredient_ids

    def step_available(step_id: str) -> bool:
        return recipe.find_step(step_id) is not None and step_id not in removed_step_ids

    for index, patch in enumerate(patch_set.patches):
        if isinstance(patch, AddIngredient):
            if patch.after_id is not None and not ingredient_available(patch.after_id):
                errors.append(InvalidIngredientId(id=patch.after_id))

        elif isinstance(patch, UpdateIngredient):
            if not ingredient_available(patch.id):
                errors.append(InvalidIngredientId(id=patch.id))

        elif isinstance(patch, RemoveIngredient):
            if not ingredient_available(patch.id):
                errors.append(InvalidIngredientId(id=patch.id))
            else:
                removed_ingredient_ids.add(patch.id)

        elif isinstance(patch, AddStep):
            if patch.after_step_id is not None and not step_available(patch.after_step_id):
                errors.append(InvalidStepId(id=patch.after_step_id))

        elif isinstance(patch, UpdateStep):
            if not step_available(patch.step_id):
                errors.append(InvalidStepId(id=patch.step_id))
            elif recipe.find_step(patch.step_id).is_done:
                errors.append(StepDoneImmutable(id=patch.step_id))

        elif isinstance(patch, RemoveStep):
            if not step_available(patch.id):
                errors.append(InvalidStepId(id=patch.id))
            elif recipe.find_step(patch.id).is_done:
                errors.append(StepDoneImmutable(id=patch.id))
            else:
                removed_step_ids.add(patch.id)

        elif isinstance(patch, (AddNote, ReplaceRecipe)):
            pass

        else:
            raise TypeError(f"Unsupported patch type at index {index}: {type(patch).__name__}")

    if errors:
        logger.debug(
            f"Patch set {patch_set.patch_set_id} invalid against recipe {recipe.id} v{recipe.version}: "
            f"{[error.code for error in errors]}"
        )
        return Invalid(errors=errors)

    logger.debug(f"Patch set {patch_set.patch_set_id} valid ({len(patch_set.patches)} patches)")
    return Valid()
