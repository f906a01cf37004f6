"""Service applying a validated patch set to a recipe, all or nothing"""
import logging
from typing import List, Tuple

from ..exceptions import ValidationFailed
from ..models.change_set import ChangeSet
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
from ..models.recipe import Ingredient, Recipe, Step
from ..models.validation import InvalidIngredientId, InvalidStepId
from .validator import validate_patch_set

logger = logging.getLogger(__name__)


def apply_patch_set(patch_set: PatchSet, recipe: Recipe, *, soft_delete: bool = False) -> Recipe:
    """
    Apply a batch and return the new recipe.

    Raises:
        ValidationFailed: the batch does not validate against `recipe`. Nothing
            is applied and `recipe` is left as it was.
    """
    updated, _ = apply_and_track(patch_set, recipe, soft_delete=soft_delete)
    return updated


def apply_and_track(
    patch_set: PatchSet,
    recipe: Recipe,
    *,
    soft_delete: bool = False,
) -> Tuple[Recipe, ChangeSet]:
    """
    Apply a batch and also report which ids and note indices it touched.

    Works on a deep copy that is only returned once every patch went through.
    With `soft_delete`, removed ingredients stay in place flagged `removed`
    so a review screen can still show them; steps are always deleted.
    """
    result = validate_patch_set(patch_set, recipe)
    if not result.is_valid:
        logger.warning(
            f"Refusing patch set {patch_set.patch_set_id}: "
            f"{[error.code for error in result.errors]}"
        )
        raise ValidationFailed(result.errors)

    previous = recipe.clone()

    replace = patch_set.replace_patch()
    if replace is not None:
        if len(patch_set.patches) > 1:
            logger.debug(
                f"Patch set {patch_set.patch_set_id} contains replace_recipe, "
                f"ignoring {len(patch_set.patches) - 1} other patches"
            )
        updated = _replace_recipe(recipe, replace)
        change_set = ChangeSet(
            kind="replace_recipe",
            patch_set_id=patch_set.patch_set_id,
            patches=[replace],
            previous_recipe=previous,
        )
        logger.info(f"Replaced recipe {recipe.id}, now at version {updated.version}")
        return updated, change_set

    working = recipe.clone()
    change_set = ChangeSet(patch_set_id=patch_set.patch_set_id, previous_recipe=previous)

    for patch in patch_set.patches:
        if isinstance(patch, AddIngredient):
            ingredient = Ingredient(text=patch.text)
            _insert_after(working.ingredients, ingredient, patch.after_id)
            change_set.added_ingredient_ids.append(ingredient.id)

        elif isinstance(patch, UpdateIngredient):
            index = _live_ingredient_index(working, patch.id)
            working.ingredients[index].text = patch.text
            change_set.changed_ingredient_ids.append(patch.id)

        elif isinstance(patch, RemoveIngredient):
            index = _live_ingredient_index(working, patch.id)
            if soft_delete:
                working.ingredients[index].removed = True
            else:
                del working.ingredients[index]
            change_set.removed_ingredient_ids.append(patch.id)

        elif isinstance(patch, AddStep):
            step = Step(text=patch.text, status="todo")
            _insert_after(working.steps, step, patch.after_step_id)
            change_set.added_step_ids.append(step.id)

        elif isinstance(patch, UpdateStep):
            index = _step_index(working, patch.step_id)
            working.steps[index].text = patch.text
            change_set.changed_step_ids.append(patch.step_id)

        elif isinstance(patch, RemoveStep):
            index = _step_index(working, patch.id)
            del working.steps[index]
            if working.current_step_id == patch.id:
                working.current_step_id = None
            change_set.removed_step_ids.append(patch.id)

        elif isinstance(patch, AddNote):
            working.notes.append(patch.text)
            change_set.added_note_indices.append(len(working.notes) - 1)

        change_set.patches.append(patch)

    working.version = recipe.version + 1
    logger.info(
        f"Applied {len(patch_set.patches)} patches from {patch_set.patch_set_id} "
        f"to recipe {recipe.id}, now at version {working.version}"
    )
    return working, change_set


def _replace_recipe(recipe: Recipe, patch: ReplaceRecipe) -> Recipe:
    """Build a fresh document keeping only the recipe id."""
    ingredients = [Ingredient(text=text) for text in patch.ingredients]
    steps = [Step(text=text, status="todo") for text in patch.steps]
    return Recipe(
        id=recipe.id,
        version=recipe.version + 1,
        title=patch.title,
        ingredients=ingredients,
        steps=steps,
        notes=[],
        current_step_id=steps[0].id if steps else None,
    )


def _insert_after(items: List, item, after_id) -> None:
    """Insert right after `after_id` as it stands now, or append."""
    if after_id is not None:
        for index, existing in enumerate(items):
            if existing.id == after_id:
                items.insert(index + 1, item)
                return
    items.append(item)


def _live_ingredient_index(recipe: Recipe, ingredient_id: str) -> int:
    for index, ingredient in enumerate(recipe.ingredients):
        if ingredient.id == ingredient_id and not ingredient.removed:
            return index
    # Unreachable after validation; fail loudly rather than corrupt the copy
    raise ValidationFailed([InvalidIngredientId(id=ingredient_id)])


def _step_index(recipe: Recipe, step_id: str) -> int:
    for index, step in enumerate(recipe.steps):
        if step.id == step_id:
            return index
    raise ValidationFailed([InvalidStepId(id=step_id)])
