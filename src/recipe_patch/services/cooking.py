"""Cooking progress updates made directly by the cook, outside the patch protocol"""
import logging

from ..models.recipe import Recipe

logger = logging.getLogger(__name__)


def toggle_ingredient(recipe: Recipe, ingredient_id: str) -> Recipe:
    """Flip the checked flag. Unknown ids leave the recipe unchanged."""
    if recipe.find_ingredient(ingredient_id) is None:
        logger.debug(f"toggle_ingredient: unknown ingredient {ingredient_id}")
        return recipe

    updated = recipe.clone()
    for ingredient in updated.ingredients:
        if ingredient.id == ingredient_id:
            ingredient.checked = not ingredient.checked
    updated.version = recipe.version + 1
    return updated


def mark_step_done(recipe: Recipe, step_id: str) -> Recipe:
    """
    Complete a step and move the cursor to the next todo step.

    Once done, the step's text can no longer be changed through patches.
    Unknown or already completed steps leave the recipe unchanged.
    """
    step = recipe.find_step(step_id)
    if step is None or step.is_done:
        return recipe

    updated = recipe.clone()
    for candidate in updated.steps:
        if candidate.id == step_id:
            candidate.status = "done"

    next_todo = next((s for s in updated.steps if not s.is_done), None)
    updated.current_step_id = next_todo.id if next_todo else None
    updated.version = recipe.version + 1
    logger.info(f"Step {step_id} done, current step now {updated.current_step_id}")
    return updated


def set_current_step(recipe: Recipe, step_id: str) -> Recipe:
    """Point the cursor at a todo step. Does not change the version."""
    step = recipe.find_step(step_id)
    if step is None or step.is_done:
        return recipe
    updated = recipe.clone()
    updated.current_step_id = step_id
    return updated
