import pytest

from recipe_patch.models import Ingredient, PatchSet, Recipe, Step

# Stable ids for deterministic tests
RECIPE_ID = "00000000-0000-0000-ffff-000000000001"
FLOUR_ID = "00000000-0000-0000-0000-000000000001"
SALT_ID = "00000000-0000-0000-0000-000000000002"
WATER_ID = "00000000-0000-0000-0000-000000000003"
STEP_MIX_ID = "00000000-0000-0000-0001-000000000001"
STEP_BAKE_ID = "00000000-0000-0000-0001-000000000002"
STEP_DONE_ID = "00000000-0000-0000-0001-000000000003"
PATCH_SET_ID = "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa"


def make_seed_recipe() -> Recipe:
    """Simple Bread at version 1: two todo steps and one done step."""
    return Recipe(
        id=RECIPE_ID,
        version=1,
        title="Simple Bread",
        ingredients=[
            Ingredient(id=FLOUR_ID, text="2 cups flour"),
            Ingredient(id=SALT_ID, text="1 tsp salt"),
            Ingredient(id=WATER_ID, text="3/4 cup water"),
        ],
        steps=[
            Step(id=STEP_MIX_ID, text="Mix dry ingredients", status="todo"),
            Step(id=STEP_BAKE_ID, text="Bake at 375°F for 30 min", status="todo"),
            Step(id=STEP_DONE_ID, text="Let cool on rack", status="done"),
        ],
        notes=[],
    )


def make_patch_set(recipe: Recipe, patches, **kwargs) -> PatchSet:
    """Patch set against the recipe's current id and version unless overridden."""
    defaults = {
        "patch_set_id": PATCH_SET_ID,
        "base_recipe_id": recipe.id,
        "base_recipe_version": recipe.version,
    }
    defaults.update(kwargs)
    return PatchSet(patches=patches, **defaults)


@pytest.fixture
def recipe() -> Recipe:
    return make_seed_recipe()
