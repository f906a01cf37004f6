"""
Tests for the patch applier.

These tests validate that:
- Invalid batches raise ValidationFailed and leave the recipe untouched
- Version increments exactly once per batch
- Insert-after re-resolves its anchor against the mutated sequence
- replace_recipe takes over the whole batch
- Change sets report the ids and note indices that were touched
"""

import pytest

from recipe_patch.exceptions import ValidationFailed
from recipe_patch.models import (
    AddIngredient,
    AddNote,
    AddStep,
    InvalidIngredientId,
    RemoveIngredient,
    RemoveStep,
    ReplaceRecipe,
    StepDoneImmutable,
    UpdateIngredient,
    UpdateStep,
    VersionMismatch,
)
from recipe_patch.services.applier import apply_and_track, apply_patch_set

from conftest import (
    FLOUR_ID,
    SALT_ID,
    STEP_BAKE_ID,
    STEP_DONE_ID,
    STEP_MIX_ID,
    WATER_ID,
    make_patch_set,
)


# ═══════════════════════════════════════════════════════════════════
# TESTS: atomicity
# ═══════════════════════════════════════════════════════════════════

class TestAtomicity:

    def test_done_step_update_fails_and_recipe_unchanged(self, recipe):
        before = recipe.clone()
        patch_set = make_patch_set(recipe, [UpdateStep(step_id=STEP_DONE_ID, text="changed")])

        with pytest.raises(ValidationFailed) as exc_info:
            apply_patch_set(patch_set, recipe)

        assert exc_info.value.errors == [StepDoneImmutable(id=STEP_DONE_ID)]
        assert recipe == before

    def test_no_partial_application(self, recipe):
        """Valid leading patches are not applied when a later one is invalid."""
        before = recipe.clone()
        patch_set = make_patch_set(recipe, [
            AddNote(text="Knead 10 min"),
            UpdateIngredient(id=SALT_ID, text="2 tsp salt"),
            RemoveStep(id=STEP_DONE_ID),
        ])

        with pytest.raises(ValidationFailed):
            apply_patch_set(patch_set, recipe)

        assert recipe == before
        assert recipe.notes == []
        assert recipe.ingredients[1].text == "1 tsp salt"

    def test_stale_version_fails(self, recipe):
        patch_set = make_patch_set(recipe, [AddNote(text="late")], base_recipe_version=0)

        with pytest.raises(ValidationFailed) as exc_info:
            apply_patch_set(patch_set, recipe)

        assert exc_info.value.errors == [VersionMismatch(expected=1, got=0)]
        assert "VERSION_MISMATCH" in str(exc_info.value)

    def test_input_recipe_not_mutated_on_success(self, recipe):
        before = recipe.clone()
        patch_set = make_patch_set(recipe, [
            UpdateIngredient(id=FLOUR_ID, text="3 cups flour"),
            RemoveIngredient(id=SALT_ID),
            AddStep(text="Proof 1 hour", after_step_id=STEP_MIX_ID),
        ])

        updated = apply_patch_set(patch_set, recipe)

        assert recipe == before
        assert updated != recipe


# ═══════════════════════════════════════════════════════════════════
# TESTS: successful application
# ═══════════════════════════════════════════════════════════════════

class TestApply:

    def test_add_note_scenario(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [AddNote(text="Knead 10 min")]), recipe)

        assert updated.version == 2
        assert updated.notes == ["Knead 10 min"]
        assert updated.model_copy(update={"version": 1, "notes": []}) == recipe

    @pytest.mark.parametrize("batch_size", [0, 1, 4])
    def test_version_increments_once(self, recipe, batch_size):
        patches = [AddNote(text=f"note {i}") for i in range(batch_size)]
        updated = apply_patch_set(make_patch_set(recipe, patches), recipe)
        assert updated.version == recipe.version + 1

    def test_update_ingredient_in_place(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [UpdateIngredient(id=SALT_ID, text="2 tsp salt")]), recipe)
        assert [ing.text for ing in updated.ingredients] == ["2 cups flour", "2 tsp salt", "3/4 cup water"]
        assert updated.ingredients[1].id == SALT_ID

    def test_remove_ingredient_hard_deletes(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [RemoveIngredient(id=SALT_ID)]), recipe)
        assert [ing.id for ing in updated.ingredients] == [FLOUR_ID, WATER_ID]

    def test_remove_ingredient_soft_delete(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [RemoveIngredient(id=SALT_ID)]), recipe, soft_delete=True)
        assert [ing.id for ing in updated.ingredients] == [FLOUR_ID, SALT_ID, WATER_ID]
        assert updated.ingredients[1].removed is True
        assert [ing.id for ing in updated.live_ingredients()] == [FLOUR_ID, WATER_ID]

    def test_add_ingredient_after_anchor(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [AddIngredient(text="1 tbsp yeast", after_id=FLOUR_ID)]), recipe)
        assert [ing.text for ing in updated.ingredients] == ["2 cups flour", "1 tbsp yeast", "1 tsp salt", "3/4 cup water"]

    def test_add_ingredient_appends_and_mints_fresh_id(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [AddIngredient(text="1 tbsp yeast")]), recipe)
        added = updated.ingredients[-1]
        assert added.text == "1 tbsp yeast"
        assert added.id not in {FLOUR_ID, SALT_ID, WATER_ID}
        assert added.checked is False

    def test_add_step_defaults_to_todo(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [AddStep(text="Slice")]), recipe)
        assert updated.steps[-1].text == "Slice"
        assert updated.steps[-1].status == "todo"

    def test_two_inserts_after_same_anchor_land_in_reverse_order(self, recipe):
        patch_set = make_patch_set(recipe, [
            AddStep(text="A", after_step_id=STEP_MIX_ID),
            AddStep(text="B", after_step_id=STEP_MIX_ID),
        ])

        updated = apply_patch_set(patch_set, recipe)

        assert [step.text for step in updated.steps] == [
            "Mix dry ingredients", "B", "A", "Bake at 375°F for 30 min", "Let cool on rack",
        ]

    def test_remove_step(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [RemoveStep(id=STEP_BAKE_ID)]), recipe)
        assert [step.id for step in updated.steps] == [STEP_MIX_ID, STEP_DONE_ID]

    def test_remove_current_step_clears_cursor(self, recipe):
        recipe.current_step_id = STEP_BAKE_ID
        updated = apply_patch_set(make_patch_set(recipe, [RemoveStep(id=STEP_BAKE_ID)]), recipe)
        assert updated.current_step_id is None

    def test_update_step_text(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [UpdateStep(step_id=STEP_BAKE_ID, text="Bake 35 min")]), recipe)
        assert updated.find_step(STEP_BAKE_ID).text == "Bake 35 min"
        assert updated.find_step(STEP_BAKE_ID).status == "todo"


# ═══════════════════════════════════════════════════════════════════
# TESTS: replace_recipe
# ═══════════════════════════════════════════════════════════════════

class TestReplaceRecipe:

    def test_replace_rebuilds_document(self, recipe):
        recipe.notes.append("Original family recipe")
        patch_set = make_patch_set(recipe, [
            ReplaceRecipe(title="Focaccia", ingredients=["500g flour", "olive oil"], steps=["Mix", "Bake"]),
        ])

        updated = apply_patch_set(patch_set, recipe)

        assert updated.id == recipe.id
        assert updated.version == 2
        assert updated.title == "Focaccia"
        assert [ing.text for ing in updated.ingredients] == ["500g flour", "olive oil"]
        assert [step.text for step in updated.steps] == ["Mix", "Bake"]
        assert all(step.status == "todo" for step in updated.steps)
        assert updated.notes == []
        assert updated.current_step_id == updated.steps[0].id
        old_ids = {FLOUR_ID, SALT_ID, WATER_ID, STEP_MIX_ID, STEP_BAKE_ID, STEP_DONE_ID}
        assert not old_ids & {item.id for item in updated.ingredients + updated.steps}

    def test_replace_with_no_steps_clears_cursor(self, recipe):
        updated = apply_patch_set(make_patch_set(recipe, [ReplaceRecipe(title="Empty")]), recipe)
        assert updated.steps == []
        assert updated.current_step_id is None

    def test_replace_ignores_other_patches(self, recipe):
        patch_set = make_patch_set(recipe, [
            AddNote(text="ignored"),
            ReplaceRecipe(title="Focaccia", ingredients=["flour"], steps=["Mix"]),
            AddStep(text="also ignored"),
        ])

        updated, change_set = apply_and_track(patch_set, recipe)

        assert updated.notes == []
        assert [step.text for step in updated.steps] == ["Mix"]
        assert change_set.kind == "replace_recipe"
        assert len(change_set.patches) == 1

    def test_replace_still_requires_valid_batch(self, recipe):
        patch_set = make_patch_set(recipe, [
            ReplaceRecipe(title="Focaccia"),
            UpdateIngredient(id="missing", text="x"),
        ])
        with pytest.raises(ValidationFailed) as exc_info:
            apply_patch_set(patch_set, recipe)
        assert exc_info.value.errors == [InvalidIngredientId(id="missing")]


# ═══════════════════════════════════════════════════════════════════
# TESTS: change tracking
# ═══════════════════════════════════════════════════════════════════

class TestChangeTracking:

    def test_change_set_records_touched_ids(self, recipe):
        patch_set = make_patch_set(recipe, [
            AddIngredient(text="1 tbsp yeast"),
            UpdateIngredient(id=FLOUR_ID, text="3 cups flour"),
            RemoveIngredient(id=SALT_ID),
            AddStep(text="Proof"),
            UpdateStep(step_id=STEP_MIX_ID, text="Whisk"),
            RemoveStep(id=STEP_BAKE_ID),
            AddNote(text="a"),
            AddNote(text="b"),
        ])

        updated, change_set = apply_and_track(patch_set, recipe)

        assert change_set.kind == "patches"
        assert change_set.patch_set_id == patch_set.patch_set_id
        assert change_set.added_ingredient_ids == [updated.ingredients[-1].id]
        assert change_set.changed_ingredient_ids == [FLOUR_ID]
        assert change_set.removed_ingredient_ids == [SALT_ID]
        assert change_set.added_step_ids == [updated.steps[-1].id]
        assert change_set.changed_step_ids == [STEP_MIX_ID]
        assert change_set.removed_step_ids == [STEP_BAKE_ID]
        assert change_set.added_note_indices == [0, 1]
        assert change_set.patches == patch_set.patches
        assert change_set.previous_recipe == recipe
        assert not change_set.is_empty

    def test_previous_recipe_is_a_detached_copy(self, recipe):
        _, change_set = apply_and_track(make_patch_set(recipe, [AddNote(text="x")]), recipe)
        recipe.notes.append("mutated later")
        assert change_set.previous_recipe.notes == []
