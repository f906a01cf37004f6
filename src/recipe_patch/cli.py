#!/usr/bin/env python3
"""
Command-line interface for recipe-patch.

Usage:
    # Check a patch set against a recipe
    recipe-patch validate path/to/recipe.json path/to/patchset.json

    # Apply it and write the new recipe
    recipe-patch apply path/to/recipe.json path/to/patchset.json --output new.json

    # Apply through the review ledger (history guard, soft delete), then approve
    recipe-patch apply path/to/recipe.json path/to/patchset.json --ledger
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .exceptions import ValidationFailed
from .models.change_set import ChangeSet
from .models.patch import PatchSet
from .models.recipe import Recipe
from .models.validation import PatchValidationError, describe_error
from .services.applier import apply_and_track
from .services.ledger import PatchLedger
from .services.validator import validate_patch_set

console = Console()

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_BAD_INPUT = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _load_inputs(recipe_path: str, patch_set_path: str) -> Optional[Tuple[Recipe, PatchSet]]:
    """Parse both files, printing the problem and returning None on failure."""
    try:
        recipe = Recipe.model_validate_json(Path(recipe_path).read_text(encoding="utf-8"))
        patch_set = PatchSet.model_validate_json(Path(patch_set_path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        console.print(f"[red]File not found: {e.filename}[/red]")
        return None
    except (OSError, UnicodeDecodeError) as e:
        logging.error(f"Unreadable input: {e}")
        console.print(f"[red]Cannot read input:[/red] {escape(str(e))}")
        return None
    except ValidationError as e:
        logging.error(f"Malformed input: {e}")
        console.print(f"[red]Malformed input ({e.error_count()} errors):[/red] {e.title}")
        return None
    return recipe, patch_set


def _print_errors(errors: List[PatchValidationError]) -> None:
    table = Table(show_header=True, header_style="bold", padding=(0, 1))
    table.add_column("#", justify="right")
    table.add_column("Code", min_width=22)
    table.add_column("Details", max_width=70)
    for i, error in enumerate(errors, start=1):
        table.add_row(str(i), f"[red]{error.code}[/red]", escape(describe_error(error)))
    console.print(table)


def _print_change_set(change_set: ChangeSet, recipe: Recipe) -> None:
    if change_set.kind == "replace_recipe":
        console.print(f"  [yellow]Recipe replaced[/yellow]: [bold]{recipe.title}[/bold]")
        return

    ingredients = {ing.id: ing.text for ing in change_set.previous_recipe.ingredients}
    ingredients.update({ing.id: ing.text for ing in recipe.ingredients})
    steps = {step.id: step.text for step in change_set.previous_recipe.steps}
    steps.update({step.id: step.text for step in recipe.steps})

    table = Table(show_header=True, header_style="bold", padding=(0, 1))
    table.add_column("Change", min_width=10)
    table.add_column("Kind", min_width=10)
    table.add_column("Text", max_width=70)

    for ing_id in change_set.added_ingredient_ids:
        table.add_row("[green]added[/green]", "ingredient", escape(ingredients.get(ing_id, ing_id)))
    for ing_id in change_set.changed_ingredient_ids:
        table.add_row("[yellow]changed[/yellow]", "ingredient", escape(ingredients.get(ing_id, ing_id)))
    for ing_id in change_set.removed_ingredient_ids:
        table.add_row("[red]removed[/red]", "ingredient", f"[strike]{escape(ingredients.get(ing_id, ing_id))}[/strike]")
    for step_id in change_set.added_step_ids:
        table.add_row("[green]added[/green]", "step", escape(steps.get(step_id, step_id)))
    for step_id in change_set.changed_step_ids:
        table.add_row("[yellow]changed[/yellow]", "step", escape(steps.get(step_id, step_id)))
    for step_id in change_set.removed_step_ids:
        table.add_row("[red]removed[/red]", "step", f"[strike]{escape(steps.get(step_id, step_id))}[/strike]")
    for index in change_set.added_note_indices:
        table.add_row("[green]added[/green]", "note", escape(recipe.notes[index]))

    if change_set.is_empty:
        console.print("  [dim]No visible changes[/dim]")
    else:
        console.print(table)

    for rejected in change_set.rejected_patches:
        console.print(f"  [dark_orange]Refused {rejected.patch.op}[/dark_orange]: {rejected.reason}")


def cmd_validate(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args.recipe, args.patch_set)
    if loaded is None:
        return EXIT_BAD_INPUT
    recipe, patch_set = loaded

    result = validate_patch_set(patch_set, recipe)
    if result.is_valid:
        console.print(
            f"[green]VALID[/green] {len(patch_set.patches)} patch(es) against "
            f"[bold]{recipe.title}[/bold] v{recipe.version}"
        )
        return EXIT_OK

    console.print(f"[red]INVALID[/red] {len(result.errors)} violation(s)")
    _print_errors(result.errors)
    return EXIT_INVALID


def cmd_apply(args: argparse.Namespace) -> int:
    loaded = _load_inputs(args.recipe, args.patch_set)
    if loaded is None:
        return EXIT_BAD_INPUT
    recipe, patch_set = loaded

    try:
        if args.ledger:
            ledger = PatchLedger(recipe)
            result = ledger.apply(patch_set)
            change_set = result.change_set
            updated = ledger.approve_changes()
        else:
            updated, change_set = apply_and_track(patch_set, recipe)
    except ValidationFailed as e:
        console.print(f"[red]NOT APPLIED[/red] {len(e.errors)} violation(s)")
        _print_errors(e.errors)
        return EXIT_INVALID

    console.print(
        f"[green]APPLIED[/green] [bold]{updated.title}[/bold] "
        f"v{recipe.version} -> v{updated.version}",
        highlight=False,
    )
    _print_change_set(change_set, updated)

    output = updated.model_dump_json(indent=2)
    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        console.print(f"\n[dim]Recipe saved to {args.output}[/dim]")
    else:
        print(output)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Validate and apply recipe patch sets",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )
    subparsers = parser.add_subparsers(dest="command")

    for name, help_text in (
        ("validate", "Check a patch set against a recipe"),
        ("apply", "Apply a patch set and print or save the new recipe"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("recipe", type=str, help="Path to the recipe JSON file")
        sub.add_argument("patch_set", type=str, help="Path to the patch set JSON file")
        if name == "apply":
            sub.add_argument(
                "--output", "-o", type=str, default=None,
                help="Write the new recipe to this file instead of stdout",
            )
            sub.add_argument(
                "--ledger", action="store_true",
                help="Apply through the review ledger and approve immediately",
            )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "validate":
        return cmd_validate(args)
    if args.command == "apply":
        return cmd_apply(args)

    parser.print_help()
    return EXIT_BAD_INPUT


if __name__ == "__main__":
    sys.exit(main())
