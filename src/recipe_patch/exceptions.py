"""Exceptions for recipe patch package."""

from typing import List

from .models.validation import PatchValidationError


class PatchError(Exception):
    """Base class for patch protocol failures."""
    pass


class ValidationFailed(PatchError):
    """Raised when a patch set cannot be applied to a recipe.

    The recipe passed in is left exactly as it was.
    """

    def __init__(self, errors: List[PatchValidationError]):
        self.errors = list(errors)
        codes = ", ".join(error.code for error in self.errors) or "no errors reported"
        super().__init__(f"Patch set failed validation: {codes}")
