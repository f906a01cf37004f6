from .recipe import Ingredient, Recipe, Step, new_id
from .patch import (
    PATCH_ADAPTER,
    AddIngredient,
    AddNote,
    AddStep,
    Patch,
    PatchSet,
    PatchSetStatus,
    RemoveIngredient,
    RemoveStep,
    ReplaceRecipe,
    UpdateIngredient,
    UpdateStep,
)
from .validation import (
    InternalConflict,
    Invalid,
    InvalidIngredientId,
    InvalidStepId,
    PatchValidationError,
    RecipeIdMismatch,
    StepDoneImmutable,
    Valid,
    ValidationResult,
    VersionMismatch,
    describe_error,
)
from .change_set import ChangeSet, PatchResult, RejectedPatch
from .ui_state import (
    AcceptPatch,
    ChatOpen,
    CloseChat,
    HiddenContext,
    OpenChat,
    PatchProposed,
    PatchReceived,
    PatchReview,
    RecipeOnly,
    RejectPatch,
    UIEvent,
    UIState,
    UserDraftChanged,
    ValidatePatch,
)
