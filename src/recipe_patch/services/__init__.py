"""Services implementing the patch protocol"""

from .validator import validate_patch_set
from .applier import apply_and_track, apply_patch_set
from .ledger import PatchLedger
from .state_machine import reduce
from .context_composer import compose_user_message, rejection_fact, strip_hidden_context
from .cooking import mark_step_done, set_current_step, toggle_ingredient
