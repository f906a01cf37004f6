"""Composes the user turn sent to the assistant, with hidden context prefixed."""
from ..constants import REJECTION_FACT_PREFIX, SYSCTX_CLOSE, SYSCTX_OPEN
from ..models.ui_state import HiddenContext


def rejection_fact(patch_set_id: str) -> str:
    return f"{REJECTION_FACT_PREFIX}{patch_set_id}"


def compose_user_message(user_text: str, hidden: HiddenContext) -> str:
    """
    Prefix hidden facts onto the visible text in a machine-readable block.

    With no hidden entries the user text is returned unchanged, with no block
    at all. The block is for the assistant only and must never be rendered.
    """
    if not hidden.entries:
        return user_text
    block = f"{SYSCTX_OPEN}\n" + "\n".join(hidden.entries) + f"\n{SYSCTX_CLOSE}"
    return f"{block}\n{user_text}"


def strip_hidden_context(message: str) -> str:
    """Inverse of compose_user_message: the text a transcript may show."""
    if not message.startswith(SYSCTX_OPEN):
        return message
    end = message.find(SYSCTX_CLOSE)
    if end == -1:
        return message
    rest = message[end + len(SYSCTX_CLOSE):]
    return rest[1:] if rest.startswith("\n") else rest
