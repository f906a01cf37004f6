"""Constants for the recipe patch package."""

import os

from dotenv import load_dotenv

load_dotenv()

# Undo snapshots kept by a PatchLedger, oldest dropped first
UNDO_STACK_CAPACITY: int = int(os.getenv("RECIPE_PATCH_UNDO_CAPACITY", "20"))

# Visible chat messages kept by an EditingSession
MAX_TRANSCRIPT_MESSAGES: int = int(os.getenv("RECIPE_PATCH_MAX_TRANSCRIPT", "200"))

if UNDO_STACK_CAPACITY < 1:
    raise ValueError(f"Invalid RECIPE_PATCH_UNDO_CAPACITY: {UNDO_STACK_CAPACITY}. Must be at least 1")

if MAX_TRANSCRIPT_MESSAGES < 1:
    raise ValueError(f"Invalid RECIPE_PATCH_MAX_TRANSCRIPT: {MAX_TRANSCRIPT_MESSAGES}. Must be at least 1")

# Hidden context wire format, parsed by the assistant prompt on the other side
REJECTION_FACT_PREFIX = "PATCH_REJECTED: "
SYSCTX_OPEN = "[[SYSCTX]]"
SYSCTX_CLOSE = "[[/SYSCTX]]"
