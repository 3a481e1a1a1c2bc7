# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# - describer_system.py: Description writer prompt
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.describer_system import (
    DESCRIBER_SYSTEM_PROMPT,
    build_describer_messages,
)

__all__ = [
    "DESCRIBER_SYSTEM_PROMPT",
    "build_describer_messages",
]
