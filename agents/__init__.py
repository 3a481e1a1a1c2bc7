# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the AI helpers used by the admin panel:
# - describer.py: drafts project/certificate descriptions (OpenAI)
#
# Prompts:
# - prompts/describer_system.py: System prompt for the description writer
# =============================================================================

from agents.describer import DescriptionWriter, GeneratedDescription, fallback_description

__all__ = [
    "DescriptionWriter",
    "GeneratedDescription",
    "fallback_description",
]
