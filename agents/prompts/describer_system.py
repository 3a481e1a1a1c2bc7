# =============================================================================
# agents/prompts/describer_system.py - Description Writer System Prompt
# =============================================================================
# System prompt for the description writer, which drafts the summary and
# long description of a portfolio project or certificate from its title,
# technologies and the admin's rough notes.
#
# Usage:
#   messages = build_describer_messages(title, technologies, notes)
# =============================================================================

from __future__ import annotations

DESCRIBER_SYSTEM_PROMPT = """
<role>
You write short, concrete copy for a developer's portfolio website.
</role>

<rules>
- Use only facts present in the title, technologies and notes. Never invent
  metrics, clients or features.
- Write in the same language as the notes (or the title if there are no notes).
- summary: one sentence, at most 160 characters.
- description: 2 to 5 short paragraphs or steps separated by newlines,
  explaining what was built and how the listed technologies were used.
</rules>

<output_format>
Respond with a single JSON object:
{"summary": "...", "description": "..."}
</output_format>
""".strip()


def build_describer_messages(
    title: str,
    technologies: list[str] | None = None,
    notes: str | None = None,
) -> list[dict[str, str]]:
    """
    Build the chat messages for one description request.

    Example:
        build_describer_messages("Portfolio API", ["FastAPI"], "admin uploads files")
    """
    lines = [f"Title: {title.strip()}"]
    if technologies:
        lines.append(f"Technologies: {', '.join(technologies)}")
    if notes and notes.strip():
        lines.append(f"Notes:\n{notes.strip()}")

    return [
        {"role": "system", "content": DESCRIBER_SYSTEM_PROMPT},
        {"role": "user", "content": "\n".join(lines)},
    ]
