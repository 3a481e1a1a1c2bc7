# =============================================================================
# agents/describer.py - Description Writer
# =============================================================================
# Drafts the summary/description fields of a project or certificate with a
# single OpenAI chat completion.
#
# The call is a convenience for the admin form, never part of a record
# operation: a missing key, an API failure or an unparseable answer all
# degrade to fallback text and are only logged.
#
# Usage:
#   from agents.describer import DescriptionWriter
#   draft = DescriptionWriter().generate("Portfolio API", ["FastAPI"], "notes")
#   draft.summary, draft.description, draft.fallback
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

from openai import OpenAI

from app.config import settings
from agents.prompts.describer_system import build_describer_messages

# Set up logging for this module
logger = logging.getLogger(__name__)


@dataclass
class GeneratedDescription:
    """Drafted copy; `fallback` is True when it did not come from the model."""
    summary: str
    description: str
    fallback: bool = False


def fallback_description(title: str, technologies: list[str] | None = None) -> GeneratedDescription:
    """Plain text used whenever the model can't be asked or answers badly."""
    title = title.strip()
    if technologies:
        summary = f"{title}, built with {', '.join(technologies)}."
    else:
        summary = f"{title}."
    return GeneratedDescription(summary=summary, description="", fallback=True)


class DescriptionWriter:
    """
    Drafts portfolio copy from a title, technologies and notes.

    Attributes:
        model: OpenAI model to use (default from settings)
        temperature: Generation temperature
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        client: OpenAI | None = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.DESCRIBER_TEMPERATURE

        if client is not None:
            self.client = client
        elif settings.OPENAI_API_KEY:
            self.client = OpenAI(api_key=settings.OPENAI_API_KEY)
        else:
            self.client = None
            logger.info("OPENAI_API_KEY not set, description writer will return fallback text")

    def generate(
        self,
        title: str,
        technologies: list[str] | None = None,
        notes: str | None = None,
    ) -> GeneratedDescription:
        """
        Draft a summary and description.

        Never raises: every failure returns fallback_description().
        """
        if self.client is None:
            return fallback_description(title, technologies)

        messages = build_describer_messages(title, technologies, notes)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                response_format={"type": "json_object"},
                messages=messages,
            )
            response_text = response.choices[0].message.content or ""
            logger.debug(f"OpenAI response: {response_text[:200]}...")

        except Exception as e:
            logger.warning(f"Description generation failed, using fallback: {e}")
            return fallback_description(title, technologies)

        return self._parse_response(response_text, title, technologies)

    def _parse_response(
        self,
        response_text: str,
        title: str,
        technologies: list[str] | None,
    ) -> GeneratedDescription:
        try:
            data = json.loads(response_text)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON from description model, using fallback: {e}")
            return fallback_description(title, technologies)

        summary = data.get("summary") if isinstance(data, dict) else None
        description = data.get("description") if isinstance(data, dict) else None
        if not isinstance(summary, str) or not summary.strip():
            logger.warning("Description model returned no summary, using fallback")
            return fallback_description(title, technologies)

        return GeneratedDescription(
            summary=summary.strip(),
            description=description.strip() if isinstance(description, str) else "",
        )
