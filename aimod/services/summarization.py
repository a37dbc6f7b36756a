"""
Summarization Service - summary extraction with graceful fallback.

Summaries are only worth their cost for longer texts, so callers consult
should_summarize() first. The summary text is read from the model result in
this order: `summary` field, `text` field, the result itself when it is a
plain string, and finally a truncation of the input.
"""

import logging
from typing import Any

from aimod.config import ModerationConfig
from aimod.dispatcher.handlers import InvokeFn
from aimod.exceptions import InvalidResponseShape
from aimod.schemas.moderation import SummarizationResult

logger = logging.getLogger(__name__)


def extract_summary(raw: Any, text: str, limit: int) -> str:
    """
    Pull the summary string out of a raw summarization result.

    Raises:
        InvalidResponseShape: If a summary or text field holds a non-string value.
    """
    match raw:
        case {"summary": str() as summary} if summary:
            return summary
        case {"summary": value} if value:
            raise InvalidResponseShape("Invalid summarization response")
        case {"text": str() as summary} if summary:
            return summary
        case {"text": value} if value:
            raise InvalidResponseShape("Invalid summarization response")
        case str() if raw:
            return raw
        case _:
            logger.debug("Summarization result had no summary, truncating input")
            return text[:limit]


class SummarizationService:
    """Runs the summarization model for texts long enough to need it."""

    def __init__(self, invoke: InvokeFn, config: ModerationConfig) -> None:
        self._invoke = invoke
        self._config = config

    def should_summarize(self, text: str) -> bool:
        return len(text) > self._config.summarize_threshold

    async def summarize(self, text: str, max_length: int | None = None) -> SummarizationResult:
        """
        Summarize text within a character limit.

        Args:
            text: Input text.
            max_length: Length limit; the configured default when omitted.

        Returns:
            SummarizationResult whose summary_length equals len(summary).
        """
        limit = max_length or self._config.default_summary_length

        raw = await self._invoke(
            self._config.summarization_model,
            {"input_text": text, "max_length": limit},
        )

        summary = extract_summary(raw, text, limit).strip()

        return SummarizationResult(
            summary=summary,
            original_length=len(text),
            summary_length=len(summary),
        )
