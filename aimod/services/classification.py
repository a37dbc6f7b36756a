"""
Classification Service - prompt-based content classification.

The classification model is an instruction-following LLM asked to answer
with a JSON object. Models do not always comply, so parsing has two paths:

1. Extract the first brace-delimited block from the reply and read
   category / confidence / isSpam from it
2. Otherwise infer spam from keywords in the reply text

Parsing never raises: a malformed reply always degrades to the keyword
heuristic. All of it lives in parse_classification_response() so a stricter
structured-output contract can replace it without touching orchestration.
"""

import json
import logging
import re
from typing import Any

from aimod.config import ModerationConfig
from aimod.dispatcher.handlers import InvokeFn
from aimod.schemas.moderation import ClassificationResult, ContentCategory

logger = logging.getLogger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"\{.*\}", re.DOTALL)

DEFAULT_CONFIDENCE = 0.5
FALLBACK_CONFIDENCE = 0.6
SPAM_KEYWORDS = ("spam", "promotional")

CLASSIFICATION_PROMPT = """Analyze the following text and classify it. Respond ONLY with a JSON object in this exact format:
{{"category": "one of: spam, legitimate, promotional, informational, social", "confidence": 0.0-1.0, "isSpam": true/false}}

Text to analyze: "{text}"

JSON Response:"""


def build_classification_prompt(text: str) -> str:
    """Embed the text verbatim in the classification instruction."""
    return CLASSIFICATION_PROMPT.format(text=text)


def _coerce_category(value: Any) -> ContentCategory:
    if not value:
        return ContentCategory.UNKNOWN
    try:
        return ContentCategory(str(value).strip().lower())
    except ValueError:
        return ContentCategory.UNKNOWN


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


def _parse_json_block(response_text: str) -> ClassificationResult | None:
    """Primary path: read the first JSON object found in the reply."""
    match = JSON_BLOCK_PATTERN.search(response_text)
    if match is None:
        return None

    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("classification reply is not a JSON object")

    confidence = parsed.get("confidence")
    confidence = DEFAULT_CONFIDENCE if confidence is None else float(confidence)

    return ClassificationResult(
        category=_coerce_category(parsed.get("category")),
        confidence=max(0.0, min(1.0, confidence)),
        is_spam=_coerce_bool(parsed.get("isSpam", False)),
    )


def _classify_by_keywords(response_text: str) -> ClassificationResult:
    """Fallback path: spam if the reply mentions spam or promotion."""
    lowered = response_text.lower()
    is_spam = any(keyword in lowered for keyword in SPAM_KEYWORDS)

    return ClassificationResult(
        category=ContentCategory.SPAM if is_spam else ContentCategory.LEGITIMATE,
        confidence=FALLBACK_CONFIDENCE,
        is_spam=is_spam,
    )


def parse_classification_response(response_text: str | None) -> ClassificationResult:
    """
    Parse a classification reply into a ClassificationResult.

    Args:
        response_text: Raw text produced by the classification model.

    Returns:
        ClassificationResult from the JSON block if one parses, otherwise
        from the keyword heuristic.
    """
    response_text = response_text or ""

    try:
        result = _parse_json_block(response_text)
        if result is not None:
            return result
    except (ValueError, TypeError) as e:
        logger.warning(f"Failed to parse classification response: {e}")

    return _classify_by_keywords(response_text)


def extract_response_text(raw: Any) -> str:
    """Read the generated text from a text-generation result."""
    match raw:
        case {"response": str() as text}:
            return text
        case str():
            return raw
        case _:
            return ""


class ClassificationService:
    """Prompts the classification model and parses its reply."""

    def __init__(self, invoke: InvokeFn, config: ModerationConfig) -> None:
        self._invoke = invoke
        self._config = config

    async def classify(self, text: str) -> ClassificationResult:
        raw = await self._invoke(
            self._config.classification_model,
            {
                "prompt": build_classification_prompt(text),
                "max_tokens": self._config.classification_max_tokens,
            },
        )
        return parse_classification_response(extract_response_text(raw))
