"""
Sentiment Service - scored label normalization.

Sentiment models answer in several shapes: a list of label/score
candidates, a mapping wrapping that list under `results`, or a single
mapping. decode_candidates() turns each shape into a candidate list, and
normalize_sentiment() picks the strongest candidate and maps it onto the
fixed POSITIVE / NEGATIVE / NEUTRAL schema.
"""

import logging
from typing import Any

from aimod.config import ModerationConfig
from aimod.dispatcher.handlers import InvokeFn
from aimod.exceptions import InvalidResponseShape
from aimod.schemas.moderation import SentimentLabel, SentimentResult

logger = logging.getLogger(__name__)

DEFAULT_SCORE = 0.5


def decode_candidates(raw: Any) -> list[Any]:
    """
    Decode a raw sentiment response into its candidate records.

    Raises:
        InvalidResponseShape: If the response is none of the known shapes.
    """
    match raw:
        case list() | tuple():
            return list(raw)
        case {"results": list() as results}:
            return list(results)
        case dict():
            return [raw]
        case _:
            raise InvalidResponseShape("Invalid sentiment analysis response format")


def normalize_label(label: str) -> SentimentLabel:
    """Map a free-form model label onto the normalized polarity."""
    normalized = label.upper()

    if "POSITIVE" in normalized:
        return SentimentLabel.POSITIVE
    if "NEGATIVE" in normalized:
        return SentimentLabel.NEGATIVE
    return SentimentLabel.NEUTRAL


def _score_of(candidate: dict) -> float:
    try:
        return float(candidate["score"] or 0)
    except (TypeError, ValueError):
        return 0.0


def select_candidate(candidates: list[Any]) -> Any:
    """
    Pick the candidate with the highest score.

    max() keeps the first of equal scores. When no candidate carries a score
    the first candidate is used as is.
    """
    scored = [c for c in candidates if isinstance(c, dict) and "score" in c]
    if scored:
        return max(scored, key=_score_of)
    return candidates[0]


def normalize_sentiment(raw: Any) -> SentimentResult:
    """
    Convert a raw sentiment response into a SentimentResult.

    Applying it to an already-normalized record returns the same values.

    Args:
        raw: Model output in any supported shape.

    Returns:
        SentimentResult with a 4-decimal score and integer confidence.

    Raises:
        InvalidResponseShape: If there is no usable candidate record.
    """
    candidates = decode_candidates(raw)
    if not candidates:
        raise InvalidResponseShape("Empty sentiment analysis response")

    top = select_candidate(candidates)
    if not isinstance(top, dict):
        raise InvalidResponseShape("Invalid sentiment analysis response")

    label = normalize_label(str(top.get("label") or SentimentLabel.NEUTRAL.value))

    raw_score = top.get("score")
    score = DEFAULT_SCORE if raw_score is None else _score_of(top)
    score = round(max(0.0, min(1.0, score)), 4)

    return SentimentResult(label=label, score=score, confidence=round(score * 100))


class SentimentService:
    """Runs the sentiment model and normalizes its answer."""

    def __init__(self, invoke: InvokeFn, config: ModerationConfig) -> None:
        self._invoke = invoke
        self._config = config

    async def analyze(self, text: str) -> SentimentResult:
        raw = await self._invoke(self._config.sentiment_model, {"text": text})
        result = normalize_sentiment(raw)
        logger.debug(f"Sentiment: label={result.label.value}, score={result.score}")
        return result
