"""
Services module: one normalizer per moderation feature.

Each service calls the inference capability for its feature and turns the
raw answer into a fixed-shape result model.
"""

from aimod.services.classification import ClassificationService, parse_classification_response
from aimod.services.sentiment import SentimentService, normalize_sentiment
from aimod.services.summarization import SummarizationService, extract_summary

__all__ = [
    "SentimentService",
    "ClassificationService",
    "SummarizationService",
    "normalize_sentiment",
    "parse_classification_response",
    "extract_summary",
]
