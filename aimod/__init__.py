"""
AI-Mod: Parallel Inference Gateway for Text Moderation

Fans a single moderation request out to sentiment, classification and
summarization models, normalizes each model's loosely-shaped output into a
stable schema, and aggregates the results into one response envelope.
"""

__version__ = "1.0.0"
