"""
LLM Pydantic Models

Structured models for the sentence translation pipeline:
- Request models (SentenceRequest, WordHint)
- Response models (TranslationResult, WordBreakdown, GrammarNote)
"""

from .translation_models import (
    GrammarNote,
    SentenceRequest,
    TranslationResult,
    WordBreakdown,
    WordHint,
)

__all__ = [
    'GrammarNote',
    'SentenceRequest',
    'TranslationResult',
    'WordBreakdown',
    'WordHint',
]
