"""
Schema validation for the model's translation document.

The parsed JSON crosses a trust boundary, so nothing is assumed about its
shape until validate_translation() accepts it.
"""

import logging

from pydantic import ValidationError

from services.errors import SchemaViolation
from services.llm_models.translation_models import TranslationResult

logger = logging.getLogger(__name__)


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{location}: {first['msg']}"


def _first_index(error: ValidationError):
    for detail in error.errors():
        loc = detail["loc"]
        if len(loc) > 1 and loc[0] == "words" and isinstance(loc[1], int):
            return loc[1]
    return None


def validate_translation(parsed: object) -> TranslationResult:
    """
    Check a parsed document against the TranslationResult schema.

    Args:
        parsed: Output of json.loads on the model's response

    Returns:
        The validated TranslationResult

    Raises:
        SchemaViolation: If a field is missing or mistyped, or a word breaks
            the decomposition invariant. The offending word index is attached
            when the problem is inside ``words``.
    """
    if not isinstance(parsed, dict):
        raise SchemaViolation(f"Expected a JSON object, got {type(parsed).__name__}")

    try:
        result = TranslationResult.model_validate(parsed)
    except ValidationError as e:
        raise SchemaViolation(_describe(e), index=_first_index(e)) from e

    # Inflected words must be split into stem + ending(s)
    for index, word in enumerate(result.words):
        if word.dictionary_form != word.surface_form and len(word.component_morphemes) < 2:
            raise SchemaViolation(
                f"words.{index}: '{word.surface_form}' is not in dictionary form "
                f"('{word.dictionary_form}') but has {len(word.component_morphemes)} morpheme(s)",
                index=index,
            )

    return result
