"""
Translation Pydantic Models

Structured models for the sentence translation pipeline.
The wire format is camelCase (what the front end and the model exchange);
attributes are snake_case. Models validate by alias or by field name.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WordHint(CamelModel):
    """An English word pre-parsed by the client. Advisory only.

    Example:
    {"text": "eating", "tag": "Gerund", "role": "verb"}
    """
    text: str = Field(description="Surface form of the English word")
    role: str = Field(default="other", description="Grammatical role guessed by the client parser")
    tag: Optional[str] = Field(default=None, description="Part-of-speech tag from the client parser")


class SentenceRequest(CamelModel):
    """One translate-sentence request."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    text: str = Field(alias="sentence", min_length=1)
    parsed_words: List[WordHint] = Field(default_factory=list)

    @field_validator('text')
    @classmethod
    def validate_text(cls, text):
        if not text.strip():
            raise ValueError('Sentence cannot be empty or whitespace')
        return text.strip()


class WordBreakdown(CamelModel):
    """One lexical unit of the translated sentence.

    Example:
    {
        "surfaceForm": "食べています",
        "dictionaryForm": "食べる",
        "partOfSpeech": "verb",
        "componentMorphemes": ["食べ", "て", "います"],
        "englishGloss": "am eating",
        "reading": "たべています",
        "romaji": "tabete imasu",
        "role": "verb"
    }
    """
    surface_form: str = Field(description="The word exactly as it appears in the sentence")
    dictionary_form: str = Field(description="Uninflected base form")
    part_of_speech: str = Field(description="noun, verb, particle, i-adjective, ...")
    component_morphemes: List[str] = Field(
        min_length=1,
        description="Stem followed by inflectional endings; a single entry for base-form words",
    )
    english_gloss: str = Field(description="English meaning of the word in this sentence")
    reading: str = Field(default="", description="Hiragana reading")
    romaji: str = Field(default="", description="Hepburn romanization")
    role: str = Field(default="", description="subject, object, verb, particle, auxiliary, ...")


class GrammarNote(CamelModel):
    """Structured grammar note, accepted alongside plain-string notes."""
    title: str
    title_japanese: Optional[str] = None
    explanation: str = ""
    example: Optional[str] = None
    example_translation: Optional[str] = None


class TranslationResult(CamelModel):
    """Full translation of one sentence with its word breakdown.

    Example structure:
    {
        "fullTranslation": "食べています。",
        "wordOrder": ["verb"],
        "wordOrderDisplay": "Verb",
        "words": [ ...WordBreakdown... ],
        "grammarNotes": ["ている marks an ongoing action"]
    }
    """
    full_translation: str = Field(min_length=1, description="Complete Japanese sentence")
    word_order: List[str] = Field(description="Roles in Japanese order")
    word_order_display: str = Field(description="Human-readable order, e.g. 'Subject → Object → Verb'")
    words: List[WordBreakdown] = Field(min_length=1)
    grammar_notes: List[Union[str, GrammarNote]] = Field(description="May be empty")

    def to_response(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
