"""
Prompt construction for sentence translation.

build_prompt() is a pure function: the same sentence and hints always give
the same prompt string.
"""

from typing import Iterable, Optional

from services.errors import InvalidInput
from services.llm_models.translation_models import WordHint

PREAMBLE = (
    "You are a Japanese language expert teaching beginners (JLPT N5). "
    "Translate the English sentence below into natural Japanese and break "
    "down every word of the translation."
)

OUTPUT_SCHEMA = """Respond with a single JSON object with exactly these fields:
{
  "fullTranslation": "complete Japanese sentence",
  "wordOrder": ["subject", "particle", "object", "particle", "verb"],
  "wordOrderDisplay": "Subject → Object → Verb",
  "words": [
    {
      "surfaceForm": "word exactly as it appears in fullTranslation",
      "dictionaryForm": "uninflected dictionary form",
      "partOfSpeech": "noun | verb | i-adjective | na-adjective | particle | adverb | copula | ...",
      "componentMorphemes": ["stem", "ending", "..."],
      "englishGloss": "English meaning in this sentence",
      "reading": "hiragana reading",
      "romaji": "Hepburn romaji",
      "role": "subject | object | verb | particle | auxiliary | adjective | adverb | other"
    }
  ],
  "grammarNotes": ["one short explanation per grammar point"]
}"""

DECOMPOSITION_RULES = """MORPHEME BREAKDOWN RULES:
1. A word that is NOT in its dictionary form (it carries tense, politeness,
   negation, desire, potential, passive, progressive or any other inflection)
   MUST list its stem followed by one or more endings in componentMorphemes,
   and its dictionaryForm MUST differ from its surfaceForm.
2. A word already in its dictionary form has exactly one entry in
   componentMorphemes (the word itself) and dictionaryForm equal to surfaceForm.
3. Every particle (は, が, を, に, で, へ, と, も, の, から, まで, より) is its own
   entry with role "particle".
4. Concatenating componentMorphemes must give back surfaceForm.

Examples:
- "am eating"   → 食べています: dictionaryForm 食べる, componentMorphemes ["食べ", "て", "います"]
- "ate"         → 食べた:       dictionaryForm 食べる, componentMorphemes ["食べ", "た"]
- "don't eat"   → 食べない:     dictionaryForm 食べる, componentMorphemes ["食べ", "ない"]
- "want to go"  → 行きたい:     dictionaryForm 行く,   componentMorphemes ["行き", "たい"]
- "ate (polite)"→ 食べました:   dictionaryForm 食べる, componentMorphemes ["食べ", "ました"]
- "was big"     → 大きかった:   dictionaryForm 大きい, componentMorphemes ["大き", "かった"]
- "book"        → 本:           dictionaryForm 本,     componentMorphemes ["本"]

NATURAL JAPANESE:
- Drop obvious pronouns (私, あなた) unless they are emphasized.
- Follow subject-object-verb order and skip English articles.
- grammarNotes: at most 2 notes, each under 50 words."""

DATA_ONLY_DIRECTIVE = (
    "Return ONLY the JSON object. No explanations before or after it, no "
    "markdown, no code fences. It must be valid JSON: no trailing commas and "
    "properly escaped quotes."
)


def format_hints(hints: Optional[Iterable[WordHint]]) -> str:
    """Render the client's pre-parsed English words as an advisory list."""
    if not hints:
        return ""
    items = ", ".join(f"{hint.text} ({hint.role})" for hint in hints)
    return f"Pre-parsed English words (advisory only): {items}"


def build_prompt(sentence: str, hints: Optional[Iterable[WordHint]] = None) -> str:
    """
    Build the translation instruction for the text-generation model.

    Args:
        sentence: English sentence to translate
        hints: Optional pre-parsed English words from the client

    Returns:
        The full prompt string

    Raises:
        InvalidInput: If the sentence is empty after trimming
    """
    if not sentence or not sentence.strip():
        raise InvalidInput("Sentence is required")

    sections = [
        PREAMBLE,
        f'English: "{sentence.strip()}"',
    ]

    hint_text = format_hints(hints)
    if hint_text:
        sections.append(hint_text)

    sections.extend([OUTPUT_SCHEMA, DECOMPOSITION_RULES, DATA_ONLY_DIRECTIVE])
    return "\n\n".join(sections)
