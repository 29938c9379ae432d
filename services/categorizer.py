"""
Keyword-based category assignment for saved vocabulary.

RULES is evaluated top to bottom and the first matching rule wins. Stored
favorites already carry categories produced by exactly this table, so the
keyword lists and their order must not change. The verb rule is known to be
imprecise and stays that way.
"""

import re
from typing import Callable, List, Tuple

DEFAULT_CATEGORY = 'vocabulary'


def _gloss_matches(*keywords: str) -> Callable[[str, str], bool]:
    pattern = re.compile(r'\b(' + '|'.join(keywords) + r')\b', re.ASCII)
    return lambda word, lower: pattern.search(lower) is not None


_NUMBER_WORDS = _gloss_matches(
    'one', 'two', 'three', 'four', 'five', 'six', 'seven', 'eight', 'nine', 'ten', 'number', 'count'
)
_KANJI_NUMERAL = re.compile(r'[一二三四五六七八九十]')

_VERB_GLOSS = re.compile(r'\b(to |ing |ed )\b', re.ASCII)
_VERB_ENDING = re.compile(r'[るうつくぐむぶぬすずます]\Z')


def _is_number(word: str, lower: str) -> bool:
    return _NUMBER_WORDS(word, lower) or _KANJI_NUMERAL.search(word) is not None


def _is_verb(word: str, lower: str) -> bool:
    return _VERB_GLOSS.search(lower) is not None or _VERB_ENDING.search(word) is not None


RULES: List[Tuple[Callable[[str, str], bool], str]] = [
    (_gloss_matches('food', 'eat', 'drink', 'rice', 'fish', 'meat', 'vegetable', 'fruit', 'water',
                    'tea', 'coffee', 'meal', 'breakfast', 'lunch', 'dinner'), 'food'),
    (_gloss_matches('cat', 'dog', 'bird', 'fish', 'animal', 'pet', 'cow', 'horse', 'pig',
                    'chicken'), 'animals'),
    (_gloss_matches('yes', 'no', 'please', 'thank', 'sorry', 'excuse', 'hello', 'goodbye',
                    'good morning', 'good night', 'today', 'tomorrow', 'yesterday'), 'everyday'),
    (_gloss_matches('time', 'hour', 'minute', 'second', 'day', 'week', 'month', 'year', 'morning',
                    'afternoon', 'evening', 'night', 'now', 'later'), 'time'),
    (_gloss_matches('place', 'home', 'house', 'school', 'work', 'office', 'store', 'shop',
                    'restaurant', 'park', 'station', 'airport', 'hotel'), 'places'),
    (_is_number, 'numbers'),
    (_gloss_matches('family', 'mother', 'father', 'parent', 'sister', 'brother', 'child', 'children',
                    'son', 'daughter', 'grandmother', 'grandfather'), 'family'),
    (_gloss_matches('color', 'red', 'blue', 'green', 'yellow', 'black', 'white', 'brown', 'pink',
                    'purple', 'orange'), 'colors'),
    (_is_verb, 'verbs'),
]


def categorize(word: str, english: str) -> str:
    """Return the category tag for a word and its English gloss."""
    lower = (english or '').lower()
    word = word or ''
    for matches, tag in RULES:
        if matches(word, lower):
            return tag
    return DEFAULT_CATEGORY
