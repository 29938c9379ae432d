"""
Grammar Context Service - finds grammar reference topics for a Japanese text

Topics score 10 points when their pattern appears in the text and 2 points
for every kana/kanji run (longer than one character) from their conjugation
table that appears in the text.
"""

import json
import logging
import re
from pathlib import Path
from typing import Iterable, List, Tuple

from models import db
from models.grammar_topic import GrammarTopic

logger = logging.getLogger(__name__)

MAX_TOPICS = 8
PATTERN_SCORE = 10
CONJUGATION_SCORE = 2
MAX_CONJUGATION_LINES = 3

_JAPANESE_RUN = re.compile(r'[ぁ-んァ-ン一-龯]+')


def score_topic(text: str, topic: GrammarTopic) -> int:
    score = 0

    if topic.pattern and topic.pattern in text:
        score += PATTERN_SCORE

    for value in (topic.conjugation or {}).values():
        for run in _JAPANESE_RUN.findall(str(value)):
            if len(run) > 1 and run in text:
                score += CONJUGATION_SCORE

    return score


def find_relevant_topics(
    text: str,
    topics: Iterable[GrammarTopic],
    limit: int = MAX_TOPICS
) -> List[GrammarTopic]:
    """Return the best-scoring topics for ``text``, highest score first."""
    scored: List[Tuple[int, GrammarTopic]] = []
    for topic in topics:
        score = score_topic(text, topic)
        if score > 0:
            scored.append((score, topic))

    # sorted() is stable, so equal scores keep their original order
    scored = sorted(scored, key=lambda item: item[0], reverse=True)
    return [topic for _, topic in scored[:limit]]


def build_grammar_context(topics: List[GrammarTopic]) -> str:
    """Render topics as a grammar reference block for a prompt or the client."""
    if not topics:
        return ''

    lines = ['', '', '=== GRAMMAR REFERENCE (Use these rules for accurate breakdown) ===', '']

    for topic in topics:
        header = f'【{topic.pattern}】 {topic.name}'
        if topic.name_japanese:
            header += f' ({topic.name_japanese})'
        lines.append(header)

        if topic.description:
            lines.append(f'  → {topic.description}')
        if topic.usage:
            lines.append(f'  Usage: {topic.usage}')

        for key, value in list((topic.conjugation or {}).items())[:MAX_CONJUGATION_LINES]:
            lines.append(f'  • {key}: {value}')

        if topic.examples:
            example = topic.examples[0]
            lines.append(f'  Example: {example.get("japanese", "")} = "{example.get("english", "")}"')

        if topic.notes:
            lines.append(f'  Note: {topic.notes}')

        lines.append('')

    lines.append('=== END GRAMMAR REFERENCE ===')
    return '\n'.join(lines) + '\n'


def get_grammar_context(text: str) -> dict:
    """Look up stored topics for ``text`` and build the API payload."""
    relevant = find_relevant_topics(text, GrammarTopic.query.all())
    logger.info(f"Found {len(relevant)} grammar topic(s) for text of length {len(text)}")

    return {
        'context': build_grammar_context(relevant),
        'topicsFound': len(relevant),
        'topics': [
            {'id': topic.id, 'pattern': topic.pattern, 'name': topic.name}
            for topic in relevant
        ],
    }


def _check_topic(record) -> None:
    if not isinstance(record, dict):
        raise ValueError(f'Each topic must be a JSON object, got {type(record).__name__}')

    missing = [key for key in ('id', 'pattern', 'name', 'category') if not record.get(key)]
    if missing:
        raise ValueError(f'Topic {record.get("id", "?")} is missing: {", ".join(missing)}')

    examples = record.get('examples')
    if examples is not None and (
        not isinstance(examples, list) or not all(isinstance(example, dict) for example in examples)
    ):
        raise ValueError(f'Topic {record["id"]}: examples must be a list of objects')

    conjugation = record.get('conjugation')
    if conjugation is not None and not isinstance(conjugation, dict):
        raise ValueError(f'Topic {record["id"]}: conjugation must be an object')


def load_grammar_topics(path: Path) -> int:
    """
    Insert or replace grammar topics from a JSON array file.

    Each item needs at least id, pattern, name and category; examples must be
    a list of objects and conjugation an object. The whole file is checked
    before anything is written.

    Returns:
        Number of topics written
    """
    records = json.loads(Path(path).read_text(encoding='utf-8'))
    if not isinstance(records, list):
        raise ValueError(f'{path} must contain a JSON array of topics')

    for record in records:
        _check_topic(record)

    columns = {column.name for column in GrammarTopic.__table__.columns} - {'created_at'}
    count = 0
    for record in records:
        db.session.merge(GrammarTopic(**{key: value for key, value in record.items() if key in columns}))
        count += 1

    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(f"Loaded {count} grammar topic(s) from {path}")
    return count
