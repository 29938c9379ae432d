"""
Vocabulary Service - persistence of the words a user saves to favorites

Entries are keyed on (user_id, word): saving the same word again overwrites
reading, english, category and updated_at instead of adding a row.
"""

import logging
from collections import OrderedDict
from datetime import datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from models import db
from models.vocabulary_entry import VocabularyEntry
from services.categorizer import DEFAULT_CATEGORY, categorize
from services.errors import InvalidInput

logger = logging.getLogger(__name__)


def _require(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput('Word, reading, and english are required')
    return value.strip()


def save_vocabulary_entry(
    user_id: str,
    word: str,
    reading: str,
    english: str,
    category: Optional[str] = None
) -> VocabularyEntry:
    """
    Insert or update a favorite word for a user.

    Args:
        user_id: Owning user's id
        word: Japanese word
        reading: Hiragana reading
        english: English gloss
        category: Explicit category; auto-assigned from the gloss when empty

    Returns:
        The saved VocabularyEntry

    Raises:
        InvalidInput: If word, reading or english is missing
    """
    word = _require(word)
    reading = _require(reading)
    english = _require(english)

    final_category = category.strip() if isinstance(category, str) and category.strip() else None
    if not final_category:
        final_category = categorize(word, english)

    now = datetime.now(timezone.utc)

    entry = VocabularyEntry.query.filter_by(user_id=user_id, word=word).first()
    if entry is None:
        entry = VocabularyEntry(
            user_id=user_id,
            word=word,
            reading=reading,
            english=english,
            category=final_category,
            created_at=now,
            updated_at=now
        )
        db.session.add(entry)
        try:
            db.session.commit()
            logger.info(f"Saved favorite '{word}' ({final_category}) for user {user_id}")
            return entry
        except IntegrityError:
            # A concurrent request inserted the same word first; update that row
            db.session.rollback()
            logger.info(f"Favorite '{word}' for user {user_id} already exists, updating")
            entry = VocabularyEntry.query.filter_by(user_id=user_id, word=word).one()

    entry.reading = reading
    entry.english = english
    entry.category = final_category
    entry.updated_at = now
    db.session.commit()

    logger.info(f"Updated favorite '{word}' ({final_category}) for user {user_id}")
    return entry


def list_vocabulary_entries(user_id: str) -> List[VocabularyEntry]:
    """Return a user's favorites, most recently updated first."""
    return (
        VocabularyEntry.query
        .filter_by(user_id=user_id)
        .order_by(VocabularyEntry.updated_at.desc(), VocabularyEntry.id.desc())
        .all()
    )


def group_by_category(entries: List[VocabularyEntry]) -> Dict[str, List[dict]]:
    """Group serialized entries by category, keeping the input order inside each group."""
    grouped: Dict[str, List[dict]] = OrderedDict()
    for entry in entries:
        grouped.setdefault(entry.category or DEFAULT_CATEGORY, []).append(entry.to_dict())
    return grouped


def delete_vocabulary_entry(user_id: str, word: str) -> bool:
    """
    Delete one favorite.

    Returns:
        True if a row was deleted, False if the user had no such word

    Raises:
        InvalidInput: If word is missing
    """
    if not isinstance(word, str) or not word.strip():
        raise InvalidInput('Word is required')

    deleted = VocabularyEntry.query.filter_by(user_id=user_id, word=word.strip()).delete()
    db.session.commit()

    logger.info(f"Deleted {deleted} favorite(s) '{word}' for user {user_id}")
    return deleted > 0
