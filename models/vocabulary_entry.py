from models import db
from datetime import datetime, timezone
from sqlalchemy.orm import validates


class VocabularyEntry(db.Model):
    """VocabularyEntry model - a word the user saved to their favorites"""
    __tablename__ = 'user_favorites'

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.String(64), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)

    # Japanese word as shown in the sentence breakdown, e.g. 食べる
    word = db.Column(db.String, nullable=False)

    # Hiragana reading, e.g. たべる
    reading = db.Column(db.String, nullable=False)

    english = db.Column(db.String, nullable=False)

    # food, animals, everyday, time, places, numbers, family, colors, verbs, vocabulary
    category = db.Column(db.String(32), nullable=False, default='vocabulary', index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    # Relationships
    user = db.relationship('User', back_populates='vocabulary_entries')

    # A repeat save for the same user and word overwrites the entry
    __table_args__ = (
        db.UniqueConstraint('user_id', 'word', name='uq_user_favorite_word'),
    )

    @validates('word', 'reading', 'english')
    def validate_required_text(self, key, value):
        if not value or not value.strip():
            raise ValueError(f'{key} cannot be empty or whitespace')
        return value.strip()

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'word': self.word,
            'reading': self.reading,
            'english': self.english,
            'category': self.category,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<VocabularyEntry {self.word} ({self.category}) user_id={self.user_id}>'
