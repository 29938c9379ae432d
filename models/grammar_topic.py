from models import db
from datetime import datetime, timezone


class GrammarTopic(db.Model):
    """GrammarTopic model - one grammar point from the reference guide"""
    __tablename__ = 'grammar_topics'

    # Slug such as "te-iru"
    id = db.Column(db.String, primary_key=True)

    # The Japanese pattern searched for in sentences, e.g. ている
    pattern = db.Column(db.String, nullable=False)

    name = db.Column(db.String, nullable=False)
    name_japanese = db.Column(db.String)

    # particle, verb-form, adjective, pattern, ...
    category = db.Column(db.String, nullable=False, index=True)
    chapter = db.Column(db.String, index=True)
    level = db.Column(db.String, index=True)

    description = db.Column(db.Text)
    usage = db.Column(db.Text)

    # [{"japanese": ..., "reading": ..., "english": ...}]
    examples = db.Column(db.JSON)

    # {"ru-verb": "食べる → 食べている", ...}
    conjugation = db.Column(db.JSON)

    notes = db.Column(db.Text)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f'<GrammarTopic {self.pattern} - {self.name}>'
