from models import db
from datetime import datetime, timezone
from flask_login import UserMixin
from sqlalchemy.orm import validates


class User(UserMixin, db.Model):
    """User model - local mirror of an account held by the identity provider"""
    __tablename__ = 'users'

    # Subject id issued by the identity provider (a UUID for Supabase Auth)
    id = db.Column(db.String(64), primary_key=True)

    email = db.Column(db.String, index=True)

    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))
    last_active_at = db.Column(db.DateTime)

    # Relationships
    vocabulary_entries = db.relationship(
        'VocabularyEntry', back_populates='user', lazy='dynamic', cascade='all, delete-orphan'
    )

    @validates('email')
    def validate_email(self, key, email):
        # The identity provider owns the address; store it as given
        return email or None

    def __repr__(self):
        return f'<User {self.email or self.id}>'
