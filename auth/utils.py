from models import db
from models.user import User
from flask import current_app
from datetime import datetime, timezone
from sqlalchemy.exc import IntegrityError
from auth.identity import IdentityUser, extract_bearer_token
from services.errors import Unauthorized
import logging

logger = logging.getLogger(__name__)


def get_identity_provider():
    """Return the identity provider registered on the current app."""
    return current_app.extensions['identity_provider']


def get_or_create_user(identity: IdentityUser):
    """
    Get or create the local mirror of an identity-provider account.

    Args:
        identity: User resolved from the bearer token

    Returns:
        User object
    """
    user = db.session.get(User, identity.id)

    if user is None:
        user = User(id=identity.id, email=identity.email)
        db.session.add(user)
        logger.info(f'Created new user: {identity.email or identity.id}')
    elif identity.email and user.email != identity.email:
        user.email = identity.email

    user.last_active_at = datetime.now(timezone.utc)

    try:
        db.session.commit()
    except IntegrityError:
        # Another request created the same user first
        db.session.rollback()
        user = db.session.get(User, identity.id)

    return user


def load_user_from_request(request):
    """
    Flask-Login request loader: authenticate the Authorization bearer token.

    Returns:
        User object, or None when the header is missing or the token is rejected
    """
    token = extract_bearer_token(request.headers.get('Authorization'))
    if not token:
        return None

    try:
        identity = get_identity_provider().get_user(token)
    except Unauthorized as e:
        logger.info(f'Rejected bearer token: {e.message}')
        return None

    return get_or_create_user(identity)
