"""
Bearer-token validation against the managed auth service (Supabase Auth).

The service is the source of truth for who a token belongs to; this module
only asks it and never inspects the token itself.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import requests

from config import Settings
from services.errors import ConfigError, Unauthorized

logger = logging.getLogger(__name__)

USER_ENDPOINT = '/auth/v1/user'


@dataclass(frozen=True)
class IdentityUser:
    id: str
    email: Optional[str] = None


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from a 'Bearer <token>' header, or None."""
    if not authorization or not authorization.startswith('Bearer '):
        return None
    token = authorization[len('Bearer '):].strip()
    return token or None


class SupabaseIdentityProvider:
    """Validates access tokens with GET {SUPABASE_URL}/auth/v1/user."""

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None, timeout: float = 10.0):
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout

    def get_user(self, token: str) -> IdentityUser:
        """
        Resolve the user that owns ``token``.

        Raises:
            ConfigError: Supabase URL or service key not configured
            Unauthorized: Token missing, expired or rejected
        """
        if not self.settings.supabase_url or not self.settings.supabase_service_role_key:
            raise ConfigError('Server configuration error: Missing Supabase config')

        if not token:
            raise Unauthorized('Missing authorization header')

        url = self.settings.supabase_url.rstrip('/') + USER_ENDPOINT
        try:
            response = self.session.get(
                url,
                headers={
                    'apikey': self.settings.supabase_service_role_key,
                    'Authorization': f'Bearer {token}',
                },
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f'Identity provider unreachable: {e}')
            raise Unauthorized('Could not validate token') from e

        if response.status_code != 200:
            logger.warning(f'Token rejected by identity provider: status={response.status_code}')
            raise Unauthorized('Invalid or expired token')

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f'Identity provider returned a non-JSON body: {e}')
            raise Unauthorized('Could not validate token') from e

        if not isinstance(data, dict):
            logger.error('Identity provider response is not a JSON object')
            raise Unauthorized('Invalid or expired token')

        user_id = data.get('id')
        if not user_id:
            logger.error('Identity provider response has no user id')
            raise Unauthorized('Invalid or expired token')

        return IdentityUser(id=user_id, email=data.get('email'))
