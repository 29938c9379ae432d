from flask import Blueprint, redirect, request, current_app
from urllib.parse import quote, urlencode
import json
import logging
import requests

logger = logging.getLogger(__name__)

bp = Blueprint('auth', __name__, url_prefix='/api/auth')

GOOGLE_AUTHORIZE_URL = 'https://accounts.google.com/o/oauth2/v2/auth'
GOOGLE_TOKEN_URL = 'https://oauth2.googleapis.com/token'
GOOGLE_USERINFO_URL = 'https://www.googleapis.com/oauth2/v2/userinfo'

SCOPES = ' '.join([
    'openid',
    'email',
    'profile',
])

REQUEST_TIMEOUT = 15


def _settings():
    return current_app.extensions['settings']


def _error_redirect(message):
    """Send the browser back to the app with a readable error in the query string."""
    return redirect('/?' + urlencode({'google_error': message}))


def _success_redirect(payload):
    """Send the browser back to the app with the tokens in the URL fragment.

    Fragments are never sent to a server, so the tokens stay out of access logs.
    """
    token_data = json.dumps(payload)
    return redirect(f'/?google_connected=true#google_tokens={quote(token_data, safe="")}')


@bp.route('/google/authorize')
def google_authorize():
    """Redirect to Google's consent screen (offline access, so a refresh token is issued)"""
    settings = _settings()

    if not settings.google_client_id:
        return _error_redirect('OAuth not configured')

    params = {
        'client_id': settings.google_client_id,
        'redirect_uri': settings.google_redirect_uri,
        'response_type': 'code',
        'scope': SCOPES,
        'access_type': 'offline',
        'prompt': 'consent',
    }
    state = request.args.get('state')
    if state:
        params['state'] = state

    return redirect(f'{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}')


@bp.route('/callback')
def google_callback():
    """
    Handle Google OAuth callback.

    Exchanges the authorization code for tokens, fetches the account email and
    hands both to the front end through the redirect fragment.
    """
    error = request.args.get('error')
    if error:
        logger.warning(f'OAuth callback received error from Google: {error}')
        return _error_redirect(error)

    code = request.args.get('code')
    if not code:
        return _error_redirect('No authorization code received')

    settings = _settings()
    if not settings.google_client_id or not settings.google_client_secret:
        logger.error('Google OAuth credentials not configured')
        return _error_redirect('OAuth not configured')

    try:
        token_response = requests.post(
            GOOGLE_TOKEN_URL,
            data={
                'code': code,
                'client_id': settings.google_client_id,
                'client_secret': settings.google_client_secret,
                'redirect_uri': settings.google_redirect_uri,
                'grant_type': 'authorization_code',
            },
            timeout=REQUEST_TIMEOUT,
        )
        tokens = token_response.json()

        if not token_response.ok or tokens.get('error'):
            logger.error(
                f'Token exchange failed. Status: {token_response.status_code}, '
                f'error: {tokens.get("error")}'
            )
            return _error_redirect(tokens.get('error_description') or tokens.get('error') or 'Token exchange failed')

        userinfo_response = requests.get(
            GOOGLE_USERINFO_URL,
            headers={'Authorization': f'Bearer {tokens["access_token"]}'},
            timeout=REQUEST_TIMEOUT,
        )
        if not userinfo_response.ok:
            logger.error(f'Failed to fetch user info from Google. Status: {userinfo_response.status_code}')
            return _error_redirect('Failed to fetch user info from Google')

        email = userinfo_response.json().get('email')
        logger.info(f'Google account {email} connected')

        return _success_redirect({
            'access_token': tokens.get('access_token'),
            'refresh_token': tokens.get('refresh_token'),
            'expires_in': tokens.get('expires_in'),
            'email': email,
        })

    except (requests.RequestException, ValueError, KeyError) as e:
        logger.exception(f'Exception during Google OAuth callback: {str(e)}')
        return _error_redirect(f'Authentication failed: {e}')
