from flask import Blueprint, jsonify, current_app
from models import db
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('api', __name__, url_prefix='/api')


@bp.route('/health', methods=['GET'])
def health_check():
    """
    Report service health.

    Returns:
        {"status": "ok", "hasApiKey": true, "database": "connected"}
    """
    settings = current_app.extensions['settings']
    has_api_key = bool(
        settings.anthropic_api_key if settings.llm_provider == 'anthropic' else settings.openai_api_key
    )

    try:
        db.session.execute(db.text('SELECT 1'))
    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return jsonify({
            'status': 'unhealthy',
            'hasApiKey': has_api_key,
            'database': 'unavailable'
        }), 500

    return jsonify({
        'status': 'ok',
        'hasApiKey': has_api_key,
        'database': 'connected'
    }), 200
