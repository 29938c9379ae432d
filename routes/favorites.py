from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user
from services.errors import InvalidInput
from services.vocabulary_service import (
    save_vocabulary_entry,
    list_vocabulary_entries,
    group_by_category,
    delete_vocabulary_entry,
)
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('favorites', __name__, url_prefix='/api')


def _json_body():
    data = request.get_json(silent=True)
    if data is not None and not isinstance(data, dict):
        raise InvalidInput('Request body must be a JSON object')
    return data or {}


@bp.route('/favorites', methods=['GET'])
@login_required
def get_favorites():
    """
    Get the current user's favorite words.

    Returns:
        {
            "favorites": [ ...entries, newest first... ],
            "grouped": {"food": [...], "verbs": [...], ...}
        }
    """
    entries = list_vocabulary_entries(current_user.id)

    return jsonify({
        'favorites': [entry.to_dict() for entry in entries],
        'grouped': group_by_category(entries)
    }), 200


@bp.route('/favorites', methods=['POST'])
@bp.route('/save-favorite', methods=['POST'])
@login_required
def save_favorite():
    """
    Save (insert or overwrite) a favorite word.

    Request body:
    {
        "word": "魚",
        "reading": "さかな",
        "english": "fish",
        "category": "food"  // optional, auto-assigned when omitted
    }
    """
    data = _json_body()

    entry = save_vocabulary_entry(
        user_id=current_user.id,
        word=data.get('word'),
        reading=data.get('reading'),
        english=data.get('english'),
        category=data.get('category')
    )

    return jsonify({
        'success': True,
        'favorite': entry.to_dict()
    }), 200


@bp.route('/favorites', methods=['DELETE'])
@login_required
def delete_favorite():
    """
    Delete a favorite word.

    Request body:
    {
        "word": "魚"
    }
    """
    data = _json_body()

    deleted = delete_vocabulary_entry(current_user.id, data.get('word'))

    return jsonify({
        'success': True,
        'deleted': deleted
    }), 200
