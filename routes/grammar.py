from flask import Blueprint, jsonify, request
from services.errors import InvalidInput
from services.grammar_context_service import get_grammar_context

bp = Blueprint('grammar', __name__, url_prefix='/api')


@bp.route('/grammar-context', methods=['POST'])
def grammar_context():
    """
    Find grammar reference topics relevant to a Japanese text.

    Request body:
    {
        "japaneseText": "食べています"
    }

    Response:
    {
        "context": "=== GRAMMAR REFERENCE ... ===",
        "topicsFound": 1,
        "topics": [{"id": "te-iru", "pattern": "ている", "name": "Progressive"}]
    }
    """
    data = request.get_json(silent=True) or {}
    japanese_text = data.get('japaneseText') if isinstance(data, dict) else None

    if not japanese_text or not isinstance(japanese_text, str):
        raise InvalidInput('japaneseText is required')

    return jsonify(get_grammar_context(japanese_text)), 200
