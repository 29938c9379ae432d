from flask import Blueprint, jsonify, request, current_app
from pydantic import ValidationError
from services.errors import InvalidInput
from services.llm_models.translation_models import SentenceRequest
from services.prompt_builder import build_prompt
import logging

logger = logging.getLogger(__name__)

bp = Blueprint('translation', __name__, url_prefix='/api')


def get_model_gateway():
    return current_app.extensions['model_gateway']


@bp.route('/translate-sentence', methods=['POST'])
def translate_sentence():
    """
    Translate an English sentence into Japanese with a word-by-word breakdown.

    Request body:
    {
        "sentence": "I am eating",
        "parsedWords": [{"text": "I", "role": "subject"}, ...]  // optional
    }

    Response (TranslationResult):
    {
        "fullTranslation": "食べています。",
        "wordOrder": ["verb"],
        "wordOrderDisplay": "Verb",
        "words": [
            {
                "surfaceForm": "食べています",
                "dictionaryForm": "食べる",
                "partOfSpeech": "verb",
                "componentMorphemes": ["食べ", "て", "います"],
                "englishGloss": "am eating",
                ...
            }
        ],
        "grammarNotes": [...]
    }
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        raise InvalidInput('No JSON data provided')

    try:
        sentence_request = SentenceRequest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        if first['loc'] and first['loc'][0] == 'sentence':
            raise InvalidInput('Sentence is required') from e
        raise InvalidInput(f"Invalid parsedWords: {first['msg']}") from e

    prompt = build_prompt(sentence_request.text, sentence_request.parsed_words)

    logger.info(f"Translating sentence ({len(sentence_request.text)} chars)")
    result = get_model_gateway().translate(prompt)

    return jsonify(result.to_response()), 200
