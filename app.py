import logging
import os

from config import config, Settings
from flask import Flask, jsonify
from flask_cors import CORS
from flask_login import LoginManager
from flask_migrate import Migrate

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """Application factory pattern"""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(
        level=getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Read-only settings shared by every request
    settings = Settings.from_mapping(app.config)
    app.extensions["settings"] = settings

    # Initialize CORS for React frontend
    CORS(
        app,
        resources={r"/api/*": {"origins": list(settings.allowed_origins) or "*"}},
        allow_headers=["Content-Type", "Authorization"],
    )

    # Initialize SQLAlchemy
    from models import db

    db.init_app(app)

    # Initialize Flask-Migrate
    Migrate(app, db)

    # Import all models to ensure they are registered with SQLAlchemy
    from models.grammar_topic import GrammarTopic  # noqa: F401
    from models.user import User  # noqa: F401
    from models.vocabulary_entry import VocabularyEntry  # noqa: F401

    # External collaborators
    from auth.identity import SupabaseIdentityProvider
    from services.model_gateway import ModelGateway

    app.extensions["identity_provider"] = SupabaseIdentityProvider(settings)
    app.extensions["model_gateway"] = ModelGateway(settings)

    # Initialize Flask-Login with bearer-token authentication
    from auth.utils import load_user_from_request

    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.request_loader(load_user_from_request)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"success": False, "error": "Missing or invalid authorization header"}), 401

    register_error_handlers(app)

    # Register blueprints
    from auth.oauth import bp as auth_bp
    from routes.api import bp as api_bp
    from routes.favorites import bp as favorites_bp
    from routes.grammar import bp as grammar_bp
    from routes.translation import bp as translation_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(translation_bp)
    app.register_blueprint(favorites_bp)
    app.register_blueprint(grammar_bp)

    register_commands(app)

    # Home route
    @app.route("/")
    def home():
        return jsonify({"message": "Welcome to Gojun!", "version": "1.0.0"})

    return app


def register_error_handlers(app):
    """Render service errors as {"success": false, "error": ...} with their HTTP status"""
    from models import db
    from services.errors import GojunError

    @app.errorhandler(GojunError)
    def handle_gojun_error(error):
        if error.status_code >= 500:
            logger.error(f"{type(error).__name__}: {error.message}")
        else:
            logger.info(f"{type(error).__name__}: {error.message}")
        return jsonify({"success": False, "error": error.to_public_message()}), error.status_code

    @app.errorhandler(500)
    def handle_unexpected_error(error):
        db.session.rollback()
        original = getattr(error, "original_exception", None)
        logger.error(f"Unhandled error: {original or error}", exc_info=original)
        return jsonify({"success": False, "error": "Internal server error"}), 500


def register_commands(app):
    """Register `flask` CLI commands"""
    import click
    from models import db

    @app.cli.command("init-db")
    def init_db():
        """Create all database tables."""
        db.create_all()
        click.echo("Database tables created")

    @app.cli.command("load-grammar")
    @click.argument("path", type=click.Path(exists=True, dir_okay=False))
    def load_grammar(path):
        """Load grammar topics from a JSON file."""
        from services.grammar_context_service import load_grammar_topics

        count = load_grammar_topics(path)
        click.echo(f"Loaded {count} grammar topics")


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5001)
