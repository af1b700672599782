"""
Flask application factory.

    flask --app "meal_tracker.api:create_app()" run
or
    meal-tracker
"""

from typing import Optional

from flask import Flask, jsonify, send_from_directory

from meal_tracker.api.routes import api_bp
from meal_tracker.config import AppSettings, get_settings
from meal_tracker.logs import configure_logging, get_logger
from meal_tracker.orchestrator import AppComponents, create_app_components


logger = get_logger(__name__)

# Room for the multipart envelope and form fields around the receipt itself.
_FORM_OVERHEAD_BYTES = 1024 * 1024


def create_app(
    components: Optional[AppComponents] = None,
    settings: Optional[AppSettings] = None,
) -> Flask:
    if components is not None:
        settings = components.settings
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = settings.max_upload_size_bytes + _FORM_OVERHEAD_BYTES
    app.config["DEBUG"] = settings.debug_mode
    app.extensions["meal_tracker"] = components or create_app_components(settings)

    app.register_blueprint(api_bp)

    @app.route("/receipts/<path:filename>")
    def receipt_file(filename):
        return send_from_directory(settings.receipts_path.resolve(), filename)

    @app.errorhandler(413)
    def upload_too_large(error):
        return jsonify({
            "error": f"Upload too large: receipts are limited to {settings.max_upload_size_mb} MB"
        }), 413

    return app


def run() -> None:
    """Console entry point: serve the API with the Flask development server."""
    settings = get_settings()
    app = create_app(settings=settings)
    logger.info("server_starting", host=settings.host, port=settings.port)
    app.run(host=settings.host, port=settings.port, debug=settings.debug_mode)
