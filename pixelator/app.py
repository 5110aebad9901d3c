from __future__ import annotations

from flask import Flask, jsonify, request

from .config import configure_logging
from .processing.dither import DITHER_METHODS
from .processing.palette import PRESET_PALETTES
from .processing.resample import RESAMPLERS
from .worker import handle_message

APP_VERSION = "1.0.0"


def create_app() -> Flask:
    logger = configure_logging()
    app = Flask(__name__)

    @app.route("/worker", methods=["POST"])
    def worker():
        message = request.get_json(silent=True)
        if not isinstance(message, dict):
            return jsonify(kind="error", message="Request body must be a JSON object"), 400

        reply = handle_message(message, as_base64=True)
        status = 400 if reply["kind"] == "error" else 200
        if status != 200:
            logger.warning("Worker request rejected: %s", reply["message"])
        return jsonify(reply), status

    @app.route("/palettes")
    def palettes():
        return jsonify({name: list(colors) for name, colors in PRESET_PALETTES.items()})

    @app.route("/health")
    def health():
        return jsonify(
            ok=True,
            version=APP_VERSION,
            resampling_methods=sorted(RESAMPLERS),
            dither_methods=list(DITHER_METHODS),
        )

    return app


# Expose a module-level Flask application for WSGI servers importing ``pixelator.app:app``.
app = create_app()
application = app
