"""Flask application and package entry point for the dungeon generator.

Importing the package builds the module-level ``app`` with the dungeon API
blueprint registered. Configuration comes from environment variables (a local
``.env`` is loaded first) and ``instance/`` holds runtime files such as the
server log.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

# Load .env so DUNGEON_* policy flags can be set without exporting them.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only installs still serve requests; only the log file is lost
    pass


def _env_bool(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes", "on")


app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    DUNGEON_ENABLE_GENERATION_METRICS=_env_bool("DUNGEON_ENABLE_GENERATION_METRICS", "1"),
)

from dungeongen.routes.dungeon_api import bp_dungeon  # noqa: E402

app.register_blueprint(bp_dungeon)


def create_app():
    """Return the configured Flask app instance."""
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500


__all__ = ["app", "create_app"]
