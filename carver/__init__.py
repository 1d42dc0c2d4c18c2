"""
project: Carver
module: __init__.py
License: MIT

Flask application factory.

Wires the stepwise dungeon generator API into a Flask app. Configuration is
sourced from environment variables (optionally via a .env file) with defaults
suitable for development. A local `instance/` directory holds the log file.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

from carver.dungeon import ConfigurationError, GeneratorConfig

__version__ = "0.1.0"


def _env_int(name, default):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name}={raw!r} is not a valid int") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def create_app(overrides=None):
    """Return a configured Flask app with the generator blueprint registered.

    ``overrides`` is applied last, so tests can shrink caps or grid sizes.
    """
    # Load .env if present so CARVER_* settings can be supplied without
    # exporting shell variables during development.
    load_dotenv()

    app = Flask(__name__, instance_relative_config=True)
    try:
        os.makedirs(app.instance_path, exist_ok=True)
    except OSError:
        # Read-only installs still serve the API; only file logging needs it
        pass

    defaults = GeneratorConfig.from_env()
    app.config.update(
        SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
        CARVER_GRID_SIZE=defaults.grid_size,
        CARVER_ROOM_ATTEMPTS=defaults.room_attempts,
        CARVER_EXTRA_CONNECTOR_CHANCE=defaults.extra_connector_chance,
        CARVER_MAX_GENERATORS=_env_int("CARVER_MAX_GENERATORS", 16),
        CARVER_MAX_STEPS=_env_int("CARVER_MAX_STEPS", 200_000),
        # Upper bounds for client-chosen sizes; one room step can sample the whole budget
        CARVER_MAX_GRID_SIZE=_env_int("CARVER_MAX_GRID_SIZE", 101),
        CARVER_MAX_ROOM_ATTEMPTS=_env_int("CARVER_MAX_ROOM_ATTEMPTS", 5000),
    )
    if overrides:
        app.config.update(overrides)

    from carver.routes.generator_api import bp_generator

    app.register_blueprint(bp_generator)

    @app.errorhandler(ConfigurationError)
    def configuration_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(500)
    def internal_error(e):
        error_id = uuid.uuid4().hex[:8]
        logging.exception("Unhandled exception (id=%s)", error_id)
        return jsonify({"error": "internal server error", "error_id": error_id}), 500

    return app
