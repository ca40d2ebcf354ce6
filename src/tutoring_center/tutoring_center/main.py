from __future__ import annotations

import importlib
import logging
import uuid
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, g, request

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_CREATED_ID_LIMIT, DEFAULT_SAMPLE_LIMIT
from .core.logging import init_logging, request_id_ctx
from .database.bootstrap import apply_schema, list_tables
from .generation.controller import register as register_generation
from .sessions.controller import register as register_sessions

logger = logging.getLogger(__name__)


def _register_request_id(app: Flask) -> None:
    @app.before_request
    def _bind_request_id():
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_id = request_id
        g.request_id_token = request_id_ctx.set(request_id)

    @app.after_request
    def _echo_request_id(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        return response

    @app.teardown_request
    def _unbind_request_id(_exc):
        token = g.pop("request_id_token", None)
        if token is not None:
            request_id_ctx.reset(token)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    init_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            sample_limit=int(getattr(settings, "SAMPLE_LIMIT", DEFAULT_SAMPLE_LIMIT)),
            created_id_limit=int(getattr(settings, "CREATED_ID_LIMIT", DEFAULT_CREATED_ID_LIMIT)),
        )

    _register_request_id(app)
    register_sessions(app, container)
    register_generation(app, container)

    return app
