from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.exceptions import ValidationError
from ..container import Container
from .request_parser import parse_generation_request

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _validation_error(e: ValidationError):
        return jsonify({"error": "ValidationError", "details": str(e)}), 400

    @app.route("/api/sessions/generate/preview", methods=["POST"], endpoint="sessions_generate_preview")
    def sessions_generate_preview():
        try:
            gen_request = parse_generation_request(request.get_json(silent=True))
            outcome = container.generation_service.preview(gen_request)
            return jsonify(outcome.to_preview_payload())
        except ValidationError as e:
            return _validation_error(e)
        except Exception:
            logger.exception("POST /api/sessions/generate/preview failed")
            return jsonify({"error": "InternalError"}), 500

    @app.route("/api/sessions/generate", methods=["POST"], endpoint="sessions_generate")
    def sessions_generate():
        try:
            gen_request = parse_generation_request(request.get_json(silent=True))
            outcome = container.generation_service.commit(gen_request)
            return jsonify(outcome.to_commit_payload())
        except ValidationError as e:
            return _validation_error(e)
        except Exception:
            logger.exception("POST /api/sessions/generate failed")
            return jsonify({"error": "InternalError"}), 500
