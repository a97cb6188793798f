"""Flask application factory for the page cache status API.

The ``create_app`` function creates a logging prober and returns a
Flask app with three endpoints:

- ``GET /api/status?path=...`` — probe one path and return its record.
- ``POST /api/status`` — probe several paths, ``{"paths": [...]}``.
- ``GET /api/log`` — the prober's audit log.
"""

from __future__ import annotations

from typing import Any

from flask import Flask, Response, jsonify, request

from py_pcstat.errors import OpenError, ProbeError
from py_pcstat.logging import Logger, LogLevel
from py_pcstat.probe import Prober

_HTTP_BAD_REQUEST = 400
_HTTP_NOT_FOUND = 404
_HTTP_UNPROCESSABLE = 422


def _error_body(error: ProbeError) -> dict[str, Any]:
    return {
        "error": str(error),
        "kind": type(error).__name__,
        "status": error.status.to_dict() if error.status is not None else None,
    }


def create_app(prober: Prober | None = None) -> Flask:
    """Create and configure the Flask application.

    Args:
        prober: Prober to serve requests with; a logging prober for the
            running platform is created if omitted.

    Returns:
        A configured Flask application ready to serve.

    """
    if prober is None:
        prober = Prober(logger=Logger())

    app = Flask(__name__)

    @app.route("/api/status", methods=["GET"])
    def status() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Probe the path given in the ``path`` query parameter.

        Returns:
            The serialized record, or an error body with the partial record.

        """
        path = request.args.get("path")
        if not path:
            return jsonify({"error": "Missing 'path' parameter"}), _HTTP_BAD_REQUEST

        try:
            record = prober.probe(path)
        except OpenError as e:
            return jsonify(_error_body(e)), _HTTP_NOT_FOUND
        except ProbeError as e:
            return jsonify(_error_body(e)), _HTTP_UNPROCESSABLE
        return jsonify(record.to_dict())

    @app.route("/api/status", methods=["POST"])
    def status_many() -> tuple[Response, int] | Response:  # pyright: ignore[reportUnusedFunction]
        """Probe every path in the JSON body ``{"paths": [...]}``.

        Returns:
            JSON with ``results`` and ``errors`` lists.

        """
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not isinstance(data.get("paths"), list):
            return jsonify({"error": "Missing 'paths' list"}), _HTTP_BAD_REQUEST
        paths: list[Any] = data["paths"]
        if not all(isinstance(p, str) and p for p in paths):
            return jsonify({"error": "'paths' must hold non-empty strings"}), _HTTP_BAD_REQUEST

        results: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for path in paths:
            try:
                results.append(prober.probe(path).to_dict())
            except ProbeError as e:
                errors.append(_error_body(e))
        return jsonify({"results": results, "errors": errors})

    @app.route("/api/log")
    def log() -> Response:  # pyright: ignore[reportUnusedFunction]
        """Return the prober's audit log, optionally filtered by ``level`` and ``path``.

        Returns:
            JSON with an ``entries`` list.

        """
        if prober.logger is None:
            return jsonify({"entries": []})
        level_name = request.args.get("level", "DEBUG").upper()
        min_level = LogLevel.__members__.get(level_name, LogLevel.DEBUG)
        entries = prober.logger.filter(min_level=min_level, path=request.args.get("path"))
        return jsonify({"entries": [e.to_dict() for e in entries]})

    return app


def main() -> None:
    """Run the API development server.

    This is the ``py-pcstat-web`` console entry point.
    """
    app = create_app()
    app.run(port=8080)
