"""
Relay endpoint.

POST /api/consolidate {recipient, donor, signature} is re-issued as

  POST <api_url>/donate_to/<recipient>/<donor>/<signature>

and the registry's status, Content-Type and body are passed back verbatim.
Recipient and donor are percent-encoded like encodeURIComponent; the
signature segment is sent as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

import requests
from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import MethodNotAllowed

from .config import DEFAULT_API_URL, RELAY_PATH, RELAY_USER_AGENT, REQUEST_TIMEOUT

logger = logging.getLogger(__name__)

CLAIM_FIELDS = ("recipient", "donor", "signature")


def _present(value: Any) -> bool:
    """JavaScript truthiness: empty lists and objects are present."""
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def encode_component(value: str) -> str:
    """Percent-encode the way JavaScript's encodeURIComponent does."""
    return quote(value, safe="!~*'()")


def donate_url(api_url: str, recipient: str, donor: str, signature: str) -> str:
    return (
        f"{api_url.rstrip('/')}/donate_to/"
        f"{encode_component(recipient)}/{encode_component(donor)}/{signature}"
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def create_app(
    api_url: str = DEFAULT_API_URL,
    session: Optional[requests.Session] = None,
    timeout: int = REQUEST_TIMEOUT,
) -> Flask:
    app = Flask(__name__)
    http = session or requests.Session()

    @app.errorhandler(MethodNotAllowed)
    def method_not_allowed(_exc: MethodNotAllowed) -> Any:
        resp = jsonify({"error": "Method not allowed"})
        resp.status_code = 405
        resp.headers["Allow"] = "POST"
        return resp

    @app.route(RELAY_PATH, methods=["POST"], provide_automatic_options=False)
    def consolidate() -> Any:
        try:
            payload = request.get_json(force=True, silent=True)
            if not isinstance(payload, dict):
                payload = {}

            received = {name: _present(payload.get(name)) for name in CLAIM_FIELDS}
            if not all(received.values()):
                return jsonify({"error": "Missing required parameters", "received": received}), 400

            invalid = [name for name in CLAIM_FIELDS if not isinstance(payload[name], str)]
            if invalid:
                return jsonify({
                    "error": "Invalid parameter types",
                    "expected": {name: "string" for name in CLAIM_FIELDS},
                    "invalid": invalid,
                }), 400

            url = donate_url(api_url, payload["recipient"], payload["donor"], payload["signature"])
            logger.info("Making request to: %s", url)

            upstream = http.post(
                url,
                data="{}",
                headers={"Content-Type": "application/json", "User-Agent": RELAY_USER_AGENT},
                timeout=timeout,
            )
            logger.info("Response status: %s", upstream.status_code)
            logger.debug("Response data: %s", upstream.text[:400])

            return Response(
                upstream.content,
                status=upstream.status_code,
                content_type=upstream.headers.get("Content-Type") or "application/json",
            )
        except Exception as e:
            logger.exception("Relay error")
            return jsonify({
                "error": "Internal server error",
                "details": str(e),
                "timestamp": _now_iso(),
            }), 500

    return app
