from __future__ import annotations

import json
import logging
from typing import Any

from errors import InternalInvariantViolation, ValidationError
from oracle import Oracle
from planner import build_substitution_plan
from request_validator import parse_request
from settings import Settings

logger = logging.getLogger(__name__)

Response = tuple[int, dict[str, str], str]


def _json(status: int, payload: Any) -> Response:
    headers = {"Content-Type": "application/json", "Allow": "POST"}
    return status, headers, json.dumps(payload, ensure_ascii=False)


def handle_request(
    method: str,
    body: str | bytes | None,
    oracle: Oracle | None = None,
    settings: Settings | None = None,
) -> Response:
    """
    POST-only entry point: (method, raw body) -> (status, headers, body).
    Never answers 200 with a plan that failed its audit.
    """
    if (method or "").upper() != "POST":
        return 405, {"Content-Type": "text/plain", "Allow": "POST"}, "Method Not Allowed"

    try:
        data = json.loads(body or "{}")
    except ValueError as e:
        return _json(400, {"error": f"malformed_json: {e}"})

    try:
        request = parse_request(data)
        plan = build_substitution_plan(request, oracle=oracle, settings=settings)
    except ValidationError as e:
        logger.info("rejected request: %s", e)
        return _json(400, {"error": str(e)})
    except InternalInvariantViolation as e:
        logger.error("plan aborted: %s", e)
        return _json(500, {"error": f"Failed to generate substitution plan: {e}"})
    except Exception as e:
        logger.exception("unexpected planner failure")
        return _json(500, {"error": f"Failed to generate substitution plan: {e}"})

    return _json(200, plan.to_dict())
