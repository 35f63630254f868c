"""JSON error responses and request body helpers."""

import json
from typing import Any

from aiohttp import web


def json_error(message: str, *, status: int, **details: Any) -> web.Response:
    return web.json_response({"error": message, **details}, status=status)


async def read_json(request: web.Request) -> dict[str, Any]:
    """Read a JSON object body; an empty body reads as ``{}``.

    Raises:
        web.HTTPBadRequest: If the body is not a JSON object
    """
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except json.JSONDecodeError as e:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "Invalid JSON body", "detail": str(e)}),
            content_type="application/json",
        ) from e
    if not isinstance(data, dict):
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "JSON body must be an object"}),
            content_type="application/json",
        )
    return data
