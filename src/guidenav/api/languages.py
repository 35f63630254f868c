"""Language API endpoints."""

from aiohttp import web

from guidenav.api.errors import json_error, read_json
from guidenav.app_keys import live_reload_enabled_key, selector_key
from guidenav.core.language import UnsupportedLanguage


def create_language_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/languages", get_languages),
        web.put("/api/language", put_language),
        web.get("/api/config", get_config),
    ]


async def get_languages(request: web.Request) -> web.Response:
    selector = request.app[selector_key]
    return web.json_response(
        {
            "default": selector.default,
            "supported": list(selector.supported),
            "current": selector.current(),
        },
    )


async def put_language(request: web.Request) -> web.Response:
    selector = request.app[selector_key]
    body = await read_json(request)
    code = body.get("code")
    if not isinstance(code, str):
        return json_error("Missing language code", status=400)

    try:
        current = selector.set_current(code)
    except UnsupportedLanguage as e:
        return json_error(
            "Unsupported language",
            status=400,
            code=e.code,
            supported=list(e.supported),
        )
    return web.json_response({"current": current})


async def get_config(request: web.Request) -> web.Response:
    live_reload_enabled = request.app[live_reload_enabled_key]
    return web.json_response({"liveReloadEnabled": live_reload_enabled})
