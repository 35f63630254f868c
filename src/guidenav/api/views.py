"""Page view API endpoints.

A page view keeps one reader's expansion state between requests, so
sections can be toggled without resending the whole tree.
"""

import json
from typing import Any

from aiohttp import web

from guidenav.api.errors import json_error, read_json
from guidenav.api.navigation import load_tree
from guidenav.app_keys import renderer_key, selector_key, views_key
from guidenav.core.renderer import render_html
from guidenav.core.toggle import NodeNotFound, NotASection
from guidenav.core.view import PageView


def create_view_routes() -> list[web.RouteDef]:
    return [
        web.post("/api/views", create_view),
        web.get("/api/views/{view_id}", get_view),
        web.get("/api/views/{view_id}/html", get_view_html),
        web.post("/api/views/{view_id}/toggle", toggle_section),
        web.delete("/api/views/{view_id}", delete_view),
    ]


def _view_payload(view: PageView) -> dict[str, Any]:
    return {
        "language": view.language(),
        "active": view.active.url if view.active is not None else None,
        "items": [item.to_dict() for item in view.render()],
    }


def _get_view(request: web.Request) -> PageView:
    view_id = request.match_info["view_id"]
    view = request.app[views_key].get(view_id)
    if view is None:
        raise web.HTTPNotFound(
            text=json.dumps({"error": "View not found", "id": view_id}),
            content_type="application/json",
        )
    return view


async def create_view(request: web.Request) -> web.Response:
    body = await read_json(request)
    active_url = body.get("active")
    if active_url is not None and not isinstance(active_url, str):
        return json_error("active must be a string", status=400)

    view = PageView(
        load_tree(request),
        request.app[selector_key],
        active_url=active_url,
        renderer=request.app[renderer_key],
    )
    view_id = request.app[views_key].add(view)
    return web.json_response({"id": view_id, **_view_payload(view)}, status=201)


async def get_view(request: web.Request) -> web.Response:
    return web.json_response(_view_payload(_get_view(request)))


async def get_view_html(request: web.Request) -> web.Response:
    view = _get_view(request)
    return web.Response(text=render_html(view.render()), content_type="text/html")


async def toggle_section(request: web.Request) -> web.Response:
    view = _get_view(request)
    body = await read_json(request)

    url = body.get("url")
    node_id = body.get("id")
    if url is not None and not isinstance(url, str):
        return json_error("url must be a string", status=400)
    if node_id is not None and (not isinstance(node_id, int) or isinstance(node_id, bool)):
        return json_error("id must be an integer", status=400)

    try:
        subtree = view.toggle(url=url, node_id=node_id)
    except NodeNotFound as e:
        return json_error("Section not found", status=404, target=e.target)
    except NotASection as e:
        return json_error("Not a section", status=400, id=e.node.node_id, url=e.node.url)

    return web.json_response({"item": subtree.to_dict()})


async def delete_view(request: web.Request) -> web.Response:
    view_id = request.match_info["view_id"]
    if not request.app[views_key].close(view_id):
        return json_error("View not found", status=404, id=view_id)
    return web.Response(status=204)
