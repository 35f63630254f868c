"""Navigation API endpoints.

Provides stateless renders of the full tree and of subtrees.
"""

import json
import logging

from aiohttp import web

from guidenav.app_keys import loader_key, renderer_key, selector_key
from guidenav.core.tree import NavigationTree, TocError

logger = logging.getLogger(__name__)


def create_navigation_routes() -> list[web.RouteDef]:
    return [
        web.get("/api/navigation", get_navigation),
        web.get("/api/navigation/{path:.*}", get_navigation_subtree),
    ]


def load_tree(request: web.Request) -> NavigationTree:
    """Load a fresh navigation tree for a request.

    Raises:
        web.HTTPServiceUnavailable: If the TOC file is missing or malformed
    """
    loader = request.app[loader_key]
    try:
        return loader.load()
    except (FileNotFoundError, TocError) as e:
        logger.error(f"Cannot load navigation from {loader.toc_file}: {e}")
        raise web.HTTPServiceUnavailable(
            text=json.dumps({"error": "Navigation unavailable", "detail": str(e)}),
            content_type="application/json",
        ) from e


async def get_navigation(request: web.Request) -> web.Response:
    language = request.query.get("lang") or request.app[selector_key].current()
    active_url = request.query.get("active")

    tree = load_tree(request)
    active = tree.mark_active(active_url)
    items = request.app[renderer_key].render_tree(tree, language, active=active)

    return web.json_response(
        {
            "language": language,
            "active": active.url if active is not None else None,
            "items": [item.to_dict() for item in items],
        },
    )


async def get_navigation_subtree(request: web.Request) -> web.Response:
    path = request.match_info["path"]
    language = request.query.get("lang") or request.app[selector_key].current()

    tree = load_tree(request)
    active = tree.mark_active(request.query.get("active"))
    node = tree.find(path)
    if node is None:
        return web.json_response(
            {"error": "Section not found", "path": path},
            status=404,
        )

    node.expanded = node.is_section
    rendered = request.app[renderer_key].render(node, language, active=active)
    return web.json_response({"items": [item.to_dict() for item in rendered.children]})
