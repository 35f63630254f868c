"""aiohttp server for Guidenav.

Application factory and route registration for standalone server mode.
"""

import logging
from html import escape

from aiohttp import web

from guidenav.api.languages import create_language_routes
from guidenav.api.navigation import create_navigation_routes, load_tree
from guidenav.api.views import create_view_routes
from guidenav.app_keys import (
    live_reload_enabled_key,
    loader_key,
    renderer_key,
    selector_key,
    views_key,
)
from guidenav.config import Config
from guidenav.core.language import FilePreferenceStore, LanguageSelector, PreferenceStore
from guidenav.core.renderer import TreeRenderer, render_html
from guidenav.core.source import TocLoader
from guidenav.core.types import LanguageCode
from guidenav.core.view import ViewRegistry
from guidenav.live import LiveReloadManager
from guidenav.live.reload import create_live_reload_routes

logger = logging.getLogger(__name__)

live_reload_manager_key = web.AppKey("live_reload_manager", LiveReloadManager)

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="utf-8">
<title>{title}</title>
</head>
<body>
{nav}
</body>
</html>
"""


def create_app(
    config: Config,
    *,
    preference_store: PreferenceStore | None = None,
) -> web.Application:
    """Create aiohttp application.

    Args:
        config: Application configuration
        preference_store: Language preference storage (default: file store
            in the configured state directory)

    Returns:
        Configured aiohttp application
    """
    app = web.Application()

    loader = TocLoader(
        config.content.toc_file,
        toroot=config.content.toroot,
        default_language=config.languages.default,
        title=config.content.title,
    )
    store = preference_store or FilePreferenceStore(config.preferences.state_dir)
    selector = LanguageSelector(
        config.languages.allowed(),
        config.languages.default,
        store,
    )

    app[loader_key] = loader
    app[selector_key] = selector
    app[renderer_key] = TreeRenderer(LanguageCode(config.languages.default))
    app[views_key] = ViewRegistry()
    app[live_reload_enabled_key] = config.live_reload.enabled

    app.router.add_routes(create_navigation_routes())
    app.router.add_routes(create_view_routes())
    app.router.add_routes(create_language_routes())

    if config.live_reload.enabled:
        manager = LiveReloadManager(loader)
        app[live_reload_manager_key] = manager
        app.router.add_routes(create_live_reload_routes(manager))
        app.on_startup.append(_start_live_reload)
        app.on_cleanup.append(_stop_live_reload)

    app.router.add_get("/", index)
    app.on_cleanup.append(_close_views)

    return app


async def index(request: web.Request) -> web.Response:
    """Serve a page holding the navigation list.

    The ``active`` query parameter selects the page whose ancestors are
    expanded.
    """
    selector = request.app[selector_key]
    language = request.query.get("lang") or selector.current()

    tree = load_tree(request)
    active = tree.mark_active(request.query.get("active"))
    renderer = request.app[renderer_key]
    nav = render_html(renderer.render_tree(tree, language, active=active))
    title, _ = renderer.label(tree.root(), language)

    body = _PAGE_TEMPLATE.format(lang=escape(language), title=escape(title), nav=nav)
    return web.Response(text=body, content_type="text/html")


async def _start_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].start()


async def _stop_live_reload(app: web.Application) -> None:
    await app[live_reload_manager_key].stop()


async def _close_views(app: web.Application) -> None:
    app[views_key].close_all()


def run_server(config: Config) -> None:
    """Run the server."""
    app = create_app(config)
    logger.info(f"Serving navigation from {config.content.toc_file}")
    web.run_app(app, host=config.server.host, port=config.server.port)
