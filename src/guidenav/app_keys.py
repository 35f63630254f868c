"""Application keys for type-safe app configuration access."""

from aiohttp import web

from guidenav.core.language import LanguageSelector
from guidenav.core.renderer import TreeRenderer
from guidenav.core.source import TocLoader
from guidenav.core.view import ViewRegistry

loader_key = web.AppKey("loader", TocLoader)
selector_key = web.AppKey("selector", LanguageSelector)
renderer_key = web.AppKey("renderer", TreeRenderer)
views_key = web.AppKey("views", ViewRegistry)
live_reload_enabled_key = web.AppKey("live_reload_enabled", bool)
