"""Page views.

A page view is one reader's navigation state: its own copy of the tree with
expansion flags, the active page, and the shared language selector. Views
are discarded as a whole.
"""

import logging
import uuid
from collections import OrderedDict

from guidenav.core.language import LanguageSelector
from guidenav.core.renderer import RenderedNode, TreeRenderer
from guidenav.core.toggle import ToggleController
from guidenav.core.tree import NavigationTree, NavNode
from guidenav.core.types import LanguageCode

logger = logging.getLogger(__name__)


class PageView:
    """Navigation state for a single page load.

    The rendered tree is cached until the language changes or a section is
    toggled.
    """

    def __init__(
        self,
        tree: NavigationTree,
        selector: LanguageSelector,
        *,
        active_url: str | None = None,
        renderer: TreeRenderer | None = None,
    ) -> None:
        """Open a view, expanding the ancestors of the active page.

        Args:
            tree: Tree owned by this view; its expansion flags are reset
            selector: Language selector shared with other views
            active_url: URL of the page being viewed
            renderer: Renderer, built from the tree's default language if omitted
        """
        self._tree = tree
        self._selector = selector
        self._renderer = renderer or TreeRenderer(tree.default_language)
        self._active_url = active_url
        self._active = tree.mark_active(active_url)
        self._toggle = ToggleController(
            tree, self._renderer, selector, active=self._active,
        )
        self._cache: tuple[LanguageCode, list[RenderedNode]] | None = None
        selector.add_listener(self._on_language_change)

    @property
    def tree(self) -> NavigationTree:
        return self._tree

    @property
    def active(self) -> NavNode | None:
        return self._active

    @property
    def active_url(self) -> str | None:
        return self._active_url

    def language(self) -> LanguageCode:
        return self._selector.current()

    def render(self) -> list[RenderedNode]:
        """Render the visible tree in the current language."""
        language = self._selector.current()
        if self._cache is None or self._cache[0] != language:
            nodes = self._renderer.render_tree(self._tree, language, active=self._active)
            self._cache = (language, nodes)
        return self._cache[1]

    def toggle(self, *, url: str | None = None, node_id: int | None = None) -> RenderedNode:
        """Toggle a section and return its re-rendered subtree."""
        subtree = self._toggle.toggle(url=url, node_id=node_id)
        self._cache = None
        return subtree

    def set_language(self, code: str) -> LanguageCode:
        """Change the display language (shared by all views on the selector)."""
        return self._selector.set_current(code)

    def close(self) -> None:
        """Detach from the language selector."""
        self._selector.remove_listener(self._on_language_change)
        self._cache = None

    def _on_language_change(self, code: LanguageCode) -> None:
        self._cache = None


class ViewRegistry:
    """Open page views keyed by id.

    Holds at most ``max_views`` views; opening more closes the least
    recently used one.
    """

    def __init__(self, max_views: int = 256) -> None:
        if max_views < 1:
            raise ValueError("max_views must be positive")
        self._max_views = max_views
        self._views: OrderedDict[str, PageView] = OrderedDict()

    def add(self, view: PageView) -> str:
        """Register a view and return its id."""
        view_id = uuid.uuid4().hex
        self._views[view_id] = view
        while len(self._views) > self._max_views:
            evicted_id, evicted = self._views.popitem(last=False)
            evicted.close()
            logger.debug(f"Evicted page view {evicted_id}")
        return view_id

    def get(self, view_id: str) -> PageView | None:
        view = self._views.get(view_id)
        if view is not None:
            self._views.move_to_end(view_id)
        return view

    def close(self, view_id: str) -> bool:
        """Close and forget a view.

        Returns:
            True if the view existed
        """
        view = self._views.pop(view_id, None)
        if view is None:
            return False
        view.close()
        return True

    def close_all(self) -> None:
        for view in self._views.values():
            view.close()
        self._views.clear()

    def __len__(self) -> int:
        return len(self._views)

    def __contains__(self, view_id: object) -> bool:
        return view_id in self._views
