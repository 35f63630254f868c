"""Expand/collapse handling for navigation sections.

Each section toggles independently. Collapsing a section keeps the flags
of sections below it, so re-expanding restores the previous view.
"""

import logging

from guidenav.core.language import LanguageSelector
from guidenav.core.renderer import RenderedNode, TreeRenderer
from guidenav.core.tree import NavigationTree, NavNode

logger = logging.getLogger(__name__)


class NodeNotFound(LookupError):
    """No navigation node matches the requested target."""

    def __init__(self, target: str) -> None:
        self.target = target
        super().__init__(f"Navigation node not found: {target}")


class NotASection(ValueError):
    """Target node has no children and cannot be expanded."""

    def __init__(self, node: NavNode) -> None:
        self.node = node
        super().__init__(f"Navigation node {node.node_id} ({node.url}) is not a section")


class ToggleController:
    """Flips section expansion flags and re-renders the affected subtree."""

    def __init__(
        self,
        tree: NavigationTree,
        renderer: TreeRenderer,
        selector: LanguageSelector,
        *,
        active: NavNode | None = None,
    ) -> None:
        self._tree = tree
        self._renderer = renderer
        self._selector = selector
        self._active = active

    def resolve(self, *, url: str | None = None, node_id: int | None = None) -> NavNode:
        """Locate a node by URL or id.

        Raises:
            NodeNotFound: If neither target matches a node
        """
        if node_id is not None:
            node = self._tree.get(node_id)
            if node is None:
                raise NodeNotFound(f"#{node_id}")
            return node
        if url:
            node = self._tree.find(url)
            if node is None:
                raise NodeNotFound(url)
            return node
        raise NodeNotFound("(no target)")

    def toggle(self, *, url: str | None = None, node_id: int | None = None) -> RenderedNode:
        """Flip a section's expanded flag.

        Args:
            url: URL of the section header link
            node_id: Node id, for sections without a URL

        Returns:
            Re-rendered subtree of the toggled section

        Raises:
            NodeNotFound: If the target does not exist
            NotASection: If the target has no children
        """
        node = self.resolve(url=url, node_id=node_id)
        if not node.is_section:
            raise NotASection(node)

        node.expanded = not node.expanded
        logger.debug(
            f"{'Expanded' if node.expanded else 'Collapsed'} section {node.node_id} ({node.url})",
        )
        return self._renderer.render(node, self._selector.current(), active=self._active)
