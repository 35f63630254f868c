"""Navigation tree store.

Holds the structural navigation tree of a developer guide. The tree is
built once per page view and never structurally mutated afterwards; only
the per-node ``expanded`` flags change in response to user interaction.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from guidenav.core.types import LanguageCode, URLPath

logger = logging.getLogger(__name__)


class TocError(ValueError):
    """Navigation content is malformed."""


@dataclass(eq=False)
class NavNode:
    """Single entry in the navigation tree.

    Nodes compare by identity so they can key dictionaries while their
    ``expanded`` flag changes.
    """

    node_id: int
    url: URLPath
    labels: dict[LanguageCode, str]
    children: tuple[NavNode, ...] = ()
    expanded: bool = False

    @property
    def is_section(self) -> bool:
        """Whether the node has children and can be expanded."""
        return bool(self.children)


@dataclass
class _PendingNode:
    url: URLPath
    labels: dict[LanguageCode, str]
    children: list[int] = field(default_factory=list)


class NavigationTree:
    """Navigation tree with URL lookups and ancestor traversal.

    Node ids are preorder indices, so ``walk()`` yields nodes in id order
    and sections without a URL can still be addressed.
    """

    __slots__ = ("_default_language", "_nodes", "_parents", "_root", "_url_index")

    def __init__(self, root: NavNode, default_language: LanguageCode) -> None:
        """Initialize tree and index every node.

        Args:
            root: Tree root (a synthetic node holding the top-level entries)
            default_language: Language every node must carry a label for

        Raises:
            TocError: If a node lacks a default-language label
        """
        self._root = root
        self._default_language = default_language
        self._nodes: dict[int, NavNode] = {}
        self._parents: dict[int, NavNode | None] = {}
        self._url_index: dict[str, NavNode] = {}
        self._index(root, None)

    def _index(self, node: NavNode, parent: NavNode | None) -> None:
        if not node.labels.get(self._default_language):
            raise TocError(
                f"Node {node.node_id} ({node.url or 'no url'}) has no "
                f"'{self._default_language}' label",
            )
        self._nodes[node.node_id] = node
        self._parents[node.node_id] = parent
        if node.url:
            key = normalize_url(node.url)
            if key in self._url_index:
                logger.debug(f"Duplicate navigation url {key}, keeping first entry")
            else:
                self._url_index[key] = node
        for child in node.children:
            self._index(child, node)

    @property
    def default_language(self) -> LanguageCode:
        return self._default_language

    def root(self) -> NavNode:
        """Return the tree root."""
        return self._root

    def find(self, url: str) -> NavNode | None:
        """Find the node linking to a URL.

        Args:
            url: Target URL; fragment and query string are ignored

        Returns:
            Matching node, or None if no node links to the URL
        """
        if not url:
            return None
        return self._url_index.get(normalize_url(url))

    def get(self, node_id: int) -> NavNode | None:
        """Get node by id."""
        return self._nodes.get(node_id)

    def parent(self, node: NavNode) -> NavNode | None:
        """Return the parent of a node, None for the root."""
        return self._parents.get(node.node_id)

    def ancestors(self, node: NavNode) -> list[NavNode]:
        """Return the ancestor chain of a node, root first, excluding the node."""
        chain: list[NavNode] = []
        current = self._parents.get(node.node_id)
        while current is not None:
            chain.append(current)
            current = self._parents.get(current.node_id)
        chain.reverse()
        return chain

    def walk(self) -> Iterator[NavNode]:
        """Iterate over all nodes depth-first, root included."""
        stack = [self._root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def mark_active(self, url: str | None) -> NavNode | None:
        """Reset expansion so that only the active page's ancestors are expanded.

        Args:
            url: URL of the page being viewed

        Returns:
            Active node, or None if the URL is not in the tree (the tree is
            then left fully collapsed)
        """
        for node in self.walk():
            node.expanded = False

        active = self.find(url) if url else None
        if active is None:
            if url:
                logger.debug(f"Active page {url} not in navigation, rendering collapsed")
            return None

        for ancestor in self.ancestors(active):
            ancestor.expanded = True
        return active

    def expand_all(self) -> None:
        """Expand every section."""
        for node in self.walk():
            node.expanded = node.is_section

    def copy(self) -> NavigationTree:
        """Return a structurally identical tree with its own expansion flags."""
        return NavigationTree(_copy_node(self._root), self._default_language)

    def __len__(self) -> int:
        return len(self._nodes)


def _copy_node(node: NavNode) -> NavNode:
    return NavNode(
        node_id=node.node_id,
        url=node.url,
        labels=dict(node.labels),
        children=tuple(_copy_node(child) for child in node.children),
        expanded=node.expanded,
    )


def normalize_url(url: str) -> str:
    """Normalize a site URL for lookups.

    Drops query string and fragment, and adds a leading slash to
    root-relative paths. Absolute URLs keep their scheme and host.
    """
    parts = urlsplit(url)
    if parts.scheme or parts.netloc:
        return f"{parts.scheme}://{parts.netloc}{parts.path}"
    path = parts.path
    return path if path.startswith("/") else f"/{path}"


class NavTreeBuilder:
    """Builder for constructing NavigationTree instances.

    The root is created up front; entries are attached by parent index
    in document order.
    """

    ROOT = 0

    def __init__(self, default_language: LanguageCode, title: str) -> None:
        self._default_language = default_language
        self._pending: list[_PendingNode] = []
        self._pending.append(
            _PendingNode(url=URLPath(""), labels={default_language: title}),
        )

    def add_node(
        self,
        labels: Mapping[LanguageCode, str],
        url: str = "",
        parent_idx: int = ROOT,
    ) -> int:
        """Add an entry to the tree.

        Args:
            labels: Display text per language
            url: Target URL, empty for pure section headers
            parent_idx: Index of parent entry, ROOT for top level

        Returns:
            Index of the added entry

        Raises:
            TocError: If the default-language label is missing or empty
        """
        if not labels.get(self._default_language):
            raise TocError(
                f"Entry {url or '(no url)'} has no '{self._default_language}' label",
            )
        if not 0 <= parent_idx < len(self._pending):
            raise TocError(f"Unknown parent index: {parent_idx}")

        idx = len(self._pending)
        self._pending.append(_PendingNode(url=URLPath(url), labels=dict(labels)))
        self._pending[parent_idx].children.append(idx)
        return idx

    def build(self) -> NavigationTree:
        """Build the NavigationTree instance."""
        counter = iter(range(len(self._pending)))

        def make(idx: int) -> NavNode:
            # Assign ids in preorder so they match walk() order
            node_id = next(counter)
            pending = self._pending[idx]
            children = tuple(make(child) for child in pending.children)
            return NavNode(
                node_id=node_id,
                url=pending.url,
                labels=pending.labels,
                children=children,
            )

        return NavigationTree(make(self.ROOT), self._default_language)


def missing_translations(tree: NavigationTree, language: str) -> list[NavNode]:
    """List entries without a label in a language, in document order.

    The root is not an entry and is never reported.
    """
    root = tree.root()
    return [
        node
        for node in tree.walk()
        if node is not root and not node.labels.get(LanguageCode(language))
    ]
