"""Navigation tree renderer.

Turns a navigation tree into display structures for a language. Rendering
is a pure function of the tree's labels and expansion flags, the requested
language, and the active page.
"""

from __future__ import annotations

from dataclasses import dataclass
from html import escape
from typing import TypedDict

from guidenav.core.tree import NavigationTree, NavNode
from guidenav.core.types import LanguageCode


class RenderedNodeDict(TypedDict):
    """Dictionary representation of a rendered node."""

    id: int
    url: str
    label: str
    language: str
    expandable: bool
    expanded: bool
    active: bool
    children: list[RenderedNodeDict]


@dataclass(frozen=True)
class RenderedNode:
    """Visible state of a navigation node.

    ``language`` is the language of ``label``, which differs from the
    requested language when the label fell back to the default language.
    ``children`` is empty for collapsed sections.
    """

    node_id: int
    url: str
    label: str
    language: LanguageCode
    expandable: bool
    expanded: bool
    active: bool
    children: tuple[RenderedNode, ...] = ()

    def to_dict(self) -> RenderedNodeDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.node_id,
            "url": self.url,
            "label": self.label,
            "language": self.language,
            "expandable": self.expandable,
            "expanded": self.expanded,
            "active": self.active,
            "children": [child.to_dict() for child in self.children],
        }


class TreeRenderer:
    """Renders navigation nodes with per-language label fallback."""

    def __init__(self, default_language: LanguageCode) -> None:
        self._default_language = default_language

    @property
    def default_language(self) -> LanguageCode:
        return self._default_language

    def label(self, node: NavNode, language: str) -> tuple[str, LanguageCode]:
        """Choose the display label for a node.

        Args:
            node: Node to label
            language: Requested language

        Returns:
            Tuple of (label text, language of the text). Falls back to the
            default-language label when the requested one is missing or blank.
        """
        text = node.labels.get(LanguageCode(language))
        if text and text.strip():
            return text, LanguageCode(language)
        return node.labels[self._default_language], self._default_language

    def render(
        self,
        node: NavNode,
        language: str,
        *,
        active: NavNode | None = None,
    ) -> RenderedNode:
        """Render a node and its visible descendants.

        Args:
            node: Node to render
            language: Requested language
            active: Node of the page being viewed, if any

        Returns:
            RenderedNode; children are included only if the node is expanded
        """
        text, text_language = self.label(node, language)
        expanded = node.is_section and node.expanded
        children: tuple[RenderedNode, ...] = ()
        if expanded:
            children = tuple(
                self.render(child, language, active=active) for child in node.children
            )
        return RenderedNode(
            node_id=node.node_id,
            url=node.url,
            label=text,
            language=text_language,
            expandable=node.is_section,
            expanded=expanded,
            active=node is active,
            children=children,
        )

    def render_tree(
        self,
        tree: NavigationTree,
        language: str,
        *,
        active: NavNode | None = None,
    ) -> list[RenderedNode]:
        """Render the top-level entries of a tree.

        The root itself is not displayed; its entries always are.
        """
        return [
            self.render(child, language, active=active)
            for child in tree.root().children
        ]


def render_html(nodes: list[RenderedNode], *, list_id: str = "nav") -> str:
    """Render nodes as nested list markup for the guide sidebar.

    Uses the sidebar's class names: ``nav-section`` for sections,
    ``nav-section-header`` for their headers, ``expanded`` for open
    sections and ``selected`` for the active page.
    """
    lines = [f'<ul id="{escape(list_id)}">']
    for node in nodes:
        _html_node(node, lines, depth=1)
    lines.append("</ul>")
    return "\n".join(lines)


def _html_node(node: RenderedNode, lines: list[str], depth: int) -> None:
    indent = "  " * depth
    classes = []
    if node.expandable:
        classes.append("nav-section")
        if node.expanded:
            classes.append("expanded")
    if node.active:
        classes.append("selected")
    class_attr = f' class="{" ".join(classes)}"' if classes else ""
    link = _html_link(node)

    if not node.expandable:
        lines.append(f"{indent}<li{class_attr}>{link}</li>")
        return

    lines.append(f'{indent}<li{class_attr} data-node-id="{node.node_id}">')
    lines.append(f'{indent}  <div class="nav-section-header">{link}</div>')
    if node.children:
        lines.append(f"{indent}  <ul>")
        for child in node.children:
            _html_node(child, lines, depth + 2)
        lines.append(f"{indent}  </ul>")
    lines.append(f"{indent}</li>")


def _html_link(node: RenderedNode) -> str:
    span = f'<span lang="{escape(node.language)}">{escape(node.label)}</span>'
    if not node.url:
        return span
    return f'<a href="{escape(node.url)}">{span}</a>'


def render_text(nodes: list[RenderedNode]) -> str:
    """Render nodes as an indented outline.

    Sections are prefixed with ``[-]`` when expanded and ``[+]`` when
    collapsed; the active page is marked with ``*``.
    """
    lines: list[str] = []
    for node in nodes:
        _text_node(node, lines, depth=0)
    return "\n".join(lines)


def _text_node(node: RenderedNode, lines: list[str], depth: int) -> None:
    if node.expandable:
        marker = "[-]" if node.expanded else "[+]"
    else:
        marker = "   "
    active = " *" if node.active else ""
    lines.append(f"{'    ' * depth}{marker} {node.label}{active}")
    for child in node.children:
        _text_node(child, lines, depth + 1)
