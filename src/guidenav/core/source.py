"""Navigation content loading.

Reads table-of-contents files into navigation trees. Two formats are
supported:

- TOML (``.toml``): nested ``[[item]]`` arrays with ``url`` and ``labels``
- Guide markup (``.cs``, ``.html``, ``.htm``): the sidebar list with
  ``li.nav-section`` entries and ``<span class="LANG">`` labels, optionally
  wrapped in ClearSilver ``<?cs ... ?>`` directives

Template directives and comments are resolved here, so the resulting tree
carries final URLs only.
"""

import logging
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path

from bs4 import BeautifulSoup, Tag

from guidenav.core.tree import NavigationTree, NavTreeBuilder, TocError
from guidenav.core.types import LanguageCode

logger = logging.getLogger(__name__)

TOROOT_PLACEHOLDER = "${toroot}"
MARKUP_SUFFIXES = {".cs", ".html", ".htm"}

_CS_TOROOT = re.compile(r"<\?cs\s+var\s*:\s*toroot\s*\?>")
_CS_DIRECTIVE = re.compile(r"<\?cs\b.*?\?>", re.DOTALL)
_WHITESPACE = re.compile(r"\s+")


def load_toc(
    path: Path,
    *,
    toroot: str = "/",
    default_language: str = "en",
    title: str = "Dev Guide",
) -> NavigationTree:
    """Load a navigation tree from a TOC file.

    Args:
        path: TOC file; format chosen by suffix
        toroot: Value substituted for the root-relative path variable
        default_language: Language every entry must have a label for
        title: Label of the tree root

    Returns:
        NavigationTree with all expansion flags cleared

    Raises:
        FileNotFoundError: If the file doesn't exist
        TocError: If the content is malformed
    """
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix == ".toml":
        return parse_toml_toc(text, toroot=toroot, default_language=default_language, title=title)
    if suffix in MARKUP_SUFFIXES:
        return parse_markup_toc(text, toroot=toroot, default_language=default_language, title=title)
    raise TocError(f"Unsupported TOC format: {path.name}")


def parse_toml_toc(
    text: str,
    *,
    toroot: str = "/",
    default_language: str = "en",
    title: str = "Dev Guide",
) -> NavigationTree:
    """Parse a TOML table of contents.

    Example:
        title = "Dev Guide"

        [[item]]
        url = "${toroot}guide/components/index.html"
        labels = { en = "App Components", zh-CN = "应用程序组件" }

          [[item.item]]
          url = "${toroot}guide/components/fundamentals.html"
          title = "App Fundamentals"

    ``title`` on an item is shorthand for the default-language label.
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise TocError(f"Invalid TOML: {e}") from e

    root_title = data.get("title", title)
    if not isinstance(root_title, str) or not root_title.strip():
        raise TocError("title must be a non-empty string")

    lang = LanguageCode(default_language)
    builder = NavTreeBuilder(lang, root_title.strip())
    _add_toml_items(builder, data.get("item", []), NavTreeBuilder.ROOT, toroot, lang, "item")
    return builder.build()


def _add_toml_items(
    builder: NavTreeBuilder,
    items: object,
    parent_idx: int,
    toroot: str,
    default_language: LanguageCode,
    where: str,
) -> None:
    if not isinstance(items, list):
        raise TocError(f"{where} must be an array of tables")

    for position, item in enumerate(items):
        location = f"{where}[{position}]"
        if not isinstance(item, dict):
            raise TocError(f"{location} must be a table")

        url = item.get("url", "")
        if not isinstance(url, str):
            raise TocError(f"{location}.url must be a string")

        labels_raw = item.get("labels", {})
        if not isinstance(labels_raw, dict):
            raise TocError(f"{location}.labels must be a table")
        labels: dict[LanguageCode, str] = {}
        shorthand = item.get("title")
        if shorthand is not None:
            if not isinstance(shorthand, str):
                raise TocError(f"{location}.title must be a string")
            labels[default_language] = shorthand
        for code, text in labels_raw.items():
            if not isinstance(text, str):
                raise TocError(f"{location}.labels.{code} must be a string")
            labels[LanguageCode(code)] = text

        idx = builder.add_node(
            _finalize_labels(labels, default_language, location),
            substitute_toroot(url, toroot),
            parent_idx,
        )
        _add_toml_items(
            builder, item.get("item", []), idx, toroot, default_language, f"{location}.item",
        )


def parse_markup_toc(
    text: str,
    *,
    toroot: str = "/",
    default_language: str = "en",
    title: str = "Dev Guide",
) -> NavigationTree:
    """Parse the guide sidebar markup.

    ClearSilver ``var:toroot`` is replaced by ``toroot``; other directives,
    HTML comments and scripts are dropped. Each ``<li>`` of the navigation
    list becomes an entry.
    """
    text = _CS_TOROOT.sub(lambda _: toroot, text)
    text = _CS_DIRECTIVE.sub("", text)

    soup = BeautifulSoup(text, "html.parser")
    for script in soup.find_all("script"):
        script.decompose()

    nav = soup.find("ul", id="nav") or soup.find("ul")
    if not isinstance(nav, Tag):
        raise TocError("No navigation list found")

    lang = LanguageCode(default_language)
    builder = NavTreeBuilder(lang, title)
    _add_markup_items(builder, nav, NavTreeBuilder.ROOT, lang)
    return builder.build()


def _add_markup_items(
    builder: NavTreeBuilder,
    ul: Tag,
    parent_idx: int,
    default_language: LanguageCode,
) -> None:
    for li in ul.find_all("li", recursive=False):
        header = _label_element(li)
        if header is None:
            logger.debug("Skipping navigation item without a link or label")
            continue

        url = str(header.get("href", "")) if header.name == "a" else ""
        labels = _extract_labels(header, default_language)
        if not labels:
            raise TocError(f"Navigation item {url or '(no url)'} has no label text")

        idx = builder.add_node(
            _finalize_labels(labels, default_language, url or "(no url)"),
            url,
            parent_idx,
        )
        sublist = li.find("ul", recursive=False)
        if isinstance(sublist, Tag):
            _add_markup_items(builder, sublist, idx, default_language)


def _label_element(li: Tag) -> Tag | None:
    """Find the element holding an item's link and labels.

    Sections keep it in a header ``<div>``; leaves hold the ``<a>`` directly.
    """
    for child in li.children:
        if not isinstance(child, Tag):
            continue
        if child.name == "a":
            return child
        if child.name == "div":
            anchor = child.find("a")
            return anchor if isinstance(anchor, Tag) else child
    return None


def _extract_labels(element: Tag, default_language: LanguageCode) -> dict[LanguageCode, str]:
    spans = [
        span for span in element.find_all("span") if isinstance(span, Tag) and span.get("class")
    ]
    if not spans:
        text = _clean_text(element.get_text(" "))
        return {default_language: text} if text else {}

    labels: dict[LanguageCode, str] = {}
    for span in spans:
        code = LanguageCode(span["class"][0])
        text = _clean_text(span.get_text(" "))
        if text and code not in labels:
            labels[code] = text
    return labels


def _clean_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _finalize_labels(
    labels: Mapping[LanguageCode, str],
    default_language: LanguageCode,
    location: str,
) -> dict[LanguageCode, str]:
    """Ensure the default-language label exists.

    If it is missing, the first non-empty label takes its place.
    """
    result = {code: text.strip() for code, text in labels.items() if text.strip()}
    if not result:
        raise TocError(f"{location} has no label")
    if default_language not in result:
        first_code, first_text = next(iter(result.items()))
        logger.warning(
            f"{location} has no '{default_language}' label, using '{first_code}' label",
        )
        result = {default_language: first_text, **result}
    return result


def substitute_toroot(url: str, toroot: str) -> str:
    """Replace the root-relative path variable in a URL."""
    return url.replace(TOROOT_PLACEHOLDER, toroot)


class TocLoader:
    """Loads a TOC file, caching the parsed tree until the file changes.

    Each call to ``load()`` returns a fresh copy so callers can change
    expansion flags freely.
    """

    def __init__(
        self,
        toc_file: Path,
        *,
        toroot: str = "/",
        default_language: str = "en",
        title: str = "Dev Guide",
    ) -> None:
        self._toc_file = toc_file
        self._toroot = toroot
        self._default_language = default_language
        self._title = title
        self._cached: NavigationTree | None = None
        self._cached_mtime: float | None = None

    @property
    def toc_file(self) -> Path:
        return self._toc_file

    @property
    def default_language(self) -> LanguageCode:
        return LanguageCode(self._default_language)

    def load(self) -> NavigationTree:
        """Return the navigation tree, re-reading the file if it changed.

        Raises:
            FileNotFoundError: If the TOC file doesn't exist
            TocError: If the content is malformed
        """
        mtime = self._toc_file.stat().st_mtime
        if self._cached is None or self._cached_mtime != mtime:
            logger.info(f"Loading navigation from {self._toc_file}")
            self._cached = load_toc(
                self._toc_file,
                toroot=self._toroot,
                default_language=self._default_language,
                title=self._title,
            )
            self._cached_mtime = mtime
            logger.debug(f"Loaded {len(self._cached)} navigation nodes")
        return self._cached.copy()

    def invalidate(self) -> None:
        """Drop the cached tree."""
        self._cached = None
        self._cached_mtime = None
