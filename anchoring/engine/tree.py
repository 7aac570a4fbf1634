"""Tree-query capability set consumed by the engine.

The engine never touches a concrete document API directly. It asks a
:class:`DocumentTree` for lookups, enumerations and per-node accessors, so
any representation (a parsed page, a test fixture, a serialized snapshot)
can be anchored once it implements this protocol. :class:`HtmlDocument` is
the BeautifulSoup-backed implementation used by the service.
"""

from __future__ import annotations

from typing import Any, Callable, Iterator, List, Optional, Protocol, Sequence, Tuple

from bs4 import BeautifulSoup, FeatureNotFound, NavigableString, Tag
from bs4.element import PreformattedString
from soupsieve import SelectorSyntaxError

from .types import BoundingBox, InvalidPathError

Layout = Callable[[Tag], Optional[BoundingBox]]

LAYOUT_ATTRIBUTE = "data-box"

_HIDDEN_TEXT_PARENTS = {"script", "style", "template"}


class DocumentTree(Protocol):
    """Read-only view over a document tree.

    ``select`` raises :class:`InvalidPathError` (a ``ValueError``) on
    malformed paths; callers are expected to catch it.
    Nodes are compared by identity.
    """

    def select(self, selector: str) -> Any | None: ...

    def iter_by_tag(self, tag_name: str) -> Iterator[Any]: ...

    def iter_text_leaves(self) -> Iterator[Any]: ...

    def tag_name(self, node: Any) -> str: ...

    def class_string(self, node: Any) -> str: ...

    def element_id(self, node: Any) -> str: ...

    def attribute(self, node: Any, name: str) -> str | None: ...

    def text_content(self, node: Any) -> str: ...

    def parent(self, node: Any) -> Any | None: ...

    def child_nodes(self, node: Any) -> Sequence[Any]: ...

    def same_tag_position(self, node: Any) -> Tuple[int, int]: ...

    def enclosing_element(self, node: Any) -> Any | None: ...

    def bounding_box(self, node: Any) -> BoundingBox | None: ...


def parse_html(html: str) -> BeautifulSoup:
    """Parse markup with lxml, falling back to the stdlib parser."""

    try:
        return BeautifulSoup(html or "", "lxml")
    except FeatureNotFound:
        return BeautifulSoup(html or "", "html.parser")


def attribute_layout(tag: Tag) -> BoundingBox | None:
    """Read viewport geometry serialized as ``data-box="top,left,width,height"``."""

    raw = tag.get(LAYOUT_ATTRIBUTE)
    if not raw or not isinstance(raw, str):
        return None
    parts = [piece.strip() for piece in raw.split(",")]
    if len(parts) != 4:
        return None
    try:
        top, left, width, height = (float(piece) for piece in parts)
    except ValueError:
        return None
    return BoundingBox(top=top, left=left, width=width, height=height)


def _is_element(node: Any) -> bool:
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def _is_text_leaf(node: Any) -> bool:
    if not isinstance(node, NavigableString) or isinstance(node, PreformattedString):
        return False
    parent = node.parent
    return parent is None or parent.name not in _HIDDEN_TEXT_PARENTS


class HtmlDocument:
    """:class:`DocumentTree` over a BeautifulSoup parse of an HTML page.

    ``layout`` maps an element to its viewport box; ``scroll`` is the
    ``(x, y)`` scroll offset added to produce document coordinates. Without
    a layout no geometry is reported.
    """

    def __init__(
        self,
        html: str = "",
        *,
        soup: BeautifulSoup | None = None,
        layout: Layout | None = None,
        scroll: Tuple[float, float] = (0.0, 0.0),
    ) -> None:
        self.soup = soup if soup is not None else parse_html(html)
        self.layout = layout
        self.scroll_x, self.scroll_y = scroll

    def select(self, selector: str) -> Tag | None:
        try:
            return self.soup.select_one(selector)
        except (SelectorSyntaxError, NotImplementedError) as exc:
            raise InvalidPathError(str(exc)) from exc

    def iter_by_tag(self, tag_name: str) -> Iterator[Tag]:
        return iter(self.soup.find_all(tag_name.lower()))

    def iter_text_leaves(self) -> Iterator[NavigableString]:
        root = self.soup.body or self.soup
        for node in root.descendants:
            if _is_text_leaf(node):
                yield node

    def tag_name(self, node: Any) -> str:
        return (getattr(node, "name", None) or "").lower()

    def class_string(self, node: Any) -> str:
        value = node.get("class") if _is_element(node) else None
        if not value:
            return ""
        if isinstance(value, str):
            return value
        return " ".join(value)

    def element_id(self, node: Any) -> str:
        value = node.get("id") if _is_element(node) else None
        return value if isinstance(value, str) else ""

    def attribute(self, node: Any, name: str) -> str | None:
        if not _is_element(node):
            return None
        value = node.get(name)
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return " ".join(value)

    def text_content(self, node: Any) -> str:
        # Script-like elements contribute no text, matching a parent's get_text().
        if _is_element(node) and node.name in _HIDDEN_TEXT_PARENTS:
            return ""
        if _is_element(node) or isinstance(node, BeautifulSoup):
            return node.get_text()
        if _is_text_leaf(node):
            return str(node)
        return ""

    def parent(self, node: Any) -> Tag | None:
        parent = getattr(node, "parent", None)
        return parent if _is_element(parent) else None

    def child_nodes(self, node: Any) -> List[Any]:
        return list(node.contents) if isinstance(node, Tag) else []

    def same_tag_position(self, node: Any) -> Tuple[int, int]:
        container = getattr(node, "parent", None)
        if container is None:
            return 1, 1
        rank = 0
        count = 0
        for child in container.children:
            if isinstance(child, Tag) and child.name == node.name:
                count += 1
                if child is node:
                    rank = count
        return rank or 1, count or 1

    def enclosing_element(self, node: Any) -> Tag | None:
        if _is_element(node):
            return node
        return self.parent(node)

    def bounding_box(self, node: Any) -> BoundingBox | None:
        if self.layout is None or not _is_element(node):
            return None
        box = self.layout(node)
        if box is None:
            return None
        return BoundingBox(
            top=box.top + self.scroll_y,
            left=box.left + self.scroll_x,
            width=box.width,
            height=box.height,
        )
