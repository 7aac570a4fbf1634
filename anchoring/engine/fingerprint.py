"""Fingerprint construction for whole nodes and text selections."""

from __future__ import annotations

import math
from typing import Any, Tuple

from .config import EngineConfig, load_config
from .hashing import hash_text
from .paths import build_selector
from .text import normalize_text
from .tree import DocumentTree
from .types import Anchor, BoundingBox, Selection


def _round(value: float) -> int:
    return int(math.floor(value + 0.5))


def _index_of(nodes, node: Any) -> int:
    for index, candidate in enumerate(nodes):
        if candidate is node:
            return index
    return -1


def get_context(tree: DocumentTree, node: Any, length: int = 50) -> Tuple[str, str]:
    """Return normalized sibling text before and after ``node``.

    Siblings are consumed outward until each side holds at least ``length``
    raw characters, then each side is normalized and cut to ``length``
    (keeping the text closest to the node).
    """

    parent = tree.parent(node)
    if parent is None or length <= 0:
        return "", ""

    siblings = tree.child_nodes(parent)
    index = _index_of(siblings, node)
    if index == -1:
        return "", ""

    before = ""
    cursor = index - 1
    while cursor >= 0 and len(before) < length:
        before = tree.text_content(siblings[cursor]) + before
        cursor -= 1

    after = ""
    cursor = index + 1
    while cursor < len(siblings) and len(after) < length:
        after += tree.text_content(siblings[cursor])
        cursor += 1

    return normalize_text(before)[-length:], normalize_text(after)[:length]


def _document_box(tree: DocumentTree, node: Any) -> BoundingBox | None:
    box = tree.bounding_box(node)
    if box is None:
        return None
    return BoundingBox(
        top=_round(box.top),
        left=_round(box.left),
        width=_round(box.width),
        height=_round(box.height),
    )


def create_fingerprint(
    tree: DocumentTree,
    node: Any,
    config: EngineConfig | None = None,
) -> Anchor:
    """Fingerprint a whole node.

    The snapshot is capped, but the hash covers the full normalized text so
    long nodes can still be recognized by hash alone.
    """

    engine_config = config or load_config(None)
    snapshot_limit = int(engine_config.get("snapshot_limit", 200))
    context_length = int(engine_config.get("context_length", 50))

    text = normalize_text(tree.text_content(node))
    text_hash = hash_text(text)
    before, after = get_context(tree, node, context_length)
    selector = build_selector(tree, node)
    tag_name = tree.tag_name(node)

    return Anchor(
        selector=selector,
        tag_name=tag_name,
        class_name=tree.class_string(node),
        text_snapshot=text[:snapshot_limit],
        text_hash=text_hash,
        context_before=before,
        context_after=after,
        bounding_box=_document_box(tree, node),
        element_key=f"{tag_name}_{text_hash}_{hash_text(selector)}",
    )


def create_selection_fingerprint(
    tree: DocumentTree,
    selection: Selection | None,
    config: EngineConfig | None = None,
) -> Anchor | None:
    """Fingerprint a sub-string selection inside its enclosing element.

    Returns ``None`` for a missing, collapsed or whitespace-only selection.
    The selected text is kept whole; ``selection_start_offset`` is its first
    position in the element's normalized text, or ``-1`` when the selection
    spans beyond what the element's own text shows.
    """

    if selection is None or selection.is_collapsed:
        return None

    element = tree.enclosing_element(selection.container)
    if element is None:
        return None

    selected = normalize_text(selection.text)
    if not selected:
        return None

    engine_config = config or load_config(None)
    context_length = int(engine_config.get("context_length", 50))

    text_hash = hash_text(selected)
    before, after = get_context(tree, element, context_length)
    selector = build_selector(tree, element)
    element_text = normalize_text(tree.text_content(element))

    return Anchor(
        selector=selector,
        tag_name=tree.tag_name(element),
        class_name=tree.class_string(element),
        text_snapshot=selected,
        text_hash=text_hash,
        context_before=before,
        context_after=after,
        selection_start_offset=element_text.find(selected),
        selection_length=len(selected),
        element_key=f"highlight_{text_hash}_{hash_text(selector)}",
    )
