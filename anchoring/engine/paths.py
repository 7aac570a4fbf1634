"""Structural path selectors for live nodes."""

from __future__ import annotations

from typing import Any, List

import soupsieve

from .tree import DocumentTree


def id_segment(element_id: str) -> str:
    return "#" + soupsieve.escape(element_id)


def node_segment(tree: DocumentTree, node: Any) -> str:
    """Return ``tag[.class...][:nth-of-type(k)]`` for a single node."""

    segment = soupsieve.escape(tree.tag_name(node))
    classes = tree.class_string(node).split()
    if classes:
        segment += "".join("." + soupsieve.escape(name) for name in classes)
    rank, count = tree.same_tag_position(node)
    if count > 1:
        segment += f":nth-of-type({rank})"
    return segment


def build_selector(tree: DocumentTree, node: Any) -> str:
    """Build a child-combinator path that resolves back to ``node``.

    The walk climbs to the root element unless an ancestor (or the node
    itself) carries an id, in which case that id becomes the path root.
    """

    parts: List[str] = []
    current = node
    while current is not None:
        element_id = tree.element_id(current)
        if element_id:
            parts.insert(0, id_segment(element_id))
            break
        parts.insert(0, node_segment(tree, current))
        current = tree.parent(current)
    return " > ".join(parts)
