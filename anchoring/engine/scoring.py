"""Similarity scoring between an anchor and a live candidate node."""

from __future__ import annotations

from typing import Any, Dict

from .config import EngineConfig, load_config
from .hashing import hash_text
from .text import first_token, normalize_text
from .tree import DocumentTree
from .types import Anchor

Breakdown = Dict[str, float]


def score_breakdown(
    tree: DocumentTree,
    node: Any,
    anchor: Anchor,
    config: EngineConfig,
) -> Breakdown:
    """Return the points earned per factor.

    An empty dict means the tag gate failed and nothing else was evaluated.
    Factors the anchor carries no data for (context, geometry) are omitted.
    """

    if tree.tag_name(node) != anchor.tag_name:
        return {}

    points: Breakdown = {"tag": config.weight("tag")}
    element_text = normalize_text(tree.text_content(node))
    points["text"] = _text_points(element_text, anchor, config)
    points["class"] = _class_points(tree.class_string(node), anchor, config)

    if anchor.context_before or anchor.context_after:
        points["context"] = _context_points(tree, node, anchor, config)

    if anchor.bounding_box is not None:
        points["position"] = _position_points(tree, node, anchor, config)

    return points


def score_candidate(
    tree: DocumentTree,
    node: Any,
    anchor: Anchor,
    config: EngineConfig | None = None,
) -> float:
    """Return a bounded score in [0, 1] for the candidate."""

    engine_config = config or load_config(None)
    points = score_breakdown(tree, node, anchor, engine_config)
    if not points:
        return 0.0
    maximum = engine_config.max_points
    if maximum <= 0:
        return 0.0
    return min(sum(points.values()) / maximum, 1.0)


def _text_points(element_text: str, anchor: Anchor, config: EngineConfig) -> float:
    snapshot = anchor.text_snapshot or ""
    if element_text == snapshot:
        return config.weight("text_exact")
    if snapshot in element_text:
        return config.weight("text_contains")
    prefix_length = int(config.get("prefix_length", 50))
    if snapshot and snapshot[:prefix_length] in element_text:
        return config.weight("text_prefix")
    if hash_text(element_text) == anchor.text_hash:
        return config.weight("text_hash")
    return 0.0


def _class_points(class_string: str, anchor: Anchor, config: EngineConfig) -> float:
    if class_string == anchor.class_name:
        return config.weight("class_exact")
    token = first_token(anchor.class_name)
    if token and token in class_string:
        return config.weight("class_token")
    return 0.0


def _context_points(tree: DocumentTree, node: Any, anchor: Anchor, config: EngineConfig) -> float:
    parent = tree.parent(node)
    if parent is None:
        return 0.0
    parent_text = normalize_text(tree.text_content(parent))
    earned = 0.0
    if anchor.context_before and anchor.context_before in parent_text:
        earned += config.weight("context_side")
    if anchor.context_after and anchor.context_after in parent_text:
        earned += config.weight("context_side")
    return earned


def _position_points(tree: DocumentTree, node: Any, anchor: Anchor, config: EngineConfig) -> float:
    box = tree.bounding_box(node)
    if box is None or anchor.bounding_box is None:
        return 0.0
    delta = abs(box.top - anchor.bounding_box.top)
    if delta < float(config.get("position_near", 50)):
        return config.weight("position_near")
    if delta < float(config.get("position_far", 200)):
        return config.weight("position_far")
    return 0.0


def score_reason(points: Breakdown, config: EngineConfig, top_k: int = 2) -> str:
    """Return a human-friendly summary of the strongest factors."""

    if not points:
        return "tag mismatch"

    ceilings = {
        "tag": config.weight("tag"),
        "text": max(config.weight("text_exact"), config.weight("text_contains")),
        "class": config.weight("class_exact"),
        "context": 2 * config.weight("context_side"),
        "position": config.weight("position_near"),
    }
    ranked = []
    for name, value in points.items():
        if name == "tag" or value <= 0:
            continue
        ceiling = ceilings.get(name) or 1.0
        ranked.append((value, name, value / ceiling))
    ranked.sort(reverse=True)

    fragments = [_reason_fragment(name, ratio) for _, name, ratio in ranked[:top_k]]
    return "; ".join(fragment for fragment in fragments if fragment) or "tag only"


def _reason_fragment(name: str, ratio: float) -> str:
    mapping = {
        "text": "text match",
        "class": "class match",
        "context": "surrounding text",
        "position": "nearby position",
    }
    descriptor = mapping.get(name)
    if not descriptor:
        return ""
    if ratio >= 0.99:
        qualifier = "exact"
    elif ratio >= 0.5:
        qualifier = "strong"
    else:
        qualifier = "partial"
    return f"{qualifier} {descriptor}"
