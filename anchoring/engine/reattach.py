"""Coordinator for resolving anchors back to live nodes."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Tuple

from .config import EngineConfig, load_config
from .scoring import score_candidate
from .text import find_text_match
from .tree import DocumentTree
from .types import Anchor, ReattachmentBatch, ResolutionResult

logger = logging.getLogger(__name__)

ReservedWrapper = Callable[[DocumentTree, Any], bool]

METHOD_PATH = "path"
METHOD_SCORING = "scoring"
METHOD_TEXT_SEARCH = "text-search"


def marker_wrapper_predicate(config: EngineConfig) -> ReservedWrapper:
    """Build the default reserved-wrapper check from the ``markers`` config.

    A node is a reserved wrapper when it carries the marker attribute and is
    an inline wrapper (a wrapper tag or a wrapper class). Containers that
    merely host markers keep the attribute but are not wrappers.
    """

    attribute = config.marker("attribute", "data-anchor-id")
    wrapper_tags = {name.lower() for name in config.marker("wrapper_tags", [])}
    wrapper_classes = set(config.marker("wrapper_classes", []))

    def is_reserved_wrapper(tree: DocumentTree, node: Any) -> bool:
        if tree.attribute(node, attribute) is None:
            return False
        if tree.tag_name(node) in wrapper_tags:
            return True
        return bool(wrapper_classes & set(tree.class_string(node).split()))

    return is_reserved_wrapper


@dataclass(frozen=True)
class PipelineContext:
    """Aggregated state for one reattachment pass over a document snapshot."""

    tree: DocumentTree
    config: EngineConfig
    is_reserved_wrapper: ReservedWrapper


def build_context(
    tree: DocumentTree,
    config: EngineConfig | None = None,
    is_reserved_wrapper: ReservedWrapper | None = None,
) -> PipelineContext:
    engine_config = config or load_config(None)
    predicate = is_reserved_wrapper or marker_wrapper_predicate(engine_config)
    return PipelineContext(tree=tree, config=engine_config, is_reserved_wrapper=predicate)


def resolve(
    anchor: Anchor,
    tree: DocumentTree,
    config: EngineConfig | None = None,
    is_reserved_wrapper: ReservedWrapper | None = None,
) -> ResolutionResult | None:
    """Return the best live node for ``anchor`` or ``None`` when orphaned."""

    return _resolve(anchor, build_context(tree, config, is_reserved_wrapper))


def reattach_all(
    anchors: Iterable[Anchor],
    tree: DocumentTree,
    config: EngineConfig | None = None,
    is_reserved_wrapper: ReservedWrapper | None = None,
) -> ReattachmentBatch:
    """Resolve every anchor against one snapshot, preserving input order."""

    pipe_context = build_context(tree, config, is_reserved_wrapper)
    attached: List[Tuple[Anchor, ResolutionResult]] = []
    orphaned: List[Anchor] = []
    for anchor in anchors:
        result = _resolve(anchor, pipe_context)
        if result is None:
            orphaned.append(anchor)
        else:
            attached.append((anchor, result))

    logger.debug("Reattached %d anchors, %d orphaned", len(attached), len(orphaned))
    return ReattachmentBatch(attached=attached, orphaned=orphaned)


def summarize(batch: ReattachmentBatch) -> Dict[str, float | Dict[str, int]]:
    """Return diagnostic metrics for a reattachment batch."""

    total = len(batch.attached) + len(batch.orphaned)
    methods = Counter(result.method for _, result in batch.attached)
    scores = [result.score for _, result in batch.attached]
    return {
        "total": total,
        "attached": len(batch.attached),
        "orphaned": len(batch.orphaned),
        "attach_rate": len(batch.attached) / total if total else 0.0,
        "mean_score": sum(scores) / len(scores) if scores else 0.0,
        "methods": dict(methods),
    }


def _resolve(anchor: Anchor, pipe_context: PipelineContext) -> ResolutionResult | None:
    result = (
        _by_path(anchor, pipe_context)
        or _by_scoring(anchor, pipe_context)
        or _by_text_search(anchor, pipe_context)
    )
    if result is None:
        logger.debug("Anchor %s orphaned", anchor.element_key or anchor.selector)
    else:
        logger.debug(
            "Anchor %s resolved via %s (score %.2f)",
            anchor.element_key or anchor.selector,
            result.method,
            result.score,
        )
    return result


def _by_path(anchor: Anchor, pipe_context: PipelineContext) -> ResolutionResult | None:
    if not anchor.selector:
        return None
    tree = pipe_context.tree
    try:
        node = tree.select(anchor.selector)
    except ValueError as exc:
        logger.debug("Ignoring unusable selector %r: %s", anchor.selector, exc)
        return None
    if node is None:
        return None

    score = score_candidate(tree, node, anchor, pipe_context.config)
    if score >= pipe_context.config.min_score:
        return ResolutionResult(node=node, score=score, method=METHOD_PATH)
    return None


def _by_scoring(anchor: Anchor, pipe_context: PipelineContext) -> ResolutionResult | None:
    tree = pipe_context.tree
    best = None
    best_score = 0.0
    for node in tree.iter_by_tag(anchor.tag_name):
        if pipe_context.is_reserved_wrapper(tree, node):
            continue
        score = score_candidate(tree, node, anchor, pipe_context.config)
        # Strict comparison keeps the first node in traversal order on ties.
        if score > best_score:
            best_score = score
            best = node

    if best is not None and best_score >= pipe_context.config.min_score:
        return ResolutionResult(node=best, score=best_score, method=METHOD_SCORING)
    return None


def _by_text_search(anchor: Anchor, pipe_context: PipelineContext) -> ResolutionResult | None:
    if not anchor.is_selection or not anchor.text_snapshot:
        return None
    tree = pipe_context.tree
    for leaf in tree.iter_text_leaves():
        if find_text_match(tree.text_content(leaf), anchor.text_snapshot) is None:
            continue
        parent = tree.parent(leaf)
        if parent is None or pipe_context.is_reserved_wrapper(tree, parent):
            continue
        return ResolutionResult(
            node=parent,
            score=pipe_context.config.text_search_score,
            method=METHOD_TEXT_SEARCH,
        )
    return None
