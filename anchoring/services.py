"""Service functions bridging HTTP payloads and the anchoring engine.

These helpers turn serialized page snapshots into engine trees, run
fingerprinting and reattachment, and render the results as JSON-ready
dictionaries so the views stay thin and the logic stays unit-testable.
They also hold :class:`AttachmentLedger`, the caller-owned memo of which
anchors a renderer has already drawn.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Callable, Dict, List, Sequence, Tuple

from django.conf import settings

from .engine.config import EngineConfig, load_config
from .engine.fingerprint import create_fingerprint, create_selection_fingerprint
from .engine.paths import build_selector
from .engine.reattach import METHOD_TEXT_SEARCH, marker_wrapper_predicate, reattach_all, summarize
from .engine.scoring import score_breakdown, score_reason
from .engine.tree import HtmlDocument, attribute_layout, parse_html
from .engine.types import Anchor, InvalidPathError, ReattachmentBatch, ResolutionResult, Selection

logger = logging.getLogger(__name__)

AnchorKey = Callable[[Anchor], str]


class ElementNotFound(LookupError):
    """Raised when a selector matches nothing in the submitted snapshot."""


def anchor_key(anchor: Anchor) -> str:
    """Identity used for ledger bookkeeping."""

    return anchor.element_key or anchor.selector


class AttachmentLedger:
    """Remembers which anchors a renderer has already drawn on a page.

    The engine never consults this object. A caller keeps one per page,
    filters each :class:`ReattachmentBatch` through :meth:`pending` before
    rendering, and calls :meth:`reset` when the page navigates.
    """

    def __init__(self, key: AnchorKey = anchor_key) -> None:
        self._key = key
        self._rendered: set[str] = set()

    def __contains__(self, anchor: Anchor) -> bool:
        return self._key(anchor) in self._rendered

    def __len__(self) -> int:
        return len(self._rendered)

    def pending(self, batch: ReattachmentBatch) -> List[Tuple[Anchor, ResolutionResult]]:
        """Return attachments that have not been rendered yet."""

        return [(anchor, result) for anchor, result in batch.attached if anchor not in self]

    def mark_rendered(self, anchor: Anchor) -> None:
        self._rendered.add(self._key(anchor))

    def forget(self, anchor: Anchor) -> None:
        self._rendered.discard(self._key(anchor))

    def prune(self, still_rendered: Callable[[str], bool]) -> List[str]:
        """Drop entries whose marker the host no longer shows; return them."""

        stale = sorted(key for key in self._rendered if not still_rendered(key))
        self._rendered.difference_update(stale)
        return stale

    def reset(self) -> None:
        self._rendered.clear()


@lru_cache(maxsize=4)
def _load_engine_config(path: str | None) -> EngineConfig:
    return load_config(path)


def engine_config() -> EngineConfig:
    """Return the engine configuration named by ``ANCHORING_ENGINE_CONFIG``."""

    return _load_engine_config(getattr(settings, "ANCHORING_ENGINE_CONFIG", None))


def build_document(html: str, scroll: Tuple[float, float] = (0.0, 0.0)) -> HtmlDocument:
    """Parse a page snapshot whose elements may carry ``data-box`` geometry."""

    return HtmlDocument(html, layout=attribute_layout, scroll=scroll)


def strip_marker_wrappers(html: str, config: EngineConfig | None = None) -> str:
    """Unwrap inline marker wrappers left in ``html`` by an earlier render."""

    if not html:
        return html

    engine = config or engine_config()
    document = HtmlDocument(soup=parse_html(html))
    is_reserved_wrapper = marker_wrapper_predicate(engine)
    wrappers = [tag for tag in document.soup.find_all(True) if is_reserved_wrapper(document, tag)]
    for tag in wrappers:
        tag.unwrap()
    return str(document.soup)


def _select(document: HtmlDocument, selector: str) -> Any:
    try:
        node = document.select(selector)
    except InvalidPathError as exc:
        raise ElementNotFound(f"Invalid selector {selector!r}: {exc}") from exc
    if node is None:
        raise ElementNotFound(f"No element matches {selector!r}")
    return node


def fingerprint_element(
    html: str,
    selector: str,
    *,
    scroll: Tuple[float, float] = (0.0, 0.0),
    config: EngineConfig | None = None,
) -> Anchor:
    """Fingerprint the element at ``selector``.

    Raises :class:`ElementNotFound` when the selector matches nothing.
    """

    document = build_document(html, scroll)
    node = _select(document, selector)
    return create_fingerprint(document, node, config or engine_config())


def fingerprint_selection(
    html: str,
    selector: str,
    text: str,
    *,
    config: EngineConfig | None = None,
) -> Anchor | None:
    """Fingerprint ``text`` selected inside the element at ``selector``.

    Returns ``None`` for a collapsed or blank selection.
    """

    document = build_document(html)
    node = _select(document, selector)
    selection = Selection(container=node, text=text)
    return create_selection_fingerprint(document, selection, config or engine_config())


def serialize_result(
    document: HtmlDocument,
    anchor: Anchor,
    result: ResolutionResult,
    config: EngineConfig,
) -> Dict[str, Any]:
    """Render a resolution as JSON, naming the node by a fresh path."""

    if result.method == METHOD_TEXT_SEARCH:
        reason = "selected text found in page"
    else:
        reason = score_reason(score_breakdown(document, result.node, anchor, config), config)
    return {
        "anchor": anchor.to_dict(),
        "selector": build_selector(document, result.node),
        "tagName": document.tag_name(result.node),
        "score": round(result.score, 4),
        "method": result.method,
        "reason": reason,
    }


def reattach_records(
    html: str,
    anchors: Sequence[Anchor],
    *,
    scroll: Tuple[float, float] = (0.0, 0.0),
    strip_markers: bool = False,
    config: EngineConfig | None = None,
) -> Dict[str, Any]:
    """Reattach ``anchors`` to ``html`` and return the JSON-ready batch."""

    engine = config or engine_config()
    if strip_markers:
        html = strip_marker_wrappers(html, engine)
    document = build_document(html, scroll)
    batch = reattach_all(anchors, document, engine)

    summary = summarize(batch)
    logger.info(
        "Reattachment finished: %d attached, %d orphaned",
        summary["attached"],
        summary["orphaned"],
    )
    return {
        "attached": [serialize_result(document, anchor, result, engine) for anchor, result in batch.attached],
        "orphaned": [anchor.to_dict() for anchor in batch.orphaned],
        "summary": summary,
    }
