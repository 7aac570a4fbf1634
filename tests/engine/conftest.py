"""Shared fixtures for anchoring engine tests."""

from __future__ import annotations

from typing import Tuple

import pytest

from anchoring.engine.config import load_config
from anchoring.engine.tree import HtmlDocument, attribute_layout


@pytest.fixture()
def engine_config():
    """Provide a mutable copy of the default engine configuration."""

    return load_config(None)


@pytest.fixture()
def make_document():
    """Build an :class:`HtmlDocument` from body markup.

    Elements may carry ``data-box="top,left,width,height"`` to give them
    geometry; pass ``layout=False`` to build a document without any.
    """

    def _make(body: str, *, scroll: Tuple[float, float] = (0.0, 0.0), layout: bool = True) -> HtmlDocument:
        return HtmlDocument(
            f"<html><body>{body}</body></html>",
            layout=attribute_layout if layout else None,
            scroll=scroll,
        )

    return _make
