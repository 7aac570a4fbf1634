"""Typed data structures used by the anchoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


class AnchorFormatError(ValueError):
    """Raised when a persisted anchor record lacks a required field."""


class InvalidPathError(ValueError):
    """Raised by a tree when a path selector cannot be parsed."""


@dataclass(frozen=True)
class BoundingBox:
    """Document-space geometry of a node."""

    top: float
    left: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"top": self.top, "left": self.left, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundingBox":
        return cls(
            top=float(data.get("top", 0)),
            left=float(data.get("left", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )


@dataclass(frozen=True)
class TextMatch:
    """Offset range of a located substring."""

    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class Anchor:
    """Compact, persistable description of a location inside a document.

    Whole-node anchors carry a ``bounding_box``; sub-string anchors carry
    ``selection_start_offset`` and ``selection_length`` instead.
    """

    selector: str
    tag_name: str
    class_name: str = ""
    text_snapshot: str = ""
    text_hash: str = "0"
    context_before: str = ""
    context_after: str = ""
    bounding_box: Optional[BoundingBox] = None
    selection_start_offset: Optional[int] = None
    selection_length: Optional[int] = None
    element_key: str = ""

    @property
    def is_selection(self) -> bool:
        return self.selection_start_offset is not None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the camelCase keys of the stored record."""

        data: Dict[str, Any] = {
            "elementFingerprint": self.element_key,
            "selector": self.selector,
            "tagName": self.tag_name,
            "className": self.class_name,
            "textSnapshot": self.text_snapshot,
            "textHash": self.text_hash,
            "contextBefore": self.context_before,
            "contextAfter": self.context_after,
        }
        if self.bounding_box is not None:
            data["boundingBox"] = self.bounding_box.to_dict()
        if self.selection_start_offset is not None:
            data["selectionStartOffset"] = self.selection_start_offset
            data["selectionLength"] = self.selection_length
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Anchor":
        """Rebuild an anchor from a stored record.

        Missing optional fields fall back to values the scorer treats as
        "not evaluated"; a missing ``selector`` or ``tagName`` is rejected.
        """

        if not isinstance(data, dict):
            raise AnchorFormatError("Anchor record must be a mapping.")
        for key in ("selector", "tagName"):
            if not isinstance(data.get(key), str):
                raise AnchorFormatError(f"Anchor record is missing '{key}'.")

        box = data.get("boundingBox")
        offset = data.get("selectionStartOffset")
        length = data.get("selectionLength")
        try:
            return cls(
                selector=data["selector"],
                tag_name=data["tagName"].lower(),
                class_name=str(data.get("className") or ""),
                text_snapshot=str(data.get("textSnapshot") or ""),
                text_hash=str(data.get("textHash") or "0"),
                context_before=str(data.get("contextBefore") or ""),
                context_after=str(data.get("contextAfter") or ""),
                bounding_box=BoundingBox.from_dict(box) if isinstance(box, dict) else None,
                selection_start_offset=int(offset) if offset is not None else None,
                selection_length=int(length) if length is not None else None,
                element_key=str(data.get("elementFingerprint") or ""),
            )
        except (TypeError, ValueError, OverflowError) as exc:
            raise AnchorFormatError(f"Anchor record has an invalid value: {exc}") from exc


@dataclass(frozen=True)
class Selection:
    """A user text selection: its common ancestor node and selected text."""

    container: Any
    text: str

    @property
    def is_collapsed(self) -> bool:
        return not self.text


@dataclass(frozen=True)
class ResolutionResult:
    """Live node found for an anchor, with confidence and the method used."""

    node: Any
    score: float
    method: str


@dataclass(frozen=True)
class ReattachmentBatch:
    """Partition of a set of anchors into attached and orphaned."""

    attached: List[Tuple[Anchor, ResolutionResult]] = field(default_factory=list)
    orphaned: List[Anchor] = field(default_factory=list)
