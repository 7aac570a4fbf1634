"""Configuration helpers for the anchoring engine."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

import yaml


@dataclass(frozen=True)
class EngineConfig:
    """Typed wrapper around the engine configuration dictionary."""

    raw: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.raw.get(key, default)

    def weight(self, name: str) -> float:
        weights = self.raw.get("weights", {})
        return float(weights.get(name, 0.0))

    def marker(self, key: str, default: Any = None) -> Any:
        return self.raw.get("markers", {}).get(key, default)

    @property
    def min_score(self) -> float:
        return float(self.raw.get("min_score", 0.3))

    @property
    def text_search_score(self) -> float:
        return float(self.raw.get("text_search_score", 0.6))

    @property
    def max_points(self) -> float:
        """Highest attainable sum of factor points."""

        return (
            self.weight("tag")
            + max(
                self.weight("text_exact"),
                self.weight("text_contains"),
                self.weight("text_prefix"),
                self.weight("text_hash"),
            )
            + max(self.weight("class_exact"), self.weight("class_token"))
            + 2 * self.weight("context_side")
            + max(self.weight("position_near"), self.weight("position_far"))
        )


DEFAULTS: Dict[str, Any] = {
    "min_score": 0.3,
    "text_search_score": 0.6,
    "snapshot_limit": 200,
    "context_length": 50,
    "prefix_length": 50,
    "position_near": 50,
    "position_far": 200,
    "weights": {
        "tag": 1.0,
        "text_exact": 4.0,
        "text_contains": 3.0,
        "text_prefix": 2.0,
        "text_hash": 3.0,
        "class_exact": 2.0,
        "class_token": 1.0,
        "context_side": 1.0,
        "position_near": 1.0,
        "position_far": 0.5,
    },
    "markers": {
        "attribute": "data-anchor-id",
        "wrapper_tags": ["mark"],
        "wrapper_classes": ["anchor-checkbox-text"],
    },
}


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load configuration from YAML, merging with defaults."""

    data: Dict[str, Any] = copy.deepcopy(DEFAULTS)

    if path is not None and Path(path).exists():
        with Path(path).open("r", encoding="utf-8") as stream:
            user = yaml.safe_load(stream) or {}
        merge_into(data, user)

    return EngineConfig(data)


def merge_into(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Recursively merge override into base dict."""

    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merge_into(base[key], value)
        else:
            base[key] = value
