"""Engine configuration tests."""

from __future__ import annotations

import textwrap

from anchoring.engine.config import DEFAULTS, load_config, merge_into


def test_defaults():
    config = load_config(None)

    assert config.min_score == 0.3
    assert config.text_search_score == 0.6
    assert config.max_points == 10.0
    assert config.marker("attribute") == "data-anchor-id"
    assert config.get("snapshot_limit") == 200


def test_yaml_overrides_merge_with_defaults(tmp_path):
    path = tmp_path / "anchoring.yaml"
    path.write_text(
        textwrap.dedent(
            """
            min_score: 0.5
            weights:
              text_exact: 6
            markers:
              wrapper_tags: [mark, ins]
            """
        ),
        encoding="utf-8",
    )

    config = load_config(path)

    assert config.min_score == 0.5
    assert config.weight("text_exact") == 6.0
    assert config.weight("text_contains") == 3.0
    assert config.max_points == 12.0
    assert config.marker("wrapper_tags") == ["mark", "ins"]
    assert config.marker("attribute") == "data-anchor-id"


def test_missing_file_falls_back_to_defaults(tmp_path):
    assert load_config(tmp_path / "absent.yaml").raw == DEFAULTS


def test_loaded_config_is_a_copy():
    config = load_config(None)
    config.raw["weights"]["tag"] = 5.0

    assert load_config(None).weight("tag") == 1.0
    assert DEFAULTS["weights"]["tag"] == 1.0


def test_merge_into_replaces_non_mapping_values():
    base = {"weights": {"tag": 1.0}, "markers": {"wrapper_tags": ["mark"]}}
    merge_into(base, {"weights": {"tag": 2.0}, "markers": {"wrapper_tags": []}})

    assert base == {"weights": {"tag": 2.0}, "markers": {"wrapper_tags": []}}
