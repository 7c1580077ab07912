"""Unit tests for configuration loading from YAML and the environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from desccleaner.config import (
    DEFAULT_PLACEHOLDER_SYMBOLS,
    DEFAULT_SEPARATOR_SYMBOLS,
    CleanerConfig,
    ConfigLoader,
    NormalizerConfig,
    WatchConfig,
)


def test_defaults_are_valid() -> None:
    """The built-in configuration should pass validation unchanged."""

    config = CleanerConfig()
    config.validate()

    assert config.normalizer.separator_symbols == DEFAULT_SEPARATOR_SYMBOLS
    assert config.normalizer.placeholder_symbols == DEFAULT_PLACEHOLDER_SYMBOLS
    assert config.watch.list_selector == "#rm_print_characters_block"
    assert config.watch.item_selector == ".ch_description"
    assert config.watch.bind_retry_seconds == 0.1
    assert config.watch.open_defer_seconds == 0.2
    assert config.watch.max_reprocess_attempts == 3


def test_from_yaml_reads_flat_keys(tmp_path: Path) -> None:
    """A YAML file should override only the keys it names."""

    config_path = tmp_path / "desccleaner.yaml"
    config_path.write_text(
        "\n".join(
            [
                "bullet: '-'",
                "separator_symbols: '#+ #'",
                "style_class_denylist:",
                "  - glow",
                "  - sparkle",
                "aggressive: yes",
                "max_reprocess_attempts: 5",
                "late_rescan_seconds: 1.5",
            ]
        ),
        encoding="utf-8",
    )

    config = ConfigLoader.from_yaml(config_path)

    assert config.normalizer.bullet == "- "
    assert config.normalizer.separator_symbols == "#+"
    assert config.normalizer.style_class_denylist == ("glow", "sparkle")
    assert config.watch.aggressive is True
    assert config.watch.max_reprocess_attempts == 5
    assert config.watch.late_rescan_seconds == 1.5
    assert config.watch.debounce_seconds == WatchConfig().debounce_seconds


def test_from_yaml_accepts_empty_file(tmp_path: Path) -> None:
    """An empty file is an empty mapping, i.e. all defaults."""

    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")

    assert ConfigLoader.from_yaml(config_path) == CleanerConfig()


def test_from_yaml_rejects_non_mapping_payload(tmp_path: Path) -> None:
    """A top-level list is not a configuration."""

    config_path = tmp_path / "list.yaml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a top-level mapping/object"):
        ConfigLoader.from_yaml(config_path)


def test_from_mapping_rejects_unknown_keys() -> None:
    """Unknown keys should be listed in sorted order."""

    with pytest.raises(
        ValueError, match=r"test includes unsupported key\(s\): colour, size\."
    ):
        ConfigLoader.from_mapping({"size": 1, "colour": "red"}, source_label="test")


def test_from_mapping_wraps_parser_errors_with_source_label() -> None:
    """Field errors should name where the bad value came from."""

    with pytest.raises(
        ValueError, match=r"environment field `debounce_seconds` must be a number of seconds\."
    ):
        ConfigLoader.from_mapping({"debounce_seconds": "fast"}, source_label="environment")


def test_from_mapping_rejects_blank_symbol_table() -> None:
    """An explicitly blank symbol table is an error, not a default."""

    with pytest.raises(ValueError, match=r"`placeholder_symbols` must list at least one symbol"):
        ConfigLoader.from_mapping({"placeholder_symbols": "  "}, source_label="test")


def test_from_mapping_runs_validation() -> None:
    """Values that parse but violate constraints should fail validation."""

    with pytest.raises(ValueError, match=r"`bind_retry_seconds` must be positive\."):
        ConfigLoader.from_mapping({"bind_retry_seconds": "0"}, source_label="test")
    with pytest.raises(ValueError, match=r"`separator_symbols` must only contain punctuation"):
        ConfigLoader.from_mapping({"separator_symbols": "-a"}, source_label="test")


def test_from_env_reads_prefixed_variables_and_skips_blank_ones() -> None:
    """Environment keys use the `DESCCLEANER_` prefix and upper-case names."""

    config = ConfigLoader.from_env(
        {
            "DESCCLEANER_OBSERVE_SUBTREE": "on",
            "DESCCLEANER_MAX_BIND_ATTEMPTS": "10",
            "DESCCLEANER_STYLE_CLASS_DENYLIST": "glow, pre-wrap",
            "DESCCLEANER_LIST_SELECTOR": "   ",
            "UNRELATED": "ignored",
        }
    )

    assert config.watch.observe_subtree is True
    assert config.watch.max_bind_attempts == 10
    assert config.normalizer.style_class_denylist == ("glow", "pre-wrap")
    assert config.watch.list_selector == WatchConfig().list_selector


def test_from_env_reports_invalid_boolean() -> None:
    """Invalid boolean tokens should surface the field name."""

    with pytest.raises(ValueError, match=r"environment field `aggressive` must be a boolean"):
        ConfigLoader.from_env({"DESCCLEANER_AGGRESSIVE": "sometimes"})


@pytest.mark.parametrize(
    "config",
    [
        NormalizerConfig(bullet="  "),
        NormalizerConfig(separator_min_run=1),
        NormalizerConfig(placeholder_symbols=""),
    ],
)
def test_normalizer_config_validation_errors(config: NormalizerConfig) -> None:
    """Broken symbol tables should be rejected before compilation."""

    with pytest.raises(ValueError):
        config.validate()


def test_watch_config_rejects_marker_with_whitespace() -> None:
    """The processed marker is a single class token."""

    with pytest.raises(ValueError, match=r"`processed_marker` must be a single class token\."):
        WatchConfig(processed_marker="desc cleaned").validate()
