"""Configuration model and loaders for desccleaner.

Responsibilities:
- Define normalizer symbol tables and watch timing as typed dataclasses.
- Provide loader entry points for file- and environment-based configuration.

Key types:
- `NormalizerConfig`: literal tables compiled into the normalizer rules.
- `WatchConfig`: selectors, markers, and bounded timer settings for the applier.
- `CleanerConfig`: both of the above, validated together.
- `ConfigLoader`: static construction helpers for `CleanerConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Callable, Mapping, TypeVar

import yaml

from .parsing import (
    normalize_optional_string,
    parse_non_negative_float,
    parse_positive_int,
    parse_required_boolean,
    parse_token_list,
)


DEFAULT_SEPARATOR_SYMBOLS = "-_~=*\\/"
DEFAULT_PLACEHOLDER_SYMBOLS = "._*~-…"
DEFAULT_BULLET = "• "
DEFAULT_PROCESSED_MARKER = "desc-cleaned"
DEFAULT_STYLE_CLASS_DENYLIST = (DEFAULT_PROCESSED_MARKER, "pre-wrap")

_T = TypeVar("_T")


@dataclass(frozen=True, slots=True)
class NormalizerConfig:
    """Literal tables used by the lexical normalizer.

    Attributes:
        separator_symbols: Characters that form rule lines when repeated.
        placeholder_symbols: Characters that mark "no content" when alone on a line.
        style_class_denylist: Class-name words stripped when they leak into text.
        bullet: Prefix written in front of every list item.
        separator_min_run: Minimum run length for a separator line.
    """

    separator_symbols: str = DEFAULT_SEPARATOR_SYMBOLS
    placeholder_symbols: str = DEFAULT_PLACEHOLDER_SYMBOLS
    style_class_denylist: tuple[str, ...] = DEFAULT_STYLE_CLASS_DENYLIST
    bullet: str = DEFAULT_BULLET
    separator_min_run: int = 3

    def validate(self) -> None:
        """Validate symbol tables before they are compiled into patterns."""

        if not self.separator_symbols:
            raise ValueError("`separator_symbols` must contain at least one character.")
        if not self.placeholder_symbols:
            raise ValueError("`placeholder_symbols` must contain at least one character.")
        if any(symbol.isalnum() or symbol.isspace() for symbol in self.separator_symbols):
            raise ValueError("`separator_symbols` must only contain punctuation/symbols.")
        if any(symbol.isalnum() or symbol.isspace() for symbol in self.placeholder_symbols):
            raise ValueError("`placeholder_symbols` must only contain punctuation/symbols.")
        if not self.bullet.strip():
            raise ValueError("`bullet` must contain a visible marker.")
        if self.separator_min_run < 2:
            raise ValueError("`separator_min_run` must be at least 2.")


@dataclass(frozen=True, slots=True)
class WatchConfig:
    """Selectors, markers, and timer settings for the change-driven applier.

    Attributes:
        list_selector: Selector of the list container holding description nodes.
        item_selector: Selector of content-holder nodes inside the container.
        processed_marker: Class added to nodes once normalized.
        bind_retry_seconds: Fixed delay between container discovery attempts.
        max_bind_attempts: Optional cap on discovery retries; `None` retries forever.
        open_defer_seconds: Delay after a UI transition before processing.
        late_rescan_seconds: Delay of the follow-up scan after a batch; `0` disables it.
        debounce_seconds: Window that coalesces repeated scan requests.
        observe_subtree: Whether to watch node content below direct children.
        aggressive: Reprocess marked nodes whose raw content still looks like markup.
        max_reprocess_attempts: Per-node bound on aggressive reprocessing.
    """

    list_selector: str = "#rm_print_characters_block"
    item_selector: str = ".ch_description"
    processed_marker: str = DEFAULT_PROCESSED_MARKER
    bind_retry_seconds: float = 0.1
    max_bind_attempts: int | None = None
    open_defer_seconds: float = 0.2
    late_rescan_seconds: float = 0.0
    debounce_seconds: float = 0.05
    observe_subtree: bool = False
    aggressive: bool = False
    max_reprocess_attempts: int = 3

    def validate(self) -> None:
        """Validate selectors and timing values."""

        for field_name in ("list_selector", "item_selector", "processed_marker"):
            if normalize_optional_string(getattr(self, field_name)) is None:
                raise ValueError(f"`{field_name}` must be a non-empty string.")
        if any(character.isspace() for character in self.processed_marker):
            raise ValueError("`processed_marker` must be a single class token.")
        if self.bind_retry_seconds <= 0.0:
            raise ValueError("`bind_retry_seconds` must be positive.")
        for field_name in ("open_defer_seconds", "late_rescan_seconds", "debounce_seconds"):
            if getattr(self, field_name) < 0.0:
                raise ValueError(f"`{field_name}` must not be negative.")
        if self.max_bind_attempts is not None and self.max_bind_attempts <= 0:
            raise ValueError("`max_bind_attempts` must be a positive integer when set.")
        if self.max_reprocess_attempts <= 0:
            raise ValueError("`max_reprocess_attempts` must be a positive integer.")


@dataclass(frozen=True, slots=True)
class CleanerConfig:
    """Complete runtime configuration for normalizer and applier."""

    normalizer: NormalizerConfig = field(default_factory=NormalizerConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)

    def validate(self) -> None:
        """Validate both configuration groups."""

        self.normalizer.validate()
        self.watch.validate()


class ConfigLoader:
    """Factory methods for creating `CleanerConfig` from external sources."""

    _NORMALIZER_KEYS = frozenset(
        {
            "separator_symbols",
            "placeholder_symbols",
            "style_class_denylist",
            "bullet",
            "separator_min_run",
        }
    )
    _WATCH_KEYS = frozenset(
        {
            "list_selector",
            "item_selector",
            "processed_marker",
            "bind_retry_seconds",
            "max_bind_attempts",
            "open_defer_seconds",
            "late_rescan_seconds",
            "debounce_seconds",
            "observe_subtree",
            "aggressive",
            "max_reprocess_attempts",
        }
    )
    _ENV_PREFIX = "DESCCLEANER_"

    @staticmethod
    def from_yaml(path: Path) -> CleanerConfig:
        """Create a validated config from a YAML file with flat keys."""

        path_text = path.read_text(encoding="utf-8")
        payload = yaml.safe_load(path_text)
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(env: Mapping[str, str] | None = None) -> CleanerConfig:
        """Create a validated config from `DESCCLEANER_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, str] = {}
        for key in ConfigLoader._NORMALIZER_KEYS | ConfigLoader._WATCH_KEYS:
            env_key = f"{ConfigLoader._ENV_PREFIX}{key.upper()}"
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        return ConfigLoader.from_mapping(payload, source_label="environment")

    @staticmethod
    def from_mapping(payload: Mapping[str, Any], source_label: str) -> CleanerConfig:
        """Build a validated config from a flat key/value mapping."""

        unknown = sorted(
            set(payload).difference(ConfigLoader._NORMALIZER_KEYS | ConfigLoader._WATCH_KEYS)
        )
        if unknown:
            key_list = ", ".join(str(key) for key in unknown)
            raise ValueError(f"{source_label} includes unsupported key(s): {key_list}.")

        defaults = NormalizerConfig()
        normalizer = NormalizerConfig(
            separator_symbols=ConfigLoader._symbols(
                payload, "separator_symbols", source_label, defaults.separator_symbols
            ),
            placeholder_symbols=ConfigLoader._symbols(
                payload, "placeholder_symbols", source_label, defaults.placeholder_symbols
            ),
            style_class_denylist=(
                parse_token_list(payload["style_class_denylist"])
                if "style_class_denylist" in payload
                else defaults.style_class_denylist
            ),
            bullet=ConfigLoader._bullet(payload, defaults.bullet),
            separator_min_run=ConfigLoader._optional(
                payload, "separator_min_run", source_label, parse_positive_int,
                defaults.separator_min_run,
            ),
        )

        watch_defaults = WatchConfig()
        watch = WatchConfig(
            list_selector=ConfigLoader._string(
                payload, "list_selector", watch_defaults.list_selector
            ),
            item_selector=ConfigLoader._string(
                payload, "item_selector", watch_defaults.item_selector
            ),
            processed_marker=ConfigLoader._string(
                payload, "processed_marker", watch_defaults.processed_marker
            ),
            bind_retry_seconds=ConfigLoader._optional(
                payload, "bind_retry_seconds", source_label, parse_non_negative_float,
                watch_defaults.bind_retry_seconds,
            ),
            max_bind_attempts=ConfigLoader._optional(
                payload, "max_bind_attempts", source_label, parse_positive_int,
                watch_defaults.max_bind_attempts,
            ),
            open_defer_seconds=ConfigLoader._optional(
                payload, "open_defer_seconds", source_label, parse_non_negative_float,
                watch_defaults.open_defer_seconds,
            ),
            late_rescan_seconds=ConfigLoader._optional(
                payload, "late_rescan_seconds", source_label, parse_non_negative_float,
                watch_defaults.late_rescan_seconds,
            ),
            debounce_seconds=ConfigLoader._optional(
                payload, "debounce_seconds", source_label, parse_non_negative_float,
                watch_defaults.debounce_seconds,
            ),
            observe_subtree=ConfigLoader._optional(
                payload, "observe_subtree", source_label, parse_required_boolean,
                watch_defaults.observe_subtree,
            ),
            aggressive=ConfigLoader._optional(
                payload, "aggressive", source_label, parse_required_boolean,
                watch_defaults.aggressive,
            ),
            max_reprocess_attempts=ConfigLoader._optional(
                payload, "max_reprocess_attempts", source_label, parse_positive_int,
                watch_defaults.max_reprocess_attempts,
            ),
        )

        config = CleanerConfig(normalizer=normalizer, watch=watch)
        config.validate()
        return config

    @staticmethod
    def _optional(
        payload: Mapping[str, Any],
        key: str,
        source_label: str,
        parser: Callable[[object, str], _T],
        default: _T,
    ) -> _T:
        """Parse an optional field, keeping the default when missing or blank."""

        if key not in payload or normalize_optional_string(payload[key]) is None:
            return default
        try:
            return parser(payload[key], key)
        except ValueError as exc:
            raise ValueError(f"{source_label} field {exc}") from exc

    @staticmethod
    def _string(payload: Mapping[str, Any], key: str, default: str) -> str:
        """Read an optional string field and fall back to the default when blank."""

        return normalize_optional_string(payload.get(key)) or default

    @staticmethod
    def _symbols(
        payload: Mapping[str, Any], key: str, source_label: str, default: str
    ) -> str:
        """Read a symbol table given as one string of characters."""

        if key not in payload:
            return default
        value = normalize_optional_string(payload[key])
        if value is None:
            raise ValueError(f"{source_label} field `{key}` must list at least one symbol.")
        return "".join(dict.fromkeys(character for character in value if not character.isspace()))

    @staticmethod
    def _bullet(payload: Mapping[str, Any], default: str) -> str:
        """Read the bullet marker, keeping exactly one trailing space."""

        value = normalize_optional_string(payload.get("bullet"))
        if value is None:
            return default
        return f"{value} "
