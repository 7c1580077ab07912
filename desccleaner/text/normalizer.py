"""Lexical normalizer: raw description markup to canonical text.

Responsibilities:
- Run the markup rules, tag stripping, line filter, and whitespace pass in
  their required order.
- Stay total: any `str` (or `None`) input yields text, never an exception.

Canonical text uses `\\n` for soft breaks, `\\n\\n` between paragraphs and
sections, and a `"• "` prefix on list items.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..config import NormalizerConfig
from .cleaners import CleanerRule, CollapseWhitespace, LineFilter
from .markup import (
    ConvertHeadings,
    ConvertLineBreaks,
    ConvertListItems,
    ConvertParagraphs,
    DecodeEntities,
    RemoveDecorativeContainers,
    RemoveEmptyContainers,
    RemoveNonContentBlocks,
    StripTagsAndDecode,
    UnwrapContainers,
    UnwrapInlineElements,
)


@dataclass(frozen=True, slots=True)
class NormalizationReport:
    """Canonical text plus counters describing what the pass removed."""

    text: str
    non_content_blocks_removed: int = 0
    decorative_containers_removed: int = 0
    urls_removed: int = 0
    separator_lines_removed: int = 0
    placeholder_lines_removed: int = 0


class DescriptionNormalizer:
    """Apply an ordered sequence of rules that turns markup into canonical text."""

    def __init__(
        self,
        config: NormalizerConfig | None = None,
        rules: list[CleanerRule] | None = None,
    ) -> None:
        """Initialize with custom rules or the default pipeline built from `config`."""

        self.config = config or NormalizerConfig()
        self._non_content = RemoveNonContentBlocks()
        self._decorative = RemoveDecorativeContainers()
        self._line_filter = LineFilter(self.config)
        self.rules: list[CleanerRule] = rules or [
            DecodeEntities(),
            self._non_content,
            self._decorative,
            RemoveEmptyContainers(),
            ConvertHeadings(),
            ConvertParagraphs(),
            ConvertListItems(self.config.bullet),
            UnwrapInlineElements(),
            UnwrapContainers(),
            ConvertLineBreaks(),
            StripTagsAndDecode(),
            self._line_filter,
            CollapseWhitespace(),
        ]

    def normalize_with_report(self, raw: str | None) -> NormalizationReport:
        """Normalize markup and return the text with removal diagnostics."""

        if not raw:
            return NormalizationReport(text="")

        current = raw.replace("\r\n", "\n").replace("\r", "\n")
        for rule in self.rules:
            current = rule.apply(current)

        # Counters stay zero when a custom rule list omits the owning rule.
        return NormalizationReport(
            text=current,
            non_content_blocks_removed=self._non_content.last_removed_count,
            decorative_containers_removed=self._decorative.last_removed_count,
            urls_removed=self._line_filter.images_and_urls.last_removed_count,
            separator_lines_removed=self._line_filter.separators.last_removed_count,
            placeholder_lines_removed=self._line_filter.placeholders.last_removed_count,
        )

    def normalize(self, raw: str | None) -> str:
        """Normalize markup into canonical text."""

        return self.normalize_with_report(raw).text

    def is_canonical(self, text: str) -> bool:
        """Return whether `text` is a fixed point of this normalizer."""

        return self.normalize(text) == text


_DEFAULT_NORMALIZER = DescriptionNormalizer()


def normalize(raw: str | None) -> str:
    """Normalize markup with the default tables."""

    return _DEFAULT_NORMALIZER.normalize(raw)
