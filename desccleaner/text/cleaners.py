"""Line-level content filter for flat text.

Responsibilities:
- Remove image links, URLs, separator lines, and placeholder lines.
- Strip leaked styling-class words.
- Canonicalize whitespace into the paragraph/soft-break conventions.

Every pattern is anchored per line (multi-line mode) so punctuation inside
prose is never touched; only lines made entirely of symbols are dropped.
"""

from __future__ import annotations

import re
from typing import Protocol

from ..config import NormalizerConfig


# Horizontal whitespace, including non-breaking spaces left by `&nbsp;`.
_HSPACE = r"[^\S\n]"


class CleanerRule(Protocol):
    """Protocol for text rules shared by the markup and line passes."""

    def apply(self, text: str) -> str:
        """Apply a single transformation."""


class RemoveImagesAndUrls:
    """Remove Markdown images and bare URLs; keep the label of Markdown links."""

    # Labels may hold one level of brackets, targets one level of parentheses.
    _LABEL = r"(?:[^\[\]\n]|\[[^\[\]\n]*\])"
    _TARGET = r"(?:[^()\s]|\([^()\s]*\))"
    _IMAGE_RE = re.compile(rf"!\[{_LABEL}*\]\(\s*{_TARGET}*\s*\)")
    _LINK_RE = re.compile(
        rf"\[({_LABEL}+)\]\(\s*[A-Za-z][A-Za-z0-9+.-]*://{_TARGET}*\s*\)"
    )
    _URL_RE = re.compile(r"\b[A-Za-z][A-Za-z0-9+.-]*://\S+")

    def __init__(self) -> None:
        """Initialize rule state with a zero removal counter."""

        self.last_removed_count = 0

    def apply(self, text: str) -> str:
        """Remove images first so their URLs leave no bracket residue."""

        text, images = self._IMAGE_RE.subn("", text)
        text, links = self._LINK_RE.subn(r"\1", text)
        text, urls = self._URL_RE.subn("", text)
        self.last_removed_count = images + links + urls
        return text


class RemoveSeparatorLines:
    """Blank lines made only of a repeated separator symbol run."""

    def __init__(self, symbols: str, min_run: int = 3) -> None:
        """Compile the separator pattern from a symbol table."""

        symbol_class = "".join(re.escape(symbol) for symbol in symbols)
        self._pattern = re.compile(
            rf"^{_HSPACE}*[{symbol_class}]{{{min_run},}}{_HSPACE}*$",
            re.MULTILINE,
        )
        self.last_removed_count = 0

    def apply(self, text: str) -> str:
        """Remove rule lines; the emptied line is folded by whitespace cleanup."""

        text, self.last_removed_count = self._pattern.subn("", text)
        return text


class RemovePlaceholderLines:
    """Blank lines holding exactly one placeholder symbol."""

    def __init__(self, symbols: str) -> None:
        """Compile the placeholder pattern from a symbol table."""

        symbol_class = "".join(re.escape(symbol) for symbol in symbols)
        self._pattern = re.compile(
            rf"^{_HSPACE}*[{symbol_class}]{_HSPACE}*$",
            re.MULTILINE,
        )
        self.last_removed_count = 0

    def apply(self, text: str) -> str:
        """Remove placeholder lines such as a lone `.` or `*`."""

        text, self.last_removed_count = self._pattern.subn("", text)
        return text


class RemoveStyleClassTokens:
    """Strip denylisted styling-class words, case-insensitively, as whole tokens."""

    def __init__(self, tokens: tuple[str, ...] | list[str]) -> None:
        """Compile the denylist; an empty list makes the rule a no-op."""

        ordered = sorted({token for token in tokens if token}, key=len, reverse=True)
        self._pattern = (
            re.compile(
                r"(?<![\w-])(?:" + "|".join(re.escape(token) for token in ordered) + r")(?![\w-])",
                re.IGNORECASE,
            )
            if ordered
            else None
        )

    def apply(self, text: str) -> str:
        """Remove denylisted tokens."""

        if self._pattern is None:
            return text
        return self._pattern.sub("", text)


class CollapseWhitespace:
    """Canonicalize whitespace: single spaces, trimmed lines, at most one blank line."""

    _HSPACE_RUN_RE = re.compile(rf"{_HSPACE}+")
    _LINE_EDGE_SPACE_RE = re.compile(r"^ | $", re.MULTILINE)
    _BLANK_RUN_RE = re.compile(r"\n{3,}")

    def apply(self, text: str) -> str:
        """Collapse horizontal runs, trim lines, fold blank lines, and trim the text."""

        text = self._HSPACE_RUN_RE.sub(" ", text)
        text = self._LINE_EDGE_SPACE_RE.sub("", text)
        text = self._BLANK_RUN_RE.sub("\n\n", text)
        return text.strip()


class LineFilter:
    """Apply the line-level content rules in a fixed order."""

    def __init__(self, config: NormalizerConfig | None = None) -> None:
        """Build the rule sequence from symbol tables."""

        resolved = config or NormalizerConfig()
        self.images_and_urls = RemoveImagesAndUrls()
        self.separators = RemoveSeparatorLines(
            resolved.separator_symbols, resolved.separator_min_run
        )
        self.placeholders = RemovePlaceholderLines(resolved.placeholder_symbols)
        # Class tokens go before line rules so a stripped token cannot leave
        # a fresh placeholder line behind.
        self.rules: list[CleanerRule] = [
            self.images_and_urls,
            RemoveStyleClassTokens(resolved.style_class_denylist),
            self.separators,
            self.placeholders,
        ]

    def apply(self, text: str) -> str:
        """Apply all line rules in order."""

        for rule in self.rules:
            text = rule.apply(text)
        return text


_DEFAULT_FILTER = LineFilter()


def filter_lines(text: str) -> str:
    """Apply the default line filter to flat text."""

    return _DEFAULT_FILTER.apply(text)
