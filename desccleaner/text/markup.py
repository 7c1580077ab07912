"""Markup-level rules applied before tags are stripped.

Responsibilities:
- Decode character entities without rendering anything.
- Drop non-content markup (style/script blocks, comments, decorative and
  empty containers) together with its contents.
- Rewrite structural elements into the newline/bullet conventions of
  canonical text so that structure survives generic tag stripping.

All rules are pattern based and total: malformed markup is left as literal
text instead of raising.
"""

from __future__ import annotations

import html
import re

from ..config import DEFAULT_BULLET


class DecodeEntities:
    """Convert character entities (`&lt;`, `&amp;`, `&#8226;`) to literal characters.

    Multiply-encoded input (`&amp;amp;lt;`) is decoded until it stops changing,
    bounded by `max_rounds`.
    """

    def __init__(self, max_rounds: int = 8) -> None:
        """Initialize with the bound on decoding rounds."""

        self.max_rounds = max_rounds

    def apply(self, text: str) -> str:
        """Decode entities using a pure decoder."""

        for _ in range(self.max_rounds):
            decoded = html.unescape(text)
            if decoded == text:
                break
            text = decoded
        return text


class RemoveNonContentBlocks:
    """Remove style/script-like elements and comments, including their contents."""

    _BLOCK_RE = re.compile(
        r"<(script|style|noscript|template)\b[^>]*>.*?</\1\s*>",
        re.IGNORECASE | re.DOTALL,
    )
    _COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)

    def __init__(self) -> None:
        """Initialize rule state with a zero removal counter."""

        self.last_removed_count = 0

    def apply(self, text: str) -> str:
        """Delete closed blocks and comments; unclosed ones are left to tag stripping."""

        text, block_count = self._BLOCK_RE.subn("", text)
        text, comment_count = self._COMMENT_RE.subn("", text)
        self.last_removed_count = block_count + comment_count
        return text


class RemoveDecorativeContainers:
    """Remove containers whose inline style marks them as visual-only effects.

    A container is decorative when its `style` attribute uses absolute or
    fixed positioning together with an animation/transition or zero opacity.
    The element is removed with its balanced contents; when no closing tag
    can be found, only the opening tag is dropped.
    """

    _OPEN_RE = re.compile(
        r"<(div|span|section|aside|figure)\b([^>]*)>",
        re.IGNORECASE,
    )
    _STYLE_ATTR_RE = re.compile(r"""\bstyle\s*=\s*(["'])(.*?)\1""", re.IGNORECASE | re.DOTALL)
    _POSITIONED_RE = re.compile(r"position\s*:\s*(?:absolute|fixed)", re.IGNORECASE)
    _ANIMATED_RE = re.compile(r"\b(?:animation|transition)(?:-[a-z-]+)?\s*:", re.IGNORECASE)
    _INVISIBLE_RE = re.compile(
        r"(?<![\w-])opacity\s*:\s*(?:0+(?:\.0*)?|\.0+)\s*(?:!important\s*)?(?:;|$)",
        re.IGNORECASE,
    )

    def __init__(self) -> None:
        """Initialize rule state with a zero removal counter."""

        self.last_removed_count = 0

    def apply(self, text: str) -> str:
        """Remove every decorative container found in the text."""

        removed = 0
        search_from = 0
        while True:
            opening = self._next_decorative_opening(text, search_from)
            if opening is None:
                break
            end = self._matching_close_end(text, opening)
            tail_start = opening.end() if end is None else end
            text = text[: opening.start()] + text[tail_start:]
            search_from = opening.start()
            removed += 1
        self.last_removed_count = removed
        return text

    def is_decorative_style(self, style: str) -> bool:
        """Return whether an inline style value matches the decorative heuristic."""

        if not self._POSITIONED_RE.search(style):
            return False
        return bool(self._ANIMATED_RE.search(style) or self._INVISIBLE_RE.search(style))

    def _next_decorative_opening(self, text: str, start: int) -> re.Match[str] | None:
        """Return the first decorative opening tag at or after `start`."""

        for match in self._OPEN_RE.finditer(text, start):
            style_match = self._STYLE_ATTR_RE.search(match.group(2))
            if style_match is not None and self.is_decorative_style(style_match.group(2)):
                return match
        return None

    @staticmethod
    def _matching_close_end(text: str, opening: re.Match[str]) -> int | None:
        """Return the end offset of the closing tag balancing `opening`."""

        name = re.escape(opening.group(1))
        tag_re = re.compile(rf"<(/?){name}\b[^>]*>", re.IGNORECASE)
        depth = 1
        for match in tag_re.finditer(text, opening.end()):
            if match.group(1):
                depth -= 1
                if depth == 0:
                    return match.end()
            elif not match.group(0).endswith("/>"):
                depth += 1
        return None


class RemoveEmptyContainers:
    """Remove container elements with no content, innermost first."""

    _EMPTY_RE = re.compile(
        r"<(div|span|p|section|li|h[1-6]|b|strong|i|em)\b[^>]*>(\s*)</\1\s*>",
        re.IGNORECASE,
    )

    def apply(self, text: str) -> str:
        """Repeat removal until nested empty containers are gone."""

        while True:
            text, count = self._EMPTY_RE.subn(self._replacement, text)
            if count == 0:
                return text

    @staticmethod
    def _replacement(match: re.Match[str]) -> str:
        """Keep a single space where the empty element held whitespace."""

        return " " if match.group(2) else ""


class ConvertHeadings:
    """Surround heading content with blank lines."""

    _HEADING_TAG_RE = re.compile(r"</?h[1-6]\b[^>]*>", re.IGNORECASE)

    def apply(self, text: str) -> str:
        """Replace opening and closing heading tags with paragraph breaks."""

        return self._HEADING_TAG_RE.sub("\n\n", text)


class ConvertParagraphs:
    """End paragraph content with a blank line."""

    _OPEN_AFTER_TEXT_RE = re.compile(r"(?<=[^\n])<p\b[^>]*>", re.IGNORECASE)
    _OPEN_RE = re.compile(r"<p\b[^>]*>", re.IGNORECASE)
    _CLOSE_RE = re.compile(r"</p\s*>", re.IGNORECASE)

    def apply(self, text: str) -> str:
        """Break before paragraphs that follow inline text, and after every paragraph."""

        text = self._CLOSE_RE.sub("\n\n", text)
        text = self._OPEN_AFTER_TEXT_RE.sub("\n\n", text)
        return self._OPEN_RE.sub("", text)


class ConvertListItems:
    """Put each list item on its own bullet-prefixed line."""

    _ADJACENT_CLOSE_RE = re.compile(r"</li\s*>\s*(?=<li\b)", re.IGNORECASE)
    _ITEM_OPEN_RE = re.compile(r"\s*<li\b[^>]*>\s*", re.IGNORECASE)
    _ITEM_CLOSE_RE = re.compile(r"\s*</li\s*>", re.IGNORECASE)
    _LIST_TAG_RE = re.compile(r"</?(?:ul|ol|dl)\b[^>]*>", re.IGNORECASE)

    def __init__(self, bullet: str = DEFAULT_BULLET) -> None:
        """Initialize with the bullet prefix written before each item."""

        self.bullet = bullet

    def apply(self, text: str) -> str:
        """Rewrite items so consecutive entries are separated by exactly one newline."""

        text = self._ADJACENT_CLOSE_RE.sub("", text)
        text = self._ITEM_OPEN_RE.sub(lambda _: "\n" + self.bullet, text)
        text = self._ITEM_CLOSE_RE.sub("\n", text)
        return self._LIST_TAG_RE.sub("\n", text)


class UnwrapInlineElements:
    """Drop inline emphasis tags and keep their content."""

    _INLINE_TAG_RE = re.compile(
        r"</?(?:b|strong|i|em|u|s|strike|del|ins|mark|small|big|sub|sup|font|q|cite|abbr)\b[^>]*>",
        re.IGNORECASE,
    )

    def apply(self, text: str) -> str:
        """Remove inline emphasis tags."""

        return self._INLINE_TAG_RE.sub("", text)


class UnwrapContainers:
    """Unwrap span and block containers; block containers end with one newline."""

    _BLOCKS = r"(?:div|section|article|blockquote|header|footer|main|aside|figure|figcaption|center|table|thead|tbody|tr)"
    _SPAN_TAG_RE = re.compile(r"</?span\b[^>]*>", re.IGNORECASE)
    _CELL_CLOSE_RE = re.compile(r"</t[dh]\s*>", re.IGNORECASE)
    _ADJACENT_BLOCKS_RE = re.compile(rf"(</{_BLOCKS}\s*>)\s+(?=<{_BLOCKS}\b)", re.IGNORECASE)
    _OPEN_AFTER_TEXT_RE = re.compile(rf"(?<=[^\n])<{_BLOCKS}\b[^>]*>", re.IGNORECASE)
    _OPEN_RE = re.compile(rf"<{_BLOCKS}\b[^>]*>", re.IGNORECASE)
    _CLOSE_RE = re.compile(rf"</{_BLOCKS}\s*>", re.IGNORECASE)

    def apply(self, text: str) -> str:
        """Unwrap containers without mashing adjacent blocks together."""

        text = self._SPAN_TAG_RE.sub("", text)
        text = self._CELL_CLOSE_RE.sub(" ", text)
        text = self._ADJACENT_BLOCKS_RE.sub(r"\1", text)
        text = self._CLOSE_RE.sub("\n", text)
        text = self._OPEN_AFTER_TEXT_RE.sub("\n", text)
        return self._OPEN_RE.sub("", text)


class ConvertLineBreaks:
    """Turn `<br>` and `<hr>` elements into single newlines."""

    _BREAK_RE = re.compile(r"<(?:br|hr)\b[^>]*>", re.IGNORECASE)

    def apply(self, text: str) -> str:
        """Replace line-break elements."""

        return self._BREAK_RE.sub("\n", text)


class StripTags:
    """Remove every remaining tag, keeping only text content.

    Only tag-shaped tokens are removed: `<` must be followed by a letter,
    `/`, `!` or `?`. A bare `<` in prose stays literal.
    """

    TAG_RE = re.compile(
        r"<(?:[A-Za-z][A-Za-z0-9:-]*(?:\s[^<>]*)?/?|/[A-Za-z][A-Za-z0-9:-]*\s*|![^<>]*|\?[^<>]*)>"
    )

    def apply(self, text: str) -> str:
        """Strip tags."""

        return self.TAG_RE.sub("", text)


class StripTagsAndDecode:
    """Strip tags and decode entities until neither changes the text.

    Stripping can join fragments into a new entity and decoding can produce
    a new tag; repeating both keeps the output free of either.
    """

    def __init__(self, max_rounds: int = 8) -> None:
        """Initialize with the bound on strip/decode rounds."""

        self.max_rounds = max_rounds

    def apply(self, text: str) -> str:
        """Alternate tag stripping and entity decoding up to a fixed point."""

        for _ in range(self.max_rounds):
            cleaned = html.unescape(StripTags.TAG_RE.sub("", text))
            if cleaned == text:
                break
            text = cleaned
        return text


def looks_like_markup(text: str) -> bool:
    """Return whether text, after entity decoding, still contains a tag-like token."""

    return StripTags.TAG_RE.search(html.unescape(text)) is not None
