"""Markup-to-text normalization components.

This package provides the markup rules, the line-level content filter, and
the normalizer that runs them in order.
"""

from .cleaners import (
    CollapseWhitespace,
    LineFilter,
    RemoveImagesAndUrls,
    RemovePlaceholderLines,
    RemoveSeparatorLines,
    RemoveStyleClassTokens,
    filter_lines,
)
from .normalizer import DescriptionNormalizer, NormalizationReport, normalize

__all__ = [
    "DescriptionNormalizer",
    "NormalizationReport",
    "normalize",
    "LineFilter",
    "filter_lines",
    "RemoveImagesAndUrls",
    "RemoveSeparatorLines",
    "RemovePlaceholderLines",
    "RemoveStyleClassTokens",
    "CollapseWhitespace",
]
