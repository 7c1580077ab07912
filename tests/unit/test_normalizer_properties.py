"""Unit tests for end-to-end normalization behavior and its guaranteed properties."""

from __future__ import annotations

import pytest

from desccleaner import normalize
from desccleaner.config import NormalizerConfig
from desccleaner.text.normalizer import DescriptionNormalizer


MESSY_SAMPLES = [
    '<h1>Bio</h1><p>Likes <b>tea</b>.</p><ul><li>Cats</li><li>Dogs</li></ul><img src="http://x/y.jpg">',
    "&lt;p&gt;Encoded&lt;/p&gt;&lt;p&gt;twice&lt;/p&gt;",
    "<div>Name: Ann</div>\n<div>Age: 31</div>\n<hr>\n.\n----\n<p>Quote - \"hi\" -</p>",
    "Plain text\n\n\n\n\nwith gaps and https://example.com/link",
    "<style>.x{}</style><div style='position:fixed;animation:a 1s'><span>*</span></div><ol><li><p>One</p></li><li>Two</li></ol>",
    "a < b and <3 &amp; more<br>next line",
    "<p>Unclosed <b>bold and a < b",
    "  \n  ~~~~~ \n ![x](y) \n * \n",
    "a &amp;lt;b&amp;gt; c",
    "&amp;amp;amp;",
    "<p>x</p>&amp;lt;!-- hi --&amp;gt;",
    "I like ![pic](https://en.wikipedia.org/wiki/Cat_(animal).png) cats",
]


def test_end_to_end_description_matches_canonical_text() -> None:
    """The reference description should normalize to the documented canonical text."""

    raw = (
        '<h1>Bio</h1><p>Likes <b>tea</b>.</p><ul><li>Cats</li><li>Dogs</li></ul>'
        '<img src="http://x/y.jpg">'
    )

    assert normalize(raw) == "Bio\n\nLikes tea.\n\n• Cats\n• Dogs"


@pytest.mark.parametrize("raw", MESSY_SAMPLES)
def test_normalize_is_idempotent(raw: str) -> None:
    """Re-running the normalizer on its own output must not change it."""

    once = normalize(raw)

    assert normalize(once) == once


def test_heading_followed_by_paragraph_gets_blank_line() -> None:
    """A heading directly followed by a paragraph should be separated by a blank line."""

    assert normalize("<h2>Title</h2><p>Body text</p>") == "Title\n\nBody text"


def test_unordered_list_becomes_bullet_lines_without_blank_lines() -> None:
    """Three items should produce three bullet lines joined by single newlines."""

    text = normalize("<ul>\n<li>One</li>\n<li>Two</li>\n<li>Three</li>\n</ul>")

    assert text == "• One\n• Two\n• Three"


def test_image_link_mid_sentence_leaves_words_adjacent() -> None:
    """An inline image link should vanish with at most one space between neighbours."""

    assert normalize("I like ![pic](https://x/y.png) cats") == "I like cats"


def test_separator_and_placeholder_lines_vanish_but_trailing_dash_survives() -> None:
    """Rule and placeholder lines should go, prose ending in `-` should stay."""

    assert normalize("Intro\n----------\n.\nThe end -") == "Intro\n\nThe end -"


def test_five_blank_lines_collapse_to_one() -> None:
    """Runs of blank lines should fold to exactly two newline characters."""

    assert normalize("A\n\n\n\n\n\nB") == "A\n\nB"


@pytest.mark.parametrize("raw", ["", None, "   \n\t ", "<div></div>", "<!-- only a comment -->"])
def test_empty_or_contentless_input_yields_empty_text(raw: str | None) -> None:
    """Empty or content-free input should normalize to an empty string."""

    assert normalize(raw) == ""


def test_malformed_markup_degrades_to_literal_text() -> None:
    """Unclosed tags should be stripped where recognizable and never raise."""

    assert normalize("<p>Unclosed <b>bold and a < b") == "Unclosed bold and a < b"


def test_encoded_markup_is_decoded_before_structure_pass() -> None:
    """Entity-encoded paragraphs should be treated as real structure."""

    assert normalize("&lt;p&gt;Hello&lt;/p&gt;&lt;p&gt;World&lt;/p&gt;") == "Hello\n\nWorld"


def test_decorative_and_style_markup_is_dropped() -> None:
    """Style blocks and decorative containers should leave no trace."""

    raw = (
        "<style>.a { color: red }</style>"
        '<div style="position:fixed;animation:x 1s"><span>*</span></div>'
        "<p>Real</p>"
    )

    assert normalize(raw) == "Real"


def test_line_breaks_divs_and_non_breaking_spaces() -> None:
    """Soft breaks stay single newlines and `&nbsp;` runs collapse to one space."""

    assert normalize("one<br>two<br/>three") == "one\ntwo\nthree"
    assert normalize("<div>A</div><div>B</div>") == "A\nB"
    assert normalize("A&nbsp;&nbsp;B") == "A B"
    assert normalize("A\r\n\r\n\r\n\r\nB") == "A\n\nB"


def test_report_counts_removed_constructs() -> None:
    """The report should expose per-rule removal counters next to the text."""

    report = DescriptionNormalizer().normalize_with_report(
        "<script>x()</script>x https://a.b\n---\n."
    )

    assert report.text == "x"
    assert report.non_content_blocks_removed == 1
    assert report.urls_removed == 1
    assert report.separator_lines_removed == 1
    assert report.placeholder_lines_removed == 1


def test_custom_bullet_is_used_for_list_items() -> None:
    """A configured bullet should prefix every list item."""

    normalizer = DescriptionNormalizer(NormalizerConfig(bullet="- "))

    assert normalizer.normalize("<li>a</li><li>b</li>") == "- a\n- b"


def test_is_canonical_detects_fixed_points() -> None:
    """Canonical text is a fixed point; raw markup is not."""

    normalizer = DescriptionNormalizer()

    assert normalizer.is_canonical("Bio\n\n• Cats") is True
    assert normalizer.is_canonical("<p>Bio</p>") is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("a &amp;lt;b&amp;gt; c", "a c"),
        ("&amp;amp;amp;", "&"),
        ("<p>x</p>&amp;lt;!-- hi --&amp;gt;", "x"),
        ("&amp;lt;p&amp;gt;One&amp;lt;/p&amp;gt;Two", "One\n\nTwo"),
    ],
)
def test_double_encoded_markup_is_fully_decoded(raw: str, expected: str) -> None:
    """Multiply-encoded tags and entities should leave neither behind."""

    assert normalize(raw) == expected


def test_image_with_parenthesized_url_leaves_no_residue() -> None:
    """An image URL holding parentheses should be removed as one token."""

    raw = "I like ![pic](https://en.wikipedia.org/wiki/Cat_(animal).png) cats"

    assert normalize(raw) == "I like cats"
