"""Integration tests for the `clean` and `check` commands."""

from pathlib import Path

from typer.testing import CliRunner

from desccleaner.cli import app


DESCRIPTION = (
    '<h1>Bio</h1><p>Likes <b>tea</b>.</p><ul><li>Cats</li><li>Dogs</li></ul>'
    '<img src="http://x/y.jpg">'
)


def test_clean_prints_canonical_text_for_file_input(tmp_path: Path) -> None:
    """Clean should write the canonical text to stdout."""

    source = tmp_path / "description.html"
    source.write_text(DESCRIPTION, encoding="utf-8")

    result = CliRunner().invoke(app, ["clean", str(source)])

    assert result.exit_code == 0
    assert result.output == "Bio\n\nLikes tea.\n\n• Cats\n• Dogs\n"


def test_clean_reads_stdin_marker() -> None:
    """A `-` source should read markup from stdin."""

    result = CliRunner().invoke(app, ["clean", "-"], input="<p>One</p><p>Two</p>")

    assert result.exit_code == 0
    assert result.output == "One\n\nTwo\n"


def test_clean_writes_output_file_and_reports_counters(tmp_path: Path) -> None:
    """With `--out` and `--report`, text goes to the file and counters to stderr."""

    source = tmp_path / "noisy.html"
    source.write_text(
        "<script>x()</script>Hello https://example.com\n----\n.", encoding="utf-8"
    )
    out = tmp_path / "nested" / "clean.txt"

    result = CliRunner().invoke(app, ["clean", str(source), "--out", str(out), "--report"])

    assert result.exit_code == 0
    assert out.read_text(encoding="utf-8") == "Hello\n"
    assert f"Canonical text: {out}" in result.output
    assert "Non-content blocks removed: 1" in result.output
    assert "URLs and images removed: 1" in result.output
    assert "Separator lines removed: 1" in result.output
    assert "Placeholder lines removed: 1" in result.output


def test_clean_applies_yaml_config(tmp_path: Path) -> None:
    """Normalizer tables from `--config` should change the output."""

    config_path = tmp_path / "desccleaner.yaml"
    config_path.write_text("bullet: '-'\n", encoding="utf-8")
    source = tmp_path / "list.html"
    source.write_text("<ul><li>a</li><li>b</li></ul>", encoding="utf-8")

    result = CliRunner().invoke(app, ["clean", str(source), "--config", str(config_path)])

    assert result.exit_code == 0
    assert result.output == "- a\n- b\n"


def test_check_accepts_canonical_text_and_rejects_markup(tmp_path: Path) -> None:
    """Check should exit 0 only for text that is a normalization fixed point."""

    canonical = tmp_path / "canonical.txt"
    canonical.write_text("Bio\n\n• Cats\n• Dogs\n", encoding="utf-8")
    raw = tmp_path / "raw.html"
    raw.write_text(DESCRIPTION, encoding="utf-8")
    runner = CliRunner()

    ok = runner.invoke(app, ["check", str(canonical)])
    not_ok = runner.invoke(app, ["check", str(raw)])

    assert ok.exit_code == 0
    assert "canonical" in ok.output
    assert not_ok.exit_code == 1
    assert "not canonical" in not_ok.output


def test_clean_output_passes_check(tmp_path: Path) -> None:
    """Text written by `clean` should always be accepted by `check`."""

    source = tmp_path / "mixed.html"
    source.write_text(
        "<div>Name: Ann</div>\n<div>Age: 31</div><hr>~~~~<p>Quote - hi -</p>", encoding="utf-8"
    )
    out = tmp_path / "mixed.txt"
    runner = CliRunner()

    cleaned = runner.invoke(app, ["clean", str(source), "--out", str(out)])
    checked = runner.invoke(app, ["check", str(out)])

    assert cleaned.exit_code == 0
    assert checked.exit_code == 0
