"""
Tests for the capture-page command line.
"""

from urllib.parse import urlsplit

import pytest
from click.testing import CliRunner

from capture_page import Capture, ContentResponse, MetadataResponse, TransportError
from capture_page.cli import main

CREDENTIALS = ["--key", "test_key", "--secret", "test_secret"]


@pytest.fixture
def runner(monkeypatch, tmp_path):
    # Keep a developer's real credentials or .env out of the tests
    monkeypatch.delenv("CAPTURE_KEY", raising=False)
    monkeypatch.delenv("CAPTURE_SECRET", raising=False)
    monkeypatch.chdir(tmp_path)
    return CliRunner()


def test_url_command(runner):
    result = runner.invoke(main, CREDENTIALS + ["url", "image", "https://example.com", "-O", "full=true", "-O", "delay=3"])

    assert result.exit_code == 0, result.output
    signed = result.output.strip()
    assert signed == Capture("test_key", "test_secret").build_image_url(
        "https://example.com", {"full": True, "delay": 3}
    )


def test_url_command_edge(runner):
    result = runner.invoke(main, CREDENTIALS + ["--edge", "url", "pdf", "https://example.com"])

    assert result.exit_code == 0, result.output
    parts = urlsplit(result.output.strip())
    assert parts.netloc == "edge.capture.page"
    assert parts.path.endswith("/pdf")


def test_credentials_from_environment(runner, monkeypatch):
    monkeypatch.setenv("CAPTURE_KEY", "env_key")
    monkeypatch.setenv("CAPTURE_SECRET", "env_secret")

    result = runner.invoke(main, ["url", "metadata", "https://example.com"])

    assert result.exit_code == 0, result.output
    assert "/env_key/" in result.output


def test_missing_credentials(runner):
    result = runner.invoke(main, ["url", "image", "https://example.com"])

    assert result.exit_code != 0
    assert "CAPTURE_KEY" in result.output


def test_bad_option_pair(runner):
    result = runner.invoke(main, CREDENTIALS + ["url", "image", "https://example.com", "-O", "full"])

    assert result.exit_code != 0
    assert "name=value" in result.output


def test_image_command_writes_file(runner, monkeypatch, tmp_path):
    calls = []

    async def fake_fetch_image(self, url, options=None):
        calls.append((url, options))
        return b"PNGDATA"

    monkeypatch.setattr(Capture, "fetch_image", fake_fetch_image)

    result = runner.invoke(main, CREDENTIALS + ["image", "https://example.com", "-o", "shot.png", "-O", "full=true"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "shot.png").read_bytes() == b"PNGDATA"
    assert calls == [("https://example.com", {"full": "true"})]


def test_pdf_command_default_filename(runner, monkeypatch, tmp_path):
    async def fake_fetch_pdf(self, url, options=None):
        return b"%PDF"

    monkeypatch.setattr(Capture, "fetch_pdf", fake_fetch_pdf)

    result = runner.invoke(main, CREDENTIALS + ["pdf", "https://example.com"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "page.pdf").read_bytes() == b"%PDF"


def test_fetch_error_is_reported(runner, monkeypatch):
    async def failing(self, url, options=None):
        raise TransportError("HTTP request failed: timed out")

    monkeypatch.setattr(Capture, "fetch_animated", failing)

    result = runner.invoke(main, CREDENTIALS + ["animated", "https://example.com"])

    assert result.exit_code != 0
    assert "timed out" in result.output


def test_content_command(runner, monkeypatch):
    async def fake_fetch_content(self, url, options=None):
        return ContentResponse(success=True, html="<h1>Hi</h1>", text_content="Hi", markdown="# Hi")

    monkeypatch.setattr(Capture, "fetch_content", fake_fetch_content)

    markdown = runner.invoke(main, CREDENTIALS + ["content", "https://example.com"])
    html = runner.invoke(main, CREDENTIALS + ["content", "https://example.com", "--format", "html"])

    assert markdown.exit_code == 0, markdown.output
    assert markdown.output.strip() == "# Hi"
    assert html.output.strip() == "<h1>Hi</h1>"


def test_metadata_command_json(runner, monkeypatch):
    async def fake_fetch_metadata(self, url, options=None):
        return MetadataResponse(success=True, metadata={"title": "Hello"})

    monkeypatch.setattr(Capture, "fetch_metadata", fake_fetch_metadata)

    result = runner.invoke(main, CREDENTIALS + ["metadata", "https://example.com", "--json"])

    assert result.exit_code == 0, result.output
    assert '"title": "Hello"' in result.output


def test_metadata_table_shows_brackets_literally(runner, monkeypatch):
    """Test page text that looks like rich markup is printed, not interpreted."""
    async def fake_fetch_metadata(self, url, options=None):
        return MetadataResponse(
            success=True, metadata={"title": "Docs [/] index", "note": "[bold]x"}
        )

    monkeypatch.setattr(Capture, "fetch_metadata", fake_fetch_metadata)

    result = runner.invoke(main, CREDENTIALS + ["metadata", "https://example.com/[a]"])

    assert result.exit_code == 0, result.output
    assert "Docs [/] index" in result.output
    assert "[bold]x" in result.output
    assert "https://example.com/[a]" in result.output
