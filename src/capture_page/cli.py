"""
Command-line interface for capture-page.

Commands:
- url: Print a signed capture URL without fetching it
- image / pdf / animated: Fetch a capture and save it to disk
- content: Fetch page HTML, text or markdown
- metadata: Fetch page metadata

Credentials come from --key/--secret, or the CAPTURE_KEY and CAPTURE_SECRET
environment variables (a .env file in the working directory is honored).
"""

from pathlib import Path
import asyncio
import dataclasses
import functools
import json
import logging
import os

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .client import Capture, RequestType
from .config import KEY_ENV, SECRET_ENV, CaptureOptions, load_credentials
from .errors import CaptureError

console = Console()

DEFAULT_OUTPUT = {
    RequestType.IMAGE: "screenshot.png",
    RequestType.PDF: "page.pdf",
    RequestType.ANIMATED: "animated.gif",
}


def _parse_options(pairs: tuple[str, ...]) -> dict[str, str]:
    """Turn ('full=true', 'delay=3') into {'full': 'true', 'delay': '3'}."""
    options = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep or not name:
            raise click.BadParameter(f"expected name=value, got {pair!r}", param_hint="--option")
        options[name] = value
    return options


def _run(coro):
    """Run a coroutine, reporting SDK errors instead of a traceback."""
    try:
        return asyncio.run(coro)
    except CaptureError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise click.Abort()


def _make_client(key: str | None, secret: str | None, edge: bool, timeout: float | None) -> Capture:
    if not key or not secret:
        load_dotenv(find_dotenv(usecwd=True))
    environ = dict(os.environ)
    if key:
        environ[KEY_ENV] = key
    if secret:
        environ[SECRET_ENV] = secret
    try:
        key, secret = load_credentials(environ)
    except CaptureError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise click.Abort()

    options = CaptureOptions()
    if edge:
        options = options.with_edge()
    if timeout is not None:
        options = options.with_timeout(timeout)

    return Capture(key, secret, options)


def pass_capture(f):
    """Pass the configured Capture client as the first argument."""
    @click.pass_context
    @functools.wraps(f)
    def wrapper(ctx, *args, **kwargs):
        return f(ctx.obj(), *args, **kwargs)
    return wrapper


option_flag = click.option(
    "-O", "--option", "option_pairs", multiple=True, metavar="NAME=VALUE",
    help="Service parameter, e.g. -O full=true -O delay=3 (repeatable)",
)


@click.group()
@click.option("--key", help="API key (default: $CAPTURE_KEY)")
@click.option("--secret", help="API secret (default: $CAPTURE_SECRET)")
@click.option("--edge", is_flag=True, help="Use the edge endpoint")
@click.option("--timeout", type=float, help="Request timeout in seconds")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output")
@click.pass_context
def main(ctx, key: str | None, secret: str | None, edge: bool, timeout: float | None, verbose: bool):
    """capture-page - Screenshots, PDFs and content from capture.page."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )

    # Built on first use so that subcommand --help works without credentials
    ctx.obj = functools.partial(_make_client, key, secret, edge, timeout)


@main.command()
@click.argument("request_type", type=click.Choice([t.value for t in RequestType]))
@click.argument("target_url")
@option_flag
@pass_capture
def url(capture: Capture, request_type: str, target_url: str, option_pairs: tuple[str, ...]):
    """Print the signed URL for a capture."""
    try:
        signed = capture.build_url(request_type, target_url, _parse_options(option_pairs))
    except CaptureError as e:
        console.print(f"[red]Error:[/] {escape(str(e))}")
        raise click.Abort()
    click.echo(signed)


def _save_capture(capture: Capture, request_type: RequestType, target_url: str,
                  option_pairs: tuple[str, ...], output: Path | None) -> None:
    options = _parse_options(option_pairs)
    if output is None:
        output = Path(DEFAULT_OUTPUT[request_type])

    fetchers = {
        RequestType.IMAGE: capture.fetch_image,
        RequestType.PDF: capture.fetch_pdf,
        RequestType.ANIMATED: capture.fetch_animated,
    }

    with console.status(f"Capturing {escape(target_url)}..."):
        data = _run(fetchers[request_type](target_url, options))

    output.write_bytes(data)
    console.print(f"[bold green]✓ Saved:[/] {escape(str(output))} ({len(data) / 1024:.1f} KB)")


def _binary_command(request_type: RequestType, help_text: str):
    @click.argument("target_url")
    @click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path),
                  help=f"Output file (default: {DEFAULT_OUTPUT[request_type]})")
    @option_flag
    @pass_capture
    def command(capture: Capture, target_url: str, output: Path | None, option_pairs: tuple[str, ...]):
        _save_capture(capture, request_type, target_url, option_pairs, output)

    command.__doc__ = help_text
    return main.command(name=request_type.value)(command)


image = _binary_command(RequestType.IMAGE, "Capture a screenshot.")
pdf = _binary_command(RequestType.PDF, "Render the page as a PDF.")
animated = _binary_command(RequestType.ANIMATED, "Record an animated capture.")


@main.command()
@click.argument("target_url")
@click.option("--format", "fmt", type=click.Choice(["markdown", "html", "text", "json"]),
              default="markdown", help="What to output (default: markdown)")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path),
              help="Write to a file instead of stdout")
@option_flag
@pass_capture
def content(capture: Capture, target_url: str, fmt: str, output: Path | None, option_pairs: tuple[str, ...]):
    """Fetch the page's HTML, text content or markdown."""
    with console.status(f"Fetching content of {escape(target_url)}..."):
        result = _run(capture.fetch_content(target_url, _parse_options(option_pairs)))

    if not result.success:
        console.print("[yellow]⚠ capture.page reported success=false[/]")

    if fmt == "json":
        text = json.dumps(dataclasses.asdict(result), indent=2)
    elif fmt == "html":
        text = result.html
    elif fmt == "text":
        text = result.text_content
    else:
        text = result.markdown

    if output is None:
        click.echo(text)
    else:
        output.write_text(text, encoding="utf-8")
        console.print(f"[bold green]✓ Saved:[/] {escape(str(output))}")


@main.command()
@click.argument("target_url")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON")
@option_flag
@pass_capture
def metadata(capture: Capture, target_url: str, as_json: bool, option_pairs: tuple[str, ...]):
    """Fetch the page's metadata."""
    with console.status(f"Fetching metadata of {escape(target_url)}..."):
        result = _run(capture.fetch_metadata(target_url, _parse_options(option_pairs)))

    if as_json:
        click.echo(json.dumps(result.metadata, indent=2))
        return

    if not result.success:
        console.print("[yellow]⚠ capture.page reported success=false[/]")

    table = Table(title=f"Metadata: {escape(target_url)}")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in result.metadata.items():
        # Page-supplied text: brackets must not be read as rich markup
        text = value if isinstance(value, str) else json.dumps(value)
        table.add_row(escape(key), escape(text))
    console.print(table)


if __name__ == "__main__":
    main()
