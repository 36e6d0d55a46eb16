"""Typer CLI — ``drc download`` and ``drc validate`` commands."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from playwright.async_api import Error as PlaywrightError
from rich.console import Console
from rich.markup import escape

from drc.config import load_request, split_credentials
from drc.constants import AuthType, ReportFormat
from drc.errors import ReportCaptureError
from drc.pipeline import download_report
from drc.schemas.request import ReportRequest
from drc.shared.progress import StatusReporter

# Load .env file from the working directory (if it exists)
load_dotenv()

app = typer.Typer(
    name="drc",
    help="Dashboard Report Capture — export a dashboard, visualization, notebook or saved search as PDF, PNG or CSV.",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%H:%M:%S",
    )
    # asyncio debug chatter drowns out the auth state transitions
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def _build_request(config: Path | None, credentials: str | None, **options: object) -> ReportRequest:
    username, password = split_credentials(credentials)
    if username is not None:
        options["username"] = username
        options["password"] = password
    return load_request(config, **options)


@app.command()
def download(
    url: str = typer.Option(None, "--url", "-u", help="URL of the report to capture."),
    format: ReportFormat = typer.Option(None, "--format", "-f", help="Output format."),
    width: int = typer.Option(None, "--width", "-w", help="Viewport width in pixels."),
    height: int = typer.Option(None, "--height", "-l", help="Viewport height in pixels."),
    filename: str = typer.Option(None, "--filename", "-n", help="Output file (must not exist)."),
    auth: AuthType = typer.Option(None, "--auth", "-a", help="Authentication scheme."),
    credentials: str = typer.Option(None, "--credentials", help="username:password"),
    username: str = typer.Option(None, "--username", envvar="REPORTING_CLI_USERNAME"),
    password: str = typer.Option(None, "--password", envvar="REPORTING_CLI_PASSWORD"),
    tenant: str = typer.Option(None, "--tenant", "-t", help="Tenant to select after login."),
    multitenancy: bool = typer.Option(None, "--multitenancy/--no-multitenancy"),
    transport: str = typer.Option(None, "--transport", "-e", help="Delivery channel; also writes the email body image."),
    email_body: str = typer.Option(None, "--email-body", help="Filename of the email body image."),
    timeout: int = typer.Option(None, "--timeout", help="Timeout in milliseconds."),
    config: Path = typer.Option(None, "--config", "-c", help="YAML request file; options override it."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Capture one report and write it to disk."""
    _setup_logging(verbose)

    try:
        request = _build_request(
            config,
            credentials,
            url=url,
            format=format,
            width=width,
            height=height,
            filename=filename,
            auth=auth,
            username=username,
            password=password,
            tenant=tenant,
            multitenancy=multitenancy,
            transport=transport,
            email_body=email_body,
            timeout=timeout,
        )
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]Invalid report request:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)

    with StatusReporter(console) as reporter:
        try:
            path = asyncio.run(download_report(request, reporter))
        except (ReportCaptureError, PlaywrightError, OSError) as exc:
            reporter.fail(f"Downloading report failed. {escape(str(exc))}")
            raise typer.Exit(code=1)
        except Exception as exc:
            logger.debug("Unexpected failure downloading %s", request.url, exc_info=True)
            reporter.fail(f"Downloading report failed. {escape(f'{type(exc).__name__}: {exc}')}")
            raise typer.Exit(code=1)

    console.print(f"[green]Report written to:[/] {path}")


@app.command()
def validate(
    config: Path = typer.Option(..., "--config", "-c", help="YAML request file"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Validate a request file without launching a browser."""
    _setup_logging(verbose)

    try:
        request = load_request(config)
    except (ValueError, FileNotFoundError) as exc:
        console.print(f"[red]Request validation failed:[/] {escape(str(exc))}")
        raise typer.Exit(code=1)

    console.print("[green]Request is valid![/]\n")
    console.print(f"  URL:          {request.url}")
    console.print(f"  Format:       {request.format.value}")
    console.print(f"  Viewport:     {request.width}x{request.height}")
    console.print(f"  Destination:  {request.destination}")
    console.print(f"  Auth:         {request.auth.value}")
    if request.has_credentials:
        console.print(f"  Username:     {request.username}")
        console.print(f"  Tenant:       {request.tenant} (multitenancy {'on' if request.multitenancy else 'off'})")
    if request.transport:
        console.print(f"  Email body:   {request.email_body} (via {request.transport})")
    console.print(f"  Timeout:      {request.timeout} ms")


if __name__ == "__main__":
    app()
