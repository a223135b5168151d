"""Command-line interface for the Google Photos uploader."""

import asyncio
import logging
from pathlib import Path

import typer
from google.oauth2.credentials import Credentials
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from gphotos_uploader.auth import credentials_from_token, load_credentials
from gphotos_uploader.client import PhotosClient
from gphotos_uploader.models import UploadResult
from gphotos_uploader.uploader import PhotoUploader
from gphotos_uploader.utils import scan_albums

app = typer.Typer(
    name="gphotos-uploader",
    help="Upload photos and videos to Google Photos albums in batch",
    add_completion=False,
)
console = Console()

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "google.auth")


def setup_logging(verbose: bool) -> None:
    """Route logs through Rich; DEBUG for this package only when verbose."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False, console=console)],
    )
    logging.getLogger("gphotos_uploader").setLevel(
        logging.DEBUG if verbose else logging.INFO
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def print_summary(results: list[UploadResult]) -> int:
    """Print per-album counts and every failure; return the exit code."""
    counts: dict[str, list[int]] = {}
    for result in results:
        row = counts.setdefault(result.album_title or "-", [0, 0])
        row[0 if result.success else 1] += 1

    table = Table(title="Google Photos upload")
    table.add_column("Album")
    table.add_column("Uploaded", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    for title, (uploaded, failed) in counts.items():
        table.add_row(escape(title), str(uploaded), str(failed))
    console.print(table)

    failures = [r for r in results if not r.success]
    console.print(f"{len(results) - len(failures)} of {len(results)} file(s) uploaded")
    for result in failures:
        console.print(
            f"[red]x[/red] {escape(result.album_title or '-')}/{escape(result.path.name)}: "
            f"{escape(result.error_message or '')}"
        )
    return 1 if failures else 0


async def async_upload(
    root_dir: Path,
    credentials: Credentials,
    dry_run: bool,
    max_concurrent: int,
) -> int:
    """Scan ``root_dir``, upload every album and report the outcome.

    Returns:
        Exit code (0 when every file was uploaded, 1 otherwise)
    """
    logger = logging.getLogger(__name__)

    try:
        albums = scan_albums(root_dir)
        if not albums:
            logger.warning(f"No subdirectory of {root_dir} contains media files")
            return 0

        async with PhotosClient.from_credentials(credentials) as client:
            uploader = PhotoUploader(
                client,
                max_concurrent_uploads=max_concurrent,
                dry_run=dry_run,
            )
            results = await uploader.upload_albums(albums)

        return print_summary(results)

    except Exception as e:
        logger.error(f"Upload failed: {e}", exc_info=True)
        return 1


@app.command()
def upload(
    root_dir: Path = typer.Argument(
        ...,
        help="Root directory containing album subdirectories",
        exists=True,
        file_okay=False,
        dir_okay=True,
        readable=True,
    ),
    access_token: str = typer.Option(
        None,
        "--access-token",
        "-t",
        envvar="GPHOTOS_ACCESS_TOKEN",
        help="OAuth access token (or set GPHOTOS_ACCESS_TOKEN env var)",
    ),
    credentials_file: Path = typer.Option(
        None,
        "--credentials-file",
        envvar="GPHOTOS_CREDENTIALS_FILE",
        help="Authorized-user credentials JSON (or set GPHOTOS_CREDENTIALS_FILE)",
        dir_okay=False,
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Simulate uploads without making API calls",
    ),
    max_concurrent: int = typer.Option(
        10,
        "--max-concurrent",
        "-c",
        min=1,
        max=50,
        help="Maximum number of concurrent uploads",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """Upload photos and videos to Google Photos albums.

    Scans ROOT_DIR for subdirectories. Each subdirectory becomes an album
    with the subdirectory name as the album title, reusing an existing album
    with that title. All media files in each subdirectory are uploaded to
    the corresponding album.
    """
    setup_logging(verbose)

    if access_token:
        credentials = credentials_from_token(access_token)
    elif credentials_file:
        try:
            credentials = load_credentials(credentials_file)
        except Exception as e:
            console.print(f"[red]Error: could not load credentials: {e}[/red]")
            raise typer.Exit(1)
    elif dry_run:
        credentials = credentials_from_token("dry_run_token")
    else:
        console.print(
            "[red]Error: Google credentials are required. "
            "Provide --access-token or --credentials-file "
            "(or GPHOTOS_ACCESS_TOKEN / GPHOTOS_CREDENTIALS_FILE).[/red]"
        )
        raise typer.Exit(1)

    exit_code = asyncio.run(
        async_upload(root_dir, credentials, dry_run, max_concurrent)
    )
    raise typer.Exit(exit_code)


if __name__ == "__main__":
    app()
