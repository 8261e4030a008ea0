"""Command-line interface for s3-probe.

Commands:
    - run: list the bucket, then upload, head and delete a test file
    - list: list objects in the configured bucket
    - head: show metadata for one object
    - put: upload a local file
    - delete: delete one object

Every command reads the bucket, credentials and endpoint from a TOML
configuration file (``--config``, default ``config.toml``).
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .core.exceptions import ConfigError, S3ProbeError
from .objectstorage import ObjectStore, ObjectSummary, build_object_store
from .probe import StepOutcome, run_probe
from .schemas import DEFAULT_CONFIG_PATH, ProbeConfig, load_probe_config

app = typer.Typer(
    name="s3-probe",
    help="Exercise an S3-compatible object storage account.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"s3-probe {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    S3-Probe: list, upload, head and delete against an S3-compatible bucket.
    """
    pass


ConfigOption = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the TOML configuration file"),
]


def _open_store(config_path: Path) -> tuple[ProbeConfig, ObjectStore]:
    """Load configuration and build the object store, exiting on failure."""
    try:
        config = load_probe_config(config_path)
        store = build_object_store(config.to_client_config())
    except ConfigError as e:
        typer.echo(f"Failed to load config file: {e}", err=True)
        raise typer.Exit(1)
    return config, store


@app.command("run")
def run_cmd(
    config_path: ConfigOption = Path(DEFAULT_CONFIG_PATH),
    filename: Annotated[
        Optional[str],
        typer.Option("--file", "-f", help="Local file to upload, also used as the key"),
    ] = None,
) -> None:
    """
    Run the scripted sequence: list, upload, head, delete.

    Exits 1 if the bucket cannot be listed; the outcome of the later steps
    is reported on stderr without affecting the exit code.

    Example:
        s3-probe run --config config.toml --file test_file.txt
    """
    config, store = _open_store(config_path)

    def show_listing(objects: list[ObjectSummary]) -> None:
        typer.echo("listing files...")
        typer.echo("================")
        for summary in objects:
            typer.echo(summary.key)

    def show_outcome(outcome: StepOutcome) -> None:
        typer.echo(outcome.describe(), err=True)

    try:
        run_probe(
            store,
            config.backup_s3_bucket,
            filename=filename,
            on_listing=show_listing,
            on_progress=typer.echo,
            on_outcome=show_outcome,
        )
    except S3ProbeError as e:
        typer.echo(f"Failed to pull files: {e}", err=True)
        raise typer.Exit(1)


@app.command("list")
def list_cmd(
    prefix: Annotated[
        Optional[str], typer.Argument(help="Only list keys with this prefix")
    ] = None,
    config_path: ConfigOption = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """
    List objects in the configured bucket.

    Example:
        s3-probe list backups/ --config config.toml
    """
    config, store = _open_store(config_path)
    try:
        objects = store.list_objects(config.backup_s3_bucket, prefix=prefix)
    except S3ProbeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if objects:
        typer.echo(f"Found {len(objects)} objects:")
        for summary in objects:
            typer.echo(
                f"  {summary.key}  {summary.size:,} bytes  "
                f"{summary.last_modified.isoformat()}"
            )
    else:
        typer.echo("No objects found.")


@app.command("head")
def head_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    config_path: ConfigOption = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """Show metadata for one object."""
    config, store = _open_store(config_path)
    try:
        metadata = store.head_object(config.backup_s3_bucket, key)
    except S3ProbeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Key: {key}")
    typer.echo(f"ETag: {metadata.etag}")
    typer.echo(f"Size: {metadata.size:,} bytes")
    typer.echo(f"Encrypted: {'yes' if metadata.server_side_encryption else 'no'}")
    if metadata.version_id:
        typer.echo(f"Version: {metadata.version_id}")
    if metadata.last_modified:
        typer.echo(f"Last modified: {metadata.last_modified.isoformat()}")


@app.command("put")
def put_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    path: Annotated[Path, typer.Argument(help="Local file to upload")],
    config_path: ConfigOption = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """Upload a local file."""
    config, store = _open_store(config_path)
    try:
        metadata = store.put_file(config.backup_s3_bucket, key, path)
    except S3ProbeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Uploaded {key} ({metadata.size:,} bytes, ETag {metadata.etag})")


@app.command("delete")
def delete_cmd(
    key: Annotated[str, typer.Argument(help="Object key")],
    config_path: ConfigOption = Path(DEFAULT_CONFIG_PATH),
) -> None:
    """Delete one object."""
    config, store = _open_store(config_path)
    try:
        store.delete_object(config.backup_s3_bucket, key)
    except S3ProbeError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Deleted {key}")


if __name__ == "__main__":
    app()
