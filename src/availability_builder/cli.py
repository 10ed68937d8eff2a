"""Command-line interface for availability_builder using Click.

Commands:
  folders    -> List subfolders of a Drive parent folder
  clients    -> Build the client AM/PM schedule workbook
  staff      -> Build the therapist/supervisor availability workbook
  addresses  -> Build the combined address directory
  export-all -> Build all three workbooks concurrently

Usage examples:
  availability-builder --token $TOKEN folders --parent 10CSN3c8
  availability-builder clients --folder 1NiL7Mzp --out-dir exports
  availability-builder export-all --clients 1NiL --therapists 1d1z --supervisors 1EF_ --csv
"""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

import click

from .aggregate import COLLECTORS, FolderSelection, export_all
from .config import get_access_token, get_output_dir
from .drive import list_folders
from .errors import FetchError, NoFolderSelected
from .export import write_export

# --------------------- helpers ---------------------


def _require_token(ctx: click.Context) -> str:
    token = ctx.obj.get("token")
    if not token:
        raise click.UsageError(
            "An access token is required (--token or AVAILABILITY_ACCESS_TOKEN)."
        )
    return token


def _progress(message: str) -> None:
    click.echo(message)


def _run_export(
    ctx: click.Context,
    title: str,
    selection: FolderSelection,
    out_dir: str,
    as_csv: bool,
    strict: bool,
) -> None:
    token = _require_token(ctx)
    collector, columns = COLLECTORS[title]
    try:
        rows = asyncio.run(
            collector(token, selection, progress=_progress, strict=True if strict else None)
        )
    except NoFolderSelected as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logging.exception("%s export failed", title)
        click.echo(f"Error processing {title.lower()}: {e}", err=True)
        sys.exit(1)
    path = write_export(rows, columns, title, out_dir, as_csv)
    click.echo(f"{title} processing complete! {len(rows)} rows written to {path}")


def _output_options(fn):
    fn = click.option(
        "--strict", is_flag=True, help="Abort on the first file that fails to parse."
    )(fn)
    fn = click.option("--csv", "as_csv", is_flag=True, help="Write CSV instead of xlsx.")(fn)
    fn = click.option(
        "--out-dir",
        default=get_output_dir,
        show_default="AVAILABILITY_OUTPUT_DIR or exports",
        type=click.Path(file_okay=False),
        help="Output directory for exported sheets.",
    )(fn)
    return fn


# --------------------- CLI group ---------------------


@click.group()
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG).")
@click.option(
    "--token",
    default=get_access_token,
    help="Google OAuth access token with drive.readonly scope.",
)
@click.version_option("0.1.0")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, token: Optional[str]):
    """availability_builder CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    logging.debug("Verbose logging enabled." if verbose else "Logging level INFO.")
    ctx.ensure_object(dict)
    ctx.obj["token"] = token


# --------------------- folders ---------------------


@cli.command("folders")
@click.option(
    "--parent",
    "parent_id",
    envvar="AVAILABILITY_PARENT_FOLDER_ID",
    required=True,
    help="Parent folder id whose subfolders are listed.",
)
@click.pass_context
def cmd_folders(ctx: click.Context, parent_id: str):
    """List the folders available for selection."""
    token = _require_token(ctx)
    try:
        folders = list_folders(token, parent_id)
    except FetchError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if not folders:
        click.echo("No folders found.")
        return
    for folder in folders:
        click.echo(f"{folder.id}\t{folder.name}")


# --------------------- exports ---------------------


@cli.command("clients")
@click.option("--folder", envvar="AVAILABILITY_CLIENTS_FOLDER_ID", help="Client folder id.")
@_output_options
@click.pass_context
def cmd_clients(ctx, folder: Optional[str], out_dir: str, as_csv: bool, strict: bool):
    """Build the client AM/PM schedule sheet."""
    _run_export(ctx, "Clients", FolderSelection(clients=folder), out_dir, as_csv, strict)


@cli.command("staff")
@click.option("--therapists", envvar="AVAILABILITY_THERAPISTS_FOLDER_ID", help="Therapist folder id.")
@click.option("--supervisors", envvar="AVAILABILITY_SUPERVISORS_FOLDER_ID", help="Supervisor folder id.")
@_output_options
@click.pass_context
def cmd_staff(
    ctx,
    therapists: Optional[str],
    supervisors: Optional[str],
    out_dir: str,
    as_csv: bool,
    strict: bool,
):
    """Build the staff availability sheet."""
    selection = FolderSelection(therapists=therapists, supervisors=supervisors)
    _run_export(ctx, "Staff", selection, out_dir, as_csv, strict)


@cli.command("addresses")
@click.option("--clients", envvar="AVAILABILITY_CLIENTS_FOLDER_ID", help="Client folder id.")
@click.option("--therapists", envvar="AVAILABILITY_THERAPISTS_FOLDER_ID", help="Therapist folder id.")
@click.option("--supervisors", envvar="AVAILABILITY_SUPERVISORS_FOLDER_ID", help="Supervisor folder id.")
@_output_options
@click.pass_context
def cmd_addresses(
    ctx,
    clients: Optional[str],
    therapists: Optional[str],
    supervisors: Optional[str],
    out_dir: str,
    as_csv: bool,
    strict: bool,
):
    """Build the combined address directory."""
    selection = FolderSelection(clients, therapists, supervisors)
    _run_export(ctx, "Addresses", selection, out_dir, as_csv, strict)


@cli.command("export-all")
@click.option("--clients", envvar="AVAILABILITY_CLIENTS_FOLDER_ID", help="Client folder id.")
@click.option("--therapists", envvar="AVAILABILITY_THERAPISTS_FOLDER_ID", help="Therapist folder id.")
@click.option("--supervisors", envvar="AVAILABILITY_SUPERVISORS_FOLDER_ID", help="Supervisor folder id.")
@_output_options
@click.pass_context
def cmd_export_all(
    ctx,
    clients: Optional[str],
    therapists: Optional[str],
    supervisors: Optional[str],
    out_dir: str,
    as_csv: bool,
    strict: bool,
):
    """Build client, staff and address sheets concurrently."""
    token = _require_token(ctx)
    selection = FolderSelection(clients, therapists, supervisors)
    results = asyncio.run(
        export_all(
            token,
            selection,
            out_dir,
            progress=_progress,
            strict=True if strict else None,
            as_csv=as_csv,
        )
    )
    failed = False
    for result in results:
        if result.error:
            failed = True
            click.echo(result.error, err=True)
        else:
            click.echo(f"{result.title}: {result.rows} rows written to {result.path}")
    if failed:
        sys.exit(1)


# --------------------- entry ---------------------


def main():  # pragma: no cover
    cli()


if __name__ == "__main__":  # pragma: no cover
    main()
