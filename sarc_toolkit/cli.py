"""SARC Toolkit CLI."""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """SARC Toolkit - Inspect and extract files from sarc archives.

    \b
    Archives are read fully into memory and never modified.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def load_archive(archive: Path, strict: bool):
    """Parse an archive file, raising ValueError when it is not readable.

    Archives whose offset table runs past the end of the file are rejected
    even without --strict.
    """
    from .archive import ArchiveParser

    parser = ArchiveParser.from_file(archive, strict=strict)
    if not parser.succeeded:
        raise ValueError(f"{archive}: {parser.parse_result.description}")
    if not parser.offset_table_in_bounds():
        raise ValueError(
            f"{archive}: offset table for {parser.num_files} files runs past the end of the {parser.data_size}-byte file"
        )
    return parser


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(archive: Path):
    """Show the header of a sarc archive."""
    from .archive import ArchiveParser

    try:
        parser = ArchiveParser.from_file(archive)

        click.echo(f"Archive: {archive}")
        click.echo(f"Result:  {parser.parse_result.description}")
        if parser.header is not None:
            click.echo(f"Version: {parser.header.version}")
            click.echo(f"Files:   {parser.header.num_files}")
            click.echo(f"Bounds:  {'ok' if parser.check_bounds() else 'out of range'}")

        if not parser.succeeded:
            click.echo(f"Error: {archive}: {parser.parse_result.description}", err=True)
            sys.exit(1)

    except OSError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command(name="list")
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Reject archives whose records point outside the file")
def list_files(archive: Path, strict: bool):
    """List the files in a sarc archive."""
    try:
        parser = load_archive(archive, strict)

        click.echo(f"{'Size':<10} {'Align':<5} Name")
        for file in parser:
            if not file.is_valid():
                click.echo(f"{'?':>10} {'?':>5} <unreadable record>")
                continue
            click.echo(f"{file.file_size:>10} {file.alignment:>5} {file.file_name}")
        click.echo(f"{len(parser)} file(s) in {archive}.")

    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.argument("archive", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("names", nargs=-1)
@click.option(
    "-o",
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    help="Output directory (default: <archive_name>_extracted)",
)
@click.option("--overwrite", is_flag=True, help="Overwrite files that already exist")
@click.option("--strict", is_flag=True, help="Reject archives whose records point outside the file")
def extract(archive: Path, names: Tuple[str, ...], output: Optional[Path], overwrite: bool, strict: bool):
    """Extract files from a sarc archive.

    Extracts every file unless NAMES are given.
    """
    try:
        parser = load_archive(archive, strict)

        if output is None:
            output = archive.parent / f"{archive.stem}_extracted"
        output.mkdir(parents=True, exist_ok=True)

        if names:
            files = []
            for name in names:
                file = parser.find_file(name)
                if not file.is_valid():
                    click.echo(f"Skip: {name} (not in archive)")
                    continue
                files.append(file)
        else:
            files = [file for file in parser if file.is_valid()]

        extracted = 0
        for file in files:
            output_path = resolve_output_path(output, file.file_name)
            if output_path is None:
                click.echo(f"Skip: {file.file_name} (path escapes output directory)")
                continue
            if output_path.exists() and not overwrite:
                click.echo(f"Skip: {file.file_name} (already exists)")
                continue

            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(file.data)
            extracted += 1

        click.echo(f"Extracted {extracted} file(s).")

    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def resolve_output_path(output_dir: Path, file_name: str) -> Optional[Path]:
    """Map an archive name to a path under output_dir, or None if it escapes."""
    relative = file_name.replace("\\", "/").lstrip("/")
    if not relative:
        return None
    root = output_dir.resolve()
    candidate = (root / relative).resolve()
    if candidate == root or root not in candidate.parents:
        return None
    return candidate


if __name__ == "__main__":
    main()
