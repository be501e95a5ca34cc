"""Command-line interface for nodefilter."""

import os
import sys
from pathlib import Path
from typing import Iterator, List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from .columntype import ColumnTypeRegistry
from .config import load_config, write_default_config
from .errors import FilterError
from .filter import Element, Filter, FilterRegistry
from .node import FileNode
from .size import format_size


app = typer.Typer(
    name="nodefilter",
    help="Filter files with column-based boolean filters",
    add_completion=False,
)
console = Console()


def setup_logger(verbose: bool = False) -> None:
    """Configure Loguru: warnings to stderr, or everything with ``verbose``."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}:{function}:{line}</cyan> - <level>{message}</level>",
    )


def iter_nodes(paths: List[str], recursive: bool) -> Iterator[FileNode]:
    """Yield a node for every entry of the given directories (or the files themselves)."""
    for path in paths:
        root = Path(path)
        if not root.is_dir():
            yield FileNode.from_path(root)
            continue
        if recursive:
            for dirpath, dirnames, filenames in os.walk(root):
                for name in sorted(dirnames) + sorted(filenames):
                    try:
                        yield FileNode.from_path(Path(dirpath) / name)
                    except OSError as e:
                        logger.warning(f"Skipping {name}: {e}")
        else:
            for entry in sorted(root.iterdir()):
                try:
                    yield FileNode.from_path(entry)
                except OSError as e:
                    logger.warning(f"Skipping {entry}: {e}")


def build_tree(sequence: List[Element], tree: Tree) -> Tree:
    """Add the elements of ``sequence`` to a rich tree."""
    for i, element in enumerate(sequence):
        label = "" if i == 0 else f"[magenta]{element.connective.value}[/magenta] "
        if element.negate:
            label += "[red]NOT[/red] "
        if element.is_block:
            block = element.block
            type_name = getattr(block.column_type, "name", "?")
            tree.add(f"{label}[cyan]{escape(block.column_name)}[/cyan] ({type_name}): {escape(repr(block.filter_text))}")
        else:
            build_tree(element.group, tree.add(f"{label}[bold]( )[/bold]"))
    return tree


@app.command()
def match(
    filter_string: str = typer.Argument(..., help="Filter, e.g. 'size:>1M and name:\"$.txt\"'"),
    paths: Optional[List[str]] = typer.Argument(None, help="Paths to filter (default: current directory)"),
    recursive: bool = typer.Option(False, "-r", "--recursive", help="Descend into directories"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="Configuration file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug logs"),
):
    """List the files matching a filter."""
    setup_logger(verbose)
    config = load_config(config_path)
    registry = FilterRegistry(config, ColumnTypeRegistry(config))

    try:
        matched = registry.filter_nodes(iter_nodes(paths or ["."], recursive), filter_string)
    except FilterError as e:
        console.print(f"[bold red]Filter error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    table = Table(title=f"{len(matched)} match(es)")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Modified", no_wrap=True)
    table.add_column("Location", style="dim", overflow="fold")
    for node in matched:
        size = node.get("size")
        table.add_row(
            node.name + ("/" if node.is_container() else ""),
            "" if size is None else format_size(size),
            node.get("mtime").strftime("%Y-%m-%d %H:%M"),
            node.get("location"),
        )
    console.print(table)


@app.command()
def check(
    filter_string: str = typer.Argument(..., help="Filter to check"),
    config_path: Optional[Path] = typer.Option(None, "-c", "--config", help="Configuration file"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Show debug logs"),
):
    """Parse and compile a filter, then show its structure."""
    setup_logger(verbose)
    config = load_config(config_path)

    with Filter(filter_string, config, ColumnTypeRegistry(config)) as f:
        try:
            f.compile()
            sequence = f.ensure_compiled()
        except FilterError as e:
            console.print(f"[bold red]Invalid filter:[/bold red] {escape(str(e))}")
            raise typer.Exit(code=1)
        console.print(build_tree(sequence, Tree(f"[bold]{escape(filter_string)}[/bold]")))


@app.command("init-config")
def init_config(
    target: Path = typer.Argument(..., help="Where to write the configuration file"),
    force: bool = typer.Option(False, "-f", "--force", help="Overwrite an existing file"),
):
    """Write the default configuration file."""
    try:
        path = write_default_config(target, overwrite=force)
    except FileExistsError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))} (use --force to overwrite)")
        raise typer.Exit(code=1)
    console.print(f"[bold green]✓[/bold green] Configuration written to: {path}")


if __name__ == "__main__":
    app()
