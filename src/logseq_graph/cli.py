"""CLI entry point for logseq-graph."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from logseq_graph import __version__
from logseq_graph.config import ConfigManager, default_index_path
from logseq_graph.content import Block, Text, debug
from logseq_graph.errors import LogseqGraphError
from logseq_graph.events import PageDeleted, PageIndexed, PageUpdated
from logseq_graph.graph import Graph
from logseq_graph.indexing import Or, PageType, content_matches, title_matches
from logseq_graph.markdown import parse, write_to_string
from logseq_graph.search import SearchOptions
from logseq_graph.services.file_operations import atomic_write
from logseq_graph.utils.logging import configure_logging, get_logger
from logseq_graph.utils.urls import logseq_url
from logseq_graph.watcher import DEFAULT_DEBOUNCE_SECONDS

logger = get_logger(__name__)
console = Console()


@dataclass
class GraphTarget:
    """Graph selected on the command line or in the settings file."""

    path: Path
    index_path: Optional[Path]
    index_enabled: bool = True
    block_time_format: Optional[str] = None
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS


def resolve_graph(graph_path: Optional[Path]) -> GraphTarget:
    """
    Pick the graph to work on.

    An explicit ``--graph`` wins and uses the default index location.
    Otherwise the graph and its options come from the settings file.

    Raises:
        click.ClickException: If no graph is given and the settings file
            is missing or invalid
    """
    if graph_path is not None:
        return GraphTarget(path=graph_path, index_path=default_index_path(graph_path))

    try:
        config = ConfigManager.load_default()
        graph = config.graph
        index = config.index
        watch = config.watch
    except LogseqGraphError as e:
        raise click.ClickException(f"{e}\nPass --graph or create the settings file.")

    path = Path(graph.path)
    index_path = Path(index.path).expanduser() if index.path else default_index_path(path)
    return GraphTarget(
        path=path,
        index_path=index_path,
        index_enabled=index.enabled,
        block_time_format=graph.block_time_format,
        debounce_seconds=watch.debounce_seconds,
    )


def open_graph(target: GraphTarget, index: bool, watch_changes: bool = False, listener=None) -> Graph:
    try:
        return Graph.open(
            target.path,
            index=index,
            index_path=target.index_path,
            block_time_format=target.block_time_format,
            listener=listener,
            debounce_seconds=target.debounce_seconds,
            watch_changes=watch_changes,
        )
    except LogseqGraphError as e:
        logger.error("graph_open_failed", path=str(target.path), error=str(e))
        raise click.ClickException(str(e))


def require_index(target: GraphTarget) -> None:
    if not target.index_enabled:
        raise click.ClickException("Indexing is disabled in the settings file")


graph_option = click.option(
    "--graph",
    "graph_path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Graph directory (default: graph.path from ~/.config/logseq-graph/config.yaml)",
)


@click.group()
@click.version_option(version=__version__, prog_name="logseq-graph")
def cli():
    """logseq-graph: read, format and search Logseq graphs."""
    configure_logging()


@cli.command(name="parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--debug", "show_debug", is_flag=True, help="Print the document tree instead of Markdown")
def parse_command(file: Path, show_debug: bool):
    """
    Parse a Markdown file and print it back.

    Examples:
        logseq-graph parse pages/Books.md
        logseq-graph parse journals/2024_01_31.md --debug
    """
    try:
        root = parse(file.read_bytes())
        output = debug(root) if show_debug else write_to_string(root)
    except LogseqGraphError as e:
        raise click.ClickException(str(e))

    click.echo(output)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--check", is_flag=True, help="Exit with status 1 if the file is not formatted")
@click.option("--write", "write_back", is_flag=True, help="Rewrite the file in place")
@click.pass_context
def fmt(ctx: click.Context, file: Path, check: bool, write_back: bool):
    """
    Normalise the Markdown of a page.

    Without options the formatted page is printed.
    """
    original = file.read_text(encoding="utf-8")

    try:
        formatted = write_to_string(parse(original.encode("utf-8")))
    except LogseqGraphError as e:
        raise click.ClickException(str(e))

    if original.endswith("\n") and not formatted.endswith("\n"):
        formatted += "\n"

    if check:
        if formatted != original:
            click.echo(f"Would reformat {file}", err=True)
            ctx.exit(1)
        return

    if write_back:
        if formatted != original:
            atomic_write(file, formatted)
            logger.info("file_formatted", path=str(file))
            click.echo(f"Formatted {file}")
        return

    click.echo(formatted, nl=False)


@cli.command()
@graph_option
@click.option("--rebuild", is_flag=True, help="Drop the index and index every page again")
def index(graph_path: Optional[Path], rebuild: bool):
    """
    Update the search index of a graph.

    Only pages changed since the last run are indexed unless --rebuild is given.
    """
    target = resolve_graph(graph_path)
    require_index(target)

    count = 0

    def on_indexed(event: PageIndexed) -> None:
        nonlocal count
        count += 1
        logger.debug("index_progress", sub_path=event.sub_path, count=count)

    with console.status("[bold green]Indexing pages..."):
        graph = open_graph(target, index=True, listener=on_indexed)
        try:
            if rebuild:
                count = graph.rebuild_index()
        finally:
            graph.close()

    click.echo(f"Indexed {count} page(s)")


def _print_page_results(results, graph_path: Path) -> None:
    for idx, result in enumerate(results, 1):
        url = logseq_url(graph_path, result.title)
        kind = "journal" if result.type is PageType.JOURNAL else "page"
        console.print(f"{idx}. [link={url}]{escape(result.title)}[/link] [dim]({kind})[/dim]")


def _print_block_results(results, graph_path: Path) -> None:
    for idx, result in enumerate(results, 1):
        url = logseq_url(graph_path, result.page_title, result.id or None)
        console.print(f"{idx}. [link={url}]{escape(result.page_title)}[/link]")
        for line in result.preview.splitlines() or [""]:
            console.print(f"   {escape(line)}", highlight=False)


@cli.command()
@click.argument("query")
@graph_option
@click.option("--blocks", is_flag=True, help="Search blocks instead of pages")
@click.option("--limit", default=10, show_default=True, help="Maximum number of results")
def search(query: str, graph_path: Optional[Path], blocks: bool, limit: int):
    """
    Full text search of a graph.

    Examples:
        logseq-graph search "reading list"
        logseq-graph search plumber --blocks --limit 5
    """
    target = resolve_graph(graph_path)
    require_index(target)

    logger.info("search_command_started", query=query, blocks=blocks)

    graph = open_graph(target, index=True)
    try:
        if blocks:
            options = SearchOptions().with_query(content_matches(query)).with_max_hits(limit)
            results = graph.search_blocks(options)
        else:
            options = SearchOptions().with_query(
                Or(title_matches(query), content_matches(query))
            ).with_max_hits(limit)
            results = graph.search_pages(options)
    except LogseqGraphError as e:
        raise click.ClickException(f"Search failed: {e}")
    finally:
        graph.close()

    if not results.results:
        click.echo("No results found.")
        return

    click.echo(f"Showing {results.size} of {results.count} result(s)\n")
    if blocks:
        _print_block_results(results.results, graph.directory)
    else:
        _print_page_results(results.results, graph.directory)


@cli.command()
@click.argument("text")
@graph_option
def add(text: str, graph_path: Optional[Path]):
    """
    Add a block to today's journal.

    The block is time stamped when graph.block_time_format is set.
    """
    target = resolve_graph(graph_path)
    graph = open_graph(target, index=False)
    try:
        tx = graph.new_transaction()
        page = tx.add_journal_block(datetime.now(), Block(Text(text)))
        tx.save()
    except LogseqGraphError as e:
        raise click.ClickException(str(e))
    finally:
        graph.close()

    click.echo(f"Added block to {page.title}")


@cli.command()
@graph_option
def watch(graph_path: Optional[Path]):
    """Print changes to pages until interrupted."""
    target = resolve_graph(graph_path)
    graph = open_graph(target, index=target.index_enabled, watch_changes=True)

    click.echo(f"Watching {graph.directory} (Ctrl+C to stop)")
    try:
        with graph.watch() as watcher:
            for event in watcher.events():
                if isinstance(event, PageUpdated):
                    console.print(f"[green]updated[/green] {escape(event.page.title)}")
                elif isinstance(event, PageDeleted):
                    console.print(f"[red]deleted[/red] {escape(event.title)}")
    except KeyboardInterrupt:
        pass
    finally:
        graph.close()

    click.echo("Watch stopped")


def main():
    cli()


if __name__ == "__main__":
    main()
