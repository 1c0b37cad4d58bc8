"""
Command Line Interface for the document vectorization service

Chunk, embed, store and search documents, or run the HTTP API.
"""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .chunker import TextChunker
from .config import Config, setup_logging
from .exceptions import DocvecError
from .pipeline import DocumentEmbedder
from .service import VectorizationService
from .store import QdrantStore
from .tokenizer import HuggingFaceTokenizer

console = Console()


def _read_input(text_or_file: str) -> str:
    """Treat the argument as a file path when one exists, otherwise as text"""
    path = Path(text_or_file)
    try:
        if path.is_file():
            return path.read_text(encoding="utf-8")
    except OSError:
        pass
    return text_or_file


def _fail(e: Exception):
    console.print(Panel.fit(f"[bold red]Error: {str(e)}[/bold red]", title="Error"))
    raise click.Abort()


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True, dir_okay=False),
              help='JSON config file')
@click.pass_context
def cli(ctx, verbose, config_file):
    """Long-text vectorization CLI"""
    try:
        config = Config(config_file)
    except DocvecError as e:
        _fail(e)
    setup_logging(config, "DEBUG" if verbose else None)
    ctx.obj = config


@cli.command()
@click.argument('text_or_file')
@click.option('--max-tokens', '-m', type=click.IntRange(min=1), help='Token cap per chunk')
@click.pass_obj
def chunk(config, text_or_file, max_tokens):
    """Show how a document is split into chunks"""
    text = _read_input(text_or_file)

    max_tokens = max_tokens or int(config.get("chunking.max_tokens", 256))

    # Only the tokenizer is needed to count tokens
    try:
        tokenizer = HuggingFaceTokenizer.load(config.get("tokenizer.path"), config.get("embeddings.model"))
        chunks = TextChunker(tokenizer, max_tokens=max_tokens).split_chunks(text)
    except DocvecError as e:
        _fail(e)

    table = Table(title=f"Chunks (max {max_tokens} tokens)")
    table.add_column("#", style="cyan")
    table.add_column("Offsets", style="magenta")
    table.add_column("Tokens", style="green")
    table.add_column("Weight", style="green")
    table.add_column("Preview")

    for c in chunks:
        preview = c.content[:60].replace("\n", " ")
        if len(c.content) > 60:
            preview += "..."
        table.add_row(
            str(c.index),
            f"{c.start}-{c.end}",
            str(tokenizer.count_tokens(c.content)),
            f"{c.weight:.0f}",
            preview
        )

    console.print(table)


@cli.command()
@click.argument('text_or_file')
@click.option('--json', 'as_json', is_flag=True, help='Print the full vector as JSON')
@click.pass_obj
def embed(config, text_or_file, as_json):
    """Embed a document into a single vector"""
    text = _read_input(text_or_file)

    try:
        embedder = DocumentEmbedder.from_config(config)
        chunks = embedder.chunk(text)
        vector = embedder.embed_chunks(chunks)
    except DocvecError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(vector))
        return

    head = ", ".join(f"{x:.4f}" for x in vector[:5])
    console.print(Panel.fit(
        f"[bold blue]Document Vector[/bold blue]\n"
        f"Characters: {len(text)}\n"
        f"Chunks: {len(chunks)}\n"
        f"Dimension: {len(vector)}\n"
        f"Head: [{head}, ...]",
        title="Embedding"
    ))


@cli.command()
@click.argument('text_or_file')
@click.pass_obj
def add(config, text_or_file):
    """Embed a document and store it in the vector store"""
    text = _read_input(text_or_file)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console
        ) as progress:
            task = progress.add_task("Loading models...", total=None)
            service = VectorizationService.from_config(config)
            progress.update(task, description="Embedding and storing document...")
            point_id = service.add_document(text)
            progress.update(task, description="Document stored!")
    except DocvecError as e:
        _fail(e)

    console.print(Panel.fit(
        f"[bold green]Document stored[/bold green]\n"
        f"ID: {point_id}\n"
        f"Collection: {service.store.collection_name}",
        title="Success"
    ))


@cli.command()
@click.argument('query')
@click.option('--limit', '-k', type=click.IntRange(min=1), help='Number of matches to return')
@click.pass_obj
def search(config, query, limit):
    """Search stored documents by similarity"""
    try:
        service = VectorizationService.from_config(config)
        results = service.search(_read_input(query), limit)
    except DocvecError as e:
        _fail(e)

    if not results:
        console.print("[yellow]No matching documents[/yellow]")
        return

    table = Table(title="Search Results")
    table.add_column("Score", style="green")
    table.add_column("ID", style="cyan")
    table.add_column("Text")

    for r in results:
        preview = r.text[:80].replace("\n", " ")
        if len(r.text) > 80:
            preview += "..."
        table.add_row(f"{r.score:.4f}", r.id or "", preview)

    console.print(table)


@cli.command('init-collection')
@click.pass_obj
def init_collection(config):
    """Create the vector store collection if it does not exist"""
    try:
        store = QdrantStore.from_config(config)
        created = store.ensure_collection()
    except DocvecError as e:
        _fail(e)

    state = "created" if created else "already exists"
    console.print(f"[bold green]Collection '{store.collection_name}' {state}[/bold green]")


@cli.command()
@click.option('--host', help='Bind address (defaults to server.host)')
@click.option('--port', type=int, help='Port (defaults to server.port)')
@click.pass_obj
def serve(config, host, port):
    """Run the HTTP API"""
    import uvicorn
    from .api import create_app

    server_cfg = config.get_server_config()
    host = host or server_cfg.get("host", "0.0.0.0")
    port = port or int(server_cfg.get("port", 8000))

    console.print(Panel.fit(
        f"[bold blue]Starting API server[/bold blue]\n"
        f"Address: http://{host}:{port}\n"
        f"Collection: {config.get('vector_store.collection_name')}",
        title="Server"
    ))
    logging.getLogger(__name__).info(f"Server running on {host}:{port}")
    uvicorn.run(create_app(config=config), host=host, port=port)


if __name__ == '__main__':
    cli()
