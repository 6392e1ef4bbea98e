import dataclasses
from enum import Enum
from pathlib import Path
from typing import Annotated

from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from typer import Argument, Exit, Option, Typer

from .config import SearchSettings, resolve_db_path
from .embeddings import EmbeddingProvider
from .errors import (
    EmptyQueryError,
    MalformedResponse,
    ProviderError,
    SearchFailed,
    StoreUnavailable,
)
from .models import RestaurantPayload
from .search import SearchOutcome, build_selector
from .storage import DuckDBRestaurantStore

app = Typer(help="Find restaurants with AI search and text-search fallbacks.")

_PAYLOADS = TypeAdapter(list[RestaurantPayload])


class Mode(str, Enum):
    semantic = "semantic"
    literal = "literal"


DbPathOption = Annotated[
    str | None,
    Option("--db-path", help="DuckDB file holding the restaurants table."),
]


def render_outcome(console: Console, outcome: SearchOutcome) -> None:
    query = outcome.query.text
    if outcome.is_empty:
        console.print(
            Panel(
                f'No restaurants found matching "{query}". Search used: {outcome.strategy}',
                title="No Results",
                title_align="left",
                border_style="bold yellow",
            )
        )
        return

    count = len(outcome.results)
    table = Table(
        title=f"Found {count} result{'s' if count != 1 else ''}",
        caption=f"Search used: {outcome.strategy}",
    )
    table.add_column("#", justify="right")
    table.add_column("Name")
    table.add_column("Location")
    table.add_column("Phone")
    table.add_column("Match", justify="right")
    for position, result in enumerate(outcome.results, start=1):
        record = result.record
        table.add_row(
            str(position),
            record.name or "Restaurant Name Not Available",
            record.location or "",
            record.phone_number or "",
            f"{result.percentage}%",
        )
    console.print(table)


@app.command()
def search(
    query: Annotated[str, Argument(help="What to look for, e.g. 'spicy food'.")],
    mode: Annotated[
        Mode, Option("--mode", "-m", help="semantic (AI first) or literal text search.")
    ] = Mode.semantic,
    db_path: DbPathOption = None,
    limit: Annotated[
        int | None, Option("--limit", "-n", min=1, help="Maximum number of results.")
    ] = None,
) -> None:
    """Search restaurants and print the ranked results."""
    console = Console()
    settings = SearchSettings.from_env()
    if limit is not None:
        settings = dataclasses.replace(settings, result_limit=limit)

    if not query.strip():
        console.print("[bold red]Search Query Required:[/] please enter a search term.")
        raise Exit(code=2)

    resolved_db_path = resolve_db_path(db_path)
    if not Path(resolved_db_path).exists():
        console.print(
            f"[bold red]No restaurant database at {resolved_db_path}.[/] "
            "Run `restaurant-finder load <file>` first."
        )
        raise Exit(code=1)

    try:
        store = DuckDBRestaurantStore(
            resolved_db_path,
            read_only=True,
            initialize=False,
            timeout=settings.store_timeout,
        )
    except StoreUnavailable as exc:
        console.print(f"[bold red]Search Error:[/] {exc}")
        raise Exit(code=1)

    try:
        selector = build_selector(store, settings)
        with console.status(status="Searching..."):
            outcome = selector.search(query, mode.value)
    except EmptyQueryError:
        console.print("[bold red]Search Query Required:[/] please enter a search term.")
        raise Exit(code=2)
    except SearchFailed as exc:
        console.print(
            Panel(
                f"Unable to perform search for \"{exc.query}\": {exc.reason}. "
                "Please check your configuration.",
                title="Search Error",
                title_align="left",
                border_style="bold red",
            )
        )
        raise Exit(code=1)
    finally:
        store.close()

    render_outcome(console, outcome)


@app.command()
def status(db_path: DbPathOption = None) -> None:
    """Check that the restaurant store can be read."""
    console = Console()
    resolved_db_path = resolve_db_path(db_path)
    connected = False
    count = 0
    if Path(resolved_db_path).exists():
        try:
            store = DuckDBRestaurantStore(
                resolved_db_path, read_only=True, initialize=False
            )
        except StoreUnavailable:
            store = None
        if store is not None:
            try:
                connected = store.ping()
                if connected:
                    count = store.count_restaurants()
            except StoreUnavailable:
                connected = False
            finally:
                store.close()

    if connected:
        console.print(f"Status: [bold green]Connected[/] ({count} restaurants)")
    else:
        console.print("Status: [bold red]Not Connected[/]")
        raise Exit(code=1)


@app.command()
def load(
    file: Annotated[Path, Argument(help="JSON file with an array of restaurants.")],
    db_path: DbPathOption = None,
) -> None:
    """Import restaurants from a JSON file into the store."""
    console = Console()
    if not file.exists():
        console.print(f"[bold red]No such file:[/] {file}")
        raise Exit(code=1)
    try:
        payloads = _PAYLOADS.validate_json(file.read_text())
    except ValidationError as exc:
        console.print(f"[bold red]Invalid restaurant file:[/] {exc.error_count()} errors")
        console.print(str(exc))
        raise Exit(code=1)

    try:
        store = DuckDBRestaurantStore(resolve_db_path(db_path))
    except StoreUnavailable as exc:
        console.print(f"[bold red]Load failed:[/] {exc}")
        raise Exit(code=1)

    try:
        written = store.upsert_restaurants([payload.to_record() for payload in payloads])
        total = store.count_restaurants()
    except StoreUnavailable as exc:
        console.print(f"[bold red]Load failed:[/] {exc}")
        raise Exit(code=1)
    finally:
        store.close()
    console.print(f"Loaded [bold]{written}[/] restaurants ({total} in store).")


@app.command()
def embed(
    db_path: DbPathOption = None,
    batch_size: Annotated[
        int | None, Option("--batch-size", help="Texts per embedding request.")
    ] = None,
) -> None:
    """Generate embeddings for restaurants that do not have one yet."""
    console = Console()
    settings = SearchSettings.from_env()
    try:
        provider = EmbeddingProvider(
            dim=settings.embedding_dim,
            batch_size=batch_size,
            timeout=settings.provider_timeout,
        )
    except ValueError as exc:
        console.print(f"[bold red]Embedding provider unavailable:[/] {exc}")
        raise Exit(code=1)

    try:
        store = DuckDBRestaurantStore(resolve_db_path(db_path))
    except StoreUnavailable as exc:
        console.print(f"[bold red]Embedding failed:[/] {exc}")
        raise Exit(code=1)

    try:
        records = store.list_missing_embeddings()
        if not records:
            console.print("All restaurants already have embeddings.")
            return
        with console.status(status=f"Embedding {len(records)} restaurants..."):
            vectors = provider.embed_texts(
                [record.embedding_source() for record in records]
            )
        written = store.store_embeddings(
            [(record.id, vector) for record, vector in zip(records, vectors)]
        )
    except (ProviderError, MalformedResponse, StoreUnavailable) as exc:
        console.print(f"[bold red]Embedding failed:[/] {exc}")
        raise Exit(code=1)
    finally:
        store.close()
    console.print(f"Stored [bold]{written}[/] embeddings.")
