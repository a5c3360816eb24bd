"""Command-line interface for SupplierGuard."""

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .data.factory import get_default_supplier_store
from .data.seed import sample_suppliers
from .exceptions import SupplierGuardError, ValidationFailed
from .infrastructure.correlation import CorrelationContext
from .integrations.screening_client import ScreeningApiClient
from .models import ScreeningResultView, get_settings
from .services.screening import ScreeningService

app = typer.Typer(
    name="supplierguard",
    help="SupplierGuard supplier screening CLI",
    add_completion=False,
)
console = Console()


def print_error(message: str):
    """Print an error message."""
    console.print(
        Panel(
            f"[red]{message}[/red]",
            title="[bold red]Error[/bold red]",
            border_style="red",
        )
    )


def print_screening(view: ScreeningResultView):
    """Print a screening result and its risk verdict."""
    if view.is_high_risk:
        verdict = f"[bold red]HIGH RISK: {view.total_hits} matches found[/bold red]"
        border = "red"
    else:
        verdict = "[bold green]No matches found - supplier is clear[/bold green]"
        border = "green"

    console.print(
        Panel.fit(
            f"[bold]{view.supplier_name}[/bold]\n"
            f"[dim]searched as[/dim] {view.searched_entity}\n"
            f"[dim]at {view.searched_at:%Y-%m-%d %H:%M:%S} "
            f"in {view.execution_time_seconds:.2f}s[/dim]\n\n{verdict}",
            title="Screening",
            border_style=border,
        )
    )

    if view.hits:
        table = Table(title="Hits", show_header=True)
        table.add_column("Entity", style="cyan")
        table.add_column("Source", style="magenta")
        table.add_column("Score", justify="right")
        table.add_column("Attributes", style="dim")
        for hit in view.hits:
            score = "-" if hit.match_score is None else f"{hit.match_score:.0f}"
            attributes = ", ".join(f"{k}={v}" for k, v in hit.attributes.items())
            table.add_row(hit.entity_name, hit.source, score, attributes)
        console.print(table)

    for error in view.errors or []:
        console.print(f"[yellow]upstream warning:[/yellow] {error}")


async def _run_screening(supplier_ref: str, sources: list[int]) -> ScreeningResultView:
    store = get_default_supplier_store()
    supplier = await store.get_by_id(supplier_ref) or await store.get_by_tax_id(supplier_ref)
    supplier_id = supplier.id if supplier else supplier_ref

    client = ScreeningApiClient.from_settings(get_settings())
    try:
        with CorrelationContext():
            return await ScreeningService(store, client).perform_screening(supplier_id, sources)
    finally:
        await client.close()


@app.command()
def screen(
    supplier: str = typer.Argument(..., help="Supplier ID or tax ID"),
    source: list[int] = typer.Option(
        [1, 2, 3], "--source", "-s", help="1=OffshoreLeaks, 2=WorldBank, 3=OFAC"
    ),
):
    """Screen a supplier against high-risk lists."""
    try:
        view = asyncio.run(_run_screening(supplier, source))
    except SupplierGuardError as e:
        print_error(str(e))
        if isinstance(e, ValidationFailed):
            for message in e.messages():
                console.print(f"  - {message}")
        raise typer.Exit(1)

    print_screening(view)
    if view.is_high_risk:
        raise typer.Exit(2)


@app.command()
def health():
    """Check the screening API health."""

    async def check() -> bool:
        client = ScreeningApiClient.from_settings(get_settings())
        try:
            return await client.health_check()
        finally:
            await client.close()

    if asyncio.run(check()):
        console.print("[green]Screening API is healthy[/green]")
    else:
        print_error("Screening API is unavailable")
        raise typer.Exit(1)


@app.command()
def seed():
    """Load the sample suppliers into the configured store."""

    async def run() -> int:
        return await get_default_supplier_store().add_many(sample_suppliers())

    added = asyncio.run(run())
    console.print(f"[green]Seeded {added} suppliers[/green]")


@app.command()
def suppliers():
    """List suppliers in the configured store."""
    items = asyncio.run(get_default_supplier_store().list_all())

    table = Table(title="Suppliers", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Legal name", style="cyan")
    table.add_column("Tax ID")
    table.add_column("Country")
    table.add_column("Revenue", justify="right")
    for item in items:
        table.add_row(
            item.id, item.legal_name, item.tax_id, item.country.value, f"{item.annual_revenue:,.2f}"
        )
    console.print(table)


@app.command()
def config():
    """Show current configuration."""
    settings = get_settings()

    table = Table(title="Configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")

    # Only show non-sensitive settings
    table.add_row("Environment", settings.env)
    table.add_row("Screening API", settings.screening_api_base_url)
    table.add_row("Timeout (s)", str(settings.screening_api_timeout_seconds))
    table.add_row("Retries", str(settings.screening_api_retry_count))
    table.add_row(
        "Circuit breaker",
        f"{settings.circuit_breaker_threshold} failures / {settings.circuit_breaker_break_seconds}s",
    )
    table.add_row("Auth0 domain", settings.auth0_domain or "(not set)")
    table.add_row("Client secret set", "Yes" if settings.auth0_client_secret else "No")
    table.add_row("Supplier store", settings.data_source)

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("supplierguard.api.main:app", host=host, port=port, reload=reload)


@app.command()
def version():
    """Show version information."""
    from . import __version__

    console.print(f"SupplierGuard v{__version__}")


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
