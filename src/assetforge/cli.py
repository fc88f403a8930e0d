import logging
from contextlib import contextmanager
from datetime import date, datetime

import typer
from rich.console import Console
from rich.table import Table

from assetforge.errors import AssetForgeError

app = typer.Typer(help="assetforge CLI")
console = Console()


@app.callback()
def main():
    from assetforge.config.settings import get_settings

    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@contextmanager
def _reported_errors():
    try:
        yield
    except AssetForgeError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1) from exc


@app.command("init-db")
def init_db():
    """Initialize the database (create all tables)."""
    from assetforge.models.database import get_engine
    from assetforge.models.database import init_db as _init_db

    engine = get_engine()
    _init_db(engine)
    console.print("[green]Database initialized.[/green]")


@app.command("seed-demo")
def seed_demo():
    """Initialize the database and load demo templates and assets."""
    import subprocess
    import sys

    subprocess.run([sys.executable, "scripts/generate_data.py"], check=True)
    console.print("[green]Demo data loaded.[/green]")


@app.command()
def templates():
    """List active asset templates."""
    from assetforge.generation.templates import list_active_templates
    from assetforge.models.database import get_engine, get_session

    with get_session(get_engine()) as session:
        rows = list_active_templates(session)
        if not rows:
            console.print("[yellow]No active templates.[/yellow]")
            return

        table = Table(title="Active Templates")
        table.add_column("ID", justify="right")
        table.add_column("Name", style="cyan")
        table.add_column("Asset Type")
        table.add_column("Manufacturer")
        table.add_column("Default Cost", justify="right")
        table.add_column("Interval (days)", justify="right")
        for t in rows:
            table.add_row(
                str(t.id),
                t.name,
                t.asset_type or "N/A",
                t.default_manufacturer or "",
                f"${float(t.default_cost):,.2f}" if t.default_cost is not None else "",
                str(t.maintenance_interval_days or ""),
            )
        console.print(table)


@app.command()
def preview(
    template_id: int = typer.Option(..., "--template", "-t", help="Template ID"),
    quantity: int = typer.Option(1, "--quantity", "-q", help="Assets to create"),
    site_prefix: str = typer.Option(..., "--prefix", "-p", help="Site prefix"),
    start_number: int = typer.Option(1, "--start", "-s", help="First number"),
):
    """Preview the first names a generation run would produce."""
    from assetforge.generation.bulk_generator import BulkAssetGenerator
    from assetforge.models.database import get_engine, get_session

    with _reported_errors(), get_session(get_engine()) as session:
        result = BulkAssetGenerator(session).preview(
            template_id, quantity, site_prefix, start_number
        )
        for name in result.names:
            console.print(f"  [cyan]{name}[/cyan]")
        if result.remaining_count:
            console.print(f"  ... and {result.remaining_count} more")


@app.command()
def generate(
    template_id: int = typer.Option(..., "--template", "-t", help="Template ID"),
    quantity: int = typer.Option(1, "--quantity", "-q", help="Assets to create"),
    site_prefix: str = typer.Option(..., "--prefix", "-p", help="Site prefix"),
    start_number: int = typer.Option(1, "--start", "-s", help="First number"),
):
    """Generate a batch of assets from a template (all or nothing)."""
    from assetforge.generation.bulk_generator import BulkAssetGenerator
    from assetforge.models.database import get_engine, get_session

    with _reported_errors(), get_session(get_engine()) as session:
        result = BulkAssetGenerator(session).generate(
            template_id, quantity, site_prefix, start_number
        )
        console.print(
            f"[green]Successfully created {result.created} asset(s)![/green]"
        )
        console.print(f"  {result.names[0]} .. {result.names[-1]}")


@app.command("plan-version")
def plan_version(
    asset_id: int = typer.Argument(..., help="Live asset to plan a version of"),
    new_version: str = typer.Option(..., "--version", "-v", help="Version label"),
    notes: str = typer.Option(None, "--notes", help="Version notes"),
    go_live: datetime = typer.Option(
        None, "--go-live", formats=["%Y-%m-%d"], help="Go-live date (YYYY-MM-DD)"
    ),
    engineer: str = typer.Option(None, "--engineer", help="Assigned engineer ID"),
):
    """Create a Planned version from a Live asset."""
    from assetforge.lifecycle.versioning import VersionTransitionService
    from assetforge.models.database import get_engine, get_session

    go_live_date = go_live.date() if go_live else None
    with _reported_errors(), get_session(get_engine()) as session:
        result = VersionTransitionService(session).create_planned_version(
            asset_id, new_version, notes, go_live_date, engineer
        )
        console.print(
            f"[green]New planned version has been created "
            f"(asset {result.asset_id}).[/green]"
        )


@app.command()
def activate(
    asset_id: int = typer.Argument(..., help="Planned asset to activate"),
    live_asset_id: int = typer.Option(
        None, "--live", "-l", help="Live asset to supersede (resolved if omitted)"
    ),
):
    """Activate a Planned version; the current Live version is superseded."""
    from assetforge.lifecycle.versioning import VersionTransitionService
    from assetforge.models.database import get_engine, get_session

    with _reported_errors(), get_session(get_engine()) as session:
        result = VersionTransitionService(session).activate_planned_version(
            asset_id, live_asset_id
        )
        console.print(
            f"[green]Asset {result.asset_id} has been activated; "
            f"asset {result.affected_asset_ids[-1]} superseded.[/green]"
        )


@app.command()
def supersede(asset_id: int = typer.Argument(..., help="Live asset to supersede")):
    """Mark a Live asset as Superseded without replacement."""
    from assetforge.lifecycle.versioning import VersionTransitionService
    from assetforge.models.database import get_engine, get_session

    with _reported_errors(), get_session(get_engine()) as session:
        VersionTransitionService(session).supersede_version(asset_id)
        console.print(f"[green]Asset {asset_id} has been superseded.[/green]")


@app.command("refresh-maintenance")
def refresh_maintenance():
    """Re-derive maintenance status for every asset as of today."""
    from assetforge.maintenance.derivation import refresh_all_maintenance
    from assetforge.models.database import get_engine, get_session

    with get_session(get_engine()) as session:
        count = refresh_all_maintenance(session)
        console.print(
            f"[green]Updated maintenance status on {count} asset(s).[/green]"
        )


@app.command()
def report():
    """Print dashboard metrics and groupings."""
    from assetforge.analytics.charts import format_compact_currency
    from assetforge.analytics.dashboard_service import collect_dashboard
    from assetforge.models.database import get_engine, get_session_factory

    results = collect_dashboard(get_session_factory(get_engine()))

    metrics = results["metrics"]
    if metrics.ok:
        m = metrics.data
        active_pct = (
            round(m["active_assets"] / m["total_assets"] * 100)
            if m["total_assets"]
            else 0
        )
        console.print("\n[bold]Asset Dashboard[/bold]")
        console.print(f"  Date: {date.today()}")
        console.print(f"  Total assets: {m['total_assets']}")
        console.print(f"  Active assets: {m['active_assets']} ({active_pct}%)")
        console.print(f"  [red]Overdue maintenance: {m['overdue_assets']}[/red]")
        console.print(f"  Critical assets: {m['critical_assets']}")
        console.print(f"  Total value: {format_compact_currency(m['total_value'])}")

    for name in ("by_status", "by_version_status", "by_maintenance_status"):
        result = results[name]
        if not result.ok:
            continue
        table = Table(title=name.replace("_", " ").title())
        table.add_column("Category")
        table.add_column("Count", justify="right")
        for label, count in result.data.items():
            table.add_row(label, str(count))
        console.print(table)

    for name, result in results.items():
        if not result.ok:
            console.print(f"[red]{name}: {result.error.message}[/red]")


@app.command()
def serve(host: str = "0.0.0.0", port: int = 8000):
    """Start the FastAPI server."""
    import uvicorn

    uvicorn.run("assetforge.api.main:app", host=host, port=port, reload=True)


@app.command()
def dashboard(port: int = typer.Option(8501, "--port", "-p", help="Streamlit port")):
    """Start the Streamlit dashboard."""
    import subprocess
    import sys
    from pathlib import Path

    dashboard_path = Path(__file__).parent / "dashboard" / "app.py"
    subprocess.run(
        [
            sys.executable,
            "-m",
            "streamlit",
            "run",
            str(dashboard_path),
            f"--server.port={port}",
            "--server.headless=true",
        ],
        check=True,
    )


if __name__ == "__main__":
    app()
