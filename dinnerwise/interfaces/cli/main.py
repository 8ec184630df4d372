"""
CLI Main - Typer-based command-line interface.

Usage:
    dinnerwise suggest chicken rice broccoli --preferences "low carb" --plan pro
    dinnerwise plans
    dinnerwise serve
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from dinnerwise.domains.inference import Plan

app = typer.Typer(
    name="dinnerwise",
    help="Dinnerwise - AI recipe suggestions from your pantry",
    add_completion=False,
)
console = Console()


@app.command()
def suggest(
    ingredients: list[str] = typer.Argument(None, help="Ingredients on hand"),
    preferences: str = typer.Option("", "--preferences", "-p", help="Dietary preferences"),
    plan: Plan = typer.Option(Plan.FREE, "--plan", help="Subscription plan"),
    tenant: str = typer.Option("cli", "--tenant", "-t", help="Tenant billed for usage"),
) -> None:
    """Suggest recipes for the given ingredients."""
    asyncio.run(_suggest_async(ingredients or [], preferences, plan, tenant))


async def _suggest_async(
    ingredients: list[str],
    preferences: str,
    plan: Plan,
    tenant: str,
) -> None:
    """Async suggestion implementation."""
    from dinnerwise.adapters import InMemoryUsageLedger, OpenAIConfig, OpenAITransport
    from dinnerwise.config import DinnerwiseError, configure_logging, get_settings
    from dinnerwise.domains.inference import InferenceOrchestrator, InferenceRequest

    settings = get_settings()
    configure_logging(settings.log_level)

    transport = OpenAITransport(
        OpenAIConfig(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            temperature=settings.openai_temperature,
            max_tokens=settings.openai_max_tokens,
        )
    )
    ledger = InMemoryUsageLedger()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        progress.add_task("Asking the chef...", total=None)

        try:
            orchestrator = InferenceOrchestrator.from_settings(settings, transport, ledger)
            result = await orchestrator.resolve(
                InferenceRequest(
                    ingredients=ingredients,
                    preferences=preferences,
                    tenant_id=tenant,
                    plan=plan,
                )
            )
        except DinnerwiseError as e:
            console.print(f"[red]Error:[/red] {e.message}")
            for failure in getattr(e, "failures", []):
                console.print(
                    f"  [dim]{failure.model.value}: {failure.kind.value} "
                    f"after {failure.attempts} attempt(s) - {failure.reason}[/dim]"
                )
            raise typer.Exit(1)
        finally:
            await transport.aclose()

    for recipe in result.recipes:
        body = [
            f"[bold]Cook time:[/bold] {recipe.cook_time}",
            f"[bold]Calories:[/bold] {recipe.calories}",
        ]
        if recipe.difficulty:
            body.append(f"[bold]Difficulty:[/bold] {recipe.difficulty}")
        body.append("\n[bold]Ingredients:[/bold]")
        body.extend(f"  - {i}" for i in recipe.ingredients)
        body.append("\n[bold]Steps:[/bold]")
        body.extend(f"  {n}. {s}" for n, s in enumerate(recipe.steps, 1))
        console.print(Panel("\n".join(body), title=recipe.title))

    console.print(
        f"\n[dim]Model: {result.model_used.value}  Tokens: {result.tokens_consumed}  "
        f"Cost: ${result.cost_usd}  Latency: {result.latency_ms:.0f}ms[/dim]"
    )


@app.command()
def plans() -> None:
    """Show the model tier and rates for each plan."""
    from dinnerwise.config import get_settings
    from dinnerwise.domains.inference import ModelSelector

    settings = get_settings()
    selector = ModelSelector(settings.plan_tiers)

    table = Table(title="Plan Model Tiers")
    table.add_column("Plan", style="cyan")
    table.add_column("Models (fallback order)", style="green")
    table.add_column("USD / 1K tokens", style="yellow")

    for plan, models in selector.tiers.items():
        table.add_row(
            plan.value,
            " -> ".join(m.value for m in models),
            ", ".join(str(settings.model_rates.get(m, "?")) for m in models),
        )

    console.print(table)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    from dinnerwise.config import configure_logging, get_settings

    configure_logging(get_settings().log_level)

    console.print("\n[green]Starting Dinnerwise API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "dinnerwise.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


if __name__ == "__main__":
    app()
