"""Command-line interface for the Agent Execution Engine."""

import asyncio
import logging
import signal
from pathlib import Path
from uuid import uuid4

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from agent_execution_engine.application.factories import ModelRegistry
from agent_execution_engine.application.services import (
    AgentRequestProcessor,
    LoopOptions,
    RequestRouter,
)
from agent_execution_engine.config import settings
from agent_execution_engine.domain.cancellation import CancellationToken
from agent_execution_engine.domain.exceptions import AgentEngineError
from agent_execution_engine.domain.interfaces import IProgressSink
from agent_execution_engine.domain.models import ConversationThread, ProgressEvent
from agent_execution_engine.infrastructure.repositories import FileThreadRepository

# Initialize Typer app
app = typer.Typer(
    name="agent_execution_engine",
    help="Agent Execution Engine CLI - routed, bounded dialogues with local models",
    add_completion=False,
)

# Rich console for pretty output
console = Console()

logger = logging.getLogger(__name__)


class ConsoleProgressSink(IProgressSink):
    """Prints progress events to the console."""

    async def send(self, session_id: str, event: ProgressEvent) -> None:
        color = "green" if event.progress_percentage == 100 else "cyan"
        console.print(f"[{color}]{event.stage}[/{color}] [dim]{event.progress_percentage}%[/dim]")
        if event.progress_percentage < 100:
            console.print(f"  {event.message}", markup=False)


@app.callback()
def main() -> None:
    """Load environment variables from .env before any command runs."""
    load_dotenv()
    settings.reload()


def _cancel_on_interrupt(cancellation: CancellationToken) -> None:
    """Turn Ctrl-C into a cooperative cancellation of the running request."""
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, cancellation.cancel)
    except (NotImplementedError, RuntimeError):
        # Loops without signal support, or outside the main thread, keep KeyboardInterrupt
        logger.debug("SIGINT handler not supported by this event loop")


def _load_registry(models_file: Path | None) -> ModelRegistry:
    path = models_file or settings.models.models_file
    if path is None:
        console.print("[red]No model registry file. Pass --models-file or set MODELS_MODELS_FILE.[/red]")
        raise typer.Exit(1)
    try:
        return ModelRegistry.from_file(path, models_dir=settings.models.models_dir)
    except AgentEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command()
def info():
    """Display engine information."""
    table = Table(title="Agent Execution Engine Info")

    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.app.environment.value)
    table.add_row("Log Level", settings.app.log_level)
    table.add_row("Max Iterations", str(settings.engine.max_iterations))
    table.add_row("Completion Marker", settings.engine.completion_marker)
    table.add_row("Streaming", str(settings.engine.use_streaming))
    table.add_row("Models File", str(settings.models.models_file or "-"))

    console.print(table)


@app.command()
def models(
    models_file: Path | None = typer.Option(None, "--models-file", "-m", help="JSON model registry file"),
):
    """List registered models and the categories routed to them."""
    registry = _load_registry(models_file)
    categories: dict[str, list[str]] = {}
    for category, model_name in settings.models.category_models.items():
        categories.setdefault(model_name, []).append(category)

    table = Table(title="Registered Models")
    table.add_column("Model", style="cyan")
    table.add_column("Path", style="green")
    table.add_column("Context", style="yellow")
    table.add_column("Categories", style="magenta")

    for name in registry.names:
        config = registry.get_config(name)
        table.add_row(
            name,
            config.model_path,
            str(config.context_size or "model default"),
            ", ".join(sorted(categories.get(name, []))) or "-",
        )

    console.print(table)


@app.command()
def route(
    request: str = typer.Argument(..., help='Raw request: "turn#context#category"'),
    models_file: Path | None = typer.Option(None, "--models-file", "-m", help="JSON model registry file"),
):
    """Show how a raw request is routed without running it."""
    registry = _load_registry(models_file)
    try:
        router = RequestRouter(
            registry,
            category_models=settings.models.category_models,
            delimiter=settings.engine.request_delimiter,
        )
        routed = router.route(request)
    except AgentEngineError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[cyan]Category:[/cyan] {routed.category}")
    console.print(f"[cyan]Model:[/cyan] {routed.model_config.name}")
    console.print(f"[cyan]Dialogue turn:[/cyan] {routed.dialogue_turn}")
    console.print("[cyan]System message:[/cyan]")
    console.print(routed.system_message, markup=False)


@app.command()
def run(
    request: str = typer.Argument(..., help='Raw request: "turn#context#category"'),
    models_file: Path | None = typer.Option(None, "--models-file", "-m", help="JSON model registry file"),
    thread_id: str | None = typer.Option(None, "--thread", "-t", help="Continue a saved conversation"),
    save: bool = typer.Option(False, "--save", help="Save the conversation thread"),
    storage_dir: Path = typer.Option(Path("conversations"), help="Directory of saved threads"),
    max_iterations: int | None = typer.Option(None, min=1, help="Override the iteration cap"),
):
    """Route a request and run the conversation loop on a local model."""
    registry = _load_registry(models_file)
    options = LoopOptions.from_settings()
    if max_iterations is not None:
        options = options.model_copy(update={"max_iterations": max_iterations})

    async def run_request():
        cancellation = CancellationToken()
        _cancel_on_interrupt(cancellation)
        repository = FileThreadRepository(storage_dir)
        thread = ConversationThread()
        if thread_id:
            loaded = await repository.load_thread(thread_id)
            if loaded is None:
                console.print(f"[red]Thread {thread_id} not found[/red]")
                raise typer.Exit(1)
            thread = loaded

        processor = AgentRequestProcessor(
            registry,
            router=RequestRouter(
                registry,
                category_models=settings.models.category_models,
                delimiter=settings.engine.request_delimiter,
            ),
            progress_sink=ConsoleProgressSink(),
            options=options,
        )
        result = await processor.process(request, session_id=str(uuid4()), cancellation=cancellation, thread=thread)
        if save:
            await repository.save_thread(thread)
        return result, thread

    try:
        result, thread = asyncio.run(run_request())
    except (AgentEngineError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if result.success:
        console.print("[green]Answer:[/green]")
        console.print(result.final_answer, markup=False)
    elif result.cancelled:
        console.print("[yellow]Cancelled[/yellow]")
    else:
        console.print(f"[red]Failed:[/red] {result.error_message}")

    usage = f" | Tokens: {result.usage.total_tokens}" if result.usage and result.usage.total_tokens else ""
    saved = " (saved)" if save else ""
    console.print(
        f"[dim]Iterations: {result.iterations} | Steps: {len(result.steps)}{usage}"
        f" | Thread: {thread.thread_id}{saved}[/dim]"
    )

    if not result.success:
        raise typer.Exit(1)


@app.command()
def show_thread(
    thread_id: str = typer.Argument(..., help="Thread ID to display"),
    storage_dir: Path = typer.Option(Path("conversations"), help="Directory of saved threads"),
):
    """Show the messages of a saved conversation thread."""

    async def load():
        return await FileThreadRepository(storage_dir).load_thread(thread_id)

    try:
        thread = asyncio.run(load())
    except (AgentEngineError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    if thread is None:
        console.print(f"[red]Thread {thread_id} not found[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]Thread: {thread.thread_id}[/bold] ({len(thread)} messages)")
    role_colors = {"system": "magenta", "user": "blue", "assistant": "green", "tool": "yellow"}
    for i, message in enumerate(thread.messages, 1):
        color = role_colors.get(message.role.value, "white")
        console.print(f"\n[{color}]{i}. {message.role.value}:[/{color}]")
        console.print(f"   {message.text}", markup=False)


@app.command()
def config():
    """Display current configuration."""
    table = Table(title="Configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Key", style="yellow")
    table.add_column("Value", style="green")

    for section, values in (
        ("app", settings.app.model_dump()),
        ("engine", settings.engine.model_dump()),
        ("models", settings.models.model_dump()),
    ):
        for key, value in values.items():
            table.add_row(section, key, str(value))

    console.print(table)


if __name__ == "__main__":
    app()
