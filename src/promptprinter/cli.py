"""CLI entry point for Prompt Printer."""

import asyncio
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from promptprinter import __version__
from promptprinter.config import ConfigManager
from promptprinter.llm.providers import create_backend
from promptprinter.models.config import AIBackend
from promptprinter.services.storage import create_store
from promptprinter.services.workflow import WorkflowController
from promptprinter.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def load_config(config_path: Optional[Path] = None) -> ConfigManager:
    """
    Load configuration from ``config_path`` or ~/.config/promptprinter/config.yaml.

    Without an explicit path a missing file falls back to built-in defaults
    (Gemini backend, local JSON file store).

    Returns:
        ConfigManager instance

    Raises:
        click.ClickException: If config is missing, has invalid permissions, or validation fails
    """
    try:
        if config_path is not None:
            return ConfigManager.load_from_path(config_path)
        return ConfigManager.load_default()
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except PermissionError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.ClickException(str(e))


def build_controller(
    config_mgr: ConfigManager,
    backend: Optional[AIBackend] = None,
) -> WorkflowController:
    """
    Wire the AI backend and storage collaborator into a WorkflowController.

    Args:
        config_mgr: Loaded configuration
        backend: Override for the configured AI backend

    Raises:
        click.ClickException: If the selected backend or store cannot be built
    """
    ai_config = config_mgr.ai
    kind = backend or ai_config.backend

    try:
        model_backend = create_backend(ai_config, kind)
        store = create_store(config_mgr.storage)
    except ValueError as e:
        logger.error("controller_setup_failed", error=str(e))
        raise click.ClickException(str(e))

    logger.info("controller_ready", backend=kind.value, store=store.name)
    return WorkflowController(
        backend=model_backend,
        store=store,
        backend_kind=kind,
        backend_factory=lambda selected: create_backend(ai_config, selected),
    )


@click.group()
@click.version_option(version=__version__, prog_name="promptprinter")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.config/promptprinter/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]):
    """Prompt Printer: draft prompts, optimize them with AI, and keep every version."""
    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


BACKEND_CHOICE = click.Choice([b.value for b in AIBackend])


@cli.command()
@click.option("--backend", type=BACKEND_CHOICE, default=None, help="AI backend to start with")
@click.pass_context
def tui(ctx: click.Context, backend: Optional[str]):
    """
    Open the interactive prompt editor.

    Examples:
        promptprinter tui
        promptprinter tui --backend openai_compat
    """
    from promptprinter.tui.app import PromptPrinterApp

    config_mgr = load_config(ctx.obj["config_path"])
    controller = build_controller(config_mgr, AIBackend(backend) if backend else None)

    logger.info("launching_tui", backend=controller.state.backend.value)
    PromptPrinterApp(controller).run()
    logger.info("tui_command_completed")


@cli.command()
@click.option("--backend", type=BACKEND_CHOICE, default=None, help="AI backend to probe")
@click.pass_context
def check(ctx: click.Context, backend: Optional[str]):
    """Probe storage and AI backend connectivity.

    Exits with status 1 if either probe fails.
    """
    config_mgr = load_config(ctx.obj["config_path"])
    controller = build_controller(config_mgr, AIBackend(backend) if backend else None)

    failures = asyncio.run(controller.check_connections())
    state = controller.state

    def show(label: str, ok: bool) -> None:
        marker = "[green]✓[/green]" if ok else "[red]✗[/red]"
        console.print(f"{marker} {label}: {'online' if ok else 'offline'}")

    show(f"Storage ({controller.store.name})", state.db_connected)
    show(f"AI ({state.backend.value})", state.ai_connected)

    if failures:
        ctx.exit(1)


@cli.command()
@click.pass_context
def schema(ctx: click.Context):
    """Print the storage setup description (SQL for Supabase)."""
    config_mgr = load_config(ctx.obj["config_path"])
    try:
        store = create_store(config_mgr.storage)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(store.get_schema_description())


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
