"""
unified-inference-sglang - SGLang backend command line.

Probe the SGLang installation, preview the server command line, or serve
a registered model bundle.
"""
import asyncio
import shlex
from typing import List, Optional

import typer
import yaml
from rich.console import Console

from unified_inference import __version__
from unified_inference.backends import BackendConfiguration, BackendMode, SGLangBackend, SGLangConfig
from unified_inference.config.models import ModelRegistry
from unified_inference.config.settings import settings
from unified_inference.errors import BackendError
from unified_inference.log import configure_logging

app = typer.Typer(
    name="unified-inference-sglang",
    help="SGLang backend for unified-inference",
    add_completion=False
)
console = Console()


def _fail(error: BackendError):
    detail = error.to_detail()
    console.print(f"[red]Error ({detail.code}):[/red] {detail.message}")
    if detail.hint:
        console.print(f"[dim]{detail.hint}[/dim]")
    raise typer.Exit(code=1)


def _load_registry(models_config: Optional[str]) -> ModelRegistry:
    path = models_config or settings.models_config_path
    try:
        return ModelRegistry(path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        console.print(f"[red]Error:[/red] could not load model registry {path}: {e}", highlight=False, soft_wrap=True)
        raise typer.Exit(code=1)


def _backend(models_config: Optional[str] = None, sglang_dir: Optional[str] = None) -> SGLangBackend:
    registry = _load_registry(models_config)
    return SGLangBackend(registry, sglang_dir=sglang_dir)


def _backend_config(context_size: Optional[int], flags: Optional[List[str]]) -> Optional[BackendConfiguration]:
    if context_size is None and not flags:
        return None
    return BackendConfiguration(context_size=context_size, runtime_flags=flags or [])


@app.command()
def probe(
    sglang_dir: Optional[str] = typer.Option(None, "--sglang-dir", help="Prebuilt installation directory")
):
    """
    Detect the SGLang installation and show its status.
    """
    backend = SGLangBackend(model_manager=None, sglang_dir=sglang_dir)
    try:
        asyncio.run(backend.install())
    except BackendError as e:
        console.print(f"Status: {backend.status}")
        _fail(e)

    console.print(f"[green]Status:[/green] {backend.status}")
    console.print(f"Topology: {backend.topology.value}")
    if backend.python_path:
        console.print(f"Interpreter: {backend.python_path}")


@app.command("args")
def show_args(
    model: str = typer.Argument(..., help="Registered model name"),
    socket: str = typer.Option("127.0.0.1", "--socket", "-s", help="Address the server binds to"),
    mode: BackendMode = typer.Option(BackendMode.COMPLETION, "--mode", "-m", help="Serving mode"),
    context_size: Optional[int] = typer.Option(None, "--context-size", "-c", help="Context length override"),
    flag: Optional[List[str]] = typer.Option(None, "--flag", "-f", help="Raw flag passed through to SGLang"),
    models_config: Optional[str] = typer.Option(None, "--models-config", help="Model registry YAML")
):
    """
    Print the SGLang server arguments for a model without starting it.
    """
    registry = _load_registry(models_config)
    try:
        bundle = registry.get_bundle(model)
        tokens = SGLangConfig().get_args(bundle, socket, mode, _backend_config(context_size, flag))
    except BackendError as e:
        _fail(e)

    console.print(shlex.join(tokens), markup=False, highlight=False, soft_wrap=True)


@app.command()
def serve(
    model: str = typer.Argument(..., help="Registered model name"),
    socket: str = typer.Option(..., "--socket", "-s", help="Address the server binds to"),
    model_ref: Optional[str] = typer.Option(None, "--model-ref", help="Model reference (defaults to the name)"),
    mode: BackendMode = typer.Option(BackendMode.COMPLETION, "--mode", "-m", help="Serving mode"),
    context_size: Optional[int] = typer.Option(None, "--context-size", "-c", help="Context length override"),
    flag: Optional[List[str]] = typer.Option(None, "--flag", "-f", help="Raw flag passed through to SGLang"),
    models_config: Optional[str] = typer.Option(None, "--models-config", help="Model registry YAML"),
    sglang_dir: Optional[str] = typer.Option(None, "--sglang-dir", help="Prebuilt installation directory")
):
    """
    Install-check SGLang and serve a model until interrupted.
    """
    configure_logging(settings.log_level)
    backend = _backend(models_config, sglang_dir)

    async def _serve():
        await backend.install()
        console.print(f"[green]{backend.status}[/green]")
        await backend.run(socket, model, model_ref or model, mode, _backend_config(context_size, flag))

    try:
        asyncio.run(_serve())
    except BackendError as e:
        _fail(e)
    except KeyboardInterrupt:
        console.print("[dim]Stopped[/dim]")


@app.command("disk-usage")
def disk_usage(
    sglang_dir: Optional[str] = typer.Option(None, "--sglang-dir", help="Prebuilt installation directory")
):
    """
    Show bytes used by the prebuilt SGLang installation.
    """
    backend = SGLangBackend(model_manager=None, sglang_dir=sglang_dir)
    try:
        console.print(backend.get_disk_usage())
    except BackendError as e:
        _fail(e)


@app.command()
def version():
    """Show version information."""
    console.print(f"unified-inference-sglang v{__version__}")


def main():
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
