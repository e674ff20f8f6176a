"""
Command-line interface for the XNB pipeline.
Converts PNG/GIF/JPEG images into XNB Texture2D containers.
"""

import sys
import os
import logging
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import ConverterConfig, DEFAULT_CONFIG_FILES, ENV_PREFIX
from .errors import UsageError, XnbPipelineError
from .pipeline import ConversionPipeline, PipelineState
from .processing.validator import XnbValidator

EXIT_USAGE = 1
EXIT_CONVERSION_FAILED = 2

app = typer.Typer(
    name="xnb-pipeline",
    help="Convert images into XNB Texture2D assets for XNA/MonoGame without the content pipeline",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]xnb-pipeline convert sprite.png[/cyan]                 Write sprite.xnb beside the source
  [cyan]xnb-pipeline convert sprites/ content/[/cyan]          Convert every .png in sprites/
  [cyan]xnb-pipeline convert sprite.png --hidef[/cyan]         Target the HiDef profile
  [cyan]xnb-pipeline inspect content/sprite.xnb[/cyan]         Check an existing container

[bold]Environment Variables:[/bold]
  Use [cyan]xnb-pipeline config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger("xnb_pipeline")


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Convert images into XNB Texture2D assets."""
    if ctx.invoked_subcommand is None:
        console.print("[red]Usage error:[/red] a command is required")
        console.print("Usage: xnb-pipeline convert INPUT [OUTPUT]  (see xnb-pipeline --help)", markup=False)
        raise typer.Exit(EXIT_USAGE)


def convert(
    input_path: Optional[Path] = typer.Argument(None, help="Image file or directory of images"),
    output_path: Optional[Path] = typer.Argument(
        None, help="Output file or directory (required when the input is a directory)"
    ),
    hidef: Optional[bool] = typer.Option(None, "--hidef/--reach", help="Target the HiDef or Reach profile"),
    compressed: Optional[bool] = typer.Option(
        None, "--compressed/--uncompressed", help="Request compressed output (not supported)"
    ),
    format_hint: Optional[str] = typer.Option(None, "--format", help="Decode inputs as this format (png, gif, jpeg)"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every conversion step"),
):
    """Convert an image, or a directory of images, into XNB files."""
    if input_path is None:
        console.print("[red]Usage error:[/red] an input file or directory is required")
        console.print("Usage: xnb-pipeline convert INPUT [OUTPUT]", markup=False)
        raise typer.Exit(EXIT_USAGE)

    try:
        config = _load_config(config_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(EXIT_USAGE)

    if hidef is not None:
        config.reach = not hidef
    if compressed is not None:
        config.compressed = compressed
    if format_hint:
        config.format_hint = format_hint
    if verbose:
        config.log_level = "DEBUG"

    errors = config.validate(check_compression=False)
    if errors:
        console.print("[red]Usage error:[/red] invalid configuration")
        for error in errors:
            console.print(f"  • {error}")
        raise typer.Exit(EXIT_USAGE)

    _configure_logging(config.log_level)
    pipeline = ConversionPipeline(config)

    try:
        state = pipeline.run(input_path, output_path)
    except UsageError as e:
        console.print(f"[red]Usage error:[/red] {e}")
        raise typer.Exit(EXIT_USAGE)
    except XnbPipelineError as e:
        logger.debug(f"Conversion of {e.path} failed", exc_info=True)
        console.print(f"[red]✗ Conversion failed:[/red] {e}")
        raise typer.Exit(EXIT_CONVERSION_FAILED)

    _display_summary(state, config)


app.command()(convert)

# png2xnb INPUT [OUTPUT]: convert as the only command
png2xnb_app = typer.Typer(
    name="png2xnb",
    help="Convert an image, or a directory of images, into XNB Texture2D files",
    add_completion=False,
    rich_markup_mode="rich",
)
png2xnb_app.command()(convert)


@app.command()
def inspect(
    xnb_file: Path = typer.Argument(..., help="XNB file to inspect"),
):
    """Validate an XNB texture and show its header fields."""
    result = XnbValidator().validate_file(xnb_file)

    if result.metadata:
        table = Table(title=f"XNB: {xnb_file.name}")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="green")
        for key, value in result.metadata.items():
            table.add_row(key.replace("_", " ").title(), str(value))
        console.print(table)

    for warning in result.warnings:
        console.print(f"[yellow]Warning:[/yellow] {warning}")

    if not result.is_valid:
        console.print("[red]✗ Invalid XNB file:[/red]")
        for error in result.errors:
            console.print(f"  • {error}")
        raise typer.Exit(EXIT_CONVERSION_FAILED)

    console.print("[green]✓ Valid XNB texture[/green]")


@app.command()
def config(
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate: bool = typer.Option(False, "--validate", help="Validate configuration"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage pipeline configuration."""
    if env_vars:
        _display_env_vars()
        return

    try:
        config = _load_config(config_file)
    except (OSError, ValueError) as e:
        console.print(f"[red]Error loading configuration:[/red] {e}")
        raise typer.Exit(EXIT_USAGE)

    if show:
        _display_config(config)

    if validate:
        errors = config.validate()
        if errors:
            console.print("[red]✗ Configuration validation failed:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            raise typer.Exit(EXIT_USAGE)
        console.print("[green]✓ Configuration is valid[/green]")

    if not show and not validate:
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")


@app.command()
def version():
    """Show version and dependency information."""
    console.print("[bold]XNB Pipeline[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])

    from importlib.metadata import PackageNotFoundError, version as package_version

    table = Table(show_header=False)
    table.add_column("Status", width=3)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")

    for name in ("Pillow", "numpy", "typer", "rich"):
        try:
            table.add_row("[green]✓[/green]", name, package_version(name))
        except PackageNotFoundError:
            table.add_row("[red]✗[/red]", name, "Not installed")

    console.print("\n[bold]Dependencies:[/bold]")
    console.print(table)


def _load_config(config_file: Optional[Path]) -> ConverterConfig:
    """Load configuration from file or use defaults, then apply environment overrides."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(EXIT_USAGE)
        config = ConverterConfig.from_file(config_file)
    else:
        for config_path in DEFAULT_CONFIG_FILES:
            if config_path.exists():
                config = ConverterConfig.from_file(config_path)
                break

        if config is None:
            config = ConverterConfig()

    return ConverterConfig._apply_env_overrides(config)


def _configure_logging(level: str) -> None:
    """Send pipeline log records to stderr through rich."""
    if not logger.handlers:
        handler = RichHandler(console=err_console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level.upper())


def _display_summary(state: PipelineState, config: ConverterConfig) -> None:
    if not state.results:
        console.print("[yellow]No files converted[/yellow]")
        return

    table = Table(title=f"Converted {state.files_converted} file(s) ({config.profile})")
    table.add_column("Source", style="cyan")
    table.add_column("Output", style="green")
    table.add_column("Size", justify="right")
    table.add_column("Bytes", justify="right")

    for result in state.results:
        table.add_row(
            str(result.source),
            str(result.destination),
            f"{result.width}×{result.height}",
            str(result.bytes_written),
        )

    console.print(table)


def _display_config(config: ConverterConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="XNB Pipeline Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Profile", config.profile)
    table.add_row("Compressed", str(config.compressed))
    table.add_row("Input Extensions", ", ".join(config.input_extensions))
    table.add_row("Format Hint", config.format_hint or "auto")
    table.add_row("Output Extension", config.output_extension)
    table.add_row("Zero Transparent RGB", str(config.zero_transparent_rgb))
    table.add_row("Log Level", config.log_level)

    console.print(table)

    env_vars_used = [key for key in os.environ if key.startswith(ENV_PREFIX)]
    if env_vars_used:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="XNB Pipeline Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    env_vars = [
        (f"{ENV_PREFIX}PROFILE", "Target profile (reach/hidef)", "hidef"),
        (f"{ENV_PREFIX}COMPRESSED", "Request compressed output (unsupported)", "false"),
        (f"{ENV_PREFIX}INPUT_EXTENSIONS", "Comma-separated extensions for directory input", ".png,.gif"),
        (f"{ENV_PREFIX}FORMAT_HINT", "Force the decoder format", "png"),
        (f"{ENV_PREFIX}OUTPUT_EXTENSION", "Extension of written files", ".xnb"),
        (f"{ENV_PREFIX}ZERO_TRANSPARENT_RGB", "Zero colour of transparent pixels (true/false)", "true"),
        (f"{ENV_PREFIX}LOG_LEVEL", "Logging level", "DEBUG"),
    ]

    for var_name, description, example in env_vars:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")


if __name__ == "__main__":
    app()
