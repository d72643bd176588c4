"""
Command-line interface for the texture pipeline.
Exposes each texture operation on image files plus full texture preparation.
"""

import sys
import os
from pathlib import Path
from typing import Optional, Tuple
import typer
from rich.console import Console
from rich.table import Table

from .config import ProcessingConfig, ENV_VARS, ENV_PREFIX
from .buffer import ImageProcessingError, IndexedBuffer, Palette, PixelBuffer, RgbaBuffer
from .pipeline import TexturePipeline, TextureSettings, TextureResult, PipelineError
from .processing import (
    resize as resize_buffer, grayscale as grayscale_buffer, average_intensity,
    bump_map, normal_map, normal_map_rgb, sharpen as sharpen_buffer,
    dilate as dilate_buffer, wrap_border, clamp_border, add_border,
    tint as tint_buffer, MetalType,
)
from .utils.image import ImageUtils
from .utils.fonts import PilGlyphSource

# Initialize typer app and rich console
app = typer.Typer(
    name="texture-pipeline",
    help="Texture pipeline for palette-based game art - Resize, filter, border and pack textures",
    add_completion=False,
    rich_markup_mode="rich",
    epilog="""
[bold]Examples:[/bold]
  [cyan]texture-pipeline resize wall.png wall_2x.png -w 128 -h 128[/cyan]    Bicubic resize
  [cyan]texture-pipeline normals wall.png wall_n.png --strength 2[/cyan]     Packed normal map
  [cyan]texture-pipeline prepare floor.png out/ --border 4 --wrap[/cyan]     Tiling texture set
  [cyan]texture-pipeline font-atlas font.png --rects font.json[/cyan]       Glyph atlas

[bold]Environment Variables:[/bold]
  Use [cyan]texture-pipeline config --env-vars[/cyan] to see all available variables.
    """
)
console = Console()

METAL_NAMES = [metal.value for metal in MetalType]


class _OperationFailed(Exception):
    """Raised inside a command to report an expected failure."""


def _load_config(config_file: Optional[Path], quiet: bool = False) -> ProcessingConfig:
    """Load configuration from file or use defaults with environment variable support."""
    config = None

    if config_file:
        if not config_file.exists():
            console.print(f"[red]Configuration file not found:[/red] {config_file}")
            raise typer.Exit(1)
        config = ProcessingConfig.from_file(config_file)
        if not quiet:
            console.print(f"[dim]Using configuration: {config_file}[/dim]")
    else:
        # Try to find default config files
        default_configs = [
            Path("texture_pipeline.toml"),
            Path("texture_pipeline.json"),
            Path("scripts/texture_pipeline.toml"),
            Path("scripts/texture_pipeline.json")
        ]

        for config_path in default_configs:
            if config_path.exists():
                if not quiet:
                    console.print(f"[dim]Using configuration: {config_path}[/dim]")
                config = ProcessingConfig.from_file(config_path)
                break

        if config is None:
            config = ProcessingConfig()

    # Apply environment variable overrides
    config = ProcessingConfig._apply_env_overrides(config)

    env_vars_used = [key for key in os.environ if key.startswith(ENV_PREFIX)]
    if env_vars_used and not quiet:
        console.print(f"[dim]Environment overrides applied: {len(env_vars_used)} variables[/dim]")

    return config


def _load_rgba(input_path: Path) -> RgbaBuffer:
    if not input_path.exists():
        raise _OperationFailed(f"Input image not found: {input_path}")
    try:
        return ImageUtils.load_rgba(input_path)
    except ValueError as e:
        raise _OperationFailed(str(e)) from e


def _load_indexed(input_path: Path) -> Tuple[IndexedBuffer, Palette]:
    if not input_path.exists():
        raise _OperationFailed(f"Input image not found: {input_path}")
    try:
        return ImageUtils.load_indexed(input_path)
    except ValueError as e:
        raise _OperationFailed(str(e)) from e


def _save(buffer: PixelBuffer, output_path: Path, config: ProcessingConfig,
          palette: Optional[Palette] = None) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        written = ImageUtils.save_buffer(buffer, output_path, config.output_format, palette,
                                         compress_level=config.compression_level)
    except ValueError as e:
        raise _OperationFailed(str(e)) from e
    console.print(f"[green]✓[/green] Wrote {buffer.width}x{buffer.height} image to {written}")
    return written


def _fail(message: str, error: Exception) -> None:
    console.print(f"[red]{message}:[/red] {error}")
    raise typer.Exit(1)


def _run_rgba_operation(input_path: Path, output_path: Path, operation, label: str,
                        config: Optional[ProcessingConfig] = None) -> None:
    """Load an RGBA image, apply a copy-producing operation and save the result."""
    config = config or _load_config(None, quiet=True)
    try:
        source = _load_rgba(input_path)
        result = operation(source)
        _save(result, output_path, config)
    except (_OperationFailed, ImageProcessingError) as e:
        _fail(f"Error running {label}", e)


@app.command()
def resize(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image"),
    width: int = typer.Option(..., "--width", "-w", help="Target width in pixels"),
    height: int = typer.Option(..., "--height", "-h", help="Target height in pixels")
):
    """Resize an image with the cubic B-spline filter."""
    _run_rgba_operation(input_path, output_path, lambda buf: resize_buffer(buf, width, height), "resize")


@app.command()
def grayscale(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image")
):
    """Convert an image to luma-weighted grayscale."""
    _run_rgba_operation(input_path, output_path, grayscale_buffer, "grayscale")


@app.command()
def intensity(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image")
):
    """Convert an image to the plain average of its channels."""
    _run_rgba_operation(input_path, output_path, average_intensity, "intensity")


@app.command()
def bump(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image")
):
    """Build a Sobel bump map from an image."""
    _run_rgba_operation(input_path, output_path, bump_map, "bump map")


@app.command()
def normals(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image"),
    strength: Optional[float] = typer.Option(None, "--strength", "-s", help="Gradient strength (defaults to config)"),
    rgb: bool = typer.Option(False, "--rgb", help="Write standard xyz-in-rgb normals instead of the packed format"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Build a normal map from an image."""
    config = _load_config(config_file)
    if strength is None:
        strength = config.normal_strength
    operation = normal_map_rgb if rgb else normal_map
    _run_rgba_operation(input_path, output_path, lambda buf: operation(buf, strength), "normal map", config)


@app.command()
def sharpen(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image")
):
    """Sharpen an image with the fixed sharpen kernel."""
    _run_rgba_operation(input_path, output_path, sharpen_buffer, "sharpen")


@app.command()
def dilate(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image")
):
    """Bleed opaque colour one pixel into neighbouring transparent pixels."""
    def operation(buffer: RgbaBuffer) -> RgbaBuffer:
        dilate_buffer(buffer)
        return buffer

    _run_rgba_operation(input_path, output_path, operation, "dilate")


@app.command()
def wrap(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image"),
    border: int = typer.Option(..., "--border", "-b", help="Border width in pixels"),
    pad: bool = typer.Option(True, "--pad/--no-pad", help="Add the border around the image first"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Copy opposite edges into the border so the texture tiles."""
    config = _load_config(config_file)

    def operation(buffer: RgbaBuffer) -> RgbaBuffer:
        if pad:
            buffer = add_border(buffer, border)
        wrap_border(buffer, border, config.wrap_left_right, config.wrap_top_bottom)
        return buffer

    _run_rgba_operation(input_path, output_path, operation, "wrap", config)


@app.command()
def clamp(
    input_path: Path = typer.Argument(..., help="Source image"),
    output_path: Path = typer.Argument(..., help="Output image"),
    border: int = typer.Option(..., "--border", "-b", help="Border width in pixels"),
    pad: bool = typer.Option(True, "--pad/--no-pad", help="Add the border around the image first")
):
    """Stretch the edge pixels across the border."""
    def operation(buffer: RgbaBuffer) -> RgbaBuffer:
        if pad:
            buffer = add_border(buffer, border)
        clamp_border(buffer, border)
        return buffer

    _run_rgba_operation(input_path, output_path, operation, "clamp")


@app.command()
def tint(
    input_path: Path = typer.Argument(..., help="Palette (P mode) source image"),
    output_path: Path = typer.Argument(..., help="Output image"),
    metal: str = typer.Option(..., "--metal", "-m", help=f"Metal type: {', '.join(METAL_NAMES)}")
):
    """Remap the metal palette range of an indexed image."""
    if metal.lower() not in METAL_NAMES:
        console.print(f"[red]Unknown metal type:[/red] {metal}")
        raise typer.Exit(1)

    config = _load_config(None, quiet=True)
    try:
        indexed, palette = _load_indexed(input_path)
        tint_buffer(indexed, MetalType(metal.lower()))
        _save(indexed, output_path, config, palette)
    except (_OperationFailed, ImageProcessingError) as e:
        _fail("Error running tint", e)


@app.command("font-atlas")
def font_atlas(
    output_path: Path = typer.Argument(..., help="Output atlas PNG"),
    font: Optional[Path] = typer.Option(None, "--font", "-f", help="TrueType font (Pillow default font if omitted)"),
    font_size: int = typer.Option(12, "--size", "-s", help="Font size in points"),
    glyph_dimension: int = typer.Option(16, "--glyph-dimension", "-g", help="Square glyph cell size"),
    first_char: int = typer.Option(32, "--first-char", help="Code point of the first glyph"),
    glyph_count: int = typer.Option(224, "--count", "-n", help="Number of glyphs"),
    rects_path: Optional[Path] = typer.Option(None, "--rects", "-r", help="Write the glyph rect map as JSON"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Rasterise a font and pack its glyphs into an atlas."""
    console.print("[bold blue]Packing font atlas...[/bold blue]")
    config = _load_config(config_file)

    try:
        source = PilGlyphSource(font, font_size, glyph_dimension, first_char, glyph_count)
        pipeline = TexturePipeline(config)
        result = pipeline.prepare_font_atlas(source)
    except (FileNotFoundError, OSError, PipelineError) as e:
        _fail("Error packing font atlas", e)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    written = result.save_atlas(output_path)
    console.print(f"[green]✓[/green] Packed {len(result.rects)} glyphs into {written}")

    if rects_path:
        rects_path.parent.mkdir(parents=True, exist_ok=True)
        result.save_rect_map(rects_path)
        console.print(f"[green]✓[/green] Rect map written to {rects_path}")


@app.command()
def prepare(
    input_path: Path = typer.Argument(..., help="Palette (P mode) source image"),
    output_dir: Optional[Path] = typer.Argument(None, help="Output directory (defaults to config)"),
    border: Optional[int] = typer.Option(None, "--border", "-b", help="Border width (defaults to config)"),
    wrap_edges: bool = typer.Option(False, "--wrap", help="Copy opposite edges into the border"),
    dilate_edges: bool = typer.Option(False, "--dilate", help="Bleed colour into the border"),
    clamp_edges: bool = typer.Option(False, "--clamp", help="Stretch edge pixels into the border"),
    sharpen_image: bool = typer.Option(False, "--sharpen", help="Sharpen the albedo"),
    normal: bool = typer.Option(False, "--normal", help="Also write a normal map"),
    emission_index: int = typer.Option(-1, "--emission-index", help="Write an emission map for this palette index"),
    alpha_index: int = typer.Option(-1, "--alpha-index", help="Palette index made transparent"),
    metal: Optional[str] = typer.Option(None, "--metal", "-m", help="Metal tint applied before conversion"),
    width: Optional[int] = typer.Option(None, "--width", "-w", help="Resize to this width"),
    height: Optional[int] = typer.Option(None, "--height", "-h", help="Resize to this height"),
    flip_y: bool = typer.Option(False, "--flip-y", help="Emit rows bottom-up"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path")
):
    """Run the full texture preparation on an indexed image."""
    console.print("[bold blue]Preparing texture...[/bold blue]")
    config = _load_config(config_file)

    if metal is not None and metal.lower() not in METAL_NAMES:
        console.print(f"[red]Unknown metal type:[/red] {metal}")
        raise typer.Exit(1)
    if (width is None) != (height is None):
        console.print("[red]--width and --height must be given together[/red]")
        raise typer.Exit(1)

    settings = TextureSettings(
        alpha_index=alpha_index,
        emission_index=emission_index,
        border_size=config.border_size if border is None else border,
        copy_to_opposite_border=wrap_edges,
        dilate=dilate_edges,
        clamp=clamp_edges,
        sharpen=sharpen_image,
        create_normal_map=normal,
        create_emission_map=emission_index >= 0,
        metal_type=MetalType(metal.lower()) if metal else None,
        target_size=(width, height) if width is not None else None,
        flip_y=flip_y,
    )

    try:
        indexed, palette = _load_indexed(input_path)
        pipeline = TexturePipeline(config)
        result = pipeline.prepare_texture(indexed, palette, settings)

        output_dir = output_dir or Path(config.output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        stem = input_path.stem
        _save(result.albedo, output_dir / f"{stem}.png", config)
        if result.normal is not None:
            _save(result.normal, output_dir / f"{stem}_normal.png", config)
        if result.emission is not None:
            _save(result.emission, output_dir / f"{stem}_emission.png", config)
    except (_OperationFailed, PipelineError) as e:
        _fail("Error preparing texture", e)

    _display_texture_summary(result)


@app.command()
def config(
    show: bool = typer.Option(False, "--show", help="Show current configuration"),
    validate_config: bool = typer.Option(False, "--validate", help="Validate configuration file"),
    config_file: Optional[Path] = typer.Option(None, "--config", "-c", help="Configuration file path"),
    env_vars: bool = typer.Option(False, "--env-vars", help="Show available environment variables")
):
    """Manage pipeline configuration."""
    if env_vars:
        _display_env_vars()
        return

    if not (show or validate_config):
        console.print("Use --show to display configuration, --validate to check it, or --env-vars to see environment variables.")
        return

    try:
        config = _load_config(config_file)
    except (ValueError, OSError) as e:
        _fail("Error loading configuration", e)

    if show:
        _display_config(config)

    if validate_config:
        errors = config.validate()
        if errors:
            console.print("[red]Configuration validation errors:[/red]")
            for error in errors:
                console.print(f"  • {error}")
            raise typer.Exit(1)
        console.print("[green]✓ Configuration is valid[/green]")


@app.command()
def version():
    """Show texture pipeline version information."""
    from . import __version__

    console.print("[bold]Texture Pipeline[/bold]")
    console.print(f"Version: {__version__}")
    console.print("Python: " + sys.version.split()[0])

    import PIL
    import numpy
    import rich
    from importlib.metadata import version as package_version

    deps_status = [
        ("Pillow", PIL.__version__),
        ("NumPy", numpy.__version__),
        ("Typer", typer.__version__),
        ("Rich", package_version("rich")),
    ]

    console.print("\n[bold]Dependencies:[/bold]")
    table = Table(show_header=False)
    table.add_column("Status", width=3)
    table.add_column("Package", style="cyan")
    table.add_column("Version", style="green")

    for name, dep_version in deps_status:
        table.add_row("[green]✓[/green]", name, dep_version)

    console.print(table)


def _display_texture_summary(result: TextureResult) -> None:
    """Display texture preparation summary."""
    console.print("\n[bold]Texture Preparation Summary[/bold]")

    table = Table(show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    rect = result.single_rect
    table.add_row("Albedo size", f"{result.albedo.width}×{result.albedo.height}")
    table.add_row("Normal map", "yes" if result.normal is not None else "no")
    table.add_row("Emission map", "yes" if result.emission is not None else "no")
    table.add_row("Image rect", f"x={rect.x:.4f} y={rect.y:.4f} w={rect.width:.4f} h={rect.height:.4f}")
    table.add_row("Total time", f"{sum(step.duration for step in result.steps):.3f}s")
    console.print(table)

    step_table = Table()
    step_table.add_column("Step", style="cyan")
    step_table.add_column("Status", width=8)
    step_table.add_column("Duration", style="yellow")

    for step in result.steps:
        status = "[green]✓[/green]" if step.success else "[red]✗[/red]"
        step_table.add_row(step.step.value, status, f"{step.duration * 1000:.1f}ms")

    console.print(step_table)


def _display_config(config: ProcessingConfig) -> None:
    """Display configuration in a formatted table."""
    table = Table(title="Texture Pipeline Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    # Normal maps
    table.add_row("Normal Strength", str(config.normal_strength))

    # Borders
    table.add_row("Border Size", str(config.border_size))
    table.add_row("Wrap Left/Right", str(config.wrap_left_right))
    table.add_row("Wrap Top/Bottom", str(config.wrap_top_bottom))

    # Font atlas
    table.add_row("Atlas Size", f"{config.atlas_size}×{config.atlas_size}")
    table.add_row("Glyph Back Color", ",".join(str(c) for c in config.glyph_back_color))
    table.add_row("Glyph Text Color", ",".join(str(c) for c in config.glyph_text_color))

    # Output settings
    table.add_row("Output Format", config.output_format)
    table.add_row("Compression Level", str(config.compression_level))
    table.add_row("Output Directory", config.output_dir)
    table.add_row("Log Level", config.log_level)

    console.print(table)


def _display_env_vars() -> None:
    """Display available environment variables for configuration."""
    table = Table(title="Texture Pipeline Environment Variables")
    table.add_column("Environment Variable", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Example", style="green")

    for var_name, description, example in ENV_VARS:
        table.add_row(var_name, description, example)

    console.print(table)
    console.print("\n[dim]Set these environment variables to override configuration file settings.[/dim]")
    console.print(f"[dim]Example: export {ENV_PREFIX}BORDER_SIZE=4[/dim]")


if __name__ == "__main__":
    app()
