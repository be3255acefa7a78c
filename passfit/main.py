"""
passfit - Passport Photo Sheet Maker
Command-line entry point

Usage:
    passfit standards
    passfit layout --standard uk --sheet a4
    passfit process input/photo.jpg --standard us --sheet 4x6 --output-dir outputs/
"""

import os
import sys
import time
import logging

import click

from .config import (
    REGISTRY, SHEET_SIZES, DEFAULT_SHEET, DEFAULT_MARGIN_MM, DEFAULT_GAP_MM,
    OUTPUT_BASE, PREVIEW_SCALE, BACKGROUND_PRESETS, get_standard, get_sheet_size,
)
from .errors import PassfitError
from .sheet import layout_for, export_filename
from .validation import format_report_text

logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable debug logging')
def cli(verbose: bool) -> None:
    """passfit - passport photo alignment and print sheets."""
    _configure_logging(verbose)


@cli.command()
def standards() -> None:
    """List available photo standards."""
    for key, s in REGISTRY:
        click.echo(
            f"{key:<10} {s.country:<28} {s.width_mm:g}x{s.height_mm:g}mm  "
            f"head {s.head_height_min:g}-{s.head_height_max:g}%  "
            f"eyes {s.eye_line_from_bottom:g}%  bg {s.background_color}"
        )


@cli.command()
def sheets() -> None:
    """List available sheet sizes."""
    for key, s in SHEET_SIZES:
        click.echo(f"{key:<8} {s.name:<12} {s.width_mm:g}x{s.height_mm:g}mm @ {s.dpi} DPI")


@cli.command()
@click.option('--standard', 'standard_id', required=True, help='Standard id (see `standards`)')
@click.option('--sheet', 'sheet_id', default=DEFAULT_SHEET, show_default=True, help='Sheet size id')
@click.option('--margin', type=float, default=DEFAULT_MARGIN_MM, show_default=True, help='Margin in mm')
@click.option('--gap', type=float, default=DEFAULT_GAP_MM, show_default=True, help='Gap in mm')
def layout(standard_id: str, sheet_id: str, margin: float, gap: float) -> None:
    """Show how many photos fit on a sheet and where they go."""
    try:
        standard = get_standard(standard_id)
        sheet = get_sheet_size(sheet_id)
        export = layout_for(standard, sheet, margin, gap)
        preview = layout_for(standard, sheet, margin, gap, scale=PREVIEW_SCALE)
    except PassfitError as e:
        raise click.ClickException(str(e))

    click.echo(f"{standard.country} ({standard.width_mm:g}x{standard.height_mm:g}mm) on {sheet.name}")
    click.echo(f"  Grid: {export.columns} x {export.rows} = {export.total} photos")
    click.echo(f"  Sheet: {export.sheet_width_px:g}x{export.sheet_height_px:g}px @ {sheet.dpi} DPI")
    click.echo(f"  Photo: {export.photo_width_px:g}x{export.photo_height_px:g}px")
    click.echo(f"  Margin / gap: {export.margin_px:g}px / {export.gap_px:g}px")
    click.echo(f"  Preview: {preview.sheet_width_px:g}x{preview.sheet_height_px:g}px")


@cli.command()
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False))
@click.option('--standard', 'standard_id', required=True, help='Standard id (see `standards`)')
@click.option('--sheet', 'sheet_id', default=DEFAULT_SHEET, show_default=True, help='Sheet size id')
@click.option('--background', default=None,
              help=f"Hex colour or preset ({', '.join(BACKGROUND_PRESETS)}); default: the standard's")
@click.option('--keep-background', is_flag=True, help='Do not replace the background')
@click.option('--output-dir', default=OUTPUT_BASE, show_default=True, type=click.Path(file_okay=False))
def process(input_path: str, standard_id: str, sheet_id: str, background: str,
            keep_background: bool, output_dir: str) -> None:
    """Detect, align, replace background and build a print sheet."""
    from .processor import PhotoProcessor

    if background is not None:
        background = BACKGROUND_PRESETS.get(background, background)

    processor = PhotoProcessor()
    try:
        result = processor.process(
            input_path, standard_id, sheet_id,
            background=background, replace_background=not keep_background,
        )
    except PassfitError as e:
        raise click.ClickException(str(e))
    finally:
        processor.close()

    click.echo(format_report_text(result.report, result.standard))

    os.makedirs(output_dir, exist_ok=True)
    dpi = result.sheet_size.dpi
    photo_path = os.path.join(output_dir, f"{result.standard.id}_photo.jpg")
    sheet_path = os.path.join(
        output_dir, export_filename(result.standard, result.sheet_size, int(time.time() * 1000)),
    )
    result.photo.save(photo_path, 'JPEG', quality=95, dpi=(dpi, dpi),
                      icc_profile=result.photo.info.get('icc_profile'))
    result.sheet.save(sheet_path, 'JPEG', quality=95, dpi=(dpi, dpi),
                      icc_profile=result.sheet.info.get('icc_profile'))

    click.echo("")
    click.echo(f"Photo saved: {photo_path}")
    click.echo(f"Sheet saved: {sheet_path} ({result.layout.total} photos, "
               f"{result.layout.columns}x{result.layout.rows})")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
