"""
Print sheet layout and creation module
"""

import math
import logging
from dataclasses import dataclass
from typing import List, Tuple

from PIL import Image, ImageDraw

from .config import (
    Standard, SheetSize,
    DEFAULT_MARGIN_MM, DEFAULT_GAP_MM, PREVIEW_SCALE, GUIDE_LENGTH,
)
from .errors import InvalidArgument
from .utils import SRGB_ICC_BYTES, mm_to_pixels

logger = logging.getLogger(__name__)

SHEET_BACKGROUND = 'white'
CELL_BORDER_COLOR = '#E5E5E5'
GUIDE_COLOR = '#CCCCCC'


@dataclass(frozen=True)
class CutGuide:
    """L-shaped tick at a cell's top-left corner: start -> corner -> end."""
    start: Tuple[float, float]
    corner: Tuple[float, float]
    end: Tuple[float, float]

    @property
    def points(self) -> List[Tuple[float, float]]:
        return [self.start, self.corner, self.end]


@dataclass(frozen=True)
class SheetLayout:
    """Grid geometry of a sheet at one scale (preview or export)."""
    columns: int
    rows: int
    total: int
    margin_px: float
    gap_px: float
    photo_width_px: float
    photo_height_px: float
    sheet_width_px: float
    sheet_height_px: float
    scale: float = 1.0
    guide_length_px: float = GUIDE_LENGTH

    def cell_positions(self) -> List[Tuple[float, float]]:
        """Top-left corner of every cell, row by row."""
        return [
            (self.margin_px + col * (self.photo_width_px + self.gap_px),
             self.margin_px + row * (self.photo_height_px + self.gap_px))
            for row in range(self.rows)
            for col in range(self.columns)
        ]

    def cut_guides(self) -> List[CutGuide]:
        length = self.guide_length_px
        return [
            CutGuide(start=(x, y - length), corner=(x, y), end=(x - length, y))
            for (x, y) in self.cell_positions()
        ]


def _check_lengths(photo_width_mm: float, photo_height_mm: float,
                   margin_mm: float, gap_mm: float) -> None:
    if not (math.isfinite(photo_width_mm) and math.isfinite(photo_height_mm)) \
            or photo_width_mm <= 0 or photo_height_mm <= 0:
        raise InvalidArgument(f"Photo size must be positive, got {photo_width_mm}x{photo_height_mm}mm")
    if not (math.isfinite(margin_mm) and math.isfinite(gap_mm)) or margin_mm < 0 or gap_mm < 0:
        raise InvalidArgument(f"Margin and gap must be non-negative, got {margin_mm}mm / {gap_mm}mm")


def calculate_photos_per_sheet(
    photo_width_mm: float,
    photo_height_mm: float,
    sheet: SheetSize,
    margin_mm: float = DEFAULT_MARGIN_MM,
    gap_mm: float = DEFAULT_GAP_MM,
) -> Tuple[int, int, int]:
    """Return (columns, rows, total) that fit on the sheet.

    The last column/row needs no trailing gap, hence the +gap in the
    numerator. Counts never go below zero.
    """
    _check_lengths(photo_width_mm, photo_height_mm, margin_mm, gap_mm)
    usable_width = sheet.width_mm - 2 * margin_mm
    usable_height = sheet.height_mm - 2 * margin_mm

    columns = max(0, math.floor((usable_width + gap_mm) / (photo_width_mm + gap_mm)))
    rows = max(0, math.floor((usable_height + gap_mm) / (photo_height_mm + gap_mm)))
    return columns, rows, columns * rows


def compute_layout(
    photo_width_mm: float,
    photo_height_mm: float,
    sheet: SheetSize,
    margin_mm: float = DEFAULT_MARGIN_MM,
    gap_mm: float = DEFAULT_GAP_MM,
    scale: float = 1.0,
) -> SheetLayout:
    """Compute the sheet grid in pixels at the sheet's DPI times scale.

    Raises:
        InvalidArgument: For non-positive photo size, negative margin/gap or scale <= 0.
    """
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidArgument(f"Scale must be positive, got {scale}")
    columns, rows, total = calculate_photos_per_sheet(
        photo_width_mm, photo_height_mm, sheet, margin_mm, gap_mm,
    )
    dpi = sheet.dpi
    return SheetLayout(
        columns=columns,
        rows=rows,
        total=total,
        margin_px=mm_to_pixels(margin_mm, dpi) * scale,
        gap_px=mm_to_pixels(gap_mm, dpi) * scale,
        photo_width_px=mm_to_pixels(photo_width_mm, dpi) * scale,
        photo_height_px=mm_to_pixels(photo_height_mm, dpi) * scale,
        sheet_width_px=mm_to_pixels(sheet.width_mm, dpi) * scale,
        sheet_height_px=mm_to_pixels(sheet.height_mm, dpi) * scale,
        scale=scale,
        guide_length_px=GUIDE_LENGTH * scale,
    )


def layout_for(
    standard: Standard,
    sheet: SheetSize,
    margin_mm: float = DEFAULT_MARGIN_MM,
    gap_mm: float = DEFAULT_GAP_MM,
    scale: float = 1.0,
) -> SheetLayout:
    return compute_layout(standard.width_mm, standard.height_mm, sheet, margin_mm, gap_mm, scale)


def export_filename(standard: Standard, sheet: SheetSize, timestamp: int) -> str:
    return f"passport-photos-{standard.country_code}-{sheet.id}-{timestamp}.jpg"


class SheetGenerator:
    """Generates printable photo sheets for any Standard / SheetSize pair."""

    def __init__(self, margin_mm: float = DEFAULT_MARGIN_MM, gap_mm: float = DEFAULT_GAP_MM):
        self._margin_mm = margin_mm
        self._gap_mm = gap_mm

    def create_sheet(
        self,
        photo: Image.Image,
        standard: Standard,
        sheet: SheetSize,
        scale: float = 1.0,
    ) -> Image.Image:
        """Tile the photo over the sheet and add cut guides.

        Args:
            photo: The cropped passport photo (any size; resized per cell).
            standard: Standard giving the physical photo size.
            sheet: Target sheet size and DPI.
            scale: 1.0 for full-DPI export, <1 for a preview.

        Returns:
            PIL Image of the sheet.
        """
        layout = layout_for(standard, sheet, self._margin_mm, self._gap_mm, scale)
        preview = scale < 1

        sheet_size = (int(round(layout.sheet_width_px)), int(round(layout.sheet_height_px)))
        cell_size = (max(1, int(round(layout.photo_width_px))), max(1, int(round(layout.photo_height_px))))

        logger.info(
            f"Creating {sheet.name} sheet for {standard.country}: "
            f"{layout.columns}x{layout.rows} = {layout.total} photos, "
            f"{sheet_size[0]}x{sheet_size[1]}px (scale {scale})"
        )
        if layout.total == 0:
            logger.warning(f"{standard.width_mm}x{standard.height_mm}mm photo does not fit on {sheet.name}")

        canvas = Image.new('RGB', sheet_size, SHEET_BACKGROUND)
        cell = photo.convert('RGB').resize(cell_size, Image.LANCZOS)
        draw = ImageDraw.Draw(canvas)

        for (x, y) in layout.cell_positions():
            origin = (int(round(x)), int(round(y)))
            canvas.paste(cell, origin)
            if preview:
                draw.rectangle(
                    [origin, (origin[0] + cell_size[0] - 1, origin[1] + cell_size[1] - 1)],
                    outline=CELL_BORDER_COLOR, width=1,
                )

        self._draw_cut_guides(draw, layout)

        if not preview:
            canvas.info['icc_profile'] = SRGB_ICC_BYTES
            canvas.info['dpi'] = (sheet.dpi, sheet.dpi)
        return canvas

    def create_preview(self, photo: Image.Image, standard: Standard, sheet: SheetSize) -> Image.Image:
        return self.create_sheet(photo, standard, sheet, scale=PREVIEW_SCALE)

    @staticmethod
    def _draw_cut_guides(draw: ImageDraw.ImageDraw, layout: SheetLayout,
                         color: str = GUIDE_COLOR, line_width: int = 1) -> None:
        """Draw an L-shaped corner mark at the top-left of every cell."""
        for guide in layout.cut_guides():
            points = [(int(round(px)), int(round(py))) for (px, py) in guide.points]
            draw.line(points, fill=color, width=line_width)
