"""
Photo renderer: draws the aligned photo at a standard's print size.
"""

import logging
from typing import Optional, Tuple

from PIL import Image

from .alignment import Transform, editor_canvas_size
from .background import Color
from .config import Standard, DPI
from .errors import InvalidArgument
from .utils import SRGB_ICC_BYTES, to_rgb

logger = logging.getLogger(__name__)


class PhotoFormatter:
    """Renders a transformed source image into a single passport photo."""

    def __init__(self, dpi: int = DPI):
        self._dpi = dpi

    def render(
        self,
        img: Image.Image,
        standard: Standard,
        transform: Transform,
        canvas_size: Optional[Tuple[float, float]] = None,
        background: Optional[Color] = None,
    ) -> Image.Image:
        """Render the photo at the standard's print size.

        Args:
            img: Source image (background already replaced, if wanted).
            standard: Standard giving the photo size and default background.
            transform: Placement of img on the editor canvas.
            canvas_size: Editor canvas the transform was solved for; defaults
                to editor_canvas_size(standard).
            background: Fill for canvas areas the image does not cover.

        Returns:
            RGB PIL Image of standard.print_size(dpi) pixels.
        """
        canvas_w, canvas_h = canvas_size or editor_canvas_size(standard)
        if canvas_w <= 0 or canvas_h <= 0:
            raise InvalidArgument(f"Canvas size must be positive, got {canvas_w}x{canvas_h}")
        out_w, out_h = standard.print_size(self._dpi)
        fill = to_rgb(background if background is not None else standard.background_color)

        x0, y0, _, _ = transform.placement(img.width, img.height, canvas_w, canvas_h)
        kx = out_w / canvas_w
        ky = out_h / canvas_h
        s = transform.scale

        # Output pixel (u, v) samples source ((u/kx - x0)/s, (v/ky - y0)/s)
        coeffs = (1 / (kx * s), 0, -x0 / s, 0, 1 / (ky * s), -y0 / s)
        photo = img.convert('RGB').transform(
            (out_w, out_h), Image.AFFINE, coeffs,
            resample=Image.BICUBIC, fillcolor=fill,
        )

        logger.info(
            f"Rendered {standard.country} photo: {out_w}x{out_h}px "
            f"({standard.width_mm:g}x{standard.height_mm:g}mm @ {self._dpi} DPI)"
        )
        photo.info['icc_profile'] = SRGB_ICC_BYTES
        photo.info['dpi'] = (self._dpi, self._dpi)
        return photo
