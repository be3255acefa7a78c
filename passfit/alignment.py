"""
Auto-alignment: scale and translate a photo so the face meets a standard

Coordinates follow the editor canvas convention: the scaled image is first
centred on the canvas, then shifted by (translate_x, translate_y).
"""

import math
import logging
from dataclasses import dataclass
from typing import NamedTuple, Tuple

from .config import Standard, EDITOR_CANVAS_SIZE, EDITOR_INITIAL_ZOOM
from .errors import DegenerateGeometry, InvalidArgument
from .face_detection import FaceBox

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Transform:
    """Uniform scale followed by a translation from the centred position."""
    scale: float
    translate_x: float = 0.0
    translate_y: float = 0.0

    def placement(
        self, image_width: float, image_height: float,
        canvas_width: float, canvas_height: float,
    ) -> Tuple[float, float, float, float]:
        """Return (x, y, width, height) of the scaled image on the canvas."""
        scaled_w = image_width * self.scale
        scaled_h = image_height * self.scale
        x = (canvas_width - scaled_w) / 2 + self.translate_x
        y = (canvas_height - scaled_h) / 2 + self.translate_y
        return x, y, scaled_w, scaled_h


class GuideLines(NamedTuple):
    """Overlay guide y-coordinates on the editor canvas."""
    head_top: float
    head_bottom: float
    eye_line: float


def _check_size(name: str, width: float, height: float) -> None:
    if not (math.isfinite(width) and math.isfinite(height)) or width <= 0 or height <= 0:
        raise InvalidArgument(f"{name} size must be positive, got {width}x{height}")


def solve_alignment(
    face: FaceBox,
    image_width: float,
    image_height: float,
    canvas_width: float,
    canvas_height: float,
    standard: Standard,
) -> Transform:
    """Compute the transform that sizes and centres the face for a standard.

    The head is scaled to the midpoint of the allowed head-height band; the
    face centre goes to the canvas centre line and the estimated eye line to
    the standard's eye height.

    Raises:
        InvalidArgument: If image or canvas dimensions are not positive.
        DegenerateGeometry: If the face height is not positive.
    """
    _check_size("Image", image_width, image_height)
    _check_size("Canvas", canvas_width, canvas_height)

    face_height = face.ymax - face.ymin
    if not face_height > 0:
        raise DegenerateGeometry(f"Face height must be positive, got {face_height}")

    target_head_pct = (standard.head_height_min + standard.head_height_max) / 2 / 100
    scale = canvas_height * target_head_pct / face_height
    if not math.isfinite(scale) or scale <= 0:
        raise DegenerateGeometry(f"Cannot derive a finite scale from face height {face_height}")

    offset_x = canvas_width / 2 - face.center_x * scale
    target_eye_y = canvas_height * (1 - standard.eye_line_from_bottom / 100)
    offset_y = target_eye_y - face.eye_y * scale

    base_x = (canvas_width - image_width * scale) / 2
    base_y = (canvas_height - image_height * scale) / 2

    transform = Transform(scale=scale, translate_x=offset_x - base_x, translate_y=offset_y - base_y)
    logger.debug(f"Alignment for {standard.id}: {transform}")
    return transform


def map_face_box(
    face: FaceBox,
    transform: Transform,
    image_width: float,
    image_height: float,
    canvas_width: float,
    canvas_height: float,
) -> FaceBox:
    """Express a source-image face box in canvas coordinates."""
    x, y, _, _ = transform.placement(image_width, image_height, canvas_width, canvas_height)
    s = transform.scale
    return FaceBox(
        xmin=x + face.xmin * s,
        ymin=y + face.ymin * s,
        xmax=x + face.xmax * s,
        ymax=y + face.ymax * s,
        score=face.score,
    )


def editor_canvas_size(standard: Standard, canvas_size: float = EDITOR_CANVAS_SIZE) -> Tuple[float, float]:
    """Canvas with the standard's aspect ratio and a long side of canvas_size."""
    ratio = standard.aspect_ratio
    if ratio >= 1:
        return canvas_size, canvas_size / ratio
    return canvas_size * ratio, canvas_size


def initial_scale(
    image_width: float, image_height: float,
    canvas_width: float, canvas_height: float,
) -> float:
    """Zoom that covers the canvas with a little headroom, before alignment."""
    _check_size("Image", image_width, image_height)
    _check_size("Canvas", canvas_width, canvas_height)
    return max(canvas_width / image_width, canvas_height / image_height) * EDITOR_INITIAL_ZOOM


def guide_lines(standard: Standard, canvas_height: float) -> GuideLines:
    return GuideLines(
        head_top=canvas_height * (1 - standard.head_height_max / 100),
        head_bottom=canvas_height * (1 - standard.head_height_min / 100),
        eye_line=canvas_height * (1 - standard.eye_line_from_bottom / 100),
    )
