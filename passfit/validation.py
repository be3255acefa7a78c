"""
Compliance validation of a face box against a photo standard
"""

import math
import logging
from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

from .config import (
    Standard,
    HEAD_HEIGHT_LOWER_TOLERANCE, HEAD_HEIGHT_UPPER_TOLERANCE,
    EYE_LINE_TOLERANCE_PCT, CENTER_TOLERANCE_PCT,
)
from .errors import InvalidArgument
from .face_detection import FaceBox

logger = logging.getLogger(__name__)

MSG_TOO_SMALL = "Face is too small. Zoom in or move closer."
MSG_TOO_LARGE = "Face is too large. Zoom out or move back."
MSG_EYES_TOO_LOW = "Eyes are too low. Move the photo up."
MSG_EYES_TOO_HIGH = "Eyes are too high. Move the photo down."
MSG_NOT_CENTERED = "Face is not centered. Adjust horizontally."
MSG_OK = "Photo meets passport requirements!"


@dataclass(frozen=True)
class ComplianceReport:
    """Result of checking one face box against one standard."""
    head_height_valid: bool
    eye_line_valid: bool
    centered_valid: bool
    is_valid: bool
    head_height_percent: float
    eye_line_percent: float
    center_offset_percent: float
    messages: Tuple[str, ...]

    def to_dict(self) -> dict:
        data = asdict(self)
        data['messages'] = list(self.messages)
        return data


def validate_face(
    face: FaceBox,
    image_width: float,
    image_height: float,
    standard: Standard,
) -> ComplianceReport:
    """Measure head height, eye line and centring and check them.

    The bands are wider than the nominal standard (head height x0.8..x1.2,
    eye line +-15 points, centre +-10%) since the face box is a heuristic.

    Raises:
        InvalidArgument: If the image dimensions are not positive.
    """
    if not (math.isfinite(image_width) and math.isfinite(image_height)) \
            or image_width <= 0 or image_height <= 0:
        raise InvalidArgument(f"Image size must be positive, got {image_width}x{image_height}")

    head_height_percent = face.height / image_height * 100
    eye_line_percent = (image_height - face.eye_y) / image_height * 100
    center_offset_percent = abs(face.center_x - image_width / 2) / image_width * 100

    head_lower = standard.head_height_min * HEAD_HEIGHT_LOWER_TOLERANCE
    head_upper = standard.head_height_max * HEAD_HEIGHT_UPPER_TOLERANCE
    head_height_valid = head_lower <= head_height_percent <= head_upper
    eye_line_valid = abs(eye_line_percent - standard.eye_line_from_bottom) <= EYE_LINE_TOLERANCE_PCT
    centered_valid = center_offset_percent <= CENTER_TOLERANCE_PCT

    messages: List[str] = []
    if not head_height_valid:
        messages.append(MSG_TOO_SMALL if head_height_percent < head_lower else MSG_TOO_LARGE)
    if not eye_line_valid:
        if eye_line_percent < standard.eye_line_from_bottom:
            messages.append(MSG_EYES_TOO_LOW)
        else:
            messages.append(MSG_EYES_TOO_HIGH)
    if not centered_valid:
        messages.append(MSG_NOT_CENTERED)
    if not messages:
        messages.append(MSG_OK)

    report = ComplianceReport(
        head_height_valid=head_height_valid,
        eye_line_valid=eye_line_valid,
        centered_valid=centered_valid,
        is_valid=head_height_valid and eye_line_valid and centered_valid,
        head_height_percent=head_height_percent,
        eye_line_percent=eye_line_percent,
        center_offset_percent=center_offset_percent,
        messages=tuple(messages),
    )
    logger.debug(
        f"Validated against {standard.id}: head {head_height_percent:.1f}%, "
        f"eyes {eye_line_percent:.1f}%, offset {center_offset_percent:.1f}% -> {report.is_valid}"
    )
    return report


def format_report_text(report: ComplianceReport, standard: Optional[Standard] = None) -> str:
    lines: List[str] = []
    title = "Compliance Report"
    if standard is not None:
        title += f" - {standard.country} ({standard.width_mm:g}x{standard.height_mm:g}mm)"
    lines.append(title)
    lines.append("-" * len(title))
    lines.append(f"Overall: {'PASS' if report.is_valid else 'FAIL'}")
    lines.append("")

    def mark(ok: bool) -> str:
        return "[OK]  " if ok else "[FAIL]"

    head = f"{report.head_height_percent:.1f}% of photo height"
    eyes = f"{report.eye_line_percent:.1f}% from bottom"
    if standard is not None:
        head += f" (target {standard.head_height_min:g}-{standard.head_height_max:g}%)"
        eyes += f" (target {standard.eye_line_from_bottom:g}%)"
    lines.append(f"{mark(report.head_height_valid)} Head height: {head}")
    lines.append(f"{mark(report.eye_line_valid)} Eye line: {eyes}")
    lines.append(f"{mark(report.centered_valid)} Centering: {report.center_offset_percent:.1f}% off center")
    lines.append("")
    lines.extend(report.messages)
    return "\n".join(lines)
