"""
PhotoProcessor: facade that orchestrates the full passport photo pipeline.
"""

import io
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from PIL import Image, ImageOps
from PIL.ImageCms import profileToProfile, createProfile, ImageCmsProfile

from .alignment import Transform, solve_alignment, editor_canvas_size, map_face_box
from .background import BackgroundRemover, Color
from .config import (
    Standard, SheetSize, DPI, DEFAULT_SHEET, DEFAULT_MARGIN_MM, DEFAULT_GAP_MM,
    get_standard, get_sheet_size,
)
from .face_detection import FaceBox, FaceDetector
from .photo_formats import PhotoFormatter
from .sheet import SheetGenerator, SheetLayout, layout_for
from .utils import to_hex_color, to_rgb
from .validation import ComplianceReport, validate_face

logger = logging.getLogger(__name__)

_srgb_profile = ImageCmsProfile(createProfile('sRGB'))


@dataclass
class ProcessingResult:
    """Result of a full photo processing pipeline run."""
    photo: Image.Image
    sheet: Image.Image
    preview: Image.Image
    standard: Standard
    sheet_size: SheetSize
    face: FaceBox
    report: ComplianceReport
    aligned_report: ComplianceReport
    transform: Transform
    canvas_size: Tuple[float, float]
    layout: SheetLayout


def load_image(input_path: str) -> Image.Image:
    """Open an image, apply EXIF orientation and convert it to sRGB RGB."""
    img = Image.open(input_path)
    img = ImageOps.exif_transpose(img)
    src_profile = img.info.get('icc_profile')
    if src_profile:
        try:
            return profileToProfile(img, ImageCmsProfile(io.BytesIO(src_profile)), _srgb_profile, outputMode='RGB')
        except Exception as e:
            logger.warning(f"Could not apply embedded ICC profile, converting directly: {e}")
    return img.convert('RGB')


class PhotoProcessor:
    """High-level facade for the entire passport photo pipeline.

    Usage:
        processor = PhotoProcessor()
        result = processor.process("input/photo.jpg", "uk", "4x6")
        result.photo.save("output/photo.jpg")
        result.sheet.save("output/sheet.jpg")
        processor.close()
    """

    def __init__(
        self,
        detector: Optional[FaceDetector] = None,
        remover: Optional[BackgroundRemover] = None,
        dpi: int = DPI,
        margin_mm: float = DEFAULT_MARGIN_MM,
        gap_mm: float = DEFAULT_GAP_MM,
    ):
        logger.info("Initializing PhotoProcessor...")
        self.face_detector = detector or FaceDetector()
        self.bg_remover = remover or BackgroundRemover()
        self.formatter = PhotoFormatter(dpi=dpi)
        self.sheet_gen = SheetGenerator(margin_mm=margin_mm, gap_mm=gap_mm)
        self._margin_mm = margin_mm
        self._gap_mm = gap_mm

    def process(
        self,
        input_path: str,
        standard_id: str,
        sheet_id: str = DEFAULT_SHEET,
        background: Optional[Color] = None,
        replace_background: bool = True,
    ) -> ProcessingResult:
        """Run the full pipeline: detect -> validate -> align -> bg -> render -> sheet.

        Args:
            input_path: Path to input image.
            standard_id: Key from the standard registry.
            sheet_id: Key from the sheet size registry.
            background: Replacement colour; defaults to the standard's.
            replace_background: Skip segmentation when False.

        Returns:
            ProcessingResult with the photo, sheets and measurements.

        Raises:
            InvalidArgument: If an id is not registered or the colour is malformed.
            NoSubjectDetected: If no face or subject mask is found.
            ModelUnavailable: If a model fails to load or run.
        """
        standard = get_standard(standard_id)
        sheet_size = get_sheet_size(sheet_id)
        color = to_hex_color(to_rgb(
            background if background is not None else standard.background_color
        ))

        logger.info(f"Processing: standard={standard_id}, sheet={sheet_id}, input={input_path}")
        img = load_image(input_path)

        # 1. Detect and validate the face in the source image
        face = self.face_detector.detect_face(img)
        report = validate_face(face, img.width, img.height, standard)
        logger.info(f"Compliance: {'PASS' if report.is_valid else 'FAIL'} - {'; '.join(report.messages)}")

        # 2. Solve alignment on the editor canvas
        canvas_size = editor_canvas_size(standard)
        transform = solve_alignment(face, img.width, img.height, canvas_size[0], canvas_size[1], standard)
        aligned_face = map_face_box(face, transform, img.width, img.height, *canvas_size)
        aligned_report = validate_face(aligned_face, canvas_size[0], canvas_size[1], standard)

        # 3. Replace background
        if replace_background:
            img = self.bg_remover.replace_background(img, color)

        # 4. Render the photo and tile it
        photo = self.formatter.render(img, standard, transform, canvas_size, color)
        sheet = self.sheet_gen.create_sheet(photo, standard, sheet_size)
        preview = self.sheet_gen.create_preview(photo, standard, sheet_size)
        layout = layout_for(standard, sheet_size, self._margin_mm, self._gap_mm)

        return ProcessingResult(
            photo=photo,
            sheet=sheet,
            preview=preview,
            standard=standard,
            sheet_size=sheet_size,
            face=face,
            report=report,
            aligned_report=aligned_report,
            transform=transform,
            canvas_size=canvas_size,
            layout=layout,
        )

    def close(self) -> None:
        """Release all resources."""
        self.face_detector.close()
        self.bg_remover.close()
        logger.info("PhotoProcessor closed")
