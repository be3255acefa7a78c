"""
passfit - Passport Photo Sheet Maker

Geometric compliance and sheet layout for passport/visa photos:
validate a detected face against a country standard, solve the transform
that centres it, replace the background and tile the photo onto a print
sheet at the sheet's DPI.

Usage:
    from passfit import PhotoProcessor
    processor = PhotoProcessor()
    result = processor.process("input/photo.jpg", "uk", "a4")
    result.sheet.save("output/sheet.jpg")
    processor.close()
"""

# Core classes
from .errors import PassfitError, InvalidArgument, DegenerateGeometry, NoSubjectDetected, ModelUnavailable
from .utils import mm_to_pixels, pixels_to_mm, parse_hex_color, SRGB_ICC_BYTES
from .config import (
    Standard, SheetSize, StandardRegistry, REGISTRY, SHEET_SIZES, DPI,
    get_standard, get_sheet_size, get_standard_list, get_sheet_list,
)
from .models import ModelService, ModelState
from .face_detection import FaceBox, Detection, FaceDetector, face_from_person, select_face
from .validation import ComplianceReport, validate_face, format_report_text
from .alignment import Transform, GuideLines, solve_alignment, map_face_box, editor_canvas_size, initial_scale, guide_lines
from .sheet import SheetLayout, CutGuide, SheetGenerator, calculate_photos_per_sheet, compute_layout, layout_for
from .background import Mask, Segment, BackgroundRemover, select_subject_mask, resample_mask, composite
from .photo_formats import PhotoFormatter
from .processor import PhotoProcessor, ProcessingResult
