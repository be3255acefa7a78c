"""
Configuration settings and static catalogue for passfit
"""

import os
import math
import numbers
from dataclasses import dataclass
from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

from .errors import InvalidArgument
from .utils import mm_to_pixels, parse_hex_color


# =============================================================================
# GENERAL CONFIG
# =============================================================================

OUTPUT_BASE = os.environ.get('PASSFIT_OUTPUT_DIR', 'outputs/passfit')
MODELS_DIR = os.environ.get('PASSFIT_MODELS_DIR', 'models')
FORCE_CPU = os.environ.get('PASSFIT_FORCE_CPU', '') == '1'

DPI = 300

# Sheet layout
DEFAULT_MARGIN_MM = 5
DEFAULT_GAP_MM = 2
PREVIEW_SCALE = 0.5
GUIDE_LENGTH = 10  # px at scale 1, independent of DPI
DEFAULT_SHEET = '4x6'

# Editor canvas (long side, px)
EDITOR_CANVAS_SIZE = 400
EDITOR_INITIAL_ZOOM = 1.2


# =============================================================================
# FACE GEOMETRY HEURISTICS
# =============================================================================
# Calibrated against the detection and segmentation models.

EYE_LINE_FROM_FACE_TOP = 0.35

# Face region estimated from a person box
PERSON_TRIM_X = 0.2
PERSON_KEEP_TOP = 0.4
PERSON_MIN_SCORE = 0.7
FALLBACK_MIN_SCORE = 0.5

# Validation tolerances
HEAD_HEIGHT_LOWER_TOLERANCE = 0.8
HEAD_HEIGHT_UPPER_TOLERANCE = 1.2
EYE_LINE_TOLERANCE_PCT = 15
CENTER_TOLERANCE_PCT = 10


# =============================================================================
# MODEL CONFIG
# =============================================================================

REMBG_MODEL = os.environ.get('PASSFIT_REMBG_MODEL', 'u2net_human_seg')
MAX_IMAGE_DIMENSION = 1024

OBJECT_DETECTOR_MODEL = os.path.join(MODELS_DIR, 'efficientdet_lite0.tflite')
OBJECT_DETECTOR_URL = (
    "https://storage.googleapis.com/mediapipe-models/object_detector/"
    "efficientdet_lite0/float16/1/efficientdet_lite0.tflite"
)
MIN_DETECTION_CONFIDENCE = 0.3
MAX_DETECTIONS = 5

BACKGROUND_LABELS = ('wall', 'floor', 'ceiling', 'sky', 'building', 'tree', 'grass')
SUBJECT_LABELS = ('person', 'face')


# =============================================================================
# STANDARD & SHEET DATACLASSES
# =============================================================================

@dataclass(frozen=True)
class Standard:
    """Immutable passport/visa photo standard.

    Head height and eye line are percentages of the photo height; the eye
    line is measured from the bottom edge.
    """
    id: str
    country: str
    country_code: str
    width_mm: float
    height_mm: float
    head_height_min: float
    head_height_max: float
    eye_line_from_bottom: float
    background_color: str = '#FFFFFF'
    notes: Tuple[str, ...] = ()

    def __post_init__(self):
        if not (math.isfinite(self.width_mm) and math.isfinite(self.height_mm)) \
                or self.width_mm <= 0 or self.height_mm <= 0:
            raise InvalidArgument(f"Standard {self.id}: photo size must be positive")
        if not 0 < self.head_height_min < self.head_height_max <= 100:
            raise InvalidArgument(
                f"Standard {self.id}: need 0 < head_height_min < head_height_max <= 100, "
                f"got {self.head_height_min}..{self.head_height_max}"
            )
        if not 0 < self.eye_line_from_bottom < 100:
            raise InvalidArgument(
                f"Standard {self.id}: eye_line_from_bottom must be in (0, 100), "
                f"got {self.eye_line_from_bottom}"
            )
        parse_hex_color(self.background_color)

    @property
    def aspect_ratio(self) -> float:
        return self.width_mm / self.height_mm

    @property
    def background_rgb(self) -> Tuple[int, int, int]:
        return parse_hex_color(self.background_color)

    def print_size(self, dpi: int = DPI) -> Tuple[int, int]:
        """Photo size in pixels at the given DPI."""
        return (mm_to_pixels(self.width_mm, dpi), mm_to_pixels(self.height_mm, dpi))


@dataclass(frozen=True)
class SheetSize:
    """Immutable print sheet specification."""
    id: str
    name: str
    width_mm: float
    height_mm: float
    dpi: int = DPI

    def __post_init__(self):
        if not (math.isfinite(self.width_mm) and math.isfinite(self.height_mm)) \
                or self.width_mm <= 0 or self.height_mm <= 0:
            raise InvalidArgument(f"Sheet {self.id}: size must be positive")
        if isinstance(self.dpi, bool) or not isinstance(self.dpi, numbers.Integral) or self.dpi <= 0:
            raise InvalidArgument(f"Sheet {self.id}: dpi must be a positive integer, got {self.dpi!r}")

    def pixel_size(self, scale: float = 1.0) -> Tuple[float, float]:
        return (
            mm_to_pixels(self.width_mm, self.dpi) * scale,
            mm_to_pixels(self.height_mm, self.dpi) * scale,
        )


# =============================================================================
# REGISTRY
# =============================================================================

T = TypeVar('T')


class StandardRegistry(Generic[T]):
    """Read-only-after-import catalogue keyed by id."""

    def __init__(self, kind: str):
        self._kind = kind
        self._items: Dict[str, T] = {}

    def register(self, item: T) -> None:
        if item.id in self._items:
            raise InvalidArgument(f"Duplicate {self._kind} id: {item.id}")
        self._items[item.id] = item

    def get(self, key: str) -> Optional[T]:
        return self._items.get(key)

    def require(self, key: str) -> T:
        item = self._items.get(key)
        if item is None:
            raise InvalidArgument(
                f"Unknown {self._kind}: {key}. Available: {', '.join(self.keys())}"
            )
        return item

    def list_all(self) -> List[T]:
        return list(self._items.values())

    def keys(self) -> List[str]:
        return list(self._items.keys())

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[Tuple[str, T]]:
        return iter(self._items.items())

    def __len__(self) -> int:
        return len(self._items)


# =============================================================================
# GLOBAL REGISTRIES
# =============================================================================

REGISTRY: StandardRegistry[Standard] = StandardRegistry('standard')

REGISTRY.register(Standard(
    id='us', country='United States', country_code='US',
    width_mm=51, height_mm=51,
    head_height_min=50, head_height_max=69, eye_line_from_bottom=56,
    background_color='#FFFFFF',
    notes=('Head must be centered', 'Neutral expression required',
           'Eyes must be open and visible'),
))

REGISTRY.register(Standard(
    id='uk', country='United Kingdom', country_code='GB',
    width_mm=35, height_mm=45,
    head_height_min=66, head_height_max=75, eye_line_from_bottom=55,
    background_color='#FFFFFF',
    notes=('Plain cream or light grey background accepted', 'Mouth closed',
           'No glasses with tinted lenses'),
))

REGISTRY.register(Standard(
    id='eu', country='European Union (Schengen)', country_code='EU',
    width_mm=35, height_mm=45,
    head_height_min=70, head_height_max=80, eye_line_from_bottom=60,
    background_color='#F0F0F0',
    notes=('ICAO compliant', 'Light background required',
           'Face must be clearly visible'),
))

REGISTRY.register(Standard(
    id='india', country='India', country_code='IN',
    width_mm=35, height_mm=45,
    head_height_min=50, head_height_max=70, eye_line_from_bottom=55,
    background_color='#FFFFFF',
    notes=('White background only', '80% face coverage',
           'No border around photo'),
))

REGISTRY.register(Standard(
    id='china', country='China', country_code='CN',
    width_mm=33, height_mm=48,
    head_height_min=62, head_height_max=73, eye_line_from_bottom=50,
    background_color='#FFFFFF',
    notes=('Ears must be visible', 'No head covering',
           'Natural complexion required'),
))

REGISTRY.register(Standard(
    id='canada', country='Canada', country_code='CA',
    width_mm=50, height_mm=70,
    head_height_min=45, head_height_max=56, eye_line_from_bottom=55,
    background_color='#FFFFFF',
    notes=('White or light-colored background', 'Neutral expression',
           'Both eyes clearly visible'),
))

REGISTRY.register(Standard(
    id='australia', country='Australia', country_code='AU',
    width_mm=35, height_mm=45,
    head_height_min=60, head_height_max=75, eye_line_from_bottom=55,
    background_color='#FFFFFF',
    notes=('Plain light background', 'Head centered in frame',
           'Glasses allowed if eyes visible'),
))

REGISTRY.register(Standard(
    id='japan', country='Japan', country_code='JP',
    width_mm=35, height_mm=45,
    head_height_min=60, head_height_max=70, eye_line_from_bottom=55,
    background_color='#FFFFFF',
    notes=('White background only', 'No shadows on face',
           'Hair should not cover forehead'),
))

REGISTRY.register(Standard(
    id='germany', country='Germany', country_code='DE',
    width_mm=35, height_mm=45,
    head_height_min=70, head_height_max=80, eye_line_from_bottom=60,
    background_color='#F5F5F5',
    notes=('Light grey background preferred', 'Biometric compliant',
           'Face 70-80% of photo height'),
))

REGISTRY.register(Standard(
    id='france', country='France', country_code='FR',
    width_mm=35, height_mm=45,
    head_height_min=70, head_height_max=80, eye_line_from_bottom=60,
    background_color='#E8E8E8',
    notes=('Light blue-grey background accepted', 'Neutral expression required',
           'No smiling'),
))


SHEET_SIZES: StandardRegistry[SheetSize] = StandardRegistry('sheet size')

SHEET_SIZES.register(SheetSize(id='4x6', name='4" x 6"', width_mm=101.6, height_mm=152.4, dpi=300))
SHEET_SIZES.register(SheetSize(id='5x7', name='5" x 7"', width_mm=127, height_mm=177.8, dpi=300))
SHEET_SIZES.register(SheetSize(id='a4', name='A4', width_mm=210, height_mm=297, dpi=300))
SHEET_SIZES.register(SheetSize(id='letter', name='US Letter', width_mm=215.9, height_mm=279.4, dpi=300))
SHEET_SIZES.register(SheetSize(id='a5', name='A5', width_mm=148, height_mm=210, dpi=300))


# Background presets offered alongside each standard's own colour
BACKGROUND_PRESETS = {
    'white': '#FFFFFF',
    'light-grey': '#F5F5F5',
    'grey': '#E8E8E8',
    'off-white': '#F0F0F0',
    'light-blue': '#E6F0FF',
    'cream': '#FFFDD0',
}


# =============================================================================
# HELPERS
# =============================================================================

def get_standard(standard_id: str) -> Standard:
    return REGISTRY.require(standard_id)


def get_sheet_size(sheet_id: str) -> SheetSize:
    return SHEET_SIZES.require(sheet_id)


def get_standard_list() -> List[dict]:
    return [
        {'id': s.id, 'country': s.country, 'country_code': s.country_code,
         'size_mm': [s.width_mm, s.height_mm], 'background_color': s.background_color}
        for s in REGISTRY.list_all()
    ]


def get_sheet_list() -> List[dict]:
    return [
        {'id': s.id, 'name': s.name, 'size_mm': [s.width_mm, s.height_mm], 'dpi': s.dpi}
        for s in SHEET_SIZES.list_all()
    ]
