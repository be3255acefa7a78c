"""
Background removal and replacement module
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

import cv2
import numpy as np
from PIL import Image

from .config import (
    REMBG_MODEL, FORCE_CPU, MAX_IMAGE_DIMENSION,
    BACKGROUND_LABELS, SUBJECT_LABELS,
)
from .errors import InvalidArgument, NoSubjectDetected, ModelUnavailable
from .models import ModelService
from .utils import to_rgb

logger = logging.getLogger(__name__)

Color = Union[str, Tuple[int, int, int]]

_INTERPOLATION = {
    'bilinear': cv2.INTER_LINEAR,
    'nearest': cv2.INTER_NEAREST,
}


# =============================================================================
# MASKS
# =============================================================================

@dataclass(frozen=True, eq=False)
class Mask:
    """Soft foreground mask, values in [0, 1], shape (height, width)."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise InvalidArgument(f"Mask size must be positive, got {self.width}x{self.height}")
        if self.data.shape != (self.height, self.width):
            raise InvalidArgument(
                f"Mask data shape {self.data.shape} does not match {self.height}x{self.width}"
            )

    @classmethod
    def from_flat(cls, width: int, height: int, values: Sequence[float]) -> 'Mask':
        """Build from row-major float data as emitted by segmentation models."""
        data = np.asarray(values, dtype=np.float32)
        if data.size != width * height:
            raise InvalidArgument(f"Expected {width * height} mask values, got {data.size}")
        return cls(width=width, height=height, data=np.clip(data.reshape(height, width), 0.0, 1.0))

    @classmethod
    def from_image(cls, img: Image.Image) -> 'Mask':
        """Build from an 8-bit greyscale mask image (0..255)."""
        data = np.asarray(img.convert('L'), dtype=np.float32) / 255.0
        return cls(width=img.width, height=img.height, data=data)

    @property
    def is_empty(self) -> bool:
        return not np.any(self.data > 0)


@dataclass(frozen=True)
class Segment:
    """One labelled region from the segmentation model."""
    label: str
    score: Optional[float]
    mask: Optional[Mask]


def select_subject_mask(segments: Sequence[Segment]) -> Mask:
    """Choose the foreground mask from segmentation output.

    A 'person'/'face' segment wins; else the highest-scoring masked segment
    (score > 0); else the union of every masked segment that is not a
    background label.

    Raises:
        NoSubjectDetected: If no non-empty mask can be identified.
    """
    if not segments:
        raise NoSubjectDetected("Invalid segmentation result")

    chosen = next(
        (s.mask for s in segments if s.label in SUBJECT_LABELS and s.mask is not None),
        None,
    )

    if chosen is None:
        scored = [s for s in segments if s.mask is not None and (s.score or 0) > 0]
        if scored:
            chosen = max(scored, key=lambda s: s.score).mask

    if chosen is None:
        foreground = [
            s.mask for s in segments
            if s.mask is not None and (s.label or '').lower() not in BACKGROUND_LABELS
        ]
        if foreground:
            first = foreground[0]
            data = first.data.copy()
            for m in foreground[1:]:
                if m.data.shape != data.shape:
                    m = Mask(first.width, first.height, resample_mask(m, first.width, first.height))
                data = np.maximum(data, m.data)
            chosen = Mask(first.width, first.height, data)

    if chosen is None or chosen.is_empty:
        raise NoSubjectDetected("Could not identify subject in image. Please try a clearer photo.")
    return chosen


def resample_mask(mask: Mask, width: int, height: int, method: str = 'bilinear') -> np.ndarray:
    """Resample a mask to (height, width) with nearest or bilinear interpolation."""
    if width <= 0 or height <= 0:
        raise InvalidArgument(f"Target size must be positive, got {width}x{height}")
    if method not in _INTERPOLATION:
        raise InvalidArgument(f"Unknown resampling method: {method}. Use one of {list(_INTERPOLATION)}")
    if (mask.width, mask.height) == (width, height):
        return mask.data
    resized = cv2.resize(
        mask.data.astype(np.float32), (width, height), interpolation=_INTERPOLATION[method],
    )
    return np.clip(resized, 0.0, 1.0)


def composite(
    img: Image.Image,
    mask: Mask,
    background: Color,
    method: str = 'bilinear',
) -> Image.Image:
    """Blend the source over a solid background using the mask as alpha.

    alpha = round(mask * 255); out = (src * alpha + bg * (255 - alpha)) / 255
    """
    src = np.asarray(img.convert('RGB'), dtype=np.float32)
    height, width = src.shape[:2]
    alpha = np.round(resample_mask(mask, width, height, method) * 255.0)[..., None]
    bg = np.array(to_rgb(background), dtype=np.float32)

    out = (src * alpha + bg * (255.0 - alpha)) / 255.0
    return Image.fromarray(np.clip(np.round(out), 0, 255).astype(np.uint8), 'RGB')


def limit_size(img: Image.Image, max_dimension: int = MAX_IMAGE_DIMENSION) -> Image.Image:
    """Downscale so neither side exceeds max_dimension (aspect preserved)."""
    width, height = img.size
    if width <= max_dimension and height <= max_dimension:
        return img
    if width > height:
        size = (max_dimension, max(1, round(height * max_dimension / width)))
    else:
        size = (max(1, round(width * max_dimension / height)), max_dimension)
    return img.resize(size, Image.LANCZOS)


# =============================================================================
# BACKGROUND REMOVER CLASS
# =============================================================================

class BackgroundRemover:
    """Segments the subject with rembg and replaces the background."""

    def __init__(
        self,
        model_name: str = REMBG_MODEL,
        force_cpu: bool = FORCE_CPU,
        service: Optional[ModelService] = None,
    ):
        self._model_name = model_name
        self._force_cpu = force_cpu
        self._service = service or ModelService(f'rembg:{model_name}', self._init_session)

    @property
    def service(self) -> ModelService:
        return self._service

    def _init_session(self):
        from rembg import new_session

        if not self._force_cpu:
            try:
                session = new_session(
                    model_name=self._model_name,
                    providers=['CUDAExecutionProvider', 'CPUExecutionProvider'],
                )
                logger.info(f"Rembg session initialized ({self._model_name}, CUDA if available)")
                return session
            except Exception as e:
                logger.warning(f"CUDA initialization failed: {e}")
                logger.info("Falling back to CPU...")

        try:
            session = new_session(model_name=self._model_name, providers=['CPUExecutionProvider'])
        except Exception as e:
            raise ModelUnavailable(f"Cannot initialize rembg session: {e}") from e
        logger.info(f"Rembg session initialized with CPU ({self._model_name})")
        return session

    @staticmethod
    def _predict(session, img: Image.Image) -> List[Segment]:
        masks = session.predict(img.convert('RGB'))
        return [Segment(label='foreground', score=1.0, mask=Mask.from_image(m)) for m in masks]

    def segment(self, img: Image.Image) -> List[Segment]:
        """Run segmentation on a (size-limited) copy of the image.

        Raises:
            ModelUnavailable: If the session cannot be created or inference fails.
        """
        small = limit_size(img)
        logger.info(f"Segmenting image ({small.width}x{small.height})")
        return self._service.run(self._predict, small)

    def replace_background(
        self, img: Image.Image, color: Color, method: str = 'bilinear',
    ) -> Image.Image:
        """Return a new RGB image with the background replaced by color.

        Raises:
            NoSubjectDetected: If no subject mask can be identified.
            ModelUnavailable: If segmentation fails.
        """
        mask = select_subject_mask(self.segment(img))
        result = composite(img, mask, color, method)
        logger.info("Background replaced successfully")
        return result

    def close(self) -> None:
        self._service.close()
