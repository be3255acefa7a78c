"""
Face detection module using MediaPipe

The detector itself is an external collaborator: it returns labelled boxes
with scores. This module turns those into a single FaceBox.
"""

import os
import math
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from PIL import Image

from .config import (
    EYE_LINE_FROM_FACE_TOP, PERSON_TRIM_X, PERSON_KEEP_TOP,
    PERSON_MIN_SCORE, FALLBACK_MIN_SCORE,
    OBJECT_DETECTOR_MODEL, OBJECT_DETECTOR_URL,
    MIN_DETECTION_CONFIDENCE, MAX_DETECTIONS,
)
from .errors import InvalidArgument, NoSubjectDetected
from .models import ModelService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FaceBox:
    """Face bounding box in source-image pixels plus detection confidence."""
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    score: float = 1.0

    def __post_init__(self):
        coords = (self.xmin, self.ymin, self.xmax, self.ymax, self.score)
        if not all(math.isfinite(v) for v in coords):
            raise InvalidArgument(f"Face box has non-finite values: {coords}")
        if self.xmin >= self.xmax or self.ymin >= self.ymax:
            raise InvalidArgument(
                f"Malformed face box: ({self.xmin}, {self.ymin}, {self.xmax}, {self.ymax})"
            )
        if not 0 <= self.score <= 1:
            raise InvalidArgument(f"Detection score must be in [0, 1], got {self.score}")

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def center_x(self) -> float:
        return (self.xmin + self.xmax) / 2

    @property
    def eye_y(self) -> float:
        """Estimated eye line; the detector gives no eye landmarks."""
        return self.ymin + self.height * EYE_LINE_FROM_FACE_TOP

    def clamp(self, width: float, height: float) -> 'FaceBox':
        """Clip the box to the image rectangle."""
        if width <= 0 or height <= 0:
            raise InvalidArgument(f"Image size must be positive, got {width}x{height}")
        return FaceBox(
            xmin=min(max(self.xmin, 0), width),
            ymin=min(max(self.ymin, 0), height),
            xmax=min(max(self.xmax, 0), width),
            ymax=min(max(self.ymax, 0), height),
            score=self.score,
        )


@dataclass(frozen=True)
class Detection:
    """One labelled box from the object detector."""
    box: FaceBox
    label: str
    score: float


def face_from_person(box: FaceBox) -> FaceBox:
    """Estimate the face region from a whole-person box.

    Trims 20% from each side and keeps the top 40% of the height.
    """
    trim_x = box.width * PERSON_TRIM_X
    return FaceBox(
        xmin=box.xmin + trim_x,
        xmax=box.xmax - trim_x,
        ymin=box.ymin,
        ymax=box.ymin + box.height * PERSON_KEEP_TOP,
        score=box.score,
    )


def select_face(detections: Sequence[Detection]) -> FaceBox:
    """Pick a face box from raw detections.

    The most confident 'person' above 0.7 wins and is trimmed to its face
    region. Otherwise the first detection above 0.5 is used as-is.

    Raises:
        NoSubjectDetected: If nothing qualifies.
    """
    people = [d for d in detections if d.label == 'person' and d.score > PERSON_MIN_SCORE]
    if people:
        best = max(people, key=lambda d: d.score)
        logger.debug(f"Using person detection (score {best.score:.2f})")
        return face_from_person(best.box)

    for d in detections:
        if d.score > FALLBACK_MIN_SCORE:
            logger.debug(f"No confident person, falling back to '{d.label}' ({d.score:.2f})")
            return d.box

    raise NoSubjectDetected("No face detected. Please ensure your face is clearly visible.")


class FaceDetector:
    """Detects people/faces using the MediaPipe object detector."""

    def __init__(
        self,
        model_path: str = OBJECT_DETECTOR_MODEL,
        min_confidence: float = MIN_DETECTION_CONFIDENCE,
        max_results: int = MAX_DETECTIONS,
        service: Optional[ModelService] = None,
    ):
        self._model_path = model_path
        self._min_confidence = min_confidence
        self._max_results = max_results
        self._service = service or ModelService(
            'mediapipe-object-detector', self._load_detector, closer=lambda d: d.close(),
        )

    @property
    def service(self) -> ModelService:
        return self._service

    def _ensure_model(self) -> None:
        if not os.path.exists(self._model_path):
            logger.info(f"Object detector model not found at {self._model_path}, downloading...")
            import urllib.request
            os.makedirs(os.path.dirname(self._model_path) or ".", exist_ok=True)
            urllib.request.urlretrieve(OBJECT_DETECTOR_URL, self._model_path)
            logger.info(f"Model downloaded to {self._model_path}")

    def _load_detector(self):
        import mediapipe as mp

        self._ensure_model()
        base_options = mp.tasks.BaseOptions(model_asset_path=self._model_path)
        options = mp.tasks.vision.ObjectDetectorOptions(
            base_options=base_options,
            max_results=self._max_results,
            score_threshold=self._min_confidence,
        )
        return mp.tasks.vision.ObjectDetector.create_from_options(options)

    @staticmethod
    def _run_detector(detector, img: Image.Image) -> List[Detection]:
        import mediapipe as mp

        rgb = np.ascontiguousarray(np.asarray(img.convert('RGB'), dtype=np.uint8))
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb)
        result = detector.detect(mp_image)

        detections = []
        for det in result.detections:
            if not det.categories:
                continue
            category = det.categories[0]
            bbox = det.bounding_box
            if bbox.width <= 0 or bbox.height <= 0:
                logger.debug(f"Skipping empty detection box: {bbox}")
                continue
            score = float(min(max(category.score, 0.0), 1.0))
            box = FaceBox(
                xmin=bbox.origin_x,
                ymin=bbox.origin_y,
                xmax=bbox.origin_x + bbox.width,
                ymax=bbox.origin_y + bbox.height,
                score=score,
            )
            detections.append(Detection(box=box, label=category.category_name or '', score=score))
        return detections

    def detect(self, img: Image.Image) -> List[Detection]:
        """Run the detector on a PIL image.

        Raises:
            ModelUnavailable: If the detector cannot be loaded or fails.
        """
        detections = self._service.run(self._run_detector, img)
        logger.info(f"Detector returned {len(detections)} object(s)")
        return detections

    def detect_face(self, img: Image.Image) -> FaceBox:
        """Detect and select a single face box, clipped to the image.

        Raises:
            NoSubjectDetected: If no usable detection was returned.
        """
        face = select_face(self.detect(img)).clamp(img.width, img.height)
        logger.info(
            f"Face box: ({face.xmin:.0f}, {face.ymin:.0f}, {face.xmax:.0f}, {face.ymax:.0f}) "
            f"score {face.score:.2f}"
        )
        return face

    def close(self) -> None:
        self._service.close()
