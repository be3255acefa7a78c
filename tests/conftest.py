"""Shared fixtures: stand-ins for the model-backed collaborators."""

import pytest
from PIL import Image

from passfit.face_detection import FaceBox


class FakeDetector:
    """Returns a fixed face box instead of running MediaPipe."""

    def __init__(self, face: FaceBox = None, error: Exception = None):
        self.face = face or FaceBox(200, 200, 400, 450, 0.95)
        self.error = error
        self.closed = False

    def detect_face(self, img: Image.Image) -> FaceBox:
        if self.error is not None:
            raise self.error
        return self.face

    def close(self) -> None:
        self.closed = True


class FakeRemover:
    """Records the requested colour and returns the image unchanged."""

    def __init__(self):
        self.colors = []
        self.closed = False

    def replace_background(self, img: Image.Image, color, method: str = 'bilinear') -> Image.Image:
        self.colors.append(color)
        return img.copy()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def portrait_path(tmp_path):
    """A 600x800 PNG on disk."""
    path = tmp_path / "portrait.png"
    Image.new("RGB", (600, 800), (180, 150, 120)).save(path)
    return str(path)
