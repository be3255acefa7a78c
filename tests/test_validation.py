"""Unit tests for passfit/validation.py."""

from dataclasses import FrozenInstanceError

import pytest

from passfit.config import get_standard
from passfit.errors import InvalidArgument
from passfit.face_detection import FaceBox
from passfit.validation import (
    MSG_EYES_TOO_HIGH,
    MSG_EYES_TOO_LOW,
    MSG_NOT_CENTERED,
    MSG_OK,
    MSG_TOO_LARGE,
    MSG_TOO_SMALL,
    format_report_text,
    validate_face,
)

US = get_standard("us")  # head 50-69%, eye line 56%
SIZE = 1000


class TestHeadHeight:
    """Head height band is the standard's range widened by x0.8 / x1.2."""

    def test_sixty_percent_is_valid(self) -> None:
        """60% lies within [40, 82.8] for the US standard."""
        face = FaceBox(xmin=400, ymin=230, xmax=600, ymax=830)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.head_height_percent == pytest.approx(60)
        assert report.head_height_valid
        assert report.is_valid
        assert report.messages == (MSG_OK,)

    def test_thirty_percent_is_too_small(self) -> None:
        face = FaceBox(xmin=400, ymin=335, xmax=600, ymax=635)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.head_height_percent == pytest.approx(30)
        assert not report.head_height_valid
        assert not report.is_valid
        assert report.messages == (MSG_TOO_SMALL,)

    def test_ninety_percent_is_too_large(self) -> None:
        face = FaceBox(xmin=400, ymin=50, xmax=600, ymax=950)
        report = validate_face(face, SIZE, SIZE, US)
        assert not report.head_height_valid
        assert report.eye_line_valid
        assert report.messages == (MSG_TOO_LARGE,)


class TestEyeLine:
    """Eye line is estimated 35% down the face box, +-15 points tolerance."""

    def test_eye_line_percent(self) -> None:
        face = FaceBox(xmin=400, ymin=230, xmax=600, ymax=830)
        report = validate_face(face, SIZE, SIZE, US)
        # eye_y = 230 + 600 * 0.35 = 440 -> 56% from bottom
        assert report.eye_line_percent == pytest.approx(56)

    def test_eyes_too_low(self) -> None:
        face = FaceBox(xmin=400, ymin=400, xmax=600, ymax=1000)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.eye_line_percent == pytest.approx(39)
        assert not report.eye_line_valid
        assert report.messages == (MSG_EYES_TOO_LOW,)

    def test_eyes_too_high(self) -> None:
        face = FaceBox(xmin=400, ymin=50, xmax=600, ymax=650)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.eye_line_percent == pytest.approx(74)
        assert not report.eye_line_valid
        assert report.messages == (MSG_EYES_TOO_HIGH,)


class TestCentering:
    """Face centre must be within 10% of image width from the middle."""

    def test_off_center(self) -> None:
        face = FaceBox(xmin=0, ymin=230, xmax=200, ymax=830)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.center_offset_percent == pytest.approx(40)
        assert not report.centered_valid
        assert report.messages == (MSG_NOT_CENTERED,)

    def test_slightly_off_center_is_valid(self) -> None:
        face = FaceBox(xmin=450, ymin=230, xmax=650, ymax=830)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.center_offset_percent == pytest.approx(5)
        assert report.centered_valid


class TestReport:
    """Tests for report structure and determinism."""

    def test_message_order(self) -> None:
        """Head height, then eye line, then centring."""
        face = FaceBox(xmin=0, ymin=600, xmax=100, ymax=900)
        report = validate_face(face, SIZE, SIZE, US)
        assert report.messages == (MSG_TOO_SMALL, MSG_EYES_TOO_LOW, MSG_NOT_CENTERED)
        assert not report.is_valid

    def test_deterministic(self) -> None:
        """Identical inputs give identical reports."""
        face = FaceBox(xmin=123, ymin=45, xmax=678, ymax=901, score=0.9)
        assert validate_face(face, 800, 1200, US) == validate_face(face, 800, 1200, US)

    def test_report_is_frozen(self) -> None:
        report = validate_face(FaceBox(400, 230, 600, 830), SIZE, SIZE, US)
        with pytest.raises(FrozenInstanceError):
            report.is_valid = False  # type: ignore[misc]

    @pytest.mark.parametrize("width,height", [
        (0, 100), (100, 0), (-1, 100),
        (float("nan"), float("nan")), (100, float("nan")), (float("inf"), 100),
    ])
    def test_invalid_image_size(self, width: float, height: float) -> None:
        with pytest.raises(InvalidArgument):
            validate_face(FaceBox(10, 10, 20, 20), width, height, US)

    def test_to_dict(self) -> None:
        data = validate_face(FaceBox(400, 230, 600, 830), SIZE, SIZE, US).to_dict()
        assert data["is_valid"] is True
        assert data["messages"] == [MSG_OK]

    def test_format_report_text(self) -> None:
        report = validate_face(FaceBox(400, 335, 600, 635), SIZE, SIZE, US)
        text = format_report_text(report, US)
        assert "United States" in text
        assert "Overall: FAIL" in text
        assert "Head height: 30.0%" in text
        assert MSG_TOO_SMALL in text
