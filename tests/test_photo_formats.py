"""Unit tests for passfit/photo_formats.py."""

import pytest
from PIL import Image

from passfit.alignment import Transform
from passfit.config import get_standard
from passfit.errors import InvalidArgument
from passfit.photo_formats import PhotoFormatter

US = get_standard("us")
UK = get_standard("uk")


class TestPhotoFormatter:
    """Tests for rendering an aligned photo at print size."""

    @pytest.fixture
    def red(self) -> Image.Image:
        return Image.new("RGB", (400, 400), (255, 0, 0))

    def test_output_matches_print_size(self, red: Image.Image) -> None:
        photo = PhotoFormatter().render(red, UK, Transform(scale=1.0))
        assert photo.size == UK.print_size() == (413, 531)
        assert photo.mode == "RGB"

    def test_uncovered_area_uses_background(self, red: Image.Image) -> None:
        photo = PhotoFormatter().render(red, US, Transform(scale=0.1), (400, 400))
        assert photo.size == (602, 602)
        assert photo.getpixel((0, 0)) == (255, 255, 255)
        assert photo.getpixel((301, 301)) == (255, 0, 0)

    def test_explicit_background(self, red: Image.Image) -> None:
        photo = PhotoFormatter().render(red, US, Transform(scale=0.1), (400, 400), "#102030")
        assert photo.getpixel((5, 5)) == (16, 32, 48)

    def test_translation_moves_image(self, red: Image.Image) -> None:
        photo = PhotoFormatter().render(red, US, Transform(scale=0.1, translate_x=-150), (400, 400))
        assert photo.getpixel((301, 301)) == (255, 255, 255)
        assert photo.getpixel((75, 301)) == (255, 0, 0)

    def test_print_metadata(self, red: Image.Image) -> None:
        photo = PhotoFormatter(dpi=600).render(red, US, Transform(scale=1.0), (400, 400))
        assert photo.size == (1205, 1205)
        assert photo.info["dpi"] == (600, 600)
        assert photo.info["icc_profile"]

    def test_invalid_canvas(self, red: Image.Image) -> None:
        with pytest.raises(InvalidArgument):
            PhotoFormatter().render(red, US, Transform(scale=1.0), (0, 400))
