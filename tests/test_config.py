"""Unit tests for passfit/config.py."""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from passfit.config import (
    REGISTRY,
    SHEET_SIZES,
    SheetSize,
    Standard,
    StandardRegistry,
    get_sheet_list,
    get_sheet_size,
    get_standard,
    get_standard_list,
)
from passfit.errors import InvalidArgument


def _standard(**overrides) -> Standard:
    fields = dict(
        id="test", country="Testland", country_code="TT",
        width_mm=35, height_mm=45,
        head_height_min=50, head_height_max=70, eye_line_from_bottom=55,
    )
    fields.update(overrides)
    return Standard(**fields)


class TestStandardRegistry:
    """Tests for the built-in catalogue."""

    def test_all_standards_registered(self) -> None:
        """Ten country standards ship with the package."""
        assert len(REGISTRY) == 10
        assert set(REGISTRY.keys()) == {
            "us", "uk", "eu", "india", "china", "canada",
            "australia", "japan", "germany", "france",
        }

    def test_us_standard(self) -> None:
        """US standard matches the published geometry."""
        us = get_standard("us")
        assert (us.width_mm, us.height_mm) == (51, 51)
        assert (us.head_height_min, us.head_height_max) == (50, 69)
        assert us.eye_line_from_bottom == 56
        assert us.background_rgb == (255, 255, 255)

    def test_print_size(self) -> None:
        """UK photo is 413x531 px at 300 DPI."""
        assert get_standard("uk").print_size(300) == (413, 531)

    def test_invariants_hold_for_catalogue(self) -> None:
        """Every registered standard satisfies the geometry invariants."""
        for _, s in REGISTRY:
            assert 0 < s.head_height_min < s.head_height_max <= 100
            assert 0 < s.eye_line_from_bottom < 100
            assert s.width_mm > 0 and s.height_mm > 0

    def test_unknown_standard_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="Unknown standard"):
            get_standard("atlantis")

    def test_get_returns_none_for_unknown(self) -> None:
        assert REGISTRY.get("atlantis") is None
        assert "atlantis" not in REGISTRY

    def test_standard_is_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            get_standard("uk").width_mm = 40  # type: ignore[misc]

    def test_duplicate_registration_raises(self) -> None:
        registry: StandardRegistry[Standard] = StandardRegistry("standard")
        registry.register(_standard())
        with pytest.raises(InvalidArgument, match="Duplicate"):
            registry.register(_standard())

    def test_standard_list(self) -> None:
        items = get_standard_list()
        assert len(items) == 10
        assert items[0]["id"] == "us"


class TestStandardValidation:
    """Tests for Standard invariants."""

    def test_head_min_must_be_below_max(self) -> None:
        with pytest.raises(InvalidArgument):
            _standard(head_height_min=70, head_height_max=70)

    def test_head_max_at_most_100(self) -> None:
        with pytest.raises(InvalidArgument):
            _standard(head_height_max=101)

    def test_head_min_positive(self) -> None:
        with pytest.raises(InvalidArgument):
            _standard(head_height_min=0)

    @pytest.mark.parametrize("eye", [0, 100, -5])
    def test_eye_line_open_range(self, eye: float) -> None:
        with pytest.raises(InvalidArgument):
            _standard(eye_line_from_bottom=eye)

    @pytest.mark.parametrize("size", [
        {"width_mm": 0},
        {"width_mm": float("nan")},
        {"height_mm": float("inf")},
    ])
    def test_size_positive_and_finite(self, size: dict) -> None:
        with pytest.raises(InvalidArgument):
            _standard(**size)

    def test_bad_background_color(self) -> None:
        with pytest.raises(InvalidArgument):
            _standard(background_color="white")

    def test_aspect_ratio(self) -> None:
        assert _standard(width_mm=30, height_mm=60).aspect_ratio == pytest.approx(0.5)


class TestSheetSizes:
    """Tests for sheet size catalogue."""

    def test_sheet_sizes_registered(self) -> None:
        assert SHEET_SIZES.keys() == ["4x6", "5x7", "a4", "letter", "a5"]

    def test_a4(self) -> None:
        a4 = get_sheet_size("a4")
        assert (a4.width_mm, a4.height_mm, a4.dpi) == (210, 297, 300)
        assert a4.pixel_size() == (2480, 3508)
        assert a4.pixel_size(0.5) == (1240, 1754)

    def test_unknown_sheet_raises(self) -> None:
        with pytest.raises(InvalidArgument, match="Unknown sheet size"):
            get_sheet_size("b0")

    @pytest.mark.parametrize("dpi", [0, -1, 300.0, True])
    def test_dpi_must_be_positive_int(self, dpi) -> None:
        with pytest.raises(InvalidArgument):
            SheetSize(id="x", name="X", width_mm=100, height_mm=100, dpi=dpi)

    def test_numpy_integer_dpi(self) -> None:
        assert SheetSize(id="x", name="X", width_mm=100, height_mm=100, dpi=np.int64(600)).dpi == 600

    @pytest.mark.parametrize("width,height", [(0, 100), (float("nan"), 100), (100, float("inf"))])
    def test_size_positive_and_finite(self, width: float, height: float) -> None:
        with pytest.raises(InvalidArgument):
            SheetSize(id="x", name="X", width_mm=width, height_mm=height)

    def test_sheet_list(self) -> None:
        assert [s["id"] for s in get_sheet_list()] == SHEET_SIZES.keys()
