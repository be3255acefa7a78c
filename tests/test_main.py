"""CLI tests for passfit/main.py using click's CliRunner."""

import os

from click.testing import CliRunner

import passfit.processor
from passfit.main import cli

from .conftest import FakeDetector, FakeRemover


class TestListingCommands:
    """Tests for the read-only commands."""

    def test_standards(self) -> None:
        result = CliRunner().invoke(cli, ["standards"])
        assert result.exit_code == 0
        assert "United Kingdom" in result.output
        assert len(result.output.strip().splitlines()) == 10

    def test_sheets(self) -> None:
        result = CliRunner().invoke(cli, ["sheets"])
        assert result.exit_code == 0
        assert "US Letter" in result.output

    def test_layout(self) -> None:
        result = CliRunner().invoke(cli, ["layout", "--standard", "uk", "--sheet", "a4"])
        assert result.exit_code == 0
        assert "5 x 6 = 30" in result.output
        assert "2480x3508px" in result.output

    def test_layout_unknown_standard(self) -> None:
        result = CliRunner().invoke(cli, ["layout", "--standard", "atlantis"])
        assert result.exit_code != 0
        assert "Unknown standard" in result.output

    def test_layout_negative_margin(self) -> None:
        result = CliRunner().invoke(cli, ["layout", "--standard", "us", "--margin", "-1"])
        assert result.exit_code != 0


class TestProcessCommand:
    """Tests for `passfit process` with fake models."""

    def test_writes_photo_and_sheet(self, portrait_path: str, tmp_path, monkeypatch) -> None:
        class _Processor(passfit.processor.PhotoProcessor):
            def __init__(self):
                super().__init__(detector=FakeDetector(), remover=FakeRemover())

        monkeypatch.setattr(passfit.processor, "PhotoProcessor", _Processor)
        out_dir = tmp_path / "out"

        result = CliRunner().invoke(
            cli, ["process", portrait_path, "--standard", "uk", "--sheet", "4x6",
                  "--output-dir", str(out_dir)],
        )

        assert result.exit_code == 0, result.output
        assert "Compliance Report - United Kingdom" in result.output
        files = sorted(os.listdir(out_dir))
        assert "uk_photo.jpg" in files
        assert any(f.startswith("passport-photos-GB-4x6-") for f in files)

    def test_background_preset_is_resolved(self, portrait_path: str, tmp_path, monkeypatch) -> None:
        remover = FakeRemover()

        class _Processor(passfit.processor.PhotoProcessor):
            def __init__(self):
                super().__init__(detector=FakeDetector(), remover=remover)

        monkeypatch.setattr(passfit.processor, "PhotoProcessor", _Processor)

        result = CliRunner().invoke(
            cli, ["process", portrait_path, "--standard", "us", "--background", "light-blue",
                  "--output-dir", str(tmp_path / "out")],
        )

        assert result.exit_code == 0, result.output
        assert remover.colors == ["#E6F0FF"]
