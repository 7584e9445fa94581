"""
Tests for metadata reading

Covers the fallback chains:
- FNumber -> APEX ApertureValue
- ExposureTime -> APEX ShutterSpeedValue
- ISOSpeedRatings -> PhotographicSensitivity
and reading real EXIF through the Pillow toolchain.
"""

import logging
import math
from pathlib import Path

import pytest

from photobar.image.toolchain import ProbeFailure
from photobar.metadata.exif_reader import (
    UNRESOLVED,
    DecimalValue,
    MetadataReader,
    MetadataRecord,
    RationalValue,
    format_decimal,
    format_exposure_seconds,
    parse_rational,
)

from conftest import create_exif


class TestRationalParsing:
    """Test tolerant parsing of "a/b" and plain numbers"""

    def test_parse_fraction(self):
        """Should parse a/b into a rational"""
        value = parse_rational("28/10")

        assert isinstance(value, RationalValue)
        assert value.value == pytest.approx(2.8)
        assert str(value) == "28/10"

    def test_parse_plain_number(self):
        """Should parse plain numbers into a decimal"""
        assert parse_rational("0.004") == DecimalValue(0.004)
        assert parse_rational(" 8 ") == DecimalValue(8.0)

    @pytest.mark.parametrize("text", ["", "   ", "abc", "1/x", "/", "f/2.8"])
    def test_unparseable_input_is_unresolved(self, text):
        """Should yield UNRESOLVED instead of raising"""
        assert parse_rational(text) is UNRESOLVED

    def test_zero_denominator_is_unresolved(self):
        """Should not divide by zero"""
        assert parse_rational("1/0") is UNRESOLVED

    def test_none_is_unresolved(self):
        """Should treat a missing value as unresolved"""
        assert parse_rational(None) is UNRESOLVED


class TestDisplayFormatting:
    """Test one-decimal rounding and exposure display"""

    def test_trailing_zero_stripped(self):
        assert format_decimal(2.0) == "2"
        assert format_decimal(8.04) == "8"

    def test_rounded_to_one_decimal(self):
        assert format_decimal(5.656854) == "5.7"
        assert format_decimal(2.8) == "2.8"

    def test_short_exposure_as_fraction(self):
        assert format_exposure_seconds(0.004) == "1/250"
        assert format_exposure_seconds(0.5) == "1/2"

    def test_long_exposure_in_seconds(self):
        assert format_exposure_seconds(1.0) == "1s"
        assert format_exposure_seconds(2.5) == "2.5s"
        assert format_exposure_seconds(30.0) == "30s"

    def test_non_positive_exposure_not_displayed(self):
        assert format_exposure_seconds(0.0) == ""
        assert format_exposure_seconds(-1.0) == ""


class TestFNumberResolution:
    """Test FNumber with APEX ApertureValue fallback"""

    def test_direct_rational(self):
        """Should convert a rational FNumber to one decimal"""
        assert MetadataReader.resolve_f_number({"FNumber": "28/10"}) == "2.8"

    def test_direct_decimal(self):
        """Should keep a plain FNumber, trailing zero stripped"""
        assert MetadataReader.resolve_f_number({"FNumber": "4.0"}) == "4"

    def test_direct_value_preferred_over_apex(self):
        """Should ignore ApertureValue when FNumber is present"""
        fields = {"FNumber": "56/10", "ApertureValue": "2"}
        assert MetadataReader.resolve_f_number(fields) == "5.6"

    @pytest.mark.parametrize("av", ["2", "3", "5", "497/100", "6"])
    def test_apex_fallback(self, av):
        """Should derive sqrt(2) ** Av when FNumber is missing"""
        apex = parse_rational(av).value
        expected = f"{round(math.sqrt(2) ** apex, 1):.1f}"
        if expected.endswith(".0"):
            expected = expected[:-2]

        assert MetadataReader.resolve_f_number({"ApertureValue": av}) == expected

    def test_apex_examples(self):
        """Should match familiar f-stops"""
        assert MetadataReader.resolve_f_number({"ApertureValue": "2"}) == "2"
        assert MetadataReader.resolve_f_number({"ApertureValue": "5"}) == "5.7"
        assert MetadataReader.resolve_f_number({"ApertureValue": "6"}) == "8"

    def test_unparseable_direct_falls_back_to_apex(self):
        """Should fall back when FNumber is garbage"""
        fields = {"FNumber": "n/a", "ApertureValue": "4"}
        assert MetadataReader.resolve_f_number(fields) == "4"

    def test_nothing_available(self):
        """Should resolve to an empty string"""
        assert MetadataReader.resolve_f_number({}) == ""
        assert MetadataReader.resolve_f_number({"FNumber": "", "ApertureValue": "junk"}) == ""


class TestExposureResolution:
    """Test ExposureTime with APEX ShutterSpeedValue fallback"""

    def test_direct_fraction_kept(self):
        """Should keep a fractional ExposureTime as written"""
        assert MetadataReader.resolve_exposure({"ExposureTime": "1/250"}) == "1/250"

    def test_direct_bare_number_reformatted(self):
        """Should format a bare ExposureTime like an APEX-derived one"""
        assert MetadataReader.resolve_exposure({"ExposureTime": "0.004"}) == "1/250"
        assert MetadataReader.resolve_exposure({"ExposureTime": "2.5"}) == "2.5s"
        assert MetadataReader.resolve_exposure({"ExposureTime": "4"}) == "4s"

    @pytest.mark.parametrize("tv", ["797/100", "7", "1", "0", "-1", "-1.32"])
    def test_apex_fallback(self, tv):
        """Should derive t = 2 ** -Tv when ExposureTime is missing"""
        t = 2 ** -parse_rational(tv).value
        if t < 1:
            expected = f"1/{round(1 / t)}"
        else:
            expected = f"{round(t, 1):.1f}"
            if expected.endswith(".0"):
                expected = expected[:-2]
            expected += "s"

        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": tv}) == expected

    def test_apex_examples(self):
        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": "797/100"}) == "1/251"
        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": "7"}) == "1/128"
        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": "-1"}) == "2s"
        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": "0"}) == "1s"

    def test_zero_exposure_falls_back_to_apex(self):
        """Should not show a zero exposure time"""
        fields = {"ExposureTime": "0", "ShutterSpeedValue": "8"}
        assert MetadataReader.resolve_exposure(fields) == "1/256"

    def test_nothing_available(self):
        assert MetadataReader.resolve_exposure({}) == ""
        assert MetadataReader.resolve_exposure({"ShutterSpeedValue": "fast"}) == ""


class TestIsoAndModel:
    """Test ISO candidates and the model default"""

    def test_first_iso_candidate(self):
        fields = {"ISOSpeedRatings": "400", "PhotographicSensitivity": "800"}
        assert MetadataReader.resolve_iso(fields) == "400"

    def test_second_iso_candidate(self):
        fields = {"ISOSpeedRatings": "", "PhotographicSensitivity": "800"}
        assert MetadataReader.resolve_iso(fields) == "800"

    def test_no_iso(self):
        assert MetadataReader.resolve_iso({}) == ""

    def test_model_defaults_to_camera(self):
        assert MetadataReader.resolve({}).model == "Camera"
        assert MetadataReader.resolve({"Model": "   "}).model == "Camera"

    def test_model_trimmed(self):
        assert MetadataReader.resolve({"Model": " Canon EOS R5 "}).model == "Canon EOS R5"

    def test_record_is_immutable(self):
        record = MetadataRecord()
        with pytest.raises(AttributeError):
            record.model = "Other"


class TestReadingFiles:
    """Test reading through the Pillow toolchain"""

    def test_read_direct_tags(self, toolchain, make_image, nikon_exif):
        """Should resolve direct EXIF tags"""
        path = make_image("nikon.jpg", exif=nikon_exif)
        record = MetadataReader(toolchain).read_metadata(path)

        assert record == MetadataRecord(model="Nikon D90", f_number="2.8", exposure="1/250", iso="400")

    def test_read_apex_tags(self, toolchain, make_image):
        """Should fall back to APEX values written by the camera"""
        exif = create_exif(
            Model="Canon EOS 40D",
            ApertureValue=(6, 1),
            ShutterSpeedValue=(7, 1),
        )
        path = make_image("apex.jpg", exif=exif)
        record = MetadataReader(toolchain).read_metadata(path)

        assert record.model == "Canon EOS 40D"
        assert record.f_number == "8"
        assert record.exposure == "1/128"
        assert record.iso == ""

    def test_read_without_exif(self, toolchain, make_image):
        """Should return defaults for images without EXIF"""
        path = make_image("plain.png")

        assert MetadataReader(toolchain).read_metadata(path) == MetadataRecord()

    def test_read_nonexistent_file(self, toolchain):
        """Should return defaults instead of raising"""
        record = MetadataReader(toolchain).read_metadata(Path("nonexistent.jpg"))

        assert record == MetadataRecord()

    def test_read_not_an_image(self, toolchain, tmp_path):
        """Should return defaults for garbage files"""
        path = tmp_path / "notes.jpg"
        path.write_text("not an image")

        assert MetadataReader(toolchain).read_metadata(path) == MetadataRecord()

    def test_read_from_corrupt_pixels(self, toolchain, corrupt_jpeg):
        """Should still read the header of an image with broken pixel data"""
        record = MetadataReader(toolchain).read_metadata(corrupt_jpeg)

        assert record.model == "Nikon D90"
        assert record.iso == "400"

    def test_toolchain_failure_absorbed(self):
        """Should absorb any toolchain error"""

        class BrokenToolchain:
            def read_fields(self, path, fields):
                raise ProbeFailure("boom", path)

        record = MetadataReader(BrokenToolchain()).read_metadata(Path("x.jpg"))
        assert record == MetadataRecord()

    def test_failure_logged_at_debug(self, toolchain, caplog):
        """Should note the unreadable file in the debug log"""
        with caplog.at_level(logging.DEBUG, logger="photobar.metadata.exif_reader"):
            MetadataReader(toolchain).read_metadata(Path("nonexistent.jpg"))

        assert "No metadata for nonexistent.jpg: Cannot read metadata from nonexistent.jpg" in caplog.text
