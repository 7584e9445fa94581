"""
EXIF Metadata Reading

Resolves the camera model, f-number, exposure time and ISO shown in the
watermark bar. Cameras populate different tag sets, so each value has a
fallback chain:

- f-number: FNumber, then the APEX ApertureValue (f = sqrt(2) ** Av)
- exposure: ExposureTime, then the APEX ShutterSpeedValue (t = 2 ** -Tv)
- ISO: ISOSpeedRatings, then PhotographicSensitivity

Nothing here raises. A value that cannot be resolved by any path becomes an
empty string, and the model falls back to "Camera".
"""

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

from ..image.toolchain import METADATA_FIELDS, ImageToolchain
from ..logging_setup import get_logger
from ..models.metadata_record import DEFAULT_MODEL, MetadataRecord

logger = get_logger(__name__)


@dataclass(frozen=True)
class Unresolved:
    """A tag value that is missing or could not be parsed"""


@dataclass(frozen=True)
class RationalValue:
    """A tag value written as "a/b" (denominator never zero)"""
    numerator: float
    denominator: float

    @property
    def value(self) -> float:
        return self.numerator / self.denominator

    def __str__(self) -> str:
        return f"{_trim(self.numerator)}/{_trim(self.denominator)}"


@dataclass(frozen=True)
class DecimalValue:
    """A tag value written as a plain number"""
    value: float


ExifValue = Union[Unresolved, RationalValue, DecimalValue]

UNRESOLVED = Unresolved()


def _trim(number: float) -> str:
    if float(number).is_integer():
        return str(int(number))
    return str(number)


def format_decimal(number: float) -> str:
    """Round to one decimal and drop a trailing ".0" (2.0 -> "2", 5.66 -> "5.7")"""
    text = f"{round(number, 1):.1f}"
    if text.endswith(".0"):
        text = text[:-2]
    return text


def format_exposure_seconds(seconds: float) -> str:
    """
    Format an exposure time for display.

    Times under a second become a fraction ("1/250"), longer ones seconds
    with a suffix ("2.5s", "30s"). Non-positive times are not displayable.
    """
    if not math.isfinite(seconds) or seconds <= 0:
        return ""
    if seconds < 1:
        denominator = 1 / seconds
        if not math.isfinite(denominator):
            return ""
        return f"1/{round(denominator)}"
    return f"{format_decimal(seconds)}s"


def parse_rational(text: str) -> ExifValue:
    """
    Parse "a/b" or a plain number.

    Empty or non-numeric input and zero denominators yield UNRESOLVED.
    """
    if not text or not text.strip():
        return UNRESOLVED

    text = text.strip()
    try:
        if "/" in text:
            numerator, denominator = (float(part) for part in text.split("/", 1))
            if denominator == 0:
                return UNRESOLVED
            return RationalValue(numerator, denominator)
        return DecimalValue(float(text))
    except ValueError:
        return UNRESOLVED


def _numeric(value: ExifValue) -> Optional[float]:
    """Float value of a parsed tag, or None when unresolved or not finite"""
    if isinstance(value, Unresolved):
        return None
    number = value.value
    return number if math.isfinite(number) else None


class MetadataReader:
    """Reads a MetadataRecord through an image toolchain"""

    def __init__(self, toolchain: ImageToolchain):
        self.toolchain = toolchain

    def read_metadata(self, path: Path) -> MetadataRecord:
        """
        Read display metadata from an untouched original image.

        Args:
            path: Path to the original (pre-strip) image file

        Returns:
            MetadataRecord; defaults for anything that could not be resolved
        """
        try:
            fields = self.toolchain.read_fields(path, METADATA_FIELDS)
        except Exception as e:
            logger.debug(f"No metadata for {path.name}: {e}")
            return MetadataRecord()

        return self.resolve(fields)

    @staticmethod
    def resolve(fields: Mapping[str, str]) -> MetadataRecord:
        """
        Build a record from raw field strings (missing keys count as empty).
        """
        model = (fields.get("Model") or "").strip()
        return MetadataRecord(
            model=model or DEFAULT_MODEL,
            f_number=MetadataReader.resolve_f_number(fields),
            exposure=MetadataReader.resolve_exposure(fields),
            iso=MetadataReader.resolve_iso(fields),
        )

    @staticmethod
    def resolve_f_number(fields: Mapping[str, str]) -> str:
        """FNumber, else sqrt(2) ** ApertureValue; always one-decimal display"""
        direct = _numeric(parse_rational(fields.get("FNumber", "")))
        if direct is not None and direct > 0:
            return format_decimal(direct)

        apex = _numeric(parse_rational(fields.get("ApertureValue", "")))
        if apex is None:
            return ""
        try:
            return format_decimal(math.sqrt(2) ** apex)
        except OverflowError:
            return ""

    @staticmethod
    def resolve_exposure(fields: Mapping[str, str]) -> str:
        """ExposureTime (fractions kept verbatim), else 2 ** -ShutterSpeedValue"""
        direct = parse_rational(fields.get("ExposureTime", ""))
        if isinstance(direct, RationalValue):
            seconds = _numeric(direct)
            if seconds is not None and seconds > 0:
                return str(direct)
        elif isinstance(direct, DecimalValue):
            exposure = format_exposure_seconds(direct.value)
            if exposure:
                return exposure

        apex = _numeric(parse_rational(fields.get("ShutterSpeedValue", "")))
        if apex is None:
            return ""
        try:
            return format_exposure_seconds(2 ** -apex)
        except OverflowError:
            return ""

    @staticmethod
    def resolve_iso(fields: Mapping[str, str]) -> str:
        """First non-empty ISO candidate"""
        for field in ("ISOSpeedRatings", "PhotographicSensitivity"):
            value = (fields.get(field) or "").strip()
            if value:
                return value
        return ""
