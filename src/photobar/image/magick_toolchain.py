"""
ImageMagick Toolchain

Runs the image operations through the ImageMagick command line. Commands are
passed as argument lists, never through a shell.
"""

import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from ..logging_setup import get_logger
from ..models.geometry import TEXT_MARGIN, ImageDimensions, WatermarkSpec
from .formats import FormatDetector
from .toolchain import (
    METADATA_FIELDS,
    CompositeFailure,
    ConvertFailure,
    ImageToolchain,
    ProbeFailure,
    ResizeFailure,
    ToolUnavailable,
)

logger = get_logger(__name__)

BAR_FILL = "rgba(0,0,0,0.5)"
TEXT_FILL = "white"


def escape_annotation_text(text: str) -> str:
    """
    Escape characters ImageMagick interprets inside -annotate text.

    Backslashes and percent signs are escape introducers, and a leading "@"
    would make ImageMagick read the text from a file.
    """
    escaped = text.replace("\\", "\\\\").replace("%", "%%")
    if escaped.startswith("@"):
        escaped = "\\" + escaped
    return escaped


def find_commands() -> Optional[Tuple[List[str], List[str]]]:
    """
    Locate ImageMagick 7 (`magick`) or the ImageMagick 6 pair.

    Returns:
        (convert_cmd, identify_cmd) or None if ImageMagick is not installed
    """
    magick = shutil.which("magick")
    if magick:
        return [magick], [magick, "identify"]

    convert = shutil.which("convert")
    identify = shutil.which("identify")
    if convert and identify:
        return [convert], [identify]

    return None


class MagickToolchain(ImageToolchain):
    """Toolchain backed by the ImageMagick CLI"""

    name = "magick"

    def __init__(self, convert_cmd: List[str], identify_cmd: List[str], font_path: Optional[str] = None):
        self.convert_cmd = list(convert_cmd)
        self.identify_cmd = list(identify_cmd)
        self.font_path = font_path

    @classmethod
    def detect(cls, font_path: Optional[str] = None) -> "MagickToolchain":
        """Build a toolchain from the commands on PATH, raising ToolUnavailable"""
        commands = find_commands()
        if commands is None:
            raise ToolUnavailable("missing ImageMagick (need `magick` or both `convert` + `identify`)")
        convert_cmd, identify_cmd = commands
        return cls(convert_cmd, identify_cmd, font_path=font_path)

    def _run(self, cmd: List[str], failure: type, path: Path, action: str) -> str:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.run(cmd, text=True, capture_output=True)
        except OSError as e:
            raise ToolUnavailable(f"Cannot run {cmd[0]}: {e}", path) from e

        if proc.returncode != 0:
            detail = proc.stderr.strip() or f"exit status {proc.returncode}"
            raise failure(f"Cannot {action} {path.name}: {detail}", path)
        return proc.stdout

    @staticmethod
    def _quality_args(target: Path, quality: Optional[int]) -> List[str]:
        if quality is None or not FormatDetector.is_lossy(target):
            return []
        return ["-quality", str(quality)]

    def read_fields(self, path: Path, fields: Sequence[str] = METADATA_FIELDS) -> Dict[str, str]:
        fmt = "\n".join(f"%[EXIF:{field}]" for field in fields)
        cmd = self.identify_cmd + ["-format", fmt, f"{path}[0]"]
        output = self._run(cmd, ProbeFailure, path, "read metadata from")

        lines = output.split("\n")
        lines += [""] * (len(fields) - len(lines))
        return {field: line.strip() for field, line in zip(fields, lines)}

    def probe(self, path: Path) -> ImageDimensions:
        cmd = self.identify_cmd + ["-ping", "-format", "%w %h", f"{path}[0]"]
        output = self._run(cmd, ProbeFailure, path, "identify")

        try:
            width, height = (int(part) for part in output.split()[:2])
        except ValueError as e:
            raise ProbeFailure(f"Cannot identify {path.name}: unexpected output {output!r}", path) from e

        return ImageDimensions(width=width, height=height)

    def normalize(self, source: Path, target: Path) -> None:
        cmd = self.convert_cmd + [str(source), "-auto-orient", "-strip", str(target)]
        self._run(cmd, ConvertFailure, source, "normalize")

    def resize(self, source: Path, target: Path, box: Tuple[int, int], quality: int) -> None:
        # ">" only ever shrinks, matching Pillow's thumbnail()
        cmd = self.convert_cmd + [
            str(source),
            "-resize", f"{box[0]}x{box[1]}>",
        ] + self._quality_args(target, quality) + [str(target)]
        self._run(cmd, ResizeFailure, source, "resize")

    def annotate(
        self,
        source: Path,
        target: Path,
        dimensions: ImageDimensions,
        spec: WatermarkSpec,
        text: str,
        quality: Optional[int] = None
    ) -> None:
        cmd = self.convert_cmd + [
            str(source),
            "-fill", BAR_FILL,
            "-draw", f"rectangle 0,{spec.bar_top} {dimensions.width},{dimensions.height}",
            "-fill", TEXT_FILL,
            "-pointsize", str(spec.point_size),
        ]
        if self.font_path:
            cmd += ["-font", self.font_path]
        cmd += [
            "-gravity", "SouthWest",
            "-annotate", f"+{TEXT_MARGIN}+{spec.text_offset}",
            escape_annotation_text(text),
        ]
        cmd += self._quality_args(target, quality) + [str(target)]

        self._run(cmd, CompositeFailure, source, "watermark")
