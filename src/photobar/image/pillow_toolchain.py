"""
Pillow Toolchain

In-process implementation of the image toolchain.
"""

from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont, ImageOps
from PIL.TiffImagePlugin import IFDRational

from ..models.geometry import TEXT_MARGIN, ImageDimensions, WatermarkSpec
from .formats import FormatDetector, ImageFormat
from .toolchain import (
    METADATA_FIELDS,
    CompositeFailure,
    ConvertFailure,
    ImageToolchain,
    ProbeFailure,
    ResizeFailure,
)


EXIF_IFD = 0x8769

FIELD_TAGS: Dict[str, int] = {
    "Model": 0x0110,
    "FNumber": 0x829D,
    "ApertureValue": 0x9202,
    "ExposureTime": 0x829A,
    "ShutterSpeedValue": 0x9201,
    "ISOSpeedRatings": 0x8827,
    "PhotographicSensitivity": 0x8833,  # ISOSpeed, EXIF 2.3
}

FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/Library/Fonts/Arial Unicode.ttf",
    "/Library/Fonts/Arial.ttf",
    "C:\\Windows\\Fonts\\seguisym.ttf",
    "C:\\Windows\\Fonts\\arial.ttf",
)

# Used for characters the text font has no glyph for
EMOJI_FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/noto/NotoColorEmoji.ttf",
    "/usr/share/fonts/noto/NotoColorEmoji.ttf",
    "/usr/share/fonts/google-noto-emoji/NotoColorEmoji.ttf",
    "/usr/share/fonts/truetype/noto/NotoEmoji-Regular.ttf",
    "/usr/share/fonts/truetype/ancient-scripts/Symbola_hint.ttf",
    "/System/Library/Fonts/Apple Color Emoji.ttc",
    "C:\\Windows\\Fonts\\seguiemj.ttf",
)

# Strike sizes of bitmap color fonts (Noto: 109, Apple: 20-160)
BITMAP_EMOJI_SIZES = (109, 160, 96, 64, 48, 40, 32, 20)

# Unassigned code point; every font draws its missing-glyph box for it
NOTDEF_CHAR = "\U000E0FFF"
CAMERA_ICON = "\U0001F4F7"

BAR_FILL = (0, 0, 0, 128)
TEXT_FILL = (255, 255, 255, 255)

# Scratch copies are re-encoded once more, keep them close to lossless
NORMALIZE_QUALITY = 95
DEFAULT_QUALITY = 90


def load_font(font_path: Optional[str], size: int) -> ImageFont.ImageFont:
    """
    Try the configured font, then common system fonts, then Pillow's default.
    """
    candidates = [font_path] if font_path else []
    candidates += FONT_CANDIDATES

    for candidate in candidates:
        if not Path(candidate).exists():
            continue
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue

    return ImageFont.load_default(size=size)


@lru_cache(maxsize=None)
def load_emoji_font(size: int) -> Optional[Tuple[ImageFont.FreeTypeFont, int]]:
    """
    Find an installed emoji font.

    Returns:
        (font, loaded_size) or None. Bitmap color fonts only load at their
        strike sizes, so loaded_size may differ from size and the glyphs
        must be scaled.
    """
    for candidate in EMOJI_FONT_CANDIDATES:
        if not Path(candidate).exists():
            continue
        for loaded_size in (size,) + BITMAP_EMOJI_SIZES:
            try:
                return ImageFont.truetype(candidate, loaded_size), loaded_size
            except OSError:
                continue

    return None


def _glyph_mask(font: ImageFont.ImageFont, text: str) -> Tuple[Tuple[int, int], bytes]:
    left, top, right, bottom = font.getbbox(text)
    mask = Image.new("L", (max(1, right - left), max(1, bottom - top)))
    ImageDraw.Draw(mask).text((-left, -top), text, font=font, fill=255)
    return mask.size, mask.tobytes()


def has_glyph(font: ImageFont.ImageFont, char: str) -> bool:
    """Check that font draws char as something other than its missing-glyph box"""
    return _glyph_mask(font, char) != _glyph_mask(font, NOTDEF_CHAR)


def _text_runs(font: ImageFont.ImageFont, text: str) -> List[Tuple[str, bool]]:
    """Split text into (run, covered) pieces by whether font has the glyphs"""
    coverage: Dict[str, bool] = {}
    runs: List[Tuple[str, bool]] = []

    for char in text:
        if char not in coverage:
            coverage[char] = has_glyph(font, char)
        covered = coverage[char]
        if runs and runs[-1][1] == covered:
            runs[-1] = (runs[-1][0] + char, covered)
        else:
            runs.append((char, covered))

    return runs


def _draw_camera_pictogram(overlay: Image.Image, x: float, baseline: int, size: int) -> float:
    """Draw a camera outline for fonts without the emoji; returns its advance"""
    draw = ImageDraw.Draw(overlay)
    width = round(size * 1.2)
    body_height = round(size * 0.75)
    top = baseline - body_height
    left = round(x)

    draw.rectangle([left + width // 5, top - size // 6, left + width // 2, top], fill=TEXT_FILL)
    draw.rounded_rectangle([left, top, left + width, baseline], radius=max(1, size // 6), fill=TEXT_FILL)

    radius = body_height * 0.3
    cx, cy = left + width / 2, top + body_height / 2
    draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=BAR_FILL)
    return width


def _draw_emoji_glyph(overlay: Image.Image, x: float, baseline: int, char: str, size: int) -> Optional[float]:
    """Draw char with an installed emoji font; None when there is none or it fails"""
    emoji = load_emoji_font(size)
    if emoji is None:
        return None

    emoji_font, loaded_size = emoji
    scale = size / loaded_size
    try:
        left, top, right, bottom = emoji_font.getbbox(char, mode="RGBA", anchor="ls")
        tile = Image.new("RGBA", (max(1, right - left), max(1, bottom - top)), (0, 0, 0, 0))
        ImageDraw.Draw(tile).text(
            (-left, -top), char, font=emoji_font, fill=TEXT_FILL, anchor="ls", embedded_color=True
        )
        advance = emoji_font.getlength(char, mode="RGBA") * scale
    except (OSError, ValueError):
        return None

    if scale != 1:
        tile = tile.resize(
            (max(1, round(tile.width * scale)), max(1, round(tile.height * scale))),
            Image.Resampling.LANCZOS,
        )
    overlay.paste(tile, (round(x + left * scale), round(baseline + top * scale)), tile)
    return advance


def _draw_fallback_glyph(overlay: Image.Image, x: float, baseline: int, char: str, font, size: int) -> float:
    """Draw one character the text font lacks; returns its advance"""
    advance = _draw_emoji_glyph(overlay, x, baseline, char, size)
    if advance is not None:
        return advance

    if char == CAMERA_ICON:
        return _draw_camera_pictogram(overlay, x, baseline, size)

    ImageDraw.Draw(overlay).text((x, baseline), char, font=font, fill=TEXT_FILL, anchor="ls")
    return font.getlength(char)


def draw_text(overlay: Image.Image, origin: Tuple[int, int], text: str, font, size: int) -> None:
    """
    Draw text left to right from a baseline origin.

    Runs the text font covers are drawn with it. Other characters (the
    camera emoji with most text fonts) go through an emoji font, or a drawn
    pictogram when no emoji font is installed.
    """
    x, baseline = origin
    draw = ImageDraw.Draw(overlay)

    for run, covered in _text_runs(font, text):
        if covered:
            draw.text((x, baseline), run, font=font, fill=TEXT_FILL, anchor="ls")
            x += font.getlength(run)
            continue
        for char in run:
            x += _draw_fallback_glyph(overlay, x, baseline, char, font, size)


def _stringify(value) -> str:
    """Render a raw EXIF value the way a command-line tool would print it"""
    if value is None:
        return ""
    if isinstance(value, IFDRational):
        if value.denominator == 0:
            return ""
        return f"{value.numerator}/{value.denominator}"
    if isinstance(value, (tuple, list)):
        return _stringify(value[0]) if value else ""
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    return str(value).strip("\x00").strip()


def _save(img: Image.Image, target: Path, quality: Optional[int]) -> None:
    """Encode img in the format named by the target extension; metadata is never carried over"""
    image_format = FormatDetector.detect_format(target)
    if image_format is None:
        raise ValueError(f"Unsupported output format: {target.suffix}")

    save_kwargs = {}
    if image_format is ImageFormat.JPEG:
        if img.mode not in ("RGB", "L"):
            img = img.convert("RGB")
    elif img.mode not in ("1", "L", "LA", "P", "RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")

    if FormatDetector.is_lossy(target):
        save_kwargs["quality"] = quality or DEFAULT_QUALITY

    img.info = {}
    img.save(target, format=image_format.value, **save_kwargs)


class PillowToolchain(ImageToolchain):
    """Toolchain backed by Pillow"""

    name = "pillow"

    def __init__(self, font_path: Optional[str] = None):
        self.font_path = font_path

    def read_fields(self, path: Path, fields: Sequence[str] = METADATA_FIELDS) -> Dict[str, str]:
        result = {field: "" for field in fields}

        try:
            with Image.open(path) as img:
                exif = img.getexif()
                values = dict(exif)

                # Most camera settings live in the EXIF sub-IFD
                try:
                    for tag_id, value in exif.get_ifd(EXIF_IFD).items():
                        values.setdefault(tag_id, value)
                except (KeyError, AttributeError):
                    pass
        except Exception as e:
            raise ProbeFailure(f"Cannot read metadata from {path.name}: {e}", path) from e

        for field in fields:
            tag = FIELD_TAGS.get(field)
            if tag is not None:
                result[field] = _stringify(values.get(tag))

        return result

    def probe(self, path: Path) -> ImageDimensions:
        try:
            with Image.open(path) as img:
                width, height = img.size
                img.verify()
        except Exception as e:
            raise ProbeFailure(f"Cannot identify {path.name}: {e}", path) from e

        return ImageDimensions(width=width, height=height)

    def normalize(self, source: Path, target: Path) -> None:
        try:
            with Image.open(source) as img:
                oriented = ImageOps.exif_transpose(img)
                _save(oriented, target, NORMALIZE_QUALITY)
        except Exception as e:
            raise ConvertFailure(f"Cannot normalize {source.name}: {e}", source) from e

    def resize(self, source: Path, target: Path, box: Tuple[int, int], quality: int) -> None:
        try:
            with Image.open(source) as img:
                img.thumbnail(box, Image.Resampling.LANCZOS)
                _save(img, target, quality)
        except Exception as e:
            raise ResizeFailure(f"Cannot resize {source.name} to {box[0]}x{box[1]}: {e}", source) from e

    def annotate(
        self,
        source: Path,
        target: Path,
        dimensions: ImageDimensions,
        spec: WatermarkSpec,
        text: str,
        quality: Optional[int] = None
    ) -> None:
        try:
            with Image.open(source) as img:
                has_alpha = "A" in img.getbands() or "transparency" in img.info
                base = img.convert("RGBA")

            width, height = base.size
            overlay = Image.new("RGBA", (width, height), (0, 0, 0, 0))
            draw = ImageDraw.Draw(overlay)
            draw.rectangle([0, spec.bar_top, width - 1, height - 1], fill=BAR_FILL)

            font = load_font(self.font_path, spec.point_size)
            draw_text(overlay, (TEXT_MARGIN, height - spec.text_offset), text, font, spec.point_size)

            out = Image.alpha_composite(base, overlay)
            if not (has_alpha and target.suffix.lower() in (".png", ".webp", ".gif")):
                out = out.convert("RGB")
            _save(out, target, quality)
        except Exception as e:
            raise CompositeFailure(f"Cannot watermark {source.name}: {e}", source) from e
