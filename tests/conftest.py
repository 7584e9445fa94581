"""
Shared fixtures for photobar tests

Images are synthesized with Pillow into a temporary directory, with EXIF
written through Image.Exif so that both direct tags and APEX tags can be
exercised.
"""

import os
from pathlib import Path
from typing import Optional

import pytest
from PIL import Image, ImageDraw
from PIL.TiffImagePlugin import IFDRational

from photobar.image.pillow_toolchain import PillowToolchain


EXIF_IFD = 0x8769

# IFD0 tags
IFD0_TAGS = {
    "Model": 0x0110,
    "Orientation": 0x0112,
}

# EXIF sub-IFD tags
EXIF_TAGS = {
    "ExposureTime": 0x829A,
    "FNumber": 0x829D,
    "ISOSpeedRatings": 0x8827,
    "ShutterSpeedValue": 0x9201,
    "ApertureValue": 0x9202,
}


def create_basic_image(width: int, height: int, color: tuple, text: str = "") -> Image.Image:
    """Create a simple colored image with optional text"""
    img = Image.new('RGB', (width, height), color)

    if text:
        draw = ImageDraw.Draw(img)
        draw.text((10, 10), text, fill='black')

    return img


def create_exif(**tags) -> Image.Exif:
    """
    Build EXIF from tag names.

    Rational tags take (numerator, denominator) tuples, e.g.
    create_exif(Model="Nikon D90", FNumber=(28, 10), ISOSpeedRatings=400)
    """
    exif = Image.Exif()
    exif_ifd = {}

    for name, value in tags.items():
        if isinstance(value, tuple):
            value = IFDRational(*value)
        if name in IFD0_TAGS:
            exif[IFD0_TAGS[name]] = value
        else:
            exif_ifd[EXIF_TAGS[name]] = value

    if exif_ifd:
        exif[EXIF_IFD] = exif_ifd
    return exif


@pytest.fixture
def images_dir(tmp_path) -> Path:
    directory = tmp_path / "images"
    directory.mkdir()
    return directory


@pytest.fixture
def make_image(images_dir):
    """Factory: make_image("a.jpg", size=(800, 600), exif=create_exif(...))"""

    def _make(
        name: str,
        size=(800, 600),
        color=(255, 255, 255),
        exif: Optional[Image.Exif] = None,
        directory: Optional[Path] = None
    ) -> Path:
        path = (directory or images_dir) / name
        img = create_basic_image(size[0], size[1], color)
        save_kwargs = {}
        if exif is not None:
            save_kwargs["exif"] = exif
        if path.suffix.lower() in (".jpg", ".jpeg", ".webp"):
            save_kwargs["quality"] = 95
        img.save(path, **save_kwargs)
        return path

    return _make


@pytest.fixture
def nikon_exif() -> Image.Exif:
    return create_exif(
        Model="Nikon D90",
        FNumber=(28, 10),
        ExposureTime=(1, 250),
        ISOSpeedRatings=400,
    )


@pytest.fixture
def corrupt_jpeg(images_dir, nikon_exif) -> Path:
    """
    JPEG whose header and EXIF are intact but whose pixel data is cut short.
    """
    width, height = 400, 300
    noise = Image.frombytes("RGB", (width, height), os.urandom(width * height * 3))

    complete = images_dir / "complete.jpg"
    noise.save(complete, quality=95, exif=nikon_exif)
    data = complete.read_bytes()
    complete.unlink()

    path = images_dir / "corrupt.jpg"
    path.write_bytes(data[: len(data) // 3])
    return path


@pytest.fixture
def toolchain() -> PillowToolchain:
    return PillowToolchain()
