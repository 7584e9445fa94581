"""
Image Pipeline

Turns each source image into a watermarked full-size tier and a thumbnail
tier. Every file goes through:

    primary:  read metadata -> probe -> normalize -> resize (full, thumb)
              -> watermark full -> move into place
    fallback: re-read metadata -> resize original -> watermark both tiers
    failure:  plain-text placeholder in both tiers

Files are processed one at a time, and a failure in one file never stops
the others. Scratch copies live outside the input directory unless a work
directory is configured. Only ToolUnavailable ends the run.
"""

import shutil
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..image.formats import FormatDetector
from ..image.toolchain import ImageToolchain, ToolchainError, ToolUnavailable
from ..logging_setup import get_logger
from ..metadata.exif_reader import MetadataReader
from ..models.metadata_record import MetadataRecord
from ..models.processing_result import ProcessingOutcome, ProcessingResult
from ..watermark.compositor import WatermarkCompositor

logger = get_logger(__name__)

FULL_BOX: Tuple[int, int] = (1024, 1024)
THUMB_BOX: Tuple[int, int] = (512, 512)
FULL_QUALITY = 80
THUMB_QUALITY = 70

# Width-scaled text on a thumbnail would be too small to read
FALLBACK_THUMB_POINT_SIZE = 12

SCRATCH_PREFIX = "temp_"
SCRATCH_DIR_PREFIX = "photobar-"
PLACEHOLDER_TEMPLATE = "ERROR PROCESSING: {filename}\n{error}"

ProgressCallback = Callable[[int, int, ProcessingResult], None]


class FallbackFailure(Exception):
    """The fallback path failed; the file gets placeholder output"""


@dataclass(frozen=True)
class TierPaths:
    """Destination paths of one source image"""
    full: Path
    thumb: Path


def placeholder_text(filename: str, error: str) -> str:
    """Plain-text payload written in place of an image that could not be produced"""
    return PLACEHOLDER_TEMPLATE.format(filename=filename, error=error)


class ImagePipeline:
    """Sequential per-file processor with a two-stage fallback"""

    def __init__(
        self,
        toolchain: ImageToolchain,
        full_dir: Union[str, Path],
        thumb_dir: Union[str, Path],
        work_dir: Optional[Union[str, Path]] = None
    ):
        """
        Args:
            toolchain: Backend for every image operation
            full_dir: Destination of the watermarked full-size tier
            thumb_dir: Destination of the thumbnail tier
            work_dir: Where scratch copies go (default: a private temporary
                directory per file, never the input directory)
        """
        self.toolchain = toolchain
        self.reader = MetadataReader(toolchain)
        self.compositor = WatermarkCompositor(toolchain)
        self.full_dir = Path(full_dir)
        self.thumb_dir = Path(thumb_dir)
        self.work_dir = Path(work_dir) if work_dir is not None else None

    def tier_paths(self, source: Path) -> TierPaths:
        return TierPaths(full=self.full_dir / source.name, thumb=self.thumb_dir / source.name)

    @staticmethod
    def scratch_path(directory: Path, source: Path, tier: str = "") -> Path:
        """Scratch copy named after the source, e.g. temp_full_IMG_0001.jpg"""
        prefix = f"{SCRATCH_PREFIX}{tier}_" if tier else SCRATCH_PREFIX
        return directory / f"{prefix}{source.name}"

    @contextmanager
    def scratch_dir(self) -> Iterator[Path]:
        """The configured work directory, or a temporary one removed on exit"""
        if self.work_dir is not None:
            yield self.work_dir
            return

        with tempfile.TemporaryDirectory(prefix=SCRATCH_DIR_PREFIX) as directory:
            yield Path(directory)

    def ensure_output_dirs(self) -> None:
        self.full_dir.mkdir(parents=True, exist_ok=True)
        self.thumb_dir.mkdir(parents=True, exist_ok=True)
        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)

    def run_primary(self, source: Path) -> MetadataRecord:
        """
        Normalize, resize and watermark through scratch copies.

        Metadata is read from the original before anything else touches it.
        Outputs only replace the destinations once every step has succeeded,
        and scratch copies are removed whatever happens.

        Returns:
            The metadata burned into the full tier

        Raises:
            ToolchainError: If probing, conversion, resizing or watermarking fails
        """
        metadata = self.reader.read_metadata(source)
        self.toolchain.probe(source)

        paths = self.tier_paths(source)

        with self.scratch_dir() as directory:
            normalized = self.scratch_path(directory, source)
            full_scratch = self.scratch_path(directory, source, "full")
            thumb_scratch = self.scratch_path(directory, source, "thumb")

            try:
                self.toolchain.normalize(source, normalized)

                self.toolchain.resize(normalized, full_scratch, FULL_BOX, FULL_QUALITY)
                self.toolchain.resize(normalized, thumb_scratch, THUMB_BOX, THUMB_QUALITY)

                self.compositor.apply_watermark(full_scratch, full_scratch, metadata, quality=FULL_QUALITY)

                shutil.move(str(full_scratch), str(paths.full))
                shutil.move(str(thumb_scratch), str(paths.thumb))
            finally:
                self._discard(normalized, full_scratch, thumb_scratch)

        return metadata

    def run_fallback(self, source: Path) -> MetadataRecord:
        """
        Resize the original straight into both tiers and watermark both.

        Metadata is read again rather than reused from the primary attempt.

        Raises:
            FallbackFailure: If any step fails
            ToolUnavailable: If the toolchain itself has gone away
        """
        metadata = self.reader.read_metadata(source)
        paths = self.tier_paths(source)

        try:
            self.toolchain.resize(source, paths.full, FULL_BOX, FULL_QUALITY)
            self.toolchain.resize(source, paths.thumb, THUMB_BOX, THUMB_QUALITY)

            self.compositor.apply_watermark(paths.full, paths.full, metadata, quality=FULL_QUALITY)
            self.compositor.apply_watermark(
                paths.thumb,
                paths.thumb,
                metadata,
                point_size=FALLBACK_THUMB_POINT_SIZE,
                quality=THUMB_QUALITY
            )
        except ToolUnavailable:
            raise
        except (ToolchainError, OSError) as e:
            raise FallbackFailure(str(e)) from e

        return metadata

    def write_placeholder(self, source: Path, error: str) -> None:
        """Write the error placeholder into both tiers"""
        text = placeholder_text(source.name, error)
        paths = self.tier_paths(source)
        for path in (paths.full, paths.thumb):
            try:
                path.write_text(text, encoding="utf-8")
            except OSError as e:
                logger.error(f"Cannot write placeholder {path}: {e}")

    def process_file(self, source: Path) -> ProcessingResult:
        """
        Process one source image.

        Args:
            source: Path to the original image

        Returns:
            ProcessingResult describing which path produced the outputs

        Raises:
            ToolUnavailable: If the toolchain cannot be invoked at all
        """
        source = Path(source)
        paths = self.tier_paths(source)
        self.ensure_output_dirs()

        logger.info(f"Processing {source.name}...")

        try:
            metadata = self.run_primary(source)
        except ToolUnavailable:
            raise
        except (ToolchainError, OSError) as e:
            primary_error = str(e)
            logger.error(f"Failed to process {source.name}: {primary_error}")
        else:
            logger.info(f"Created full size and thumbnail: {source.name}")
            return ProcessingResult(
                source=source,
                outcome=ProcessingOutcome.SUCCESS,
                full_path=paths.full,
                thumb_path=paths.thumb,
                metadata=metadata,
            )

        logger.warning(f"Trying fallback method for {source.name}...")

        try:
            metadata = self.run_fallback(source)
        except FallbackFailure as e:
            logger.error(f"Fallback failed for {source.name}: {e}")
            self.write_placeholder(source, primary_error)
            return ProcessingResult(
                source=source,
                outcome=ProcessingOutcome.FAILURE,
                full_path=paths.full,
                thumb_path=paths.thumb,
                error=primary_error,
            )

        logger.info(f"Fallback succeeded for {source.name}")
        return ProcessingResult(
            source=source,
            outcome=ProcessingOutcome.FALLBACK_SUCCESS,
            full_path=paths.full,
            thumb_path=paths.thumb,
            metadata=metadata,
            error=primary_error,
        )

    def find_sources(self, input_dir: Path) -> List[Path]:
        """
        Supported images directly inside input_dir, in name order.

        Raises:
            FileNotFoundError: If input_dir is not a directory
        """
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Images directory missing: {input_dir}")

        return sorted(
            path for path in input_dir.iterdir()
            if path.is_file()
            and FormatDetector.is_supported(path)
        )

    def process_directory(
        self,
        input_dir: Union[str, Path],
        progress_callback: Optional[ProgressCallback] = None
    ) -> List[ProcessingResult]:
        """
        Process every supported image in a directory, one after another.

        Args:
            input_dir: Directory of source images
            progress_callback: Optional callback(current, total, result)

        Returns:
            One ProcessingResult per source image
        """
        sources = self.find_sources(Path(input_dir))
        if not sources:
            logger.warning(f"No images found in {input_dir}")
            return []

        logger.info(f"Processing {len(sources)} images...")

        results = []
        total = len(sources)
        for i, source in enumerate(sources, 1):
            result = self.process_file(source)
            results.append(result)

            if progress_callback:
                progress_callback(i, total, result)

        failed = sum(1 for result in results if result.failed)
        logger.info(f"Finished processing all images ({total - failed}/{total} succeeded)")
        return results

    def _discard(self, *paths: Path) -> None:
        for path in paths:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Cannot remove scratch file {path}: {e}")
