"""
Conversion pipeline: decodes source images, normalizes them, and writes XNB containers.
Handles single files and flat directories, one conversion at a time.
"""

import time
import logging
from pathlib import Path
from typing import List, Optional, Union
from dataclasses import dataclass, field

from .config import ConverterConfig
from .errors import OutputError, UsageError, XnbPipelineError
from .processing.encoder import EncodingOptions, XnbEncoder
from .processing.normalizer import CanonicalImage, ImageNormalizer, NormalizationConfig
from .utils.image import ImageUtils


@dataclass
class ConversionResult:
    """Result of converting one source image."""
    source: Path
    destination: Path
    width: int
    height: int
    bytes_written: int
    duration: float


@dataclass
class PipelineState:
    """State of a pipeline run."""
    results: List[ConversionResult] = field(default_factory=list)
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    @property
    def files_converted(self) -> int:
        return len(self.results)

    @property
    def total_bytes(self) -> int:
        return sum(result.bytes_written for result in self.results)

    @property
    def duration(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return self.end_time - self.start_time


class ConversionPipeline:
    """
    Converts image files into XNB Texture2D containers.

    A directory input is converted file by file in sorted name order and the
    run stops at the first failure.
    """

    def __init__(self, config: Optional[ConverterConfig] = None):
        self.config = config or ConverterConfig()
        self.state = PipelineState()
        self.logger = self._setup_logging()

        self.normalizer = ImageNormalizer(
            NormalizationConfig(zero_transparent_rgb=self.config.zero_transparent_rgb)
        )
        self.encoder = XnbEncoder(
            EncodingOptions(compressed=self.config.compressed, reach=self.config.reach)
        )

    def _setup_logging(self) -> logging.Logger:
        """Set up logging for the pipeline."""
        logger = logging.getLogger("xnb_pipeline")
        logger.setLevel(self.config.log_level.upper())

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def run(self, input_path: Union[str, Path],
            output_path: Optional[Union[str, Path]] = None) -> PipelineState:
        """
        Convert a file or a directory of files.

        Args:
            input_path: Source image file or directory
            output_path: Destination file or directory; required for directory input

        Returns:
            Pipeline state with one result per converted file

        Raises:
            UsageError: If the input/output combination is invalid
            XnbPipelineError: On the first conversion failure
        """
        input_path = Path(input_path)
        output_path = Path(output_path) if output_path is not None else None

        jobs = self.plan(input_path, output_path)

        self.state = PipelineState(start_time=time.time())
        self.logger.info(f"Converting {len(jobs)} file(s) from {input_path}")

        for source, destination in jobs:
            result = self.convert_file(source, destination)
            self.state.results.append(result)

        self.state.end_time = time.time()
        self.logger.info(
            f"Converted {self.state.files_converted} file(s), {self.state.total_bytes} bytes "
            f"in {self.state.duration:.2f}s"
        )
        return self.state

    def plan(self, input_path: Path, output_path: Optional[Path]) -> List[tuple[Path, Path]]:
        """
        Resolve (source, destination) pairs without touching any output.

        Raises:
            UsageError: If a directory input lacks an existing output directory
        """
        if input_path.is_dir():
            if output_path is None:
                raise UsageError("An output directory is required when the input is a directory", input_path)
            if not output_path.is_dir():
                raise UsageError(f"Output path is not an existing directory: {output_path}", output_path)

            sources = sorted(
                entry for entry in input_path.iterdir()
                if entry.is_file() and self.config.matches_input(entry)
            )
            if not sources:
                self.logger.warning(f"No files matching {self.config.input_extensions} in {input_path}")
            return [(source, self.destination_for(source, output_path)) for source in sources]

        return [(input_path, self.destination_for(input_path, output_path))]

    def destination_for(self, source: Path, output_path: Optional[Path]) -> Path:
        """Output file for a source: beside it, inside a directory, or the explicit path."""
        if output_path is None:
            return source.with_suffix(self.config.output_extension)
        if output_path.is_dir():
            return output_path / (source.stem + self.config.output_extension)
        return output_path

    def convert_file(self, source: Path, destination: Path) -> ConversionResult:
        """
        Convert one image file into one XNB file.

        A destination that was created before the failure is removed, so no
        truncated container is left behind.

        Raises:
            InputError: If the source cannot be decoded
            UnsupportedFeatureError: If compression is configured
            OutputError: If the destination cannot be written
        """
        start = time.time()
        self.logger.debug(f"Decoding {source}")
        image = ImageUtils.load_image(source, self.config.format_hint or None)
        canonical = self.normalizer.normalize(image)

        bytes_written = self.write_xnb(canonical, destination)

        result = ConversionResult(
            source=source,
            destination=destination,
            width=canonical.width,
            height=canonical.height,
            bytes_written=bytes_written,
            duration=time.time() - start,
        )
        self.logger.info(f"{source} -> {destination} ({canonical.width}x{canonical.height}, {bytes_written} bytes)")
        return result

    def write_xnb(self, image: CanonicalImage, destination: Path) -> int:
        """Encode a canonical image to a file."""
        try:
            outfile = open(destination, 'wb')
        except OSError as e:
            raise OutputError(f"Cannot create {destination}: {e}", destination) from e

        try:
            with outfile:
                return self.encoder.encode(image, outfile)
        except XnbPipelineError as e:
            if e.path is None:
                e.path = destination
            self._remove_partial_output(destination)
            raise
        except OSError as e:
            self._remove_partial_output(destination)
            raise OutputError(f"Cannot write {destination}: {e}", destination) from e

    def _remove_partial_output(self, destination: Path) -> None:
        try:
            destination.unlink(missing_ok=True)
            self.logger.debug(f"Removed partial output {destination}")
        except OSError as e:
            self.logger.warning(f"Could not remove partial output {destination}: {e}")
