from pathlib import Path
from typing import Iterable, List, Union

import bittensor as bt
from PIL import Image

from imageaugmentor import settings
from imageaugmentor.exceptions import DecodeError, EncodeError
from imageaugmentor.services.augmentation.buffer import PixelBuffer
from imageaugmentor.utils import array_to_image, image_to_array

PathLike = Union[str, Path]

MIN_QUALITY = 0
MAX_QUALITY = 100


class ImageCodec:
    """
    Pillow-backed file access for the sampler: decode sources, encode outputs, list candidates.
    """

    def load(self, path: PathLike) -> PixelBuffer:
        """
        Decodes an image file into a pixel buffer.

        Args:
            path: Path to the source image

        Returns:
            PixelBuffer: Grayscale images get one channel, everything else three (RGB)

        Raises:
            DecodeError: If the file is missing, unreadable or not a supported image.
        """
        try:
            with Image.open(path) as image:
                image.load()
                return PixelBuffer(image_to_array(image))
        except (OSError, ValueError) as e:
            bt.logging.error(f"Failed to decode image {path}: {e}")
            raise DecodeError(f"Could not open {path}") from e

    def save(self, buffer: PixelBuffer, path: PathLike, quality: int = settings.DEFAULT_QUALITY) -> Path:
        """
        Encodes a buffer and writes it to disk. The format follows the file extension.

        Args:
            buffer: Buffer to write
            path: Destination path, parent directories are created
            quality: Encoder quality, clamped to [0, 100]

        Returns:
            Path: The written path

        Raises:
            EncodeError: If the destination cannot be written or encoded.
        """
        clamped = min(max(quality, MIN_QUALITY), MAX_QUALITY)
        if clamped != quality:
            bt.logging.warning(f"Quality {quality} clamped to {clamped}")

        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            array_to_image(buffer.data).save(path, quality=clamped)
        except (OSError, ValueError, KeyError) as e:
            bt.logging.error(f"Failed to encode image {path}: {e}")
            raise EncodeError(f"Could not open {path} for writing") from e
        return path

    def list_candidates(
        self, directory: PathLike, extensions: Iterable[str] = settings.DEFAULT_EXTENSIONS
    ) -> List[str]:
        """
        Lists the source images of a directory, sorted by path.

        Args:
            directory: Directory to scan (not recursive)
            extensions: Accepted file suffixes, compared case-insensitively

        Raises:
            DecodeError: If the directory does not exist.
        """
        directory = Path(directory)
        if not directory.is_dir():
            bt.logging.error(f"Input directory {directory} does not exist")
            raise DecodeError(f"Input directory {directory} does not exist")

        suffixes = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
        candidates = sorted(str(p) for p in directory.iterdir() if p.is_file() and p.suffix.lower() in suffixes)

        bt.logging.info(f"Found {len(candidates)} candidate images in {directory}")
        return candidates
