from functools import partial
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

import bittensor as bt

from imageaugmentor import settings
from imageaugmentor.exceptions import ConfigurationError
from imageaugmentor.schemas import OperationRecord, SampleRecord, SizeLike
from imageaugmentor.services.augmentation.buffer import PixelBuffer
from imageaugmentor.services.augmentation.generator import NULL_SEED, UniformGenerator
from imageaugmentor.services.augmentation.operations import (
    UPPER_BOUND_PROB,
    Blur,
    Crop,
    Flip,
    FlipAxis,
    Invert,
    Operation,
    RandomErase,
    RapidBlur,
    Resize,
    Rotate,
    Zoom,
)
from imageaugmentor.services.codec.image_codec import ImageCodec, PathLike

RunFunction = Callable[[PixelBuffer], Tuple[PixelBuffer, List[OperationRecord]]]


def run_operations(
    operations: Sequence[Operation], buffer: PixelBuffer
) -> Tuple[PixelBuffer, List[OperationRecord]]:
    """Applies operations in order, each one receiving the buffer returned by the previous one."""
    records = []
    for operation in operations:
        buffer, params = operation.perform(buffer)
        applied = params.pop("applied")
        records.append(OperationRecord(operation=operation.NAME, applied=applied, params=params))
    return buffer, records


class Sampler:
    """
    Draws sources from the candidate list (with replacement) and writes one augmented output per run.
    """

    def __init__(
        self,
        candidates: Sequence[str],
        output_dir: PathLike,
        codec: ImageCodec,
        quality: int = settings.DEFAULT_QUALITY,
        seed: int = NULL_SEED,
        prefix: str = settings.OUTPUT_PREFIX,
        suffix: str = settings.OUTPUT_SUFFIX,
    ):
        self.candidates = tuple(candidates)
        self.output_dir = Path(output_dir)
        self.codec = codec
        self.quality = quality
        self.prefix = prefix
        self.suffix = suffix
        self.generator = UniformGenerator(seed)

    def output_path(self, index: int) -> Path:
        """Output path of the run with the given index."""
        return self.output_dir / f"{self.prefix}{index}{self.suffix}"

    def draw(self) -> str:
        return self.candidates[self.generator.integer(0, len(self.candidates) - 1)]

    def sample(self, run: RunFunction, count: int) -> List[SampleRecord]:
        """
        Runs `count` independent augmentations.

        Args:
            run: Function applying the operation chain to one buffer
            count: Number of outputs to produce

        Returns:
            List[SampleRecord]: One record per output, in run order

        Raises:
            ConfigurationError: If count is negative or there is nothing to sample from.
            DecodeError, EncodeError: On the first source or output that fails, aborting the run.
        """
        if count < 0:
            raise ConfigurationError(f"Sample count must be non-negative, got {count}")
        if count and not self.candidates:
            raise ConfigurationError("No candidate images to sample from")

        records = []
        for index in range(count):
            source = self.draw()
            buffer, operations = run(self.codec.load(source))
            output = self.codec.save(buffer, self.output_path(index), self.quality)

            bt.logging.info(f"Sample {index + 1}/{count}: {source} -> {output}")
            records.append(SampleRecord(index=index, source=source, output=str(output), operations=operations))

        return records


class Pipeline:
    """
    Ordered chain of augmentation operations with a fluent configuration API.

    Configuration methods append one operation each and return the pipeline, so calls can be chained:

        Pipeline("photos/", "results/").resize((200, 200)).rotate(-10, 10, prob=0.5).sample(20)

    Every method takes an optional probability (default 1.0, always run) and seed (default 0,
    time-derived). `sample(count)` is the only entry point that touches the filesystem.
    """

    def __init__(
        self,
        input_dir: Optional[PathLike] = None,
        output_dir: Optional[PathLike] = None,
        extensions: Iterable[str] = settings.DEFAULT_EXTENSIONS,
        quality: int = settings.DEFAULT_QUALITY,
        seed: int = settings.DEFAULT_SEED,
        codec: Optional[ImageCodec] = None,
    ):
        """
        Args:
            input_dir: Directory scanned once for candidate images
            output_dir: Directory receiving the augmented outputs
            extensions: Candidate file suffixes
            quality: Output encoder quality (0-100)
            seed: Seed of the candidate draw, 0 for a time-derived seed
            codec: Image codec, a Pillow ImageCodec by default
        """
        self.input_dir = input_dir
        self.output_dir = output_dir
        self.quality = quality
        self.seed = seed
        self.codec = codec or ImageCodec()
        self.operations: List[Operation] = []
        self.candidates: List[str] = []

        if input_dir is not None:
            self.candidates = self.codec.list_candidates(input_dir, extensions)

        bt.logging.info(f"Pipeline initialized with {len(self.candidates)} candidate images")

    def add(self, operation: Operation) -> "Pipeline":
        self.operations.append(operation)
        bt.logging.debug(f"Added {operation!r} as step {len(self.operations)}")
        return self

    def resize(
        self,
        lower: SizeLike,
        upper: Optional[SizeLike] = None,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        """
        Resize to a size drawn between lower and upper, or to exactly `lower` when upper is omitted.

        Sizes are ImageSize objects or (height, width) pairs.
        """
        return self.add(Resize(lower, upper, prob, seed))

    def crop(
        self,
        size: SizeLike,
        center: bool = True,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        """Crop to a fixed size around the center, or at a random position when center is False."""
        return self.add(Crop(size, center, prob, seed))

    def zoom(
        self,
        min_factor: float = 1.0,
        max_factor: float = 1.0,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        return self.add(Zoom(min_factor, max_factor, prob, seed))

    def rotate(
        self,
        min_degree: float,
        max_degree: float,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        return self.add(Rotate(min_degree, max_degree, prob, seed))

    def invert(self, prob: float = UPPER_BOUND_PROB, seed: int = NULL_SEED) -> "Pipeline":
        return self.add(Invert(prob, seed))

    def flip(self, axis: Union[FlipAxis, str], prob: float = UPPER_BOUND_PROB, seed: int = NULL_SEED) -> "Pipeline":
        """Flip "Horizontal" (mirror left/right) or "Vertical" (mirror top/bottom)."""
        return self.add(Flip(axis, prob, seed))

    def blur(
        self,
        sigma: float,
        kernel_size: Optional[int] = None,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        """Gaussian blur, the kernel size is derived from sigma when omitted."""
        return self.add(Blur(sigma, kernel_size, prob, seed))

    def rapid_blur(
        self,
        sigma: float,
        passes: int = 3,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        """Pseudo Gaussian blur built from `passes` box filters."""
        return self.add(RapidBlur(sigma, passes, prob, seed))

    def random_erase(
        self,
        lower_mask: SizeLike,
        upper_mask: Optional[SizeLike] = None,
        prob: float = UPPER_BOUND_PROB,
        seed: int = NULL_SEED,
    ) -> "Pipeline":
        """Erase a random rectangle sized between the two masks. Erased pixels are lost."""
        return self.add(RandomErase(lower_mask, upper_mask, prob, seed))

    def run(self, buffer: PixelBuffer) -> Tuple[PixelBuffer, List[OperationRecord]]:
        """
        Feeds one buffer through every operation in order. The input buffer may be modified.

        Returns:
            Tuple (final buffer, one record per operation)
        """
        return run_operations(self.operations, buffer)

    def sample(self, count: int) -> List[SampleRecord]:
        """
        Creates `count` augmented images in the output directory, named output_<index>.

        Raises:
            ConfigurationError: If the pipeline has no output directory or no candidates.
        """
        if self.output_dir is None:
            raise ConfigurationError("Pipeline has no output directory")

        # the chain is fixed for the whole run
        run = partial(run_operations, tuple(self.operations))

        sampler = Sampler(self.candidates, self.output_dir, self.codec, quality=self.quality, seed=self.seed)
        bt.logging.info(f"Sampling {count} images with {len(self.operations)} operations")
        return sampler.sample(run, count)

    @staticmethod
    def save(buffer: PixelBuffer, path: PathLike, quality: int = settings.DEFAULT_QUALITY) -> Path:
        return ImageCodec().save(buffer, path, quality)

    def __len__(self) -> int:
        return len(self.operations)
