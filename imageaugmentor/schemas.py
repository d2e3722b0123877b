from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from imageaugmentor.exceptions import ConfigurationError


class ImageSize(BaseModel):
    """Height and width of an image or of a region inside one"""

    model_config = ConfigDict(frozen=True)

    height: int
    width: int

    @model_validator(mode="after")
    def _check_non_negative(self) -> "ImageSize":
        if self.height < 0 or self.width < 0:
            raise ValueError(f"size must be non-negative, got {self.height}x{self.width}")
        return self

    @classmethod
    def coerce(cls, value: "SizeLike") -> "ImageSize":
        """
        Builds an ImageSize from an ImageSize or a (height, width) pair.

        Raises:
            ConfigurationError: If the value is not a valid size.
        """
        if isinstance(value, cls):
            return value
        try:
            height, width = value
            return cls(height=height, width=width)
        except (TypeError, ValueError, ValidationError) as e:
            raise ConfigurationError(f"Invalid image size {value!r}: {e}") from e

    def as_tuple(self) -> Tuple[int, int]:
        return self.height, self.width


SizeLike = Union[ImageSize, Sequence[int]]


class SizeRange(BaseModel):
    """Randomized size interval, lower <= upper on both axes"""

    model_config = ConfigDict(frozen=True)

    lower: ImageSize
    upper: ImageSize

    @model_validator(mode="after")
    def _check_order(self) -> "SizeRange":
        if self.lower.height > self.upper.height or self.lower.width > self.upper.width:
            raise ValueError(f"lower size {self.lower.as_tuple()} exceeds upper size {self.upper.as_tuple()}")
        return self

    @classmethod
    def build(cls, lower: SizeLike, upper: Optional[SizeLike] = None) -> "SizeRange":
        lower_size = ImageSize.coerce(lower)
        upper_size = lower_size if upper is None else ImageSize.coerce(upper)
        try:
            return cls(lower=lower_size, upper=upper_size)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid size range: {e}") from e


class ScalarRange(BaseModel):
    """Randomized scalar interval used for rotation degrees and zoom factors"""

    model_config = ConfigDict(frozen=True)

    minimum: float
    maximum: float

    @model_validator(mode="after")
    def _check_order(self) -> "ScalarRange":
        if self.minimum > self.maximum:
            raise ValueError(f"minimum {self.minimum} exceeds maximum {self.maximum}")
        return self

    @classmethod
    def build(cls, minimum: float, maximum: float) -> "ScalarRange":
        try:
            return cls(minimum=minimum, maximum=maximum)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid range: {e}") from e

    def interpolate(self, factor: float) -> float:
        return self.minimum + factor * (self.maximum - self.minimum)


class OperationRecord(BaseModel):
    """What a single operation did to a sample"""

    operation: str
    applied: bool
    params: Dict[str, Any] = {}


class SampleRecord(BaseModel):
    """Provenance of one augmented output"""

    index: int
    source: str
    output: str
    operations: List[OperationRecord]
