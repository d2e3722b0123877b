__version__ = "0.1.0"

from .exceptions import AugmentorError, BoundsError, ConfigurationError, DecodeError, EncodeError, ImageIOError
from .services.augmentation import Pipeline, PixelBuffer

__all__ = [
    "AugmentorError",
    "BoundsError",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "ImageIOError",
    "Pipeline",
    "PixelBuffer",
]
