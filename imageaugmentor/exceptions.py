class AugmentorError(Exception):
    """Base class for every error raised by imageaugmentor."""


class ConfigurationError(AugmentorError, ValueError):
    """Raised when an operation or pipeline is configured with invalid parameters."""


class BoundsError(AugmentorError, IndexError):
    """Raised when a transform references coordinates outside of the pixel buffer."""


class ImageIOError(AugmentorError, OSError):
    """Raised when an image cannot be read from or written to disk."""


class DecodeError(ImageIOError):
    """Raised when a source image is missing, unreadable or in an unsupported format."""


class EncodeError(ImageIOError):
    """Raised when an augmented image cannot be encoded or written."""
