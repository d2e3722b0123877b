import numpy as np
from PIL import Image

# Modes kept as-is when decoding, everything else is converted to RGB
NATIVE_MODES = ("L", "RGB")


def image_to_array(image: Image.Image) -> np.ndarray:
    """
    Converts a PIL Image to a (height, width, channels) uint8 array.

    Args:
        image: PIL Image object in any mode

    Returns:
        np.ndarray: One channel for grayscale images, three (RGB) for everything else
    """
    if image.mode not in NATIVE_MODES:
        image = image.convert("RGB")

    array = np.array(image, dtype=np.uint8)
    if array.ndim == 2:
        array = array[:, :, np.newaxis]
    return array


def array_to_image(array: np.ndarray) -> Image.Image:
    """Converts a (height, width, channels) uint8 array back to a PIL Image."""
    if array.shape[2] == 1:
        return Image.fromarray(np.ascontiguousarray(array[:, :, 0]))
    return Image.fromarray(np.ascontiguousarray(array))
