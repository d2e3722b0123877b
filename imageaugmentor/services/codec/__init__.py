from .image_codec import ImageCodec

__all__ = ["ImageCodec"]
