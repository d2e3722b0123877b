"""
Randomized image augmentation pipeline.

Operations are appended to a Pipeline through its fluent API and replayed, each behind its own
probability gate, against every image drawn by the sampler.
"""

from .buffer import PixelBuffer
from .generator import UniformGenerator
from .kernels import BoxKernel, GaussianKernel
from .operations import Blur, Crop, Flip, FlipAxis, Invert, Operation, RandomErase, RapidBlur, Resize, Rotate, Zoom
from .pipeline import Pipeline, Sampler

__all__ = [
    "Blur",
    "BoxKernel",
    "Crop",
    "Flip",
    "FlipAxis",
    "GaussianKernel",
    "Invert",
    "Operation",
    "Pipeline",
    "PixelBuffer",
    "RandomErase",
    "RapidBlur",
    "Resize",
    "Rotate",
    "Sampler",
    "UniformGenerator",
    "Zoom",
]
