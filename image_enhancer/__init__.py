"""
Detail and Tone Enhancement Pipeline

A NumPy/OpenCV package that sharpens images with unsharp masking and
rebalances their tones with hue-preserving luminance histogram equalization.
"""

__version__ = "1.0.0"

from .io import DecodeError, EncodeError, read_image, save_image, decode_image, encode_image
from .kernel import gaussian_kernel_1d
from .convolution import convolve_separable, gaussian_blur
from .sharpen import unsharp_mask
from .equalize import equalize_luminance, luma_histogram, luma_cdf
from .pipeline import SharpenParams, EnhancementRecipe, DEFAULT_RECIPE, enhance_image

__all__ = [
    "DecodeError",
    "EncodeError",
    "read_image",
    "save_image",
    "decode_image",
    "encode_image",
    "gaussian_kernel_1d",
    "convolve_separable",
    "gaussian_blur",
    "unsharp_mask",
    "equalize_luminance",
    "luma_histogram",
    "luma_cdf",
    "SharpenParams",
    "EnhancementRecipe",
    "DEFAULT_RECIPE",
    "enhance_image"
]
