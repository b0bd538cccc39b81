"""
Unsharp masking.

Detail is the difference between an image and its Gaussian-blurred copy;
adding a scaled copy of the detail back to the original sharpens edges and
fine texture.
"""

import numpy as np

from .convolution import gaussian_blur
from .io import check_image


def extract_detail(img: np.ndarray, blurred: np.ndarray) -> np.ndarray:
    """
    Signed detail signal (original - blurred), not clamped.

    Args:
        img: Original RGB image (H, W, 3)
        blurred: Blurred copy of img with the same shape

    Returns:
        float32 array of the same shape with values in [-1, 1]
    """
    if img.shape != blurred.shape:
        raise ValueError(f"Shape mismatch: {img.shape} vs {blurred.shape}")
    return img.astype(np.float32) - blurred.astype(np.float32)


def unsharp_mask(img: np.ndarray, sigma: float, radius: int, amount: float) -> np.ndarray:
    """
    Sharpen an image by re-adding amplified detail.

    new = clamp01(original + amount * (original - blur(original)))

    Args:
        img: RGB image (H, W, 3) float in [0, 1]. Not modified.
        sigma: Gaussian spread of the reference blur, > 0
        radius: Kernel radius of the reference blur, >= 0
        amount: Detail gain. 0 leaves the image unchanged, values above 1
            sharpen aggressively.

    Returns:
        Sharpened float32 image in [0, 1]

    Example:
        >>> sharpened = unsharp_mask(img, sigma=1.3, radius=2, amount=1.1)
    """
    check_image(img)
    original = img.astype(np.float32)

    blurred = gaussian_blur(original, radius, sigma)
    detail = extract_detail(original, blurred)

    sharpened = original + np.float32(amount) * detail
    return np.clip(sharpened, 0.0, 1.0, out=sharpened)
