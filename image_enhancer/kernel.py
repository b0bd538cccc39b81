"""
Gaussian kernel construction for separable blurring.
"""

import numpy as np


def gaussian_kernel_1d(radius: int, sigma: float) -> np.ndarray:
    """
    Build a normalized 1-D Gaussian kernel.

    Tap i (offset -radius..radius from the center) holds exp(-i^2 / (2 sigma^2)),
    then the taps are divided by their sum.

    Args:
        radius: Kernel radius, >= 0. Radius 0 gives the identity kernel [1.0].
        sigma: Gaussian spread, > 0

    Returns:
        float32 array of length 2*radius + 1 summing to 1

    Raises:
        ValueError: If radius is negative or sigma is not positive

    Example:
        >>> gaussian_kernel_1d(1, 1.0)
        array([0.27406862, 0.45186275, 0.27406862], dtype=float32)
    """
    if radius < 0:
        raise ValueError(f"radius must be >= 0, got {radius}")
    if not sigma > 0:
        raise ValueError(f"sigma must be > 0, got {sigma}")

    offsets = np.arange(-radius, radius + 1, dtype=np.float32)
    inv_2s2 = np.float32(1.0 / (2.0 * sigma * sigma))
    kernel = np.exp(-offsets * offsets * inv_2s2)

    return (kernel / kernel.sum()).astype(np.float32)
