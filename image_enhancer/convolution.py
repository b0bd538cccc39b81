"""
Separable convolution for 3-channel float images.

A 2-D Gaussian blur is applied as a horizontal 1-D pass followed by a vertical
1-D pass. Borders use clamp-to-edge: out-of-range coordinates read the nearest
valid pixel, so edges are neither darkened nor wrapped.
"""

import numpy as np

from .io import check_image
from .kernel import gaussian_kernel_1d


def convolve_separable(img: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Convolve an RGB image with a symmetric 1-D kernel along both axes.

    Args:
        img: RGB image (H, W, 3) float in [0, 1]. Not modified.
        kernel: 1-D kernel of odd length 2*radius + 1

    Returns:
        New float32 image of the same shape, clamped to [0, 1]

    Raises:
        ValueError: If img is not a valid image or kernel length is even

    Example:
        >>> blurred = convolve_separable(img, gaussian_kernel_1d(2, 1.3))
    """
    check_image(img)
    kernel = np.asarray(kernel, dtype=np.float32)
    if kernel.ndim != 1 or kernel.size % 2 == 0:
        raise ValueError(f"Kernel must be 1-D with odd length, got shape {kernel.shape}")

    src = img.astype(np.float32)

    # Horizontal pass into an intermediate buffer, vertical pass into the result
    tmp = _convolve_axis(src, kernel, axis=1)
    dst = _convolve_axis(tmp, kernel, axis=0)

    return np.clip(dst, 0.0, 1.0, out=dst)


def gaussian_blur(img: np.ndarray, radius: int, sigma: float) -> np.ndarray:
    """
    Gaussian blur with clamp-to-edge borders.

    Args:
        img: RGB image (H, W, 3) float in [0, 1]
        radius: Kernel radius, >= 0
        sigma: Gaussian spread, > 0

    Returns:
        Blurred float32 image
    """
    return convolve_separable(img, gaussian_kernel_1d(radius, sigma))


def _convolve_axis(data: np.ndarray, kernel: np.ndarray, axis: int) -> np.ndarray:
    """Weighted sum of shifted copies of data along one axis (0 = rows, 1 = columns)."""
    radius = kernel.size // 2
    n = data.shape[axis]

    pad_width = [(0, 0)] * data.ndim
    pad_width[axis] = (radius, radius)
    # 'edge' replicates the border sample for any pad width, even past the image size
    padded = np.pad(data, pad_width, mode="edge")

    out = np.zeros_like(data)
    for i, weight in enumerate(kernel):
        if axis == 0:
            window = padded[i:i + n]
        else:
            window = padded[:, i:i + n]
        out += weight * window

    return out
