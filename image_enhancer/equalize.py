"""
Luminance histogram equalization.

Equalizes a global 256-bin luma histogram and rescales each pixel's RGB
uniformly to its new luma, so brightness is remapped while the ratios between
channels (hue) are kept.
"""

from typing import Tuple
import numpy as np

from .io import check_image


NUM_BINS = 256
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
LUMA_EPS = 1e-6


def compute_luma(img: np.ndarray) -> np.ndarray:
    """
    Per-pixel luma Y = 0.299 R + 0.587 G + 0.114 B.

    Args:
        img: RGB image (H, W, 3)

    Returns:
        float32 luma map (H, W), not clamped
    """
    img = img.astype(np.float32, copy=False)
    wr, wg, wb = LUMA_WEIGHTS
    return wr * img[:, :, 0] + wg * img[:, :, 1] + wb * img[:, :, 2]


def luma_bins(luma: np.ndarray) -> np.ndarray:
    """
    Quantize luma to bin indices round(clamp01(Y) * 255).

    Halves round away from zero.
    """
    scaled = np.clip(luma, 0.0, 1.0) * (NUM_BINS - 1)
    return np.floor(scaled + 0.5).astype(np.intp)


def luma_histogram(img: np.ndarray) -> np.ndarray:
    """
    256-bin histogram of quantized luma.

    Args:
        img: RGB image (H, W, 3) float in [0, 1]

    Returns:
        int64 array of 256 pixel counts summing to H * W
    """
    bins = luma_bins(compute_luma(img))
    return np.bincount(bins.ravel(), minlength=NUM_BINS).astype(np.int64)


def luma_cdf(hist: np.ndarray) -> np.ndarray:
    """
    Cumulative distribution of a histogram as fractions of the total count.

    Args:
        hist: Non-negative bin counts

    Returns:
        float64 array, non-decreasing, last entry exactly 1.0

    Raises:
        ValueError: If the histogram is empty
    """
    cumulative = np.cumsum(hist, dtype=np.int64)
    total = int(cumulative[-1]) if cumulative.size else 0
    if total <= 0:
        raise ValueError("Cannot build a CDF from an empty histogram")

    return cumulative / total


def equalization_scale(img: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Compute the per-pixel luma gain that maps each pixel onto the equalized CDF.

    Returns:
        Tuple of (scale map (H, W) float32, cdf (256,) float64)
    """
    luma = compute_luma(img)
    bins = luma_bins(luma)

    hist = np.bincount(bins.ravel(), minlength=NUM_BINS)
    cdf = luma_cdf(hist)

    y_new = cdf[bins].astype(np.float32)
    # Near-black pixels divide by eps instead of Y and may be brightened slightly.
    scale = y_new / np.maximum(luma, np.float32(LUMA_EPS))

    return scale, cdf


def equalize_luminance(img: np.ndarray) -> np.ndarray:
    """
    Hue-preserving global histogram equalization.

    For every pixel, scale = cdf[bin(Y)] / max(Y, 1e-6); R, G and B are all
    multiplied by scale and clamped to [0, 1]. Channels pushed above 1 are
    clipped independently, which can desaturate the brightest pixels.

    Args:
        img: RGB image (H, W, 3) float in [0, 1]. Not modified.

    Returns:
        Equalized float32 image in [0, 1]

    Example:
        >>> flat = np.full((4, 4, 3), 0.2, dtype=np.float32)
        >>> np.allclose(equalize_luminance(flat), 1.0)
        True
    """
    check_image(img)

    scale, _ = equalization_scale(img)
    result = img.astype(np.float32) * scale[:, :, np.newaxis]

    return np.clip(result, 0.0, 1.0, out=result)
