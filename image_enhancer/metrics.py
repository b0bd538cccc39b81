"""
Quality metrics for assessing enhancement results.

All metrics are computed on the 8-bit renditions of the images, which is what
ends up on disk.
"""

from typing import Dict
import numpy as np
from sklearn.metrics import mean_squared_error
from scipy.stats import entropy

from .equalize import compute_luma
from .io import convert_to_uint8


def compute_metrics(original: np.ndarray, enhanced: np.ndarray) -> Dict[str, float]:
    """
    Compute the per-image metrics reported by the batch driver.

    Args:
        original: Original RGB image (H, W, 3), float in [0, 1] or uint8
        enhanced: Enhanced RGB image of the same shape

    Returns:
        Dictionary with mean luma, brightness/contrast change, entropy,
        PSNR and MAE

    Example:
        >>> metrics = compute_metrics(img, enhance_image(img))
        >>> print(f"PSNR: {metrics['psnr']:.2f} dB")
    """
    orig_u8 = convert_to_uint8(original)
    enh_u8 = convert_to_uint8(enhanced)

    return {
        'input_mean_luma': compute_mean_luma(orig_u8),
        'output_mean_luma': compute_mean_luma(enh_u8),
        'brightness_enhancement': compute_brightness_enhancement(orig_u8, enh_u8),
        'contrast_enhancement': compute_contrast_enhancement(orig_u8, enh_u8),
        'input_entropy': compute_entropy(orig_u8),
        'output_entropy': compute_entropy(enh_u8),
        'psnr': compute_psnr(orig_u8, enh_u8),
        'mae': compute_mae(orig_u8, enh_u8),
    }


def compute_mean_luma(image: np.ndarray) -> float:
    """Mean luma in [0, 1] of a uint8 RGB image."""
    return float(np.mean(compute_luma(image.astype(np.float32) / 255.0)))


def compute_psnr(reference: np.ndarray, enhanced: np.ndarray) -> float:
    """
    Compute Peak Signal-to-Noise Ratio.

    Args:
        reference: Reference image uint8
        enhanced: Enhanced image uint8

    Returns:
        PSNR value in dB, inf for identical images
    """
    mse = mean_squared_error(reference.astype(np.float64).ravel(),
                             enhanced.astype(np.float64).ravel())
    if mse == 0:
        return float('inf')

    max_pixel = 255.0
    return float(20 * np.log10(max_pixel / np.sqrt(mse)))


def compute_mae(reference: np.ndarray, enhanced: np.ndarray) -> float:
    """
    Compute Mean Absolute Error.

    Args:
        reference: Reference image uint8
        enhanced: Enhanced image uint8

    Returns:
        MAE value in 8-bit levels
    """
    return float(np.mean(np.abs(reference.astype(np.float32) - enhanced.astype(np.float32))))


def compute_brightness_enhancement(original: np.ndarray, enhanced: np.ndarray) -> float:
    """Relative change of mean luma, (enhanced - original) / original."""
    orig_mean = compute_mean_luma(original)
    enh_mean = compute_mean_luma(enhanced)
    return float((enh_mean - orig_mean) / (orig_mean + 1e-6))


def compute_contrast_enhancement(original: np.ndarray, enhanced: np.ndarray) -> float:
    """
    Compute contrast enhancement factor.

    Args:
        original: Original image uint8
        enhanced: Enhanced image uint8

    Returns:
        Relative change of the pixel standard deviation
    """
    orig_contrast = np.std(original.astype(np.float32))
    enh_contrast = np.std(enhanced.astype(np.float32))

    enhancement = (enh_contrast - orig_contrast) / (orig_contrast + 1e-6)
    return float(enhancement)


def compute_entropy(image: np.ndarray) -> float:
    """
    Compute luma entropy as information content measure.

    Args:
        image: Input image uint8

    Returns:
        Entropy in bits, 0 for a flat image and at most 8
    """
    luma = compute_luma(image.astype(np.float32) / 255.0)
    hist, _ = np.histogram(np.clip(luma, 0.0, 1.0), bins=256, range=(0.0, 1.0))

    return float(entropy(hist, base=2))
