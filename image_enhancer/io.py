"""
Image I/O utilities for the enhancement pipeline.

Handles decoding files into float RGB images and encoding them back, keeping
the in-memory representation fixed: shape (H, W, 3), dtype float32, RGB
order, values in [0, 1].
"""

from pathlib import Path
from typing import Union
import numpy as np
import cv2


JPEG_QUALITY = 95


class DecodeError(ValueError):
    """Raised when a source cannot be read or is not a recognized raster."""


class EncodeError(ValueError):
    """Raised when an image cannot be encoded or written."""


def check_image(img: np.ndarray) -> None:
    """
    Validate the caller contract for pipeline images.

    Violations are programming errors, not bad external data.

    Raises:
        ValueError: If img is not a non-empty (H, W, 3) floating point array
    """
    if not isinstance(img, np.ndarray):
        raise ValueError("Image must be a numpy array")

    if img.ndim != 3 or img.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {img.shape}")

    if img.shape[0] == 0 or img.shape[1] == 0:
        raise ValueError("Image must not be empty")

    if not np.issubdtype(img.dtype, np.floating):
        raise ValueError(f"Image must be floating point, got {img.dtype}")


def decode_image(data: bytes) -> np.ndarray:
    """
    Decode an encoded raster (PNG, JPEG, BMP, ...) held in memory.

    Grayscale sources are expanded to 3 channels and alpha is dropped.

    Args:
        data: Encoded image bytes

    Returns:
        RGB image with shape (H, W, 3), dtype float32, values in [0, 1]

    Raises:
        DecodeError: If the bytes are not a recognized raster format
    """
    buf = np.frombuffer(data, dtype=np.uint8)
    if buf.size == 0:
        raise DecodeError("Empty image data")

    try:
        img_bgr = cv2.imdecode(buf, cv2.IMREAD_COLOR)
    except cv2.error as exc:
        raise DecodeError(f"Could not decode image: {exc}") from exc

    if img_bgr is None:
        raise DecodeError("Unrecognized image format")

    img_rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
    return convert_to_float(img_rgb)


def read_image(path: Union[str, Path]) -> np.ndarray:
    """
    Read an RGB image from file path.

    Args:
        path: Path to image file

    Returns:
        RGB image as float32 array with shape (H, W, 3) and values in [0, 1]

    Raises:
        DecodeError: If the file is missing, unreadable or not a valid image

    Example:
        >>> img = read_image("portrait.jpg")
        >>> print(img.shape, img.dtype)
        (480, 640, 3) float32
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DecodeError(f"Could not open image: {path}") from exc

    try:
        return decode_image(data)
    except DecodeError as exc:
        raise DecodeError(f"Could not read image from: {path} ({exc})") from exc


def encode_image(img: np.ndarray, fmt: str = ".png", quality: int = JPEG_QUALITY) -> bytes:
    """
    Encode a float RGB image into PNG, JPEG or BMP bytes.

    Args:
        img: RGB image with shape (H, W, 3) and values in [0, 1]
        fmt: Target format as an extension (".png", "jpg", ".JPEG", ...).
            Anything unrecognized or empty falls back to PNG.
        quality: JPEG quality (0-100), only used for JPEG

    Returns:
        Encoded image bytes

    Raises:
        EncodeError: If the image is not a valid RGB array or encoding fails
    """
    try:
        check_image(img)
    except ValueError as exc:
        raise EncodeError(str(exc)) from exc

    ext = fmt.lower() if fmt else ""
    if ext and not ext.startswith("."):
        ext = "." + ext

    # Set encoding parameters based on format
    if ext in [".jpg", ".jpeg"]:
        ext, encode_params = ".jpg", [cv2.IMWRITE_JPEG_QUALITY, int(quality)]
    elif ext == ".bmp":
        encode_params = []
    else:
        ext, encode_params = ".png", []

    img_bgr = cv2.cvtColor(convert_to_uint8(img), cv2.COLOR_RGB2BGR)

    try:
        success, buf = cv2.imencode(ext, img_bgr, encode_params)
    except cv2.error as exc:
        raise EncodeError(f"Could not encode image as {ext}: {exc}") from exc

    if not success:
        raise EncodeError(f"Could not encode image as {ext}")

    return buf.tobytes()


def save_image(img: np.ndarray, path: Union[str, Path], quality: int = JPEG_QUALITY) -> None:
    """
    Save an RGB image to file path.

    The format follows the file extension; unknown extensions are written as
    PNG under the given name.

    Args:
        img: RGB image array with shape (H, W, 3) and values in [0, 1]
        path: Output file path
        quality: JPEG quality (0-100), only used for JPEG files

    Raises:
        EncodeError: If encoding or writing fails

    Example:
        >>> save_image(enhanced_img, "output/portrait.jpg")
    """
    path = Path(path)
    data = encode_image(img, path.suffix, quality)

    try:
        # Create output directory if it doesn't exist
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise EncodeError(f"Failed to save image to: {path}") from exc


def convert_to_float(img: np.ndarray) -> np.ndarray:
    """
    Convert uint8 image to float32 in range [0, 1].

    Args:
        img: Image array with dtype uint8

    Returns:
        Image array with dtype float32 in range [0, 1]
    """
    if img.dtype == np.uint8:
        return img.astype(np.float32) / 255.0
    return img.astype(np.float32)


def convert_to_uint8(img: np.ndarray) -> np.ndarray:
    """
    Convert float image to uint8 in range [0, 255], rounding to nearest.

    Args:
        img: Image array with dtype float32/float64 in range [0, 1]

    Returns:
        Image array with dtype uint8 in range [0, 255]
    """
    if np.issubdtype(img.dtype, np.floating):
        # floor(x + 0.5) rounds halves up, np.rint would round them to even
        return np.floor(np.clip(img, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    return img.astype(np.uint8)
