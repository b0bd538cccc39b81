"""
Pytest configuration and fixtures for image enhancer tests.
"""
import numpy as np
import pytest
import cv2


@pytest.fixture
def rng():
    """Seeded random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def random_image(rng):
    """17x23 random RGB image in [0, 1]."""
    return rng.random((17, 23, 3), dtype=np.float32)


@pytest.fixture
def gradient_image():
    """32x48 image with horizontal red ramp, vertical green ramp and constant blue."""
    h, w = 32, 48
    img = np.zeros((h, w, 3), dtype=np.float32)
    img[:, :, 0] = np.linspace(0.0, 1.0, w, dtype=np.float32)[np.newaxis, :]
    img[:, :, 1] = np.linspace(0.0, 1.0, h, dtype=np.float32)[:, np.newaxis]
    img[:, :, 2] = 0.3
    return img


@pytest.fixture
def image_dir(tmp_path, rng):
    """Directory with one file per supported format plus files the batch must skip."""
    src = tmp_path / "images"
    src.mkdir()

    pixels = (rng.random((12, 16, 3)) * 255).astype(np.uint8)
    cv2.imwrite(str(src / "a.png"), pixels)
    # uppercase extension on disk, encoded explicitly as JPEG
    (src / "b.JPG").write_bytes(cv2.imencode(".jpg", pixels)[1].tobytes())
    cv2.imwrite(str(src / "c.bmp"), pixels)
    (src / "notes.txt").write_text("not an image")
    (src / "nested").mkdir()
    cv2.imwrite(str(src / "nested" / "d.png"), pixels)
    return src
