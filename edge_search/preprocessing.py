"""
Image loading and normalization for edge feature extraction.

Every image entering the pipeline is decoded as a single intensity
channel and resized to a fixed square resolution, so that all feature
buffers taking part in one comparison share the same shape.

Two numeric modes are produced:
    float      — float32 intensities in [0, 1]
    quantized  — uint8 intensities in [0, 255]
"""

import os
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)

# Side length of the normalized square image.
# Configure via environment; 64 matches the reference face gallery.
IMAGE_SIZE = int(os.environ.get("EDGE_IMAGE_SIZE", "64"))


class ImageLoadError(IOError):
    """Raised when an image file cannot be opened or decoded."""

    def __init__(self, path):
        self.path = str(path)
        super().__init__(f"Could not load image: {self.path}")


def normalize_image(image_np: np.ndarray) -> np.ndarray:
    """Ensure image is uint8 format."""
    if image_np.dtype != np.uint8:
        if image_np.size and image_np.max() <= 1.0:
            image_np = (np.clip(image_np, 0.0, 1.0) * 255).astype(np.uint8)
        else:
            image_np = np.clip(image_np, 0, 255).astype(np.uint8)
    return image_np


def to_grayscale(image_np: np.ndarray) -> np.ndarray:
    """
    Collapse an RGB / RGBA image to a single intensity channel.

    Grayscale input (2D, or 3D with one channel) is returned as 2D.
    """
    if image_np.ndim == 2:
        return image_np
    if image_np.ndim != 3:
        raise ValueError(f"Expected a 2D or 3D image, got shape {image_np.shape}")

    channels = image_np.shape[2]
    if channels == 1:
        return image_np[:, :, 0]
    if channels == 3:
        return cv2.cvtColor(image_np, cv2.COLOR_RGB2GRAY)
    if channels == 4:
        return cv2.cvtColor(image_np, cv2.COLOR_RGBA2GRAY)
    raise ValueError(f"Unsupported channel count: {channels}")


def to_float(image_np: np.ndarray) -> np.ndarray:
    """Convert a uint8 intensity buffer to float32 in [0, 1]."""
    return image_np.astype(np.float32) / 255.0


def prepare_image(image_np: np.ndarray,
                  size: int = None,
                  quantize: bool = False) -> np.ndarray:
    """
    Normalize an in-memory image to a fixed square intensity buffer.

    Process:
        1. Coerce to uint8 (float images in [0, 1] are rescaled)
        2. Convert to a single grayscale channel
        3. Resize to size x size with area interpolation
        4. Convert to the requested numeric mode

    Args:
        image_np: RGB, RGBA or grayscale image, any numeric dtype.
        size: Output side length (defaults to IMAGE_SIZE).
        quantize: Return uint8 [0, 255] instead of float32 [0, 1].

    Returns:
        2D array of shape (size, size).
    """
    size = size or IMAGE_SIZE

    gray = to_grayscale(normalize_image(np.asarray(image_np)))

    if gray.shape != (size, size):
        gray = cv2.resize(gray, (size, size), interpolation=cv2.INTER_AREA)

    if quantize:
        return np.ascontiguousarray(gray, dtype=np.uint8)
    return to_float(gray)


def load_and_normalize(path,
                       size: int = None,
                       quantize: bool = False) -> np.ndarray:
    """
    Decode an image file into a fixed-size grayscale buffer.

    Args:
        path: Image file path (any format OpenCV can decode).
        size: Output side length (defaults to IMAGE_SIZE).
        quantize: Return uint8 [0, 255] instead of float32 [0, 1].

    Returns:
        2D array of shape (size, size).

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded.
    """
    image = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
    if image is None:
        raise ImageLoadError(path)

    logger.debug(f"Loaded {path}: {image.shape[1]}x{image.shape[0]}")
    return prepare_image(image, size=size, quantize=quantize)
