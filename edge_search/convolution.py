"""
2D convolution of a single-channel buffer against a square kernel.

Computes a cross-correlation (the kernel is not flipped) over the
interior of the image only. Output pixels closer than K // 2 to any edge
are never written and stay zero; callers must not read meaning into
them.

Two output modes:
    float      — raw signed sums, float32, unclamped
    quantized  — sums clamped to [0, 255], then truncated into uint8
"""

import numpy as np


def _check_inputs(image: np.ndarray, kernel: np.ndarray) -> int:
    if image.ndim != 2:
        raise ValueError(f"Expected a 2D image, got shape {image.shape}")
    if kernel.ndim != 2 or kernel.shape[0] != kernel.shape[1]:
        raise ValueError(f"Kernel must be square, got shape {kernel.shape}")

    size = kernel.shape[0]
    if size % 2 == 0:
        raise ValueError(f"Kernel side must be odd, got {size}")
    if size > min(image.shape):
        raise ValueError(
            f"Kernel side {size} exceeds image shape {image.shape}"
        )
    return size // 2


def quantize_response(response: np.ndarray) -> np.ndarray:
    """
    Clamp raw sums to [0, 255] and truncate them to uint8.

    Clamping happens before truncation: 255.6 -> 255, 254.7 -> 254,
    -3.0 -> 0.
    """
    return np.clip(response, 0.0, 255.0).astype(np.uint8)


def convolve(image: np.ndarray,
             kernel: np.ndarray,
             quantize: bool = False) -> np.ndarray:
    """
    Apply a kernel to the interior of an image.

    out[y, x] = sum over (fy, fx) of
                kernel[fy, fx] * image[y + fy - pad, x + fx - pad]

    for pad <= y < H - pad and pad <= x < W - pad, with pad = K // 2.

    Args:
        image: 2D intensity buffer (float [0, 1] or uint8 [0, 255]).
        kernel: Square kernel with odd side length K <= min(H, W).
        quantize: Store clamped, truncated uint8 values instead of the
                  raw float32 sums.

    Returns:
        Buffer with the same shape as image; the border ring is zero.

    Raises:
        ValueError: If the image or kernel shape is unusable.
    """
    pad = _check_inputs(image, kernel)
    size = kernel.shape[0]
    height, width = image.shape

    source = image.astype(np.float64, copy=False)
    inner_h = height - 2 * pad
    inner_w = width - 2 * pad

    interior = np.zeros((inner_h, inner_w), dtype=np.float64)
    for fy in range(size):
        for fx in range(size):
            weight = float(kernel[fy, fx])
            if weight == 0.0:
                continue
            interior += weight * source[fy:fy + inner_h, fx:fx + inner_w]

    if quantize:
        output = np.zeros((height, width), dtype=np.uint8)
        output[pad:height - pad, pad:width - pad] = quantize_response(interior)
    else:
        output = np.zeros((height, width), dtype=np.float32)
        output[pad:height - pad, pad:width - pad] = interior
    return output
