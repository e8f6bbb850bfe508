"""
Directional edge features built from a kernel bank.

The descriptor of an image is a (C, H, W) float32 stack:
    aggregated     — C = 1, Euclidean edge magnitude over all directions
                     (or the single kernel's response for a one-kernel bank)
    per-direction  — C = len(bank), one gradient buffer per kernel
"""

import logging

import numpy as np

from .convolution import convolve
from .kernels import KernelBank

logger = logging.getLogger(__name__)


def extract_gradients(image_np: np.ndarray,
                      bank: KernelBank,
                      quantize: bool = False) -> np.ndarray:
    """
    Convolve an image with every kernel in a bank.

    Args:
        image_np: 2D buffer, float [0, 1] or uint8 [0, 255].
        bank: Kernel bank to apply, in bank order.
        quantize: Use the clamped uint8 convolution mode.

    Returns:
        Array of shape (len(bank), H, W); uint8 when quantized,
        float32 otherwise.
    """
    return np.stack([
        convolve(image_np, kernel, quantize=quantize)
        for _, kernel in bank.kernels
    ])


def aggregate_magnitude(gradients: np.ndarray) -> np.ndarray:
    """
    Combine per-direction gradients into one edge magnitude buffer.

    magnitude[p] = sqrt(sum_d gradients[d, p] ** 2)

    A single gradient is returned as-is (cast to float32): the response
    of a lone edge kernel is already the feature.
    """
    if len(gradients) == 1:
        return gradients[0].astype(np.float32)

    squared = np.square(gradients.astype(np.float64))
    return np.sqrt(squared.sum(axis=0)).astype(np.float32)


def edge_magnitude(grad_x: np.ndarray, grad_y: np.ndarray) -> np.ndarray:
    """Two-direction edge magnitude, sqrt(gx^2 + gy^2)."""
    return aggregate_magnitude(np.stack([grad_x, grad_y]))


def extract_descriptor(image_np: np.ndarray,
                       bank: KernelBank,
                       quantize: bool = False,
                       aggregate: bool = True) -> np.ndarray:
    """
    Build the feature descriptor used for distance comparison.

    Args:
        image_np: Normalized 2D buffer from preprocessing.
        bank: Kernel bank (size 1 or 4).
        quantize: Run the convolution in quantized uint8 mode.
        aggregate: Collapse directions into one magnitude channel.

    Returns:
        float32 array of shape (1, H, W) when aggregated, otherwise
        (len(bank), H, W).
    """
    gradients = extract_gradients(image_np, bank, quantize=quantize)

    if aggregate:
        descriptor = aggregate_magnitude(gradients)[np.newaxis]
    else:
        descriptor = gradients.astype(np.float32)

    logger.debug(
        f"Descriptor {descriptor.shape} from bank '{bank.name}' "
        f"(quantize={quantize}, aggregate={aggregate})"
    )
    return descriptor
