"""
Fixed convolution kernel banks.

A kernel bank is an ordered set of square, odd-sided weight arrays that
the feature extractor applies one by one. Three banks are defined:

    directional   — 5x5 horizontal / vertical / +45 / -45 edge kernels
    directional3  — 3x3 reduction of the same four directions
    edge          — single 5x5 "enhance center, suppress ring" kernel

All kernel arrays are created once at import and marked read-only.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np


def _frozen(rows) -> np.ndarray:
    kernel = np.array(rows, dtype=np.float32)
    kernel.setflags(write=False)
    return kernel


@dataclass(frozen=True)
class KernelBank:
    """Named, ordered collection of (direction, kernel) pairs."""

    name: str
    kernels: Tuple[Tuple[str, np.ndarray], ...]

    @property
    def directions(self) -> Tuple[str, ...]:
        return tuple(direction for direction, _ in self.kernels)

    @property
    def size(self) -> int:
        """Kernel side length shared by every kernel in the bank."""
        return self.kernels[0][1].shape[0]

    def __len__(self) -> int:
        return len(self.kernels)


# --- 5x5 directional kernels ---

HORIZONTAL_5X5 = _frozen([
    [0, 0, 0, 0, 0],
    [1, 1, 1, 1, 1],
    [0, 0, 0, 0, 0],
    [-1, -1, -1, -1, -1],
    [0, 0, 0, 0, 0],
])

VERTICAL_5X5 = _frozen([
    [0, 1, 0, -1, 0],
    [0, 1, 0, -1, 0],
    [0, 1, 0, -1, 0],
    [0, 1, 0, -1, 0],
    [0, 1, 0, -1, 0],
])

DIAGONAL_45_5X5 = _frozen([
    [0, 0, 0, 1, 0],
    [0, 1, 1, 0, -1],
    [0, 1, 0, -1, 0],
    [1, 0, -1, -1, 0],
    [0, -1, 0, 0, 0],
])

DIAGONAL_MINUS_45_5X5 = _frozen([
    [0, -1, 0, 0, 0],
    [1, 0, -1, -1, 0],
    [0, 1, 0, -1, 0],
    [0, 1, 1, 0, -1],
    [0, 0, 0, 1, 0],
])

# --- 3x3 directional kernels ---

HORIZONTAL_3X3 = _frozen([
    [1, 1, 1],
    [0, 0, 0],
    [-1, -1, -1],
])

VERTICAL_3X3 = _frozen([
    [1, 0, -1],
    [1, 0, -1],
    [1, 0, -1],
])

DIAGONAL_45_3X3 = _frozen([
    [0, 1, 1],
    [-1, 0, 1],
    [-1, -1, 0],
])

DIAGONAL_MINUS_45_3X3 = _frozen([
    [1, 1, 0],
    [1, 0, -1],
    [0, -1, -1],
])

# --- Single edge-enhancement kernel (zero-sum) ---

EDGE_ENHANCE_5X5 = _frozen([
    [-1, -1, -1, -1, -1],
    [-1, -1, -1, -1, -1],
    [-1, -1, 24, -1, -1],
    [-1, -1, -1, -1, -1],
    [-1, -1, -1, -1, -1],
])


DIRECTIONAL_BANK = KernelBank("directional", (
    ("horizontal", HORIZONTAL_5X5),
    ("vertical", VERTICAL_5X5),
    ("diagonal_45", DIAGONAL_45_5X5),
    ("diagonal_minus_45", DIAGONAL_MINUS_45_5X5),
))

DIRECTIONAL3_BANK = KernelBank("directional3", (
    ("horizontal", HORIZONTAL_3X3),
    ("vertical", VERTICAL_3X3),
    ("diagonal_45", DIAGONAL_45_3X3),
    ("diagonal_minus_45", DIAGONAL_MINUS_45_3X3),
))

EDGE_BANK = KernelBank("edge", (
    ("edge", EDGE_ENHANCE_5X5),
))

KERNEL_BANKS: Dict[str, KernelBank] = {
    bank.name: bank for bank in (DIRECTIONAL_BANK, DIRECTIONAL3_BANK, EDGE_BANK)
}


def get_kernel_bank(name: str) -> KernelBank:
    """
    Look up a kernel bank by name.

    Raises:
        ValueError: If no bank with that name exists.
    """
    try:
        return KERNEL_BANKS[name]
    except KeyError:
        raise ValueError(
            f"Unknown kernel bank '{name}', expected one of "
            f"{sorted(KERNEL_BANKS)}"
        ) from None
