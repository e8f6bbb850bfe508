"""
Pipeline configuration.

A PipelineConfig selects the kernel bank, the convolution numeric mode,
whether directions are aggregated before comparison, and the distance
metric. Three presets reproduce the known matcher variants:

    magnitude    — 5x5 directional bank, float, aggregated, L1
    directional  — 5x5 directional bank, quantized, per-direction, L2
    edge         — single edge kernel, float, L1

Defaults can be overridden through the environment (EDGE_PIPELINE_PRESET,
EDGE_WORKERS, EDGE_IMAGE_SIZE).
"""

import os
from dataclasses import dataclass, replace
from typing import Literal

from .kernels import KERNEL_BANKS, KernelBank, get_kernel_bank
from .preprocessing import IMAGE_SIZE

MetricType = Literal["l1", "l2"]

METRICS = ("l1", "l2")

DEFAULT_PRESET = os.environ.get("EDGE_PIPELINE_PRESET", "magnitude")
DEFAULT_WORKERS = int(os.environ.get("EDGE_WORKERS", "1"))


@dataclass(frozen=True)
class PipelineConfig:
    """Feature extraction and matching settings."""

    kernel_bank: str = "directional"
    quantize: bool = False
    aggregate: bool = True
    metric: MetricType = "l1"
    image_size: int = IMAGE_SIZE
    workers: int = DEFAULT_WORKERS

    @property
    def bank(self) -> KernelBank:
        return get_kernel_bank(self.kernel_bank)

    @classmethod
    def from_preset(cls, name: str = None, **overrides) -> "PipelineConfig":
        """
        Build a config from a named preset, with optional field overrides.

        Raises:
            ValueError: If the preset name is unknown.
        """
        name = name or DEFAULT_PRESET
        if name not in PRESETS:
            msg = f"Unknown preset '{name}', expected one of {sorted(PRESETS)}"
            raise ValueError(msg)
        config = replace(PRESETS[name], **overrides)
        config.validate()
        return config

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValueError: If any parameter is invalid.
        """
        if self.kernel_bank not in KERNEL_BANKS:
            msg = f"Unknown kernel bank '{self.kernel_bank}'"
            raise ValueError(msg)
        if self.metric not in METRICS:
            msg = f"metric must be one of {METRICS}, got {self.metric!r}"
            raise ValueError(msg)
        if self.image_size < self.bank.size:
            msg = (
                f"image_size {self.image_size} is smaller than the "
                f"{self.bank.size}x{self.bank.size} kernels"
            )
            raise ValueError(msg)
        if self.workers < 1:
            msg = f"workers must be >= 1, got {self.workers}"
            raise ValueError(msg)


PRESETS = {
    "magnitude": PipelineConfig(
        kernel_bank="directional", quantize=False, aggregate=True, metric="l1",
    ),
    "directional": PipelineConfig(
        kernel_bank="directional", quantize=True, aggregate=False, metric="l2",
    ),
    "edge": PipelineConfig(
        kernel_bank="edge", quantize=False, aggregate=True, metric="l1",
    ),
}
