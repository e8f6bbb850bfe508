"""
Gallery construction from reference image files.

A gallery is an ordered list of (identifier, descriptor) pairs, built
once and read-only afterwards. The identifier is the image path.

Any image that fails to load aborts the whole build: a partial gallery
would silently change which entry wins a match.
"""

import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence, Tuple

import numpy as np

from .config import PipelineConfig
from .features import extract_descriptor
from .preprocessing import ImageLoadError, load_and_normalize

logger = logging.getLogger(__name__)

Gallery = List[Tuple[str, np.ndarray]]

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.webp', '.tif', '.tiff'}

# Layout of the reference face gallery: face/face1.jpg ... face/face10.jpg,
# queried with face/face8.jpg.
DEFAULT_GALLERY_DIR = "face"
DEFAULT_GALLERY_SIZE = 10
DEFAULT_QUERY = os.path.join(DEFAULT_GALLERY_DIR, "face8.jpg")


def default_gallery_paths(base_dir: str = ".") -> List[str]:
    """Paths of the reference face gallery under base_dir."""
    return [
        os.path.join(base_dir, DEFAULT_GALLERY_DIR, f"face{i}.jpg")
        for i in range(1, DEFAULT_GALLERY_SIZE + 1)
    ]


def list_gallery_images(image_dir: str) -> List[str]:
    """
    List image files in a directory, sorted by filename.

    Only files with a known image extension are returned.
    """
    filenames = sorted(
        f for f in os.listdir(image_dir)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
    )
    return [os.path.join(image_dir, f) for f in filenames]


def describe_image(path, config: PipelineConfig) -> np.ndarray:
    """
    Load one image file and compute its feature descriptor.

    Raises:
        ImageLoadError: If the file cannot be decoded.
    """
    image = load_and_normalize(path, size=config.image_size,
                               quantize=config.quantize)
    return extract_descriptor(image, config.bank,
                              quantize=config.quantize,
                              aggregate=config.aggregate)


def build_gallery(paths: Sequence[str],
                  config: PipelineConfig = None) -> Gallery:
    """
    Compute descriptors for an ordered list of gallery images.

    With config.workers > 1 the descriptors are extracted on a thread
    pool; entries keep the order of paths either way.

    Args:
        paths: Gallery image paths, in gallery order.
        config: Pipeline settings (defaults to the default preset).

    Returns:
        List of (path, descriptor) tuples.

    Raises:
        ImageLoadError: If any gallery image fails to load.
    """
    config = config or PipelineConfig.from_preset()
    paths = [str(p) for p in paths]

    if not paths:
        logger.warning("Building an empty gallery")
        return []

    logger.info(
        f"Building gallery from {len(paths)} images "
        f"(bank={config.kernel_bank}, workers={config.workers})"
    )

    def _describe(path):
        return describe_image(path, config)

    try:
        if config.workers > 1:
            with ThreadPoolExecutor(max_workers=config.workers) as executor:
                descriptors = list(executor.map(_describe, paths))
        else:
            descriptors = [_describe(path) for path in paths]
    except ImageLoadError as e:
        logger.error(f"Gallery build aborted: {e}")
        raise

    logger.info(f"Gallery built: {len(descriptors)} entries")
    return list(zip(paths, descriptors))


def build_gallery_from_dir(image_dir: str,
                           config: PipelineConfig = None) -> Gallery:
    """Build a gallery from every image file in a directory."""
    return build_gallery(list_gallery_images(image_dir), config)
