"""
Edge template matching engine.

Orchestrates the matching pipeline:
    1. Normalize each image to a fixed square grayscale buffer
    2. Convolve with the configured kernel bank
    3. Aggregate directions (or keep them as separate channels)
    4. Compute query-to-gallery distances and scan for the minimum

The gallery is built once per engine and then only read.
"""

import logging
from typing import List, Optional, Sequence

import numpy as np

from .config import PipelineConfig
from .distances import gallery_distances
from .features import extract_descriptor
from .gallery import Gallery, build_gallery, describe_image, list_gallery_images
from .preprocessing import ImageLoadError, prepare_image
from .scoring import MatchResult, rank_results, select_best_match

logger = logging.getLogger(__name__)


class MatchEngine:
    """
    Finds the gallery image most similar to a query image.

    Holds one pipeline configuration and the gallery descriptors computed
    with it; queries are described with the same configuration.
    """

    def __init__(self,
                 config: PipelineConfig = None,
                 gallery_paths: Sequence[str] = None):
        """
        Args:
            config: Pipeline settings (defaults to the default preset).
            gallery_paths: Optional gallery images to load immediately.
        """
        self.config = config or PipelineConfig.from_preset()
        self.config.validate()
        self.gallery: Gallery = []

        if gallery_paths is not None:
            self.load_gallery(gallery_paths)

    @property
    def identifiers(self) -> List[str]:
        return [identifier for identifier, _ in self.gallery]

    def load_gallery(self, paths: Sequence[str]) -> None:
        """Replace the gallery with descriptors for the given images."""
        self.gallery = build_gallery(paths, self.config)

    def load_gallery_dir(self, image_dir: str) -> None:
        """Replace the gallery with every image file in a directory."""
        self.load_gallery(list_gallery_images(image_dir))

    def describe(self, image_np: np.ndarray) -> np.ndarray:
        """Descriptor for an in-memory image (RGB or grayscale)."""
        image = prepare_image(image_np, size=self.config.image_size,
                              quantize=self.config.quantize)
        return extract_descriptor(image, self.config.bank,
                                  quantize=self.config.quantize,
                                  aggregate=self.config.aggregate)

    def describe_file(self, path) -> np.ndarray:
        """Descriptor for an image file."""
        try:
            return describe_image(path, self.config)
        except ImageLoadError as e:
            logger.error(f"Query image failed to load: {e}")
            raise

    def distances(self, query_descriptor: np.ndarray) -> np.ndarray:
        """Distance from a query descriptor to every gallery entry."""
        descriptors = [descriptor for _, descriptor in self.gallery]
        return gallery_distances(query_descriptor, descriptors,
                                 metric=self.config.metric)

    def match_descriptor(self,
                         query_descriptor: np.ndarray) -> Optional[MatchResult]:
        """
        Best gallery match for a precomputed descriptor.

        Returns:
            MatchResult, or None when the gallery is empty.
        """
        if not self.gallery:
            logger.warning("Gallery is empty, no match possible")
            return None

        result = select_best_match(self.distances(query_descriptor),
                                   self.identifiers)
        logger.info(
            f"Best match: #{result.number} {result.identifier} "
            f"(distance {result.distance:.4f})"
        )
        return result

    def match(self, query_path) -> Optional[MatchResult]:
        """
        Best gallery match for a query image file.

        Raises:
            ImageLoadError: If the query image cannot be decoded.
        """
        return self.match_descriptor(self.describe_file(query_path))

    def match_image(self, image_np: np.ndarray) -> Optional[MatchResult]:
        """Best gallery match for an in-memory query image."""
        return self.match_descriptor(self.describe(image_np))

    def rank(self, query_path, top_k: int = None) -> List[MatchResult]:
        """
        Every gallery entry ordered by distance to the query file.

        Args:
            query_path: Query image file.
            top_k: Maximum number of results to return.
        """
        if not self.gallery:
            return []
        distances = self.distances(self.describe_file(query_path))
        return rank_results(distances, self.identifiers, top_k=top_k)


def find_best_match(gallery_paths: Sequence[str],
                    query_path,
                    config: PipelineConfig = None) -> Optional[MatchResult]:
    """
    One-shot match of a query file against a list of gallery files.

    Raises:
        ImageLoadError: If the query or any gallery image fails to load.
    """
    engine = MatchEngine(config, gallery_paths=gallery_paths)
    return engine.match(query_path)
