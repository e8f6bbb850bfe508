"""Tests for gallery construction and the match engine."""

import os
import shutil

import numpy as np
import cv2
import pytest

from edge_search.config import PipelineConfig
from edge_search.engine import MatchEngine, find_best_match
from edge_search.gallery import (
    DEFAULT_QUERY, build_gallery, build_gallery_from_dir, default_gallery_paths,
    list_gallery_images,
)
from edge_search.preprocessing import ImageLoadError


class TestBuildGallery:
    """Tests for gallery construction."""

    def test_entries_in_path_order(self, gallery_files):
        gallery = build_gallery(gallery_files)
        assert [identifier for identifier, _ in gallery] == gallery_files

    def test_descriptor_shape(self, gallery_files):
        gallery = build_gallery(gallery_files, PipelineConfig.from_preset("magnitude"))
        for _, descriptor in gallery:
            assert descriptor.shape == (1, 64, 64)

    def test_directional_preset_keeps_channels(self, gallery_files):
        gallery = build_gallery(gallery_files, PipelineConfig.from_preset("directional"))
        assert gallery[0][1].shape == (4, 64, 64)

    def test_empty(self):
        assert build_gallery([]) == []

    def test_missing_image_aborts(self, gallery_files, tmp_path):
        paths = gallery_files + [str(tmp_path / "missing.png")]
        with pytest.raises(ImageLoadError):
            build_gallery(paths)

    def test_worker_pool_matches_serial(self, gallery_files):
        serial = build_gallery(gallery_files, PipelineConfig.from_preset(workers=1))
        pooled = build_gallery(gallery_files, PipelineConfig.from_preset(workers=3))

        assert [i for i, _ in pooled] == [i for i, _ in serial]
        for (_, a), (_, b) in zip(serial, pooled):
            assert np.array_equal(a, b)

    def test_worker_pool_failure_aborts(self, gallery_files, tmp_path):
        paths = [str(tmp_path / "missing.png")] + gallery_files
        with pytest.raises(ImageLoadError):
            build_gallery(paths, PipelineConfig.from_preset(workers=2))

    def test_from_dir(self, gallery_files, tmp_path):
        (tmp_path / "notes.txt").write_text("not an image")
        gallery = build_gallery_from_dir(str(tmp_path))
        assert len(gallery) == len(gallery_files)


class TestGalleryPaths:
    """Tests for gallery path helpers."""

    def test_list_gallery_images_sorted_and_filtered(self, gallery_files, tmp_path):
        (tmp_path / "readme.md").write_text("x")
        listed = list_gallery_images(str(tmp_path))
        assert listed == sorted(gallery_files)

    def test_default_gallery_layout(self):
        paths = default_gallery_paths("data")
        assert len(paths) == 10
        assert paths[0] == os.path.join("data", "face", "face1.jpg")
        assert paths[-1] == os.path.join("data", "face", "face10.jpg")
        assert DEFAULT_QUERY == os.path.join("face", "face8.jpg")


class TestMatchEngine:
    """Tests for end-to-end matching."""

    @pytest.mark.parametrize("preset", ["magnitude", "directional", "edge"])
    def test_identity_match(self, gallery_files, preset):
        engine = MatchEngine(PipelineConfig.from_preset(preset), gallery_files)
        result = engine.match(gallery_files[1])

        assert result.index == 1
        assert result.number == 2
        assert result.identifier == gallery_files[1]
        assert result.distance == pytest.approx(0.0, abs=1e-4)

    def test_copy_of_gallery_image_matches(self, gallery_files, tmp_path):
        query = tmp_path / "query_copy.png"
        shutil.copy(gallery_files[2], query)

        result = find_best_match(gallery_files, query)
        assert result.index == 2

    def test_deterministic(self, gallery_files):
        engine = MatchEngine(gallery_paths=gallery_files)
        assert engine.match(gallery_files[3]) == engine.match(gallery_files[3])

    def test_tie_goes_to_first_entry(self, gallery_files, tmp_path):
        duplicate = tmp_path / "zz_duplicate.png"
        shutil.copy(gallery_files[0], duplicate)
        paths = [gallery_files[1], gallery_files[0], str(duplicate)]

        result = MatchEngine(gallery_paths=paths).match(gallery_files[0])
        assert result.index == 1

    def test_empty_gallery_no_match(self, gallery_files):
        engine = MatchEngine(gallery_paths=[])
        assert engine.match(gallery_files[0]) is None

    def test_missing_query_raises(self, gallery_files, tmp_path):
        engine = MatchEngine(gallery_paths=gallery_files)
        with pytest.raises(ImageLoadError):
            engine.match(tmp_path / "missing.jpg")

    def test_match_image_in_memory(self, gallery_files):
        engine = MatchEngine(gallery_paths=gallery_files)
        gray = cv2.imread(gallery_files[3], cv2.IMREAD_GRAYSCALE)
        result = engine.match_image(gray)
        assert result.index == 3
        assert result.distance == pytest.approx(0.0, abs=1e-4)

    def test_rank_lists_every_entry(self, gallery_files):
        engine = MatchEngine(gallery_paths=gallery_files)
        ranked = engine.rank(gallery_files[0])

        assert len(ranked) == len(gallery_files)
        assert ranked[0].index == 0
        assert [r.distance for r in ranked] == sorted(r.distance for r in ranked)

    def test_rank_top_k(self, gallery_files):
        engine = MatchEngine(gallery_paths=gallery_files)
        assert len(engine.rank(gallery_files[0], top_k=2)) == 2

    def test_load_gallery_dir(self, gallery_files, tmp_path):
        engine = MatchEngine()
        engine.load_gallery_dir(str(tmp_path))
        assert engine.identifiers == sorted(gallery_files)

    def test_small_image_size(self, gallery_files):
        config = PipelineConfig.from_preset("magnitude", image_size=16)
        engine = MatchEngine(config, gallery_files)
        assert engine.gallery[0][1].shape == (1, 16, 16)
        assert engine.match(gallery_files[2]).index == 2


class TestPipelineConfig:
    """Tests for presets and validation."""

    def test_presets(self):
        magnitude = PipelineConfig.from_preset("magnitude")
        assert (magnitude.kernel_bank, magnitude.quantize,
                magnitude.aggregate, magnitude.metric) == ("directional", False, True, "l1")

        directional = PipelineConfig.from_preset("directional")
        assert directional.quantize and not directional.aggregate
        assert directional.metric == "l2"

        assert PipelineConfig.from_preset("edge").bank.name == "edge"

    def test_overrides(self):
        config = PipelineConfig.from_preset("edge", metric="l2")
        assert config.metric == "l2"
        assert config.kernel_bank == "edge"

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="preset"):
            PipelineConfig.from_preset("fancy")

    def test_bad_metric(self):
        with pytest.raises(ValueError, match="metric"):
            PipelineConfig(metric="cosine").validate()

    def test_bad_bank(self):
        with pytest.raises(ValueError, match="kernel bank"):
            PipelineConfig(kernel_bank="sobel").validate()

    def test_image_smaller_than_kernel(self):
        with pytest.raises(ValueError, match="image_size"):
            PipelineConfig(image_size=4).validate()

    def test_bad_workers(self):
        with pytest.raises(ValueError, match="workers"):
            PipelineConfig.from_preset(workers=0)
