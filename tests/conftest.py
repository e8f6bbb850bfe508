"""Shared test fixtures for edge search tests."""

import numpy as np
import cv2
import pytest


def _stripes(size=8, width=3):
    """0/1 profile with bands of the given width: 0,0,0,1,1,1,0,0..."""
    return ((np.arange(size) // width) % 2).astype(np.float32)


@pytest.fixture
def uniform_image():
    """8x8 flat gray image."""
    return np.full((8, 8), 0.5, dtype=np.float32)


@pytest.fixture
def vertical_stripe_image():
    """8x8 image whose intensity changes along x only."""
    return np.tile(_stripes(), (8, 1))


@pytest.fixture
def horizontal_stripe_image():
    """8x8 image whose intensity changes along y only."""
    return np.tile(_stripes()[:, np.newaxis], (1, 8))


@pytest.fixture
def red_square_image():
    """Generate a 200x200 red square on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    img[40:160, 40:160] = [200, 30, 30]  # Red square
    return img


@pytest.fixture
def blue_circle_image():
    """Generate a 200x200 blue circle on white background."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 255
    cv2.circle(img, (100, 100), 60, (30, 30, 200), -1)
    return img


@pytest.fixture
def textured_image():
    """Generate a 200x200 checkerboard image."""
    img = np.ones((200, 200, 3), dtype=np.uint8) * 200
    for y in range(0, 200, 20):
        for x in range(0, 200, 20):
            if (x // 20 + y // 20) % 2 == 0:
                img[y:y+20, x:x+20] = [50, 50, 50]
    return img


@pytest.fixture
def gallery_files(tmp_path, red_square_image, blue_circle_image, textured_image):
    """Write three distinct gallery images to disk and return their paths."""
    diagonal = np.full((120, 90), 240, dtype=np.uint8)
    cv2.line(diagonal, (0, 0), (89, 119), 20, 6)

    images = [
        ("square.png", cv2.cvtColor(red_square_image, cv2.COLOR_RGB2BGR)),
        ("circle.png", cv2.cvtColor(blue_circle_image, cv2.COLOR_RGB2BGR)),
        ("checker.png", textured_image),
        ("diagonal.png", diagonal),
    ]
    paths = []
    for name, image in images:
        path = tmp_path / name
        assert cv2.imwrite(str(path), image)
        paths.append(str(path))
    return paths
