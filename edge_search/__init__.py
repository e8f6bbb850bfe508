"""
edge_search — Directional edge template matching.

Describes fixed-size grayscale images by convolving them with a bank of
directional edge kernels, then finds the gallery image whose descriptor
is closest to a query's.

Modules:
    engine         Main MatchEngine class
    preprocessing  Image decoding, grayscale conversion, fixed-size resize
    kernels        Directional and edge-enhancement kernel banks
    convolution    Interior-only 2D convolution (float / quantized)
    features       Gradient extraction and edge magnitude aggregation
    distances      L1 / L2 descriptor distances, FAISS gallery search
    scoring        Best-match selection and ranking
    gallery        Gallery construction from image files
    config         Pipeline configuration and presets
"""

__version__ = "1.0.0"
