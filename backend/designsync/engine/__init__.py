"""DesignSync bundle processing engine."""

from designsync.engine.compression import CompressionEngine, CompressionResult
from designsync.engine.context import BundleRequest, BundleResult
from designsync.engine.pipeline import BundlePipeline

__all__ = [
    "BundlePipeline",
    "BundleRequest",
    "BundleResult",
    "CompressionEngine",
    "CompressionResult",
]
