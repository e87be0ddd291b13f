"""核心流程模組。"""

from .fingerprint import FingerprintComputer, average_hash, perceptual_hash, to_image_hash
from .fingerprint_cache import (
    CacheFile,
    FingerprintCache,
    decode_key,
    default_cache_dir,
    encode_key,
    make_cache_key,
)
from .orchestrator import BatchOrchestrator
from .scanner import DocumentScanner
from .similarity import (
    SimilarityGrouper,
    group_boundaries,
    group_entries,
    hamming_distance,
    sort_entries,
)

__all__ = [
    "BatchOrchestrator",
    "CacheFile",
    "DocumentScanner",
    "FingerprintCache",
    "FingerprintComputer",
    "SimilarityGrouper",
    "average_hash",
    "decode_key",
    "default_cache_dir",
    "encode_key",
    "group_boundaries",
    "group_entries",
    "hamming_distance",
    "make_cache_key",
    "perceptual_hash",
    "sort_entries",
    "to_image_hash",
]
