"""
Adaptive extraction engine: platform detection plus ordered pattern chains.
"""

from app.extraction.extractor import extract_fields
from app.extraction.registry import PlatformRegistry, get_platform_registry
from app.extraction.retry import with_retry
from app.extraction.types import (
    ExtractionResult,
    FieldExtractor,
    FieldPattern,
    PlatformProfile,
    as_int,
    as_text,
    build_profile,
    pattern,
)
from app.extraction.urls import SourceURL, hash_url, normalize_url

__all__ = [
    "ExtractionResult",
    "FieldExtractor",
    "FieldPattern",
    "PlatformProfile",
    "PlatformRegistry",
    "SourceURL",
    "as_int",
    "as_text",
    "build_profile",
    "extract_fields",
    "get_platform_registry",
    "hash_url",
    "normalize_url",
    "pattern",
    "with_retry",
]
