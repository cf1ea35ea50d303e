"""
Adaptive field extraction over rendered page text.
"""

from __future__ import annotations

import logging

from app.extraction.logging_utils import log_event
from app.extraction.types import RESULT_FIELDS, ExtractionResult, PlatformProfile

logger = logging.getLogger(__name__)


def extract_fields(text: str, profile: PlatformProfile) -> ExtractionResult:
    """
    Apply each field's pattern chain to `text` and build an ExtractionResult.

    Fields are extracted independently. A field whose chain does not match
    is None; fields the profile does not configure are None as well. This
    function never raises because of missing data.
    """

    values: dict[str, object] = {}
    for field_name in RESULT_FIELDS:
        extractor = profile.fields.get(field_name)
        values[field_name] = extractor.extract(text) if extractor is not None else None

    missing = [field_name for field_name, value in values.items() if value is None]
    log_event(
        logger,
        logging.DEBUG,
        "fields_extracted",
        platform=profile.name,
        missing_fields=missing or None,
    )
    return ExtractionResult(platform=profile.name, **values)
