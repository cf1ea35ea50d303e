"""
app/schemas package marker.
"""

from app.schemas.race_results import (
    ExtractionResultResponse,
    JobAcceptedResponse,
    JobResultListResponse,
    JobResultResponse,
    JobStatusResponse,
    RefreshRequest,
    SubmitBatchRequest,
)

__all__ = [
    "ExtractionResultResponse",
    "JobAcceptedResponse",
    "JobResultListResponse",
    "JobResultResponse",
    "JobStatusResponse",
    "RefreshRequest",
    "SubmitBatchRequest",
]
