"""
Race result job, refresh and export endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_owner_id
from app.errors import (
    BatchSizeError,
    ExportFormatUnsupportedError,
    InvalidURLError,
    JobNotFoundError,
    RaceResultsError,
    RenderError,
    UnauthorizedError,
    UnsupportedPlatformError,
)
from app.schemas.race_results import (
    ExtractionResultResponse,
    JobAcceptedResponse,
    JobResultListResponse,
    JobResultResponse,
    JobStatusResponse,
    RefreshRequest,
    SubmitBatchRequest,
)
from app.services.export_service import export_results
from app.services.race_results_service import (
    RaceResultsService,
    get_race_results_service,
)

router = APIRouter(prefix="/race-results", tags=["race-results"])

_STATUS_BY_ERROR: tuple[tuple[type[RaceResultsError], int], ...] = (
    (UnauthorizedError, status.HTTP_403_FORBIDDEN),
    (JobNotFoundError, status.HTTP_404_NOT_FOUND),
    (BatchSizeError, status.HTTP_400_BAD_REQUEST),
    (InvalidURLError, status.HTTP_400_BAD_REQUEST),
    (ExportFormatUnsupportedError, status.HTTP_400_BAD_REQUEST),
    (UnsupportedPlatformError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RenderError, status.HTTP_502_BAD_GATEWAY),
)


def _to_http_error(exc: RaceResultsError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post(
    "/jobs",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobAcceptedResponse,
)
def submit_batch(
    payload: SubmitBatchRequest,
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> JobAcceptedResponse:
    try:
        job = service.submit_batch(
            urls=payload.urls,
            owner_id=owner_id,
        )
    except RaceResultsError as exc:
        raise _to_http_error(exc) from exc

    return JobAcceptedResponse(
        job_id=job.job_id,
        status=job.status,
        total_urls=job.total_urls,
        created_at=job.created_at,
    )


@router.get("/jobs/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> JobStatusResponse:
    try:
        job = service.get_job_status(job_id=job_id, owner_id=owner_id)
    except RaceResultsError as exc:
        raise _to_http_error(exc) from exc
    return JobStatusResponse.from_job(job)


@router.get("/jobs/{job_id}/results", response_model=JobResultListResponse)
def get_job_results(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> JobResultListResponse:
    try:
        records = service.get_job_results(job_id=job_id, owner_id=owner_id)
    except RaceResultsError as exc:
        raise _to_http_error(exc) from exc
    return JobResultListResponse(results=[JobResultResponse.from_record(record) for record in records])


@router.get("/jobs/{job_id}/export")
def export_job_results(
    job_id: str,
    export_format: str = Query(
        default="csv",
        alias="format",
        description='Output format: "csv", "json" or "excel" (.xlsx workbook).',
    ),
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> Response:
    try:
        records = service.get_job_results(job_id=job_id, owner_id=owner_id)
        payload = export_results(records, export_format, basename=f"race-results-{job_id}")
    except RaceResultsError as exc:
        raise _to_http_error(exc) from exc

    return Response(
        content=payload.data,
        media_type=payload.media_type,
        headers={"Content-Disposition": f"attachment; filename={payload.filename}"},
    )


@router.post("/refresh", response_model=ExtractionResultResponse)
def refresh_result(
    payload: RefreshRequest,
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> ExtractionResultResponse:
    try:
        result = service.refresh_result(url=payload.url, owner_id=owner_id)
    except RaceResultsError as exc:
        raise _to_http_error(exc) from exc
    return ExtractionResultResponse.from_result(result)


@router.get("", response_model=JobResultListResponse)
def list_recent_results(
    limit: int = Query(default=100, ge=1, le=500, description="Max records returned, newest first"),
    owner_id: str = Depends(get_owner_id),
    service: RaceResultsService = Depends(get_race_results_service),
) -> JobResultListResponse:
    records = service.list_recent_results(owner_id=owner_id, limit=limit)
    return JobResultListResponse(results=[JobResultResponse.from_record(record) for record in records])
