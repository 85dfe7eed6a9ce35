# Copyright 2025 msq
from __future__ import annotations

from typing import Any, Dict, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query

from hazard_watch.api.deps import get_current_user, require_admin, require_hazard_service
from hazard_watch.api.schemas import (
    HazardCreateRequest,
    HazardDetailResponse,
    HazardListResponse,
    HazardResponse,
    HazardSubmitResponse,
    StatisticsModel,
    StatisticsResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
    VerificationResponse,
)
from hazard_watch.db.models import HazardType, ReportStatus, UserRecord
from hazard_watch.errors import ReportNotFoundError
from hazard_watch.services import HazardReportService, NewHazardReport

router = APIRouter(prefix="/api/hazards", tags=["hazards"])
logger = structlog.get_logger(__name__)


@router.get("", response_model=HazardListResponse)
async def list_hazards(
    status: Optional[ReportStatus] = Query(None),
    type: Optional[HazardType] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    service: HazardReportService = Depends(require_hazard_service),
) -> HazardListResponse:
    reports = service.list(status=status, hazard_type=type, limit=limit)
    return HazardListResponse(hazards=[HazardResponse.from_record(r) for r in reports])


@router.post("", response_model=HazardSubmitResponse, status_code=201)
async def submit_hazard(
    payload: HazardCreateRequest,
    user: UserRecord = Depends(get_current_user),
    service: HazardReportService = Depends(require_hazard_service),
) -> HazardSubmitResponse:
    outcome = service.submit(
        NewHazardReport(
            type=payload.type,
            description=payload.description,
            severity=payload.severity,
            location=payload.location.to_record(),
            images=list(payload.images),
            affected_people=payload.affected_people,
            is_emergency=payload.is_emergency,
            contact_phone=payload.contact_phone,
            contact_email=str(payload.contact_email) if payload.contact_email else None,
        ),
        submitter_id=user.id,
    )
    return HazardSubmitResponse(
        hazard=HazardResponse.from_record(outcome.report),
        verification=VerificationResponse.from_result(outcome.verification),
    )


@router.get("/user/my-reports", response_model=HazardListResponse)
async def my_reports(
    user: UserRecord = Depends(get_current_user),
    service: HazardReportService = Depends(require_hazard_service),
) -> HazardListResponse:
    reports = service.list_for_submitter(user.id)
    return HazardListResponse(hazards=[HazardResponse.from_record(r) for r in reports])


@router.get("/admin/statistics", response_model=StatisticsResponse)
async def hazard_statistics(
    admin: UserRecord = Depends(require_admin),
    service: HazardReportService = Depends(require_hazard_service),
) -> StatisticsResponse:
    stats = service.statistics()
    return StatisticsResponse(
        statistics=StatisticsModel(
            total=stats.total,
            by_status=stats.by_status,
            by_type=stats.by_type,
            by_severity=stats.by_severity,
            recent=stats.recent,
        )
    )


@router.get("/{report_id}", response_model=HazardDetailResponse)
async def get_hazard(
    report_id: str,
    service: HazardReportService = Depends(require_hazard_service),
) -> HazardDetailResponse:
    try:
        report = service.get(report_id)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return HazardDetailResponse(hazard=HazardResponse.from_record(report))


@router.put("/{report_id}/status", response_model=StatusUpdateResponse)
async def update_hazard_status(
    report_id: str,
    payload: StatusUpdateRequest,
    admin: UserRecord = Depends(require_admin),
    service: HazardReportService = Depends(require_hazard_service),
) -> StatusUpdateResponse:
    try:
        report = service.override_status(
            report_id,
            status=payload.status,
            admin_id=admin.id,
            rejection_reason=payload.rejection_reason,
        )
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return StatusUpdateResponse(hazard=HazardResponse.from_record(report))


@router.get("/{report_id}/audit")
async def hazard_audit_trail(
    report_id: str,
    admin: UserRecord = Depends(require_admin),
    service: HazardReportService = Depends(require_hazard_service),
) -> Dict[str, Any]:
    """Status decisions recorded for a report, oldest first."""
    try:
        service.get(report_id)
    except ReportNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    trail = service.audit_logger.get_trail(report_id)
    return {"report_id": report_id, "trail": trail, "count": len(trail)}
