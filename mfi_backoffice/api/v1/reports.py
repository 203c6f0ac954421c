"""/v1/reports/* and /v1/stats - Aggregate reporting over loan applications"""

import time
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from mfi_backoffice.api.v1.schemas import ApplicationReportResponse, ErrorResponse, FinancialReportResponse, StatsResponse
from mfi_backoffice.api.dependencies import get_identity, get_request_id
from mfi_backoffice.infrastructure.database.session import get_db
from mfi_backoffice.infrastructure.database.repositories import ApplicationRepository
from mfi_backoffice.infrastructure.observability.logging import log_report
from mfi_backoffice.infrastructure.observability.metrics import report_duration_histogram
from mfi_backoffice.domain.models import Identity
from mfi_backoffice.domain.reporting import build_application_report, build_financial_report, round_half_up
from mfi_backoffice.domain.exceptions import ValidationError
from mfi_backoffice.utils.date_utils import parse_date_bound

router = APIRouter(responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})


def _load_snapshots(db: Session, start_date: Optional[str], end_date: Optional[str]):
    start = parse_date_bound(start_date)
    end = parse_date_bound(end_date, end_of_day=True)
    if start and end and start > end:
        raise ValidationError("startDate must not be after endDate")
    return ApplicationRepository(db).snapshots(start=start, end=end)


@router.get("/reports/applications", response_model=ApplicationReportResponse)
def application_report(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO date, inclusive"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO date, inclusive"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Status breakdown, 12-month trends, loan-type breakdown, and approval
    funnel for applications created within the date range.
    """
    start_time = time.time()
    with report_duration_histogram.labels(report="applications").time():
        snapshots = _load_snapshots(db, start_date, end_date)
        report = build_application_report(snapshots)

    log_report(get_request_id(request), "applications", len(snapshots), (time.time() - start_time) * 1000)
    return report


@router.get("/reports/financial", response_model=FinancialReportResponse)
def financial_report(
    request: Request,
    start_date: Optional[str] = Query(None, alias="startDate", description="ISO date, inclusive"),
    end_date: Optional[str] = Query(None, alias="endDate", description="ISO date, inclusive"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Disbursement totals, trends, portfolio statistics, and size distribution."""
    start_time = time.time()
    with report_duration_histogram.labels(report="financial").time():
        snapshots = _load_snapshots(db, start_date, end_date)
        report = build_financial_report(snapshots)

    log_report(get_request_id(request), "financial", len(snapshots), (time.time() - start_time) * 1000)
    return report


@router.get("/stats", response_model=StatsResponse)
def stats(
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """Current-snapshot counters, independent of the date-filterable reports"""
    counters = ApplicationRepository(db).counters()
    total = counters["total"]

    return StatsResponse(
        total_applications=total,
        approved_applications=counters["approved"],
        pending_applications=counters["pending"],
        rejected_applications=counters["rejected"],
        total_disbursed=counters["total_disbursed"],
        average_loan=round_half_up(counters["average_loan"]),
        approval_rate=round_half_up(counters["approved"] / total * 100) if total else 0,
    )
