"""/v1/applications - Loan application lifecycle"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from mfi_backoffice.api.v1.schemas import (
    ApplicationCreate,
    ApplicationUpdate,
    ErrorResponse,
    ApplicationResponse,
    MessageResponse,
    PaymentSummaryResponse,
    ScheduleRowSchema,
)
from mfi_backoffice.api.dependencies import get_identity, get_request_id, parse_uuid, require_privileged
from mfi_backoffice.config import settings
from mfi_backoffice.infrastructure.database.session import get_db
from mfi_backoffice.infrastructure.database.repositories import ApplicationRepository, ProductRepository
from mfi_backoffice.infrastructure.observability.logging import log_status_change, log_submission
from mfi_backoffice.infrastructure.observability.metrics import (
    application_rejected_submission_counter,
    application_submitted_counter,
    record_transition,
)
from mfi_backoffice.domain.models import Identity
from mfi_backoffice.domain.lifecycle import (
    check_loan_terms,
    check_transition,
    touches_loan_terms,
    validate_submission,
)
from mfi_backoffice.domain.products import to_ranges
from mfi_backoffice.domain.amortization import (
    build_schedule,
    calculate_payment,
    debt_to_income_ratio,
    loan_to_annual_income_ratio,
    processing_fee_amount,
)
from mfi_backoffice.domain.reporting import round_half_up
from mfi_backoffice.domain.exceptions import NotFoundError, ValidationError

router = APIRouter(responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})


def _load(repo: ApplicationRepository, application_id: str):
    application = repo.get(parse_uuid(application_id, "Application"))
    if not application:
        raise NotFoundError("Application not found")
    return application


@router.get("/applications", response_model=List[ApplicationResponse])
def list_applications(
    status: Optional[str] = Query(None, description="Status filter; All disables it"),
    search: Optional[str] = Query(None, description="Matches full name or email"),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    repo = ApplicationRepository(db)
    return repo.search(status=status, search=search, limit=limit or settings.application_list_limit)


@router.post("/applications", response_model=ApplicationResponse, status_code=201)
def submit_application(
    body: ApplicationCreate,
    request: Request,
    db: Session = Depends(get_db),
):
    """
    Submit a loan application.

    Flow:
    1. Check required fields
    2. Resolve the selected product
    3. Check amount and tenure against the product ranges
    4. Persist with status Pending and the product name as loan type
    """
    data = body.model_dump(exclude={"loan_type"})

    product = None
    if data.get("loan_product_id") is not None:
        product = ProductRepository(db).get(data["loan_product_id"])

    try:
        record = validate_submission(data, to_ranges(product) if product else None)
    except ValidationError:
        application_rejected_submission_counter.inc()
        raise

    application = ApplicationRepository(db).create(record)
    db.commit()
    db.refresh(application)

    application_submitted_counter.labels(loan_type=application.loan_type).inc()
    log_submission(get_request_id(request), str(application.id), application.loan_type, application.loan_amount)
    return application


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    return _load(ApplicationRepository(db), application_id)


@router.put("/applications/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: str,
    body: ApplicationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Update an application.

    A body holding only `status` is a status transition. Anything else is a
    field patch; changes to amount, tenure, or product are re-checked against
    the product ranges.
    """
    repo = ApplicationRepository(db)
    application = _load(repo, application_id)
    previous_status = application.status

    patch = body.model_dump(exclude_unset=True)
    nullable = {"business_name", "years_in_business", "employees", "notes"}
    if any(value is None and key not in nullable for key, value in patch.items()):
        raise ValidationError("Required application fields cannot be set to null")

    if "status" in patch:
        patch["status"] = check_transition(previous_status, patch["status"])

    if set(patch) == {"status"}:
        repo.update_status(application, patch["status"])
    else:
        if "status" in patch:
            patch["status"] = patch["status"].value

        if touches_loan_terms(patch):
            product_id = patch.get("loan_product_id", application.loan_product_id)
            product = ProductRepository(db).get(product_id) if product_id else None
            check_loan_terms(
                patch.get("loan_amount", application.loan_amount),
                patch.get("tenure", application.tenure),
                to_ranges(product) if product else None,
            )
            if "loan_product_id" in patch:
                patch["loan_type"] = product.name

        repo.update_fields(application, patch)

    db.commit()
    db.refresh(application)

    if "status" in patch:
        record_transition(previous_status, application.status)
        log_status_change(get_request_id(request), str(application.id), previous_status, application.status, identity.subject)

    return application


@router.delete("/applications/{application_id}", response_model=MessageResponse)
def delete_application(
    application_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_privileged),
):
    """Hard delete. Attached documents must be removed separately."""
    repo = ApplicationRepository(db)
    repo.delete(_load(repo, application_id))
    db.commit()
    return MessageResponse(message="Application deleted successfully")


@router.get("/applications/{application_id}/payment-summary", response_model=PaymentSummaryResponse)
def get_payment_summary(
    application_id: str,
    annual_rate: Optional[float] = Query(None, alias="annualRate", ge=0, description="Override in annual percent"),
    schedule: bool = Query(False, description="Include the month-by-month schedule"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Repayment figures for an application.

    Rate precedence: `annualRate` override, then the product's minimum
    interest, then the configured default when the product was deleted.
    Figures are rounded here, for display; the math runs unrounded.
    """
    application = _load(ApplicationRepository(db), application_id)
    product = ProductRepository(db).get(application.loan_product_id) if application.loan_product_id else None

    if annual_rate is None:
        annual_rate = product.min_interest if product else settings.default_annual_rate
    fee_percent = product.processing_fee if product else 0.0

    summary = calculate_payment(application.loan_amount, annual_rate, application.tenure)

    rows = None
    if schedule:
        rows = [
            ScheduleRowSchema(
                period=row.period,
                payment=round(row.payment, 2),
                principal=round(row.principal, 2),
                interest=round(row.interest, 2),
                balance=round(row.balance, 2),
            )
            for row in build_schedule(application.loan_amount, annual_rate, application.tenure)
        ]

    return PaymentSummaryResponse(
        application_id=application.id,
        loan_amount=application.loan_amount,
        annual_rate=annual_rate,
        tenure=application.tenure,
        monthly_rate=round(summary.monthly_rate, 6),
        monthly_payment=round(summary.monthly_payment, 2),
        total_payment=round(summary.total_payment, 2),
        total_interest=round(summary.total_interest, 2),
        processing_fee=fee_percent,
        processing_fee_amount=round(processing_fee_amount(application.loan_amount, fee_percent), 2),
        debt_to_income_ratio=round_half_up(debt_to_income_ratio(summary.monthly_payment, application.income), 1),
        loan_to_income_ratio=round_half_up(loan_to_annual_income_ratio(application.loan_amount, application.income)),
        schedule=rows,
    )
