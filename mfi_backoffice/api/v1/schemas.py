"""Pydantic schemas for API request/response validation (camelCase on the wire)"""

import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mfi_backoffice.domain.products import MAX_TENURE_MONTHS


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON keys; accepts either on input"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ErrorResponse(CamelModel):
    error: str
    details: Optional[Any] = None


class MessageResponse(CamelModel):
    message: str


# --- Loan products -------------------------------------------------------


class ProductCreate(CamelModel):
    """Request body for POST /v1/products"""

    name: str = Field(..., min_length=1)
    description: str = ""
    min_amount: int = Field(..., ge=0)
    max_amount: int = Field(..., ge=0)
    min_tenure: int = Field(..., ge=1, le=MAX_TENURE_MONTHS, description="Months")
    max_tenure: int = Field(..., ge=1, le=MAX_TENURE_MONTHS, description="Months")
    min_interest: float = Field(..., ge=0, description="Annual percent")
    max_interest: float = Field(..., ge=0, description="Annual percent")
    processing_fee: float = Field(..., ge=0, description="Percent of principal")
    status: str = Field("Active", pattern="^(Active|Inactive)$")
    features: List[str] = Field(default_factory=list)
    eligibility: List[str] = Field(default_factory=list)


class ProductUpdate(CamelModel):
    """Request body for PUT /v1/products/{id}; only sent fields change"""

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    min_amount: Optional[int] = Field(None, ge=0)
    max_amount: Optional[int] = Field(None, ge=0)
    min_tenure: Optional[int] = Field(None, ge=1, le=MAX_TENURE_MONTHS)
    max_tenure: Optional[int] = Field(None, ge=1, le=MAX_TENURE_MONTHS)
    min_interest: Optional[float] = Field(None, ge=0)
    max_interest: Optional[float] = Field(None, ge=0)
    processing_fee: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, pattern="^(Active|Inactive)$")
    features: Optional[List[str]] = None
    eligibility: Optional[List[str]] = None


class ProductResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: str
    min_amount: int
    max_amount: int
    min_tenure: int
    max_tenure: int
    min_interest: float
    max_interest: float
    processing_fee: float
    status: str
    features: List[str]
    eligibility: List[str]
    created_at: datetime
    updated_at: datetime


# --- Loan applications ---------------------------------------------------


class ApplicationCreate(CamelModel):
    """
    Request body for POST /v1/applications.

    Presence of required fields is checked by the lifecycle rules so a
    submission missing several fields gets a single "Missing required fields"
    error listing all of them.
    """

    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    dob: Optional[date] = None
    gender: Optional[str] = None
    id_number: Optional[str] = None
    address: Optional[str] = None

    loan_product_id: Optional[uuid.UUID] = None
    loan_type: Optional[str] = Field(None, description="Ignored; taken from the product")
    loan_amount: Optional[float] = Field(None, gt=0)
    purpose: Optional[str] = None
    tenure: Optional[int] = None

    employment: Optional[str] = None
    income: Optional[float] = Field(None, ge=0, description="Monthly income")
    business_name: Optional[str] = None
    years_in_business: Optional[int] = Field(None, ge=0)
    employees: Optional[int] = Field(None, ge=0)

    documents: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class ApplicationUpdate(CamelModel):
    """Request body for PUT /v1/applications/{id}: a field patch or {status} alone"""

    full_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    dob: Optional[date] = None
    gender: Optional[str] = Field(None, min_length=1)
    id_number: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)

    loan_product_id: Optional[uuid.UUID] = None
    loan_amount: Optional[float] = Field(None, gt=0)
    purpose: Optional[str] = Field(None, min_length=1)
    tenure: Optional[int] = None

    employment: Optional[str] = Field(None, min_length=1)
    income: Optional[float] = Field(None, ge=0)
    business_name: Optional[str] = None
    years_in_business: Optional[int] = Field(None, ge=0)
    employees: Optional[int] = Field(None, ge=0)

    status: Optional[str] = None
    documents: Optional[List[str]] = None
    notes: Optional[str] = None


class ApplicationResponse(CamelModel):
    id: uuid.UUID
    full_name: str
    email: str
    phone: str
    dob: date
    gender: str
    id_number: str
    address: str
    loan_product_id: Optional[uuid.UUID] = None
    loan_type: str
    loan_amount: float
    purpose: str
    tenure: int
    employment: str
    income: float
    business_name: Optional[str] = None
    years_in_business: Optional[int] = None
    employees: Optional[int] = None
    status: str
    documents: List[str]
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class ScheduleRowSchema(CamelModel):
    period: int
    payment: float
    principal: float
    interest: float
    balance: float


class PaymentSummaryResponse(CamelModel):
    """Response for GET /v1/applications/{id}/payment-summary (display-rounded)"""

    application_id: uuid.UUID
    loan_amount: float
    annual_rate: float
    tenure: int
    monthly_rate: float
    monthly_payment: float
    total_payment: float
    total_interest: float
    processing_fee: float
    processing_fee_amount: float
    debt_to_income_ratio: float
    loan_to_income_ratio: int
    schedule: Optional[List[ScheduleRowSchema]] = None


# --- Reports -------------------------------------------------------------


class ApplicationSummary(CamelModel):
    total_applications: int
    status_breakdown: Dict[str, int]
    approval_rate: float
    rejection_rate: float
    avg_processing_time: int


class MonthlyTrend(CamelModel):
    month: str
    total: int
    approved: int
    rejected: int
    pending: int
    under_review: int


class ApplicationTrends(CamelModel):
    monthly: List[MonthlyTrend]


class TypeApproval(CamelModel):
    total: int
    approved: int
    rate: float


class ApplicationBreakdown(CamelModel):
    loan_type: Dict[str, int]
    approval_rate_by_type: Dict[str, TypeApproval]
    avg_loan_by_status: Dict[str, int]


class ApprovalFunnel(CamelModel):
    submitted: int
    under_review: int
    approved: int
    rejected: int
    pending: int


class ApplicationReportResponse(CamelModel):
    """Response for GET /v1/reports/applications"""

    summary: ApplicationSummary
    trends: ApplicationTrends
    breakdown: ApplicationBreakdown
    funnel: ApprovalFunnel


class FinancialSummary(CamelModel):
    total_disbursed: float
    total_requested: float
    total_loans: int
    avg_loan_amount: int
    projected_revenue: float


class MonthlyDisbursement(CamelModel):
    month: str
    amount: float
    count: int
    avg_amount: int


class FinancialTrends(CamelModel):
    monthly: List[MonthlyDisbursement]


class TypeDisbursement(CamelModel):
    amount: float
    count: int
    avg_amount: int


class SizeRange(CamelModel):
    range: str
    min: float
    max: Optional[float] = None  # None: unbounded
    count: int
    amount: float


class FinancialBreakdown(CamelModel):
    by_loan_type: Dict[str, TypeDisbursement]
    by_size_range: List[SizeRange]


class PortfolioStats(CamelModel):
    total_loans: int
    total_value: float
    avg_loan_size: int
    largest_loan: float
    smallest_loan: float


class PerformanceMetrics(CamelModel):
    disbursement_rate: float
    avg_disbursement_time: int
    total_requested: float
    total_disbursed: float
    disbursement_ratio: float


class FinancialReportResponse(CamelModel):
    """Response for GET /v1/reports/financial"""

    summary: FinancialSummary
    trends: FinancialTrends
    breakdown: FinancialBreakdown
    portfolio: PortfolioStats
    performance: PerformanceMetrics


class StatsResponse(CamelModel):
    """Response for GET /v1/stats"""

    total_applications: int
    approved_applications: int
    pending_applications: int
    rejected_applications: int
    total_disbursed: float
    average_loan: int
    approval_rate: int


# --- Documents -----------------------------------------------------------


class DocumentResponse(CamelModel):
    id: uuid.UUID
    related_to: str
    related_id: str
    file_name: str
    original_name: str
    file_type: str
    file_size: int
    mime_type: str
    file_path: str
    file_url: str
    storage_type: str
    category: str
    description: Optional[str] = None
    tags: List[str]
    uploaded_by: Optional[str] = None
    uploaded_by_name: Optional[str] = None
    status: str
    verified: bool
    verified_by: Optional[str] = None
    verified_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UploadedDocument(CamelModel):
    id: uuid.UUID
    file_name: str
    original_name: str
    file_url: str
    file_size: int
    mime_type: str
    category: str


class UploadSuccess(CamelModel):
    success: bool = True
    document: UploadedDocument


class UploadFailure(CamelModel):
    file_name: str
    error: str


class UploadResponse(CamelModel):
    """Response for POST /v1/upload: per-file outcome so callers can retry failures"""

    success: bool
    uploads: List[UploadSuccess]
    errors: List[UploadFailure]
    message: str


class DocumentUpdate(CamelModel):
    """Request body for PUT /v1/upload/{id}; other keys are ignored"""

    category: Optional[str] = None
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[str] = None
    verified: Optional[bool] = None


class DocumentDeleteResponse(CamelModel):
    message: str
    file_removal_failed: bool
