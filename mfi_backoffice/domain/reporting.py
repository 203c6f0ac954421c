"""Reporting aggregator - descriptive statistics over loan applications"""

from collections import OrderedDict
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from mfi_backoffice.domain.models import ApplicationSnapshot, ApplicationStatus
from mfi_backoffice.utils.date_utils import elapsed_days_ceil, trailing_month_windows, utcnow

TREND_MONTHS = 12

# Fixed assumption, not derived from each product's rate
PROJECTED_REVENUE_RATE = 0.10

# (label, inclusive min, exclusive max); None means unbounded
SIZE_RANGES = (
    ("0-5M", 0, 5_000_000),
    ("5M-10M", 5_000_000, 10_000_000),
    ("10M-20M", 10_000_000, 20_000_000),
    ("20M+", 20_000_000, None),
)

STATUS_ORDER = [s.value for s in ApplicationStatus]
DECIDED_STATUSES = (ApplicationStatus.APPROVED.value, ApplicationStatus.REJECTED.value)


def round_half_up(value: float, places: int = 0):
    """Round like a spreadsheet does (2.5 → 3), returning int when places == 0"""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def percentage(part: float, whole: float) -> float:
    """part/whole as a one-decimal percentage, 0 when whole is 0"""
    if not whole:
        return 0
    return round_half_up(part / whole * 100, 1)


def mean_rounded(values: List[float]) -> int:
    """Mean rounded to the nearest integer, 0 for an empty list"""
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def _count_by_status(apps: List[ApplicationSnapshot]) -> Dict[str, int]:
    counts = OrderedDict((status, 0) for status in STATUS_ORDER)
    for app in apps:
        # Unknown statuses stay out of every bucket
        if app.status in counts:
            counts[app.status] += 1
    return counts


def _in_window(app: ApplicationSnapshot, start: datetime, end: datetime) -> bool:
    return start <= app.created_at < end


def build_application_report(
    applications: List[ApplicationSnapshot],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Summarise an already date-filtered set of applications.

    Output sections:
    - summary: totals, status breakdown, approval/rejection rate, avg processing days
    - trends.monthly: 12 trailing months, zero-filled
    - breakdown: per loan type counts and approval rates, avg amount per status
    - funnel: status counts restated as submitted → review → decision
    """
    now = now or utcnow()
    total = len(applications)
    status_breakdown = _count_by_status(applications)

    monthly = []
    for label, start, end in trailing_month_windows(now, TREND_MONTHS):
        month_counts = _count_by_status([a for a in applications if _in_window(a, start, end)])
        monthly.append({
            "month": label,
            "total": sum(1 for a in applications if _in_window(a, start, end)),
            "approved": month_counts[ApplicationStatus.APPROVED.value],
            "rejected": month_counts[ApplicationStatus.REJECTED.value],
            "pending": month_counts[ApplicationStatus.PENDING.value],
            "under_review": month_counts[ApplicationStatus.UNDER_REVIEW.value],
        })

    loan_type_breakdown: Dict[str, int] = OrderedDict()
    for app in applications:
        loan_type_breakdown[app.loan_type] = loan_type_breakdown.get(app.loan_type, 0) + 1

    approval_rate_by_type = {}
    for loan_type, type_total in loan_type_breakdown.items():
        approved = sum(
            1 for a in applications
            if a.loan_type == loan_type and a.status == ApplicationStatus.APPROVED.value
        )
        approval_rate_by_type[loan_type] = {
            "total": type_total,
            "approved": approved,
            "rate": percentage(approved, type_total),
        }

    avg_loan_by_status = {
        status: mean_rounded([a.loan_amount for a in applications if a.status == status])
        for status in STATUS_ORDER
    }

    # Decision latency proxy: updated_at is the last write, not necessarily the decision
    decided = [a for a in applications if a.status in DECIDED_STATUSES]
    avg_processing_time = mean_rounded([elapsed_days_ceil(a.created_at, a.updated_at) for a in decided])

    return {
        "summary": {
            "total_applications": total,
            "status_breakdown": dict(status_breakdown),
            "approval_rate": percentage(status_breakdown[ApplicationStatus.APPROVED.value], total),
            "rejection_rate": percentage(status_breakdown[ApplicationStatus.REJECTED.value], total),
            "avg_processing_time": avg_processing_time,
        },
        "trends": {"monthly": monthly},
        "breakdown": {
            "loan_type": dict(loan_type_breakdown),
            "approval_rate_by_type": approval_rate_by_type,
            "avg_loan_by_status": avg_loan_by_status,
        },
        "funnel": {
            "submitted": total,
            "under_review": status_breakdown[ApplicationStatus.UNDER_REVIEW.value],
            "approved": status_breakdown[ApplicationStatus.APPROVED.value],
            "rejected": status_breakdown[ApplicationStatus.REJECTED.value],
            "pending": status_breakdown[ApplicationStatus.PENDING.value],
        },
    }


def bucket_by_size(amounts: List[float]) -> List[Dict[str, Any]]:
    """Assign each amount to the first [min, max) range containing it"""
    buckets = [
        {"range": label, "min": low, "max": high, "count": 0, "amount": 0}
        for label, low, high in SIZE_RANGES
    ]
    for amount in amounts:
        for bucket in buckets:
            if amount >= bucket["min"] and (bucket["max"] is None or amount < bucket["max"]):
                bucket["count"] += 1
                bucket["amount"] += amount
                break
    return buckets


def build_financial_report(
    applications: List[ApplicationSnapshot],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Disbursement figures over an already date-filtered set of applications.

    Approved applications count as disbursed. Requested totals use every
    application in range.
    """
    now = now or utcnow()
    approved = [a for a in applications if a.status == ApplicationStatus.APPROVED.value]
    approved_amounts = [a.loan_amount for a in approved]

    total_disbursed = sum(approved_amounts)
    total_requested = sum(a.loan_amount for a in applications)

    monthly = []
    for label, start, end in trailing_month_windows(now, TREND_MONTHS):
        amounts = [a.loan_amount for a in approved if _in_window(a, start, end)]
        monthly.append({
            "month": label,
            "amount": sum(amounts),
            "count": len(amounts),
            "avg_amount": mean_rounded(amounts),
        })

    by_type: Dict[str, Dict[str, Any]] = OrderedDict()
    for app in approved:
        entry = by_type.setdefault(app.loan_type, {"amount": 0, "count": 0})
        entry["amount"] += app.loan_amount
        entry["count"] += 1
    for entry in by_type.values():
        entry["avg_amount"] = round_half_up(entry["amount"] / entry["count"])

    portfolio = {
        "total_loans": len(approved),
        "total_value": total_disbursed,
        "avg_loan_size": mean_rounded(approved_amounts),
        "largest_loan": max(approved_amounts) if approved_amounts else 0,
        "smallest_loan": min(approved_amounts) if approved_amounts else 0,
    }

    return {
        "summary": {
            "total_disbursed": total_disbursed,
            "total_requested": total_requested,
            "total_loans": len(approved),
            "avg_loan_amount": portfolio["avg_loan_size"],
            "projected_revenue": total_disbursed * PROJECTED_REVENUE_RATE,
        },
        "trends": {"monthly": monthly},
        "breakdown": {
            "by_loan_type": dict(by_type),
            "by_size_range": bucket_by_size(approved_amounts),
        },
        "portfolio": portfolio,
        "performance": {
            "disbursement_rate": percentage(len(approved), len(applications)),
            "avg_disbursement_time": 0,
            "total_requested": total_requested,
            "total_disbursed": total_disbursed,
            "disbursement_ratio": percentage(total_disbursed, total_requested),
        },
    }
