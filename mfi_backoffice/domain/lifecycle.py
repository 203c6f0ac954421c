"""Loan application lifecycle rules - submission validation and status transitions"""

from typing import Any, Dict, Iterable, Optional
from mfi_backoffice.domain.models import ApplicationStatus, ProductRanges
from mfi_backoffice.domain.exceptions import ValidationError

INITIAL_STATUS = ApplicationStatus.PENDING

# Every status may move to every other status. Tighten a row here to guard a transition.
TRANSITIONS: Dict[ApplicationStatus, frozenset] = {
    status: frozenset(ApplicationStatus) for status in ApplicationStatus
}

REQUIRED_FIELDS = (
    "full_name",
    "email",
    "phone",
    "dob",
    "gender",
    "id_number",
    "address",
    "loan_product_id",
    "loan_amount",
    "purpose",
    "tenure",
    "employment",
    "income",
)

# Fields whose change requires re-checking the product ranges
LOAN_TERMS_FIELDS = ("loan_product_id", "loan_amount", "tenure")


def parse_status(value: Any) -> ApplicationStatus:
    """Coerce a raw status string, rejecting anything outside the four known states"""
    if isinstance(value, ApplicationStatus):
        return value
    try:
        return ApplicationStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in ApplicationStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed values: {allowed}")


def is_valid_transition(current: Any, target: Any) -> bool:
    """Whether an application in `current` may move to `target`"""
    try:
        current_status = ApplicationStatus(current)
        target_status = ApplicationStatus(target)
    except ValueError:
        return False
    return target_status in TRANSITIONS[current_status]


def check_transition(current: Any, target: Any) -> ApplicationStatus:
    """Validate a status change and return the parsed target status"""
    target_status = parse_status(target)
    if current is not None and not is_valid_transition(current, target_status):
        raise ValidationError(f"Cannot move application from '{current}' to '{target_status.value}'")
    return target_status


def check_required_fields(data: Dict[str, Any], fields: Iterable[str] = REQUIRED_FIELDS) -> None:
    """Reject submissions with absent values or blank strings"""
    missing = []
    for name in fields:
        value = data.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(name)

    if missing:
        raise ValidationError("Missing required fields", details=missing)


def check_loan_terms(loan_amount: float, tenure: int, product: Optional[ProductRanges]) -> None:
    """
    Validate requested amount and tenure against the selected product.

    Order matters: unresolved product first, then amount, then tenure, so the
    caller always sees the earliest failing rule.
    """
    if product is None:
        raise ValidationError("Selected loan product does not exist")

    if not (product.min_amount <= loan_amount <= product.max_amount):
        raise ValidationError(
            f"Loan amount must be between {product.min_amount:,} and {product.max_amount:,} "
            f"for {product.name}"
        )

    if not (product.min_tenure <= tenure <= product.max_tenure):
        raise ValidationError(
            f"Tenure must be between {product.min_tenure} and {product.max_tenure} months "
            f"for {product.name}"
        )


def validate_submission(data: Dict[str, Any], product: Optional[ProductRanges]) -> Dict[str, Any]:
    """
    Validate a new application and return the fields to persist.

    The stored loan type is a snapshot of the product name at submission, so
    reports keep rendering after the product is edited or deleted.
    """
    check_required_fields(data)
    check_loan_terms(data["loan_amount"], data["tenure"], product)

    record = dict(data)
    record["loan_type"] = product.name
    record["status"] = INITIAL_STATUS.value
    return record


def touches_loan_terms(patch: Dict[str, Any]) -> bool:
    return any(name in patch for name in LOAN_TERMS_FIELDS)
