"""Unit tests for application submission rules and status transitions"""

import uuid
import pytest
from datetime import date
from mfi_backoffice.domain.lifecycle import (
    INITIAL_STATUS,
    REQUIRED_FIELDS,
    check_loan_terms,
    check_required_fields,
    check_transition,
    is_valid_transition,
    parse_status,
    touches_loan_terms,
    validate_submission,
)
from mfi_backoffice.domain.models import ApplicationStatus, ProductRanges
from mfi_backoffice.domain.exceptions import ValidationError


@pytest.fixture
def ranges() -> ProductRanges:
    return ProductRanges(
        name="Business Loan",
        min_amount=1_000_000,
        max_amount=50_000_000,
        min_tenure=6,
        max_tenure=36,
        min_interest=12.0,
        max_interest=18.0,
        processing_fee=2.0,
    )


@pytest.fixture
def submission() -> dict:
    return {
        "full_name": "Amina Okafor",
        "email": "amina@example.com",
        "phone": "+2348012345678",
        "dob": date(1988, 4, 12),
        "gender": "Female",
        "id_number": "NIN-0042",
        "address": "12 Market Road, Lagos",
        "loan_product_id": uuid.uuid4(),
        "loan_amount": 5_000_000,
        "purpose": "Inventory",
        "tenure": 12,
        "employment": "Self-employed",
        "income": 800_000,
        "documents": [],
    }


def test_validate_submission_snapshots_product_name(submission, ranges):
    record = validate_submission(dict(submission, loan_type="Ignored"), ranges)

    assert record["loan_type"] == "Business Loan"
    assert record["status"] == INITIAL_STATUS.value == "Pending"
    assert record["loan_amount"] == 5_000_000


@pytest.mark.parametrize("amount", [1_000_000, 50_000_000])
def test_bounds_are_inclusive(amount, ranges):
    check_loan_terms(amount, 6, ranges)
    check_loan_terms(amount, 36, ranges)


def test_amount_below_minimum_is_rejected(ranges):
    with pytest.raises(ValidationError) as exc:
        check_loan_terms(500_000, 12, ranges)

    assert "1,000,000" in exc.value.message
    assert "50,000,000" in exc.value.message


def test_tenure_outside_range_is_rejected(ranges):
    with pytest.raises(ValidationError) as exc:
        check_loan_terms(5_000_000, 48, ranges)
    assert "Tenure must be between 6 and 36" in exc.value.message


def test_amount_checked_before_tenure(ranges):
    with pytest.raises(ValidationError) as exc:
        check_loan_terms(100, 100, ranges)
    assert exc.value.message.startswith("Loan amount")


def test_missing_product_is_rejected():
    with pytest.raises(ValidationError) as exc:
        check_loan_terms(5_000_000, 12, None)
    assert exc.value.message == "Selected loan product does not exist"


def test_missing_fields_are_listed(submission, ranges):
    del submission["email"]
    submission["purpose"] = "   "

    with pytest.raises(ValidationError) as exc:
        validate_submission(submission, ranges)

    assert exc.value.message == "Missing required fields"
    assert exc.value.details == ["email", "purpose"]


def test_zero_income_counts_as_present(submission):
    submission["income"] = 0
    check_required_fields(submission)


def test_required_fields_cover_loan_terms():
    for name in ("loan_product_id", "loan_amount", "tenure", "income", "dob"):
        assert name in REQUIRED_FIELDS


def test_every_transition_is_permitted():
    for current in ApplicationStatus:
        for target in ApplicationStatus:
            assert is_valid_transition(current, target)


def test_unknown_status_is_not_a_valid_transition():
    assert not is_valid_transition("Pending", "Disbursed")
    assert not is_valid_transition("Archived", "Approved")


def test_check_transition_returns_parsed_status():
    assert check_transition("Pending", "Under Review") is ApplicationStatus.UNDER_REVIEW
    assert check_transition("Approved", "Approved") is ApplicationStatus.APPROVED


def test_check_transition_rejects_unknown_target():
    with pytest.raises(ValidationError) as exc:
        check_transition("Pending", "approved")
    assert "Allowed values" in exc.value.message


def test_parse_status_accepts_enum():
    assert parse_status(ApplicationStatus.REJECTED) is ApplicationStatus.REJECTED


def test_touches_loan_terms():
    assert touches_loan_terms({"tenure": 12})
    assert not touches_loan_terms({"notes": "call back", "status": "Approved"})
