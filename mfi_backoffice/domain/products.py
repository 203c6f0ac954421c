"""Loan product catalog rules"""

from typing import Any, Dict
from mfi_backoffice.domain.models import ProductRanges
from mfi_backoffice.domain.exceptions import ValidationError

RANGE_PAIRS = (
    ("min_amount", "max_amount", "amount"),
    ("min_tenure", "max_tenure", "tenure"),
    ("min_interest", "max_interest", "interest"),
)

# Longest tenure a product may offer; keeps the annuity math in float range
MAX_TENURE_MONTHS = 600


def check_product_ranges(data: Dict[str, Any]) -> None:
    """
    Reject products whose ranges are inverted or negative.

    A product with min > max would make every application against it fail,
    so the invariant is enforced when the product is written.
    """
    problems = []
    for low_key, high_key, label in RANGE_PAIRS:
        low, high = data.get(low_key), data.get(high_key)
        if low is None or high is None:
            continue
        if low < 0 or high < 0:
            problems.append(f"{label} bounds cannot be negative")
        elif low > high:
            problems.append(f"minimum {label} ({low}) exceeds maximum {label} ({high})")

    if data.get("min_tenure") is not None and data["min_tenure"] < 1:
        problems.append("minimum tenure must be at least 1 month")

    if data.get("max_tenure") is not None and data["max_tenure"] > MAX_TENURE_MONTHS:
        problems.append(f"maximum tenure cannot exceed {MAX_TENURE_MONTHS} months")

    if data.get("processing_fee") is not None and data["processing_fee"] < 0:
        problems.append("processing fee cannot be negative")

    if problems:
        raise ValidationError("Invalid product ranges", details=problems)


def to_ranges(product: Any) -> ProductRanges:
    """Map any object with product attributes to the domain ranges"""
    return ProductRanges(
        name=product.name,
        min_amount=product.min_amount,
        max_amount=product.max_amount,
        min_tenure=product.min_tenure,
        max_tenure=product.max_tenure,
        min_interest=product.min_interest,
        max_interest=product.max_interest,
        processing_fee=product.processing_fee or 0.0,
    )
