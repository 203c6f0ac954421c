"""Amortizing-loan payment math for monthly repayment"""

import math
from typing import List
from mfi_backoffice.domain.models import PaymentSummary, ScheduleRow
from mfi_backoffice.domain.exceptions import ValidationError

OVERFLOW_MESSAGE = "Tenure and interest rate are too large to compute a payment"


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate to a monthly decimal rate"""
    return (annual_rate_percent / 100) / 12


def calculate_payment(principal: float, annual_rate_percent: float, months: int) -> PaymentSummary:
    """
    Compute the equal monthly payment for an amortizing loan.

    Formula:
    - r = annual_rate / 100 / 12
    - r == 0: payment = principal / months
    - otherwise: payment = P * r * (1 + r)^n / ((1 + r)^n - 1)

    Values are kept at full float precision. Callers round for display only,
    so repeated calls never compound rounding error.

    Example:
        10,000,000 at 10% over 12 months
        → monthly ≈ 879,158.87, total ≈ 10,549,906, interest ≈ 549,906

    Raises:
        ValidationError: if months is not a positive integer, inputs are negative,
            or the compounding overflows a float
    """
    if months is None or months <= 0:
        raise ValidationError("Tenure must be at least 1 month")
    if principal < 0:
        raise ValidationError("Principal cannot be negative")
    if annual_rate_percent < 0:
        raise ValidationError("Interest rate cannot be negative")

    rate = monthly_rate(annual_rate_percent)

    if rate == 0:
        payment = principal / months
    else:
        try:
            growth = (1 + rate) ** months
            payment = principal * (rate * growth) / (growth - 1)
        except OverflowError as e:
            raise ValidationError(OVERFLOW_MESSAGE) from e
        if not math.isfinite(payment):
            raise ValidationError(OVERFLOW_MESSAGE)

    total_payment = payment * months

    return PaymentSummary(
        principal=principal,
        annual_rate_percent=annual_rate_percent,
        months=months,
        monthly_rate=rate,
        monthly_payment=payment,
        total_payment=total_payment,
        total_interest=total_payment - principal,
    )


def build_schedule(principal: float, annual_rate_percent: float, months: int) -> List[ScheduleRow]:
    """
    Split each monthly payment into interest and principal components.

    Interest for a month is charged on the balance left after the previous
    month. The final row clears whatever float drift remains so the closing
    balance is exactly zero.
    """
    summary = calculate_payment(principal, annual_rate_percent, months)
    balance = principal
    rows = []

    for period in range(1, months + 1):
        interest = balance * summary.monthly_rate
        principal_part = summary.monthly_payment - interest

        if period == months:
            principal_part = balance

        balance = balance - principal_part

        rows.append(
            ScheduleRow(
                period=period,
                payment=principal_part + interest,
                principal=principal_part,
                interest=interest,
                balance=max(balance, 0.0),
            )
        )

    return rows


def processing_fee_amount(principal: float, processing_fee_percent: float) -> float:
    """Origination fee charged once, outside the amortized interest"""
    return principal * (processing_fee_percent or 0) / 100


def debt_to_income_ratio(monthly_payment: float, monthly_income: float) -> float:
    """Monthly payment as a percentage of monthly income (0 when income is 0)"""
    if not monthly_income:
        return 0.0
    return monthly_payment / monthly_income * 100


def loan_to_annual_income_ratio(principal: float, monthly_income: float) -> float:
    """Loan amount as a percentage of yearly income (0 when income is 0)"""
    if not monthly_income:
        return 0.0
    return principal / (monthly_income * 12) * 100
