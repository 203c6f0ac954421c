"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class ApplicationStatus(str, Enum):
    """Loan application lifecycle states"""

    PENDING = "Pending"
    UNDER_REVIEW = "Under Review"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class ProductStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class RelatedTo(str, Enum):
    """Entity kinds a document can be attached to"""

    APPLICATION = "Application"
    PRODUCT = "Product"
    USER = "User"
    BRANCH = "Branch"
    OTHER = "Other"


class DocumentCategory(str, Enum):
    ID_DOCUMENT = "ID Document"
    INCOME_PROOF = "Income Proof"
    BANK_STATEMENT = "Bank Statement"
    BUSINESS_LICENSE = "Business License"
    TAX_DOCUMENT = "Tax Document"
    PROPERTY_DOCUMENT = "Property Document"
    PHOTO = "Photo"
    OTHER = "Other"


class DocumentStatus(str, Enum):
    ACTIVE = "Active"
    ARCHIVED = "Archived"
    DELETED = "Deleted"


class Role(str, Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    OFFICER = "officer"


@dataclass
class ProductRanges:
    """Valid ranges a loan product imposes on applications"""

    name: str
    min_amount: int
    max_amount: int
    min_tenure: int
    max_tenure: int
    min_interest: float
    max_interest: float
    processing_fee: float = 0.0


@dataclass
class ApplicationSnapshot:
    """The slice of an application the reporting aggregator needs"""

    loan_type: str
    loan_amount: float
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass
class PaymentSummary:
    """Amortization figures for one loan, unrounded"""

    principal: float
    annual_rate_percent: float
    months: int
    monthly_rate: float
    monthly_payment: float
    total_payment: float
    total_interest: float


@dataclass
class ScheduleRow:
    """Single month in an amortization schedule"""

    period: int
    payment: float
    principal: float
    interest: float
    balance: float


@dataclass
class Identity:
    """Verified caller identity resolved for one request"""

    subject: str
    email: str
    role: str

    def has_role(self, *roles: str) -> bool:
        return self.role in roles


@dataclass
class StoredFile:
    """Result of writing an upload to the file store"""

    file_name: str
    original_name: str
    file_path: str
    file_url: str
    file_size: int
    mime_type: str

