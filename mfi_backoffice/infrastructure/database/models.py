"""SQLAlchemy ORM models for the back office collections"""

import uuid
from sqlalchemy import Column, String, BigInteger, Boolean, Float, DateTime, Date, Integer, Text, JSON, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base

from mfi_backoffice.utils.date_utils import utcnow

Base = declarative_base()


class LoanProduct(Base):
    """Loan product with the ranges applications must respect"""

    __tablename__ = "loan_products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(150), unique=True, nullable=False)
    description = Column(Text, nullable=False, default="")
    min_amount = Column(BigInteger, nullable=False)
    max_amount = Column(BigInteger, nullable=False)
    min_tenure = Column(Integer, nullable=False)
    max_tenure = Column(Integer, nullable=False)
    min_interest = Column(Float, nullable=False)
    max_interest = Column(Float, nullable=False)
    processing_fee = Column(Float, nullable=False, default=0.0)
    status = Column(String(20), nullable=False, default="Active", index=True)
    features = Column(JSON, nullable=False, default=list)
    eligibility = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class LoanApplication(Base):
    """Loan application submitted by an applicant and decided by staff"""

    __tablename__ = "loan_applications"

    __table_args__ = (
        Index("ix_loan_applications_status_created", "status", "created_at"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Applicant
    full_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    phone = Column(Text, nullable=False)
    dob = Column(Date, nullable=False)
    gender = Column(Text, nullable=False)
    id_number = Column(Text, nullable=False)
    address = Column(Text, nullable=False)

    # Loan; loan_type is the product name captured at submission
    loan_product_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    loan_type = Column(Text, nullable=False)
    loan_amount = Column(Float, nullable=False)
    purpose = Column(Text, nullable=False)
    tenure = Column(Integer, nullable=False)

    # Employment
    employment = Column(Text, nullable=False)
    income = Column(Float, nullable=False)
    business_name = Column(Text, nullable=True)
    years_in_business = Column(Integer, nullable=True)
    employees = Column(Integer, nullable=True)

    status = Column(String(20), nullable=False, default="Pending", index=True)
    documents = Column(JSON, nullable=False, default=list)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class Document(Base):
    """Metadata for an uploaded file attached to another entity"""

    __tablename__ = "documents"

    __table_args__ = (
        Index("ix_documents_related", "related_to", "related_id"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    related_to = Column(String(20), nullable=False)
    related_id = Column(Text, nullable=False, index=True)

    file_name = Column(Text, nullable=False)
    original_name = Column(Text, nullable=False)
    file_type = Column(Text, nullable=False)
    file_size = Column(BigInteger, nullable=False)
    mime_type = Column(Text, nullable=False)
    file_path = Column(Text, nullable=False)
    file_url = Column(Text, nullable=False)
    storage_type = Column(String(20), nullable=False, default="local")

    category = Column(String(40), nullable=False, default="Other", index=True)
    description = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    uploaded_by = Column(Text, nullable=True)
    uploaded_by_name = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default="Active", index=True)
    verified = Column(Boolean, nullable=False, default=False)
    verified_by = Column(Text, nullable=True)
    verified_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
