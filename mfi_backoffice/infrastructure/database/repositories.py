"""Data access layer for back office entities"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Session
from mfi_backoffice.infrastructure.database.models import LoanProduct, LoanApplication, Document
from mfi_backoffice.domain.models import ApplicationSnapshot, ApplicationStatus
from mfi_backoffice.utils.date_utils import utcnow


class ProductRepository:
    """Repository for loan products"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> LoanProduct:
        product = LoanProduct(**data)
        self.db.add(product)
        self.db.flush()
        return product

    def list(self, status: Optional[str] = None) -> List[LoanProduct]:
        """All products, optionally filtered by status; unpaginated"""
        query = self.db.query(LoanProduct)
        if status:
            query = query.filter(LoanProduct.status == status)
        return query.order_by(LoanProduct.created_at.desc()).all()

    def get(self, product_id: uuid.UUID) -> Optional[LoanProduct]:
        return self.db.query(LoanProduct).filter(LoanProduct.id == product_id).first()

    def name_taken(self, name: str, exclude_id: Optional[uuid.UUID] = None) -> bool:
        query = self.db.query(LoanProduct.id).filter(LoanProduct.name == name)
        if exclude_id is not None:
            query = query.filter(LoanProduct.id != exclude_id)
        return query.first() is not None

    def update(self, product: LoanProduct, patch: Dict[str, Any]) -> LoanProduct:
        for key, value in patch.items():
            setattr(product, key, value)
        product.updated_at = utcnow()
        self.db.flush()
        return product

    def delete(self, product: LoanProduct) -> None:
        # Applications keep their loan_type snapshot and a dangling loan_product_id
        self.db.delete(product)
        self.db.flush()


class ApplicationRepository:
    """Repository for loan applications"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> LoanApplication:
        """Persist a validated application with created_at == updated_at"""
        now = utcnow()
        application = LoanApplication(**data, created_at=now, updated_at=now)
        self.db.add(application)
        self.db.flush()
        return application

    def get(self, application_id: uuid.UUID) -> Optional[LoanApplication]:
        return self.db.query(LoanApplication).filter(LoanApplication.id == application_id).first()

    def search(
        self,
        status: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 100,
    ) -> List[LoanApplication]:
        """Newest first, filtered by status and a case-insensitive name/email match"""
        query = self.db.query(LoanApplication)

        if status and status != "All":
            query = query.filter(LoanApplication.status == status)

        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    LoanApplication.full_name.ilike(pattern),
                    LoanApplication.email.ilike(pattern),
                )
            )

        return query.order_by(LoanApplication.created_at.desc()).limit(limit).all()

    def update_status(self, application: LoanApplication, status: ApplicationStatus) -> LoanApplication:
        application.status = status.value
        application.updated_at = utcnow()
        self.db.flush()
        return application

    def update_fields(self, application: LoanApplication, patch: Dict[str, Any]) -> LoanApplication:
        for key, value in patch.items():
            setattr(application, key, value)
        application.updated_at = utcnow()
        self.db.flush()
        return application

    def delete(self, application: LoanApplication) -> None:
        # Attached documents are not cascaded
        self.db.delete(application)
        self.db.flush()

    def snapshots(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[ApplicationSnapshot]:
        """Load the reporting slice of every application created within [start, end]"""
        query = self.db.query(
            LoanApplication.loan_type,
            LoanApplication.loan_amount,
            LoanApplication.status,
            LoanApplication.created_at,
            LoanApplication.updated_at,
        )
        if start is not None:
            query = query.filter(LoanApplication.created_at >= start)
        if end is not None:
            query = query.filter(LoanApplication.created_at <= end)

        return [
            ApplicationSnapshot(
                loan_type=row.loan_type,
                loan_amount=row.loan_amount,
                status=row.status,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in query.order_by(LoanApplication.created_at.asc()).all()
        ]

    def counters(self) -> Dict[str, Any]:
        """Current-snapshot counters computed by the database"""
        total = self.db.query(func.count(LoanApplication.id)).scalar() or 0

        by_status = dict(
            self.db.query(LoanApplication.status, func.count(LoanApplication.id))
            .group_by(LoanApplication.status)
            .all()
        )

        total_disbursed = (
            self.db.query(func.coalesce(func.sum(LoanApplication.loan_amount), 0))
            .filter(LoanApplication.status == ApplicationStatus.APPROVED.value)
            .scalar()
        )
        average_loan = self.db.query(func.avg(LoanApplication.loan_amount)).scalar()

        return {
            "total": total,
            "approved": by_status.get(ApplicationStatus.APPROVED.value, 0),
            "pending": by_status.get(ApplicationStatus.PENDING.value, 0),
            "rejected": by_status.get(ApplicationStatus.REJECTED.value, 0),
            "total_disbursed": float(total_disbursed or 0),
            "average_loan": float(average_loan or 0),
        }


class DocumentRepository:
    """Repository for uploaded document metadata"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, data: Dict[str, Any]) -> Document:
        document = Document(**data)
        self.db.add(document)
        self.db.flush()
        return document

    def get(self, document_id: uuid.UUID) -> Optional[Document]:
        return self.db.query(Document).filter(Document.id == document_id).first()

    def list(
        self,
        related_to: Optional[str] = None,
        related_id: Optional[str] = None,
        category: Optional[str] = None,
        status: str = "Active",
    ) -> List[Document]:
        query = self.db.query(Document).filter(Document.status == status)
        if related_to:
            query = query.filter(Document.related_to == related_to)
        if related_id:
            query = query.filter(Document.related_id == related_id)
        if category:
            query = query.filter(Document.category == category)
        return query.order_by(Document.created_at.desc()).all()

    def update(self, document: Document, patch: Dict[str, Any]) -> Document:
        for key, value in patch.items():
            setattr(document, key, value)
        document.updated_at = utcnow()
        self.db.flush()
        return document

    def delete(self, document: Document) -> None:
        self.db.delete(document)
        self.db.flush()
