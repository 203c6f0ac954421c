"""Pytest fixtures for testing"""

import pytest
from datetime import datetime
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from mfi_backoffice.api.main import create_app
from mfi_backoffice.api.dependencies import get_file_store
from mfi_backoffice.infrastructure.database.models import Base, LoanProduct
from mfi_backoffice.infrastructure.database.session import get_db
from mfi_backoffice.infrastructure.identity import create_access_token
from mfi_backoffice.infrastructure.storage.local import LocalFileStore
from mfi_backoffice.domain.models import ApplicationSnapshot


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def file_store(tmp_path) -> LocalFileStore:
    """File store writing into a per-test temporary directory"""
    return LocalFileStore(base_dir=str(tmp_path / "uploads"), url_prefix="/uploads")


@pytest.fixture
def client(db: Session, file_store: LocalFileStore) -> TestClient:
    """Create FastAPI test client with test database and upload directory"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_file_store] = lambda: file_store
    return TestClient(app)


@pytest.fixture
def officer_headers() -> dict:
    token = create_access_token("officer-1", "officer@mfi.test", "officer")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers() -> dict:
    token = create_access_token("admin-1", "admin@mfi.test", "admin")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def product(db: Session) -> LoanProduct:
    """Business loan: 1M-50M over 6-36 months at 12-18%, 2% fee"""
    product = LoanProduct(
        name="Business Loan",
        description="Working capital for small businesses",
        min_amount=1_000_000,
        max_amount=50_000_000,
        min_tenure=6,
        max_tenure=36,
        min_interest=12.0,
        max_interest=18.0,
        processing_fee=2.0,
        status="Active",
        features=["Flexible repayment"],
        eligibility=["Registered business"],
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def application_payload(product: LoanProduct) -> dict:
    """A complete, in-range submission against the business loan product"""
    return {
        "fullName": "Amina Okafor",
        "email": "amina@example.com",
        "phone": "+2348012345678",
        "dob": "1988-04-12",
        "gender": "Female",
        "idNumber": "NIN-0042",
        "address": "12 Market Road, Lagos",
        "loanProductId": str(product.id),
        "loanType": "Whatever the client says",
        "loanAmount": 5_000_000,
        "purpose": "Inventory",
        "tenure": 12,
        "employment": "Self-employed",
        "income": 800_000,
        "businessName": "Amina Provisions",
        "yearsInBusiness": 4,
        "employees": 3,
    }


@pytest.fixture
def snapshot_factory():
    """Build reporting snapshots with sensible defaults"""

    def make(
        status: str = "Pending",
        loan_amount: float = 1_000_000,
        loan_type: str = "Business Loan",
        created_at: datetime = datetime(2026, 10, 5, 9, 0),
        updated_at: datetime = None,
    ) -> ApplicationSnapshot:
        return ApplicationSnapshot(
            loan_type=loan_type,
            loan_amount=loan_amount,
            status=status,
            created_at=created_at,
            updated_at=updated_at or created_at,
        )

    return make
