"""/v1/products - Loan product catalog"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from mfi_backoffice.api.v1.schemas import ErrorResponse, ProductCreate, ProductUpdate, ProductResponse, MessageResponse
from mfi_backoffice.api.dependencies import get_identity, parse_uuid, require_privileged
from mfi_backoffice.infrastructure.database.session import get_db
from mfi_backoffice.infrastructure.database.repositories import ProductRepository
from mfi_backoffice.domain.models import Identity
from mfi_backoffice.domain.products import check_product_ranges
from mfi_backoffice.domain.exceptions import NotFoundError, ValidationError

router = APIRouter(responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}})


@router.get("/products", response_model=List[ProductResponse])
def list_products(
    status: Optional[str] = Query(None, description="Active, Inactive, or All"),
    db: Session = Depends(get_db),
):
    """List loan products. No status (or All) returns every product."""
    repo = ProductRepository(db)
    return repo.list(status=None if status in (None, "", "All") else status)


@router.post("/products", response_model=ProductResponse, status_code=201)
def create_product(
    body: ProductCreate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    data = body.model_dump()
    check_product_ranges(data)

    repo = ProductRepository(db)
    if repo.name_taken(data["name"]):
        raise ValidationError(f"A product named '{data['name']}' already exists")

    try:
        product = repo.create(data)
        db.commit()
    except IntegrityError:
        # A concurrent create won the unique name
        db.rollback()
        raise ValidationError(f"A product named '{data['name']}' already exists")
    db.refresh(product)
    return product


@router.get("/products/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = ProductRepository(db).get(parse_uuid(product_id, "Product"))
    if not product:
        raise NotFoundError("Product not found")
    return product


@router.put("/products/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    body: ProductUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(get_identity),
):
    """
    Patch a product. The merged record must still satisfy min <= max for
    amount, tenure, and interest.
    """
    repo = ProductRepository(db)
    product = repo.get(parse_uuid(product_id, "Product"))
    if not product:
        raise NotFoundError("Product not found")

    patch = body.model_dump(exclude_unset=True)
    if any(value is None for value in patch.values()):
        raise ValidationError("Product fields cannot be set to null")

    merged = {
        key: patch.get(key, getattr(product, key))
        for key in ("min_amount", "max_amount", "min_tenure", "max_tenure", "min_interest", "max_interest", "processing_fee")
    }
    check_product_ranges(merged)

    if "name" in patch and repo.name_taken(patch["name"], exclude_id=product.id):
        raise ValidationError(f"A product named '{patch['name']}' already exists")

    try:
        repo.update(product, patch)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError(f"A product named '{patch.get('name')}' already exists")
    db.refresh(product)
    return product


@router.delete("/products/{product_id}", response_model=MessageResponse)
def delete_product(
    product_id: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_privileged),
):
    """Delete a product. Applications that reference it keep their loan type snapshot."""
    repo = ProductRepository(db)
    product = repo.get(parse_uuid(product_id, "Product"))
    if not product:
        raise NotFoundError("Product not found")

    repo.delete(product)
    db.commit()
    return MessageResponse(message="Product deleted successfully")
