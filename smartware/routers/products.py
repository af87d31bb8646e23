# smartware/routers/products.py

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from smartware.core import reports
from smartware.core.auth import Role, get_current_role, get_ledger
from smartware.core.config import settings
from smartware.core.ledger import Ledger, find_index
from smartware.core.reports import StockStatus
from smartware.models.product import ProductCandidate
from smartware.schemas.product import (
    ProductListResponse,
    ProductResponse,
    to_response,
)

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)


@router.get("", response_model=ProductListResponse)
def list_products(
    q: str | None = Query(None, description="Name or SKU fragment"),
    stock_status: StockStatus = Query(StockStatus.ALL, alias="status"),
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    # Newest first
    products = list(reversed(ledger.snapshot()))
    today = date.today()

    items = reports.search(
        products,
        q,
        stock_status,
        today,
        settings.EXPIRY_HORIZON_DAYS,
    )

    return {
        "total": len(products),
        "counts": reports.status_counts(products, today, settings.EXPIRY_HORIZON_DAYS),
        "items": [to_response(p, role) for p in items],
    }


@router.post("", response_model=list[ProductResponse])
def upsert_products(
    updates: ProductCandidate | list[ProductCandidate],
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    # Staff cannot change prices
    if role != Role.ADMIN:
        if isinstance(updates, ProductCandidate):
            updates = [updates]
        updates = [c.model_copy(update={"price": None, "cost": None}) for c in updates]

    products = ledger.upsert(updates)
    return [to_response(p, role) for p in products]


@router.post(
    "/new",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_blank_product(
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    product = ledger.upsert_record(
        ProductCandidate(
            name="Sản phẩm mới",
            quantity=0,
            min_stock=settings.DEFAULT_MIN_STOCK,
            max_stock=settings.DEFAULT_MAX_STOCK,
            lot="LÔ-01",
        )
    )
    return to_response(product, role)


@router.get("/{ref}", response_model=ProductResponse)
def get_product(
    ref: str,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    product = ledger.find(ref)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )

    return to_response(product, role)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product_data: ProductCandidate,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    # Staff cannot change prices
    if role != Role.ADMIN:
        product_data = product_data.model_copy(update={"price": None, "cost": None})

    with ledger.batch() as txn:
        index = find_index(txn.products, product_id=product_id)

        if index == -1:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        # An edited SKU must not collide with another product
        if product_data.sku:
            owner = find_index(txn.products, sku=product_data.sku)
            if owner > -1 and owner != index:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Product with this SKU already exists",
                )

        product = txn.merge_at(index, product_data)

    return to_response(product, role)
