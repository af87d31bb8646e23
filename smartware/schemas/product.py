# schemas/product.py

from datetime import date
from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel

from smartware.core.auth import Role
from smartware.models.product import Product


class LocationResponse(BaseModel):
    warehouse: str
    shelf: str
    tier: str
    box: str

    class Config:
        from_attributes = True


class ProductResponse(BaseModel):
    id: str
    sku: str
    name: str
    category: str
    price: Decimal | None
    cost: Decimal | None
    quantity: int
    min_stock: int
    max_stock: int
    lot: str | None
    expiry_date: date | None
    location: LocationResponse
    last_supplier: str | None
    low_stock: bool

    class Config:
        from_attributes = True


class ProductListResponse(BaseModel):
    total: int
    counts: Dict[str, int]
    items: List[ProductResponse]


def to_response(product: Product, role: Role) -> ProductResponse:
    response = ProductResponse(
        **product.model_dump(exclude={"location"}),
        location=LocationResponse.model_validate(product.location),
        low_stock=product.quantity < product.min_stock,
    )

    # Staff never see money figures
    if role != Role.ADMIN:
        response.price = None
        response.cost = None

    return response
