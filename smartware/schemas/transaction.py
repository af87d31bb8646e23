# schemas/transaction.py

from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel, Field, field_validator

from smartware.core.transactions import TxType
from smartware.models.product import LocationPatch
from smartware.schemas.product import ProductResponse


class AdjustmentRequest(BaseModel):
    ref: str = Field(..., min_length=1, description="SKU or product id")
    tx_type: TxType
    quantity: int = Field(..., gt=0)


class ManualEntryRequest(BaseModel):
    tx_type: TxType
    sku: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    category: str = "Tổng hợp"
    quantity: int = Field(default=0, ge=0)
    lot: str | None = None
    expiry_date: date | None = None

    @field_validator("sku", mode="before")
    @classmethod
    def _upper_sku(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("lot", "expiry_date", mode="before")
    @classmethod
    def _blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ScanRequest(BaseModel):
    payload: str = Field(..., min_length=1)


class ManualEntryPrefill(BaseModel):
    sku: str


class ScanResponse(BaseModel):
    found: bool
    product: ProductResponse | None = None
    manual_entry: ManualEntryPrefill | None = None


class TransferRequest(BaseModel):
    ref: str = Field(..., min_length=1)
    location: LocationPatch


class ConfirmItem(BaseModel):
    sku: str | None = None
    name: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=0)
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    cost: Decimal | None = Field(default=None, ge=0)
    lot: str | None = None
    expiry_date: date | None = None


class ExtractionResponse(BaseModel):
    total_items: int
    items: List[ConfirmItem]


class ConfirmRequest(BaseModel):
    tx_type: TxType
    items: List[ConfirmItem] = Field(..., min_length=1)


class TransactionResponse(BaseModel):
    tx_type: TxType
    products: List[ProductResponse]
