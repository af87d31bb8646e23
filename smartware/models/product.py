# smartware/models/product.py
#
# Ledger records. Stored blobs use the camelCase keys of the original
# local-storage format (minStock, expiryDate, ...), hence the aliases.

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


DEFAULT_WAREHOUSE = "Kho Chính"
DEFAULT_SHELF = "Kệ Đợi"
DEFAULT_TIER = "Tầng 1"
DEFAULT_BOX = "Chưa xếp"

DEFAULT_CATEGORY = "Chưa phân loại"


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Location(_Record):
    warehouse: str = DEFAULT_WAREHOUSE
    shelf: str = DEFAULT_SHELF
    tier: str = DEFAULT_TIER
    box: str = DEFAULT_BOX


class LocationPatch(_Record):
    warehouse: str | None = None
    shelf: str | None = None
    tier: str | None = None
    box: str | None = None


class Product(_Record):
    model_config = ConfigDict(frozen=True)

    id: str
    sku: str
    name: str
    category: str = DEFAULT_CATEGORY
    price: Decimal = Field(default=Decimal("0"), ge=0)
    cost: Decimal = Field(default=Decimal("0"), ge=0)
    quantity: int = Field(default=0, ge=0)
    min_stock: int = 5
    max_stock: int = 100
    lot: str | None = None
    expiry_date: date | None = None
    location: Location = Field(default_factory=Location)
    last_supplier: str | None = None

    @field_validator("lot", "expiry_date", "last_supplier", mode="before")
    @classmethod
    def _blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProductCandidate(_Record):
    """Partial product update fed to ``Ledger.upsert_record``.

    ``None`` means "not specified": the existing value is kept on merge and
    the ledger default is used on insert. ``quantity`` is absolute.
    """

    id: str | None = None
    sku: str | None = None
    name: str | None = None
    category: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    cost: Decimal | None = Field(default=None, ge=0)
    quantity: int | None = None
    min_stock: int | None = None
    max_stock: int | None = None
    lot: str | None = None
    expiry_date: date | None = None
    location: LocationPatch | None = None
    last_supplier: str | None = None

    @field_validator("lot", "expiry_date", "last_supplier", mode="before")
    @classmethod
    def _blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
