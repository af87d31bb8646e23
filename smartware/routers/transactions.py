# =========================================================
# TRANSACTIONS ROUTER
#
# - Inbound / outbound adjustments on a selected product
# - Manual stock entry (SKU + name required)
# - QR / barcode payload lookup
# - Location transfer
# - Document import: extract with AI, review, then confirm
#
# The ledger is only touched once a request is complete; the
# AI extraction step never writes.
# =========================================================

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool

from smartware.core.auth import Role, get_current_role, get_ledger
from smartware.core.extraction import (
    EmptyExtractionError,
    ExtractionAuthError,
    ExtractionServiceError,
    MalformedExtractionError,
    extract_items,
)
from smartware.core.ledger import Ledger, ProductNotFoundError
from smartware.core.rate_limiter import limiter
from smartware.core.scanner import resolve_payload
from smartware.core.transactions import StockEntry, TxType, post_entries, signed_quantity, transfer
from smartware.schemas.product import ProductResponse, to_response
from smartware.schemas.transaction import (
    AdjustmentRequest,
    ConfirmItem,
    ConfirmRequest,
    ExtractionResponse,
    ManualEntryRequest,
    ScanRequest,
    ScanResponse,
    TransactionResponse,
    TransferRequest,
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])

logger = logging.getLogger("smartware")

MANUAL_DEFAULT_CATEGORY = "Chưa phân loại"
AI_DEFAULT_CATEGORY = "AI Imported"


def _require_stock_movement(tx_type: TxType):
    if tx_type == TxType.TRANSFER:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Use /transactions/transfer to move stock between locations",
        )


# =========================================================
# ADJUST SELECTED PRODUCT
# =========================================================
@router.post("/adjust", response_model=ProductResponse)
def adjust_stock(
    adjustment: AdjustmentRequest,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    _require_stock_movement(adjustment.tx_type)

    try:
        product = ledger.apply_adjustment(
            adjustment.ref,
            signed_quantity(adjustment.quantity, adjustment.tx_type),
        )
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")

    return to_response(product, role)


# =========================================================
# MANUAL ENTRY
# =========================================================
@router.post("/manual", response_model=TransactionResponse)
def manual_entry(
    entry: ManualEntryRequest,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    _require_stock_movement(entry.tx_type)

    products = post_entries(
        ledger,
        [
            StockEntry(
                sku=entry.sku,
                name=entry.name,
                category=entry.category,
                quantity=entry.quantity,
                lot=entry.lot,
                expiry_date=entry.expiry_date,
            )
        ],
        entry.tx_type,
        MANUAL_DEFAULT_CATEGORY,
    )

    return {
        "tx_type": entry.tx_type,
        "products": [to_response(p, role) for p in products],
    }


# =========================================================
# SCAN LOOKUP
# =========================================================
@router.post("/scan", response_model=ScanResponse)
def scan_lookup(
    scan: ScanRequest,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    result = resolve_payload(ledger.snapshot(), scan.payload)

    if result.found:
        return {"found": True, "product": to_response(result.product, role)}

    # Unknown code: continue with manual entry, SKU pre-filled
    return {"found": False, "manual_entry": {"sku": result.payload}}


# =========================================================
# TRANSFER
# =========================================================
@router.post("/transfer", response_model=ProductResponse)
def transfer_stock(
    request_data: TransferRequest,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    try:
        product = transfer(ledger, request_data.ref, request_data.location)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")

    return to_response(product, role)


# =========================================================
# AI DOCUMENT IMPORT
# =========================================================
@router.post("/ai/extract", response_model=ExtractionResponse)
@limiter.limit("10/minute")
async def extract_document(
    request: Request,
    file: UploadFile = File(...),
):
    document = await file.read()
    if not document:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    mime_type = file.content_type or "application/octet-stream"

    try:
        items = await run_in_threadpool(extract_items, document, mime_type)
    except ExtractionAuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={
                "message": "Extraction service rejected the API key, select a key again",
                "reauthenticate": True,
            },
        )
    except EmptyExtractionError:
        raise HTTPException(
            status_code=422,
            detail="No products found in the document",
        )
    except MalformedExtractionError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not read the document. The image may be blurry or not an invoice",
        )
    except ExtractionServiceError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Extraction service unavailable, try again",
        )

    return {
        "total_items": len(items),
        "items": [ConfirmItem(**item.model_dump()) for item in items],
    }


@router.post("/ai/confirm", response_model=TransactionResponse)
def confirm_document(
    confirmation: ConfirmRequest,
    ledger: Ledger = Depends(get_ledger),
    role: Role = Depends(get_current_role),
):
    _require_stock_movement(confirmation.tx_type)

    products = post_entries(
        ledger,
        [StockEntry(**item.model_dump()) for item in confirmation.items],
        confirmation.tx_type,
        AI_DEFAULT_CATEGORY,
    )

    logger.info(f"Confirmed {len(products)} imported items ({confirmation.tx_type.value})")

    return {
        "tx_type": confirmation.tx_type,
        "products": [to_response(p, role) for p in products],
    }
