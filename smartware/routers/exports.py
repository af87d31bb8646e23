from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import Response, StreamingResponse

from smartware.core.auth import get_admin_role, get_ledger
from smartware.core.export import build_csv, build_workbook, export_filename
from smartware.core.ledger import Ledger
from smartware.core.rate_limiter import limiter

router = APIRouter(prefix="/exports", tags=["Exports"])


# =========================================================
# SNAPSHOT HELPER
# =========================================================
def _require_products(ledger: Ledger):
    products = ledger.snapshot()

    if not products:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No data to export",
        )

    return products


# =========================================================
# EXPORT ROUTES
# =========================================================
@router.get("/inventory.csv")
@limiter.limit("10/minute")
def export_inventory_csv(
    request: Request,
    ledger: Ledger = Depends(get_ledger),
    role=Depends(get_admin_role),
):
    products = _require_products(ledger)
    filename = export_filename(date.today(), "csv")

    return Response(
        content=build_csv(products).encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/inventory.xlsx")
@limiter.limit("10/minute")
def export_inventory_xlsx(
    request: Request,
    ledger: Ledger = Depends(get_ledger),
    role=Depends(get_admin_role),
):
    products = _require_products(ledger)
    filename = export_filename(date.today(), "xlsx")

    return StreamingResponse(
        build_workbook(products),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
