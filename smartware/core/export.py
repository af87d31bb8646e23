# =========================================================
# INVENTORY EXPORT
#
# CSV (UTF-8 with BOM so Excel shows Vietnamese correctly) and
# XLSX snapshots of the product collection.
# =========================================================

import csv
from datetime import date
from io import BytesIO, StringIO
from typing import Sequence

from openpyxl import Workbook

from smartware.core import reports
from smartware.models.product import Product


BOM = "\ufeff"

HEADERS = [
    "Mã SKU",
    "Tên sản phẩm",
    "Danh mục",
    "Số lượng",
    "Giá vốn (đ)",
    "Giá bán (đ)",
    "Hạn dùng",
    "Kho",
    "Kệ",
    "Tầng",
    "Hộp",
]


def export_filename(today: date, extension: str) -> str:
    return f"Bao_Cao_Kho_SmartWare_{today.isoformat()}.{extension}"


def _row(p: Product) -> list:
    return [
        p.sku,
        p.name,
        p.category,
        p.quantity,
        p.cost,
        p.price,
        p.expiry_date.isoformat() if p.expiry_date else "N/A",
        p.location.warehouse,
        p.location.shelf,
        p.location.tier,
        p.location.box,
    ]


def build_csv(products: Sequence[Product]) -> str:
    output = StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(HEADERS)
    for p in products:
        writer.writerow(_row(p))

    return BOM + output.getvalue()


def build_workbook(products: Sequence[Product]) -> BytesIO:
    workbook = Workbook()

    # =======================
    # SHEET 1 - STOCK
    # =======================
    sheet = workbook.active
    sheet.title = "Tồn kho"
    sheet.append(HEADERS)

    for p in products:
        row = _row(p)
        row[4] = float(p.cost)
        row[5] = float(p.price)
        sheet.append(row)

    # =======================
    # SHEET 2 - SUMMARY
    # =======================
    summary = workbook.create_sheet(title="Tổng quan")
    summary.append(["Số sản phẩm", len(products)])
    summary.append(["Tổng giá vốn (đ)", float(reports.total_cost_value(products))])
    summary.append(["Tổng giá trị bán (đ)", float(reports.total_inventory_value(products))])
    summary.append(["Lợi nhuận dự kiến (đ)", float(reports.potential_profit(products))])
    summary.append(["Sắp hết hàng", reports.low_stock_count(products)])

    output = BytesIO()
    workbook.save(output)
    output.seek(0)
    return output
