"""
Bill of Materials workbook.

Collects product lines from a site survey's equipment tree and renders an
.xlsx with a SUMMARY sheet followed by one sheet per brand.

The equipment tree is the JSON stored in `SiteSurvey.infrastructure_data`:

    buildings[].centralRack.{voipPbx,ata,switches}[]
    buildings[].floors[].racks[].switches[]
    buildings[].floors[].rooms[].devices[]

Each equipment item lists `products: [{productId, quantity}]` or carries a
single `productId` (with an optional `quantity`).
"""

import re
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now
from modules.backend.models.catalog import Product

logger = get_logger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

DEFAULT_BRAND = "Generic"
CENTRAL_RACK_GROUPS = ("voipPbx", "ata", "switches")
BRAND_COLUMNS = ("#", "Product Name", "Code", "Category", "Manufacturer Code", "EAN Code", "Quantity")
BRAND_COLUMN_WIDTHS = (10, 40, 15, 20, 18, 18, 10)

_SHEET_TITLE_UNSAFE = re.compile(r"[\\/?*\[\]:]")

_WHITE_BOLD = Font(bold=True, color="FFFFFFFF")
_THIN = Side(style="thin", color="FFCCCCCC")
_CELL_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


@dataclass
class BomLine:
    """One product occurrence in the equipment tree, enriched from the catalog."""

    product_id: str
    quantity: int
    name: str = "Unknown Product"
    code: str = ""
    brand: str = DEFAULT_BRAND
    category: str = "N/A"
    manufacturer_code: str = ""
    ean_code: str = ""


def _item_products(item: Any) -> list[tuple[str, int]]:
    if not isinstance(item, dict):
        logger.warning("Skipping malformed equipment item", extra={"item": repr(item)[:200]})
        return []
    entries = item.get("products") or ([item] if item.get("productId") else [])

    pairs = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed equipment item", extra={"item": repr(entry)[:200]})
            continue
        if not entry.get("productId"):
            continue
        try:
            quantity = int(entry.get("quantity") or 1)
        except (TypeError, ValueError):
            logger.warning(
                "Skipping equipment entry with invalid quantity",
                extra={"product_id": entry["productId"], "quantity": repr(entry.get("quantity"))},
            )
            continue
        pairs.append((str(entry["productId"]), quantity))
    return pairs


def collect_equipment(buildings: list[dict[str, Any]]) -> list[tuple[str, int]]:
    """
    Walk the equipment tree and return (product_id, quantity) pairs.

    Pairs are returned in tree order and are not merged, so the same product
    may appear more than once.
    """
    equipment: list[tuple[str, int]] = []
    for building in buildings:
        central_rack = building.get("centralRack") or {}
        for group in CENTRAL_RACK_GROUPS:
            for item in central_rack.get(group) or []:
                equipment.extend(_item_products(item))

        for floor in building.get("floors") or []:
            for rack in floor.get("racks") or []:
                for item in rack.get("switches") or []:
                    equipment.extend(_item_products(item))
            for room in floor.get("rooms") or []:
                for item in room.get("devices") or []:
                    equipment.extend(_item_products(item))
    return equipment


def enrich_equipment(
    equipment: list[tuple[str, int]],
    products: dict[str, Product],
) -> list[BomLine]:
    """Attach catalog details to each equipment pair. Unknown ids keep placeholders."""
    lines = []
    for product_id, quantity in equipment:
        product = products.get(product_id)
        if product is None:
            lines.append(BomLine(product_id=product_id, quantity=quantity))
            continue
        lines.append(
            BomLine(
                product_id=product_id,
                quantity=quantity,
                name=product.name,
                code=product.code or product.code1 or "",
                brand=product.brand.name if product.brand else DEFAULT_BRAND,
                category=product.category.name if product.category else "N/A",
                manufacturer_code=product.code2 or "",
                ean_code=product.code1 or "",
            )
        )
    return lines


def group_by_brand(lines: list[BomLine]) -> dict[str, list[BomLine]]:
    """Group lines by upper-cased brand name, brands sorted alphabetically."""
    groups: dict[str, list[BomLine]] = {}
    for line in lines:
        brand = (line.brand or DEFAULT_BRAND).strip().upper() or DEFAULT_BRAND.upper()
        groups.setdefault(brand, []).append(line)
    return dict(sorted(groups.items()))


def brand_sheet_title(brand: str) -> str:
    """Excel sheet titles are limited to 31 characters without \\ / ? * [ ] :"""
    return _SHEET_TITLE_UNSAFE.sub("", brand)[:31] or DEFAULT_BRAND.upper()


def _write_summary(
    ws: Worksheet,
    groups: dict[str, list[BomLine]],
    customer_name: str,
    reference: str,
    is_lead: bool,
    generated_at: datetime,
) -> None:
    for index, width in enumerate((20, 30, 15, 15, 15, 20), start=1):
        ws.column_dimensions[get_column_letter(index)].width = width

    ws["A1"] = f"BOM SUMMARY - {customer_name}"
    ws["A1"].font = Font(size=18, bold=True, color="FFFFFFFF")
    ws["A1"].fill = _fill("FF1F4E78")
    ws["A1"].alignment = Alignment(vertical="center", horizontal="center")
    ws.merge_cells("A1:F1")
    ws.row_dimensions[1].height = 35

    info = (
        ("Lead Number:" if is_lead else "Reference:", reference),
        ("Customer:", customer_name),
        ("Generated:", generated_at.strftime("%Y-%m-%d %H:%M")),
    )
    for row, (label, value) in enumerate(info, start=3):
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=value)

    ws["A7"] = "PRODUCTS BY BRAND"
    ws["A7"].font = Font(size=14, bold=True, color="FFFFFFFF")
    ws["A7"].fill = _fill("FF2E86AB")
    ws.merge_cells("A7:F7")
    ws.row_dimensions[7].height = 25

    for column, header in enumerate(("Brand", "Products Count", "Total Quantity"), start=1):
        cell = ws.cell(row=8, column=column, value=header)
        cell.font = Font(bold=True)
        cell.fill = _fill("FFE8F4F8")

    row = 9
    total_products = 0
    total_quantity = 0
    for brand, lines in groups.items():
        quantity = sum(line.quantity for line in lines)
        ws.cell(row=row, column=1, value=brand)
        ws.cell(row=row, column=2, value=len(lines))
        ws.cell(row=row, column=3, value=quantity)
        total_products += len(lines)
        total_quantity += quantity
        row += 1

    for column, value in enumerate(("TOTAL PRODUCTS", total_products, total_quantity), start=1):
        cell = ws.cell(row=row, column=column, value=value)
        cell.font = Font(bold=True)
        cell.fill = _fill("FFFFD966")


def _write_brand_sheet(ws: Worksheet, brand: str, lines: list[BomLine]) -> None:
    for index, width in enumerate(BRAND_COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width

    ws["A1"] = f"BOM - {brand}"
    ws["A1"].font = Font(size=16, bold=True, color="FFFFFFFF")
    ws["A1"].fill = _fill("FF2E86AB")
    ws["A1"].alignment = Alignment(vertical="center", horizontal="center")
    ws.merge_cells("A1:G1")
    ws.row_dimensions[1].height = 30

    ws.append(BRAND_COLUMNS)
    for cell in ws[2]:
        cell.font = _WHITE_BOLD
        cell.fill = _fill("FF4A90A4")
        cell.alignment = Alignment(vertical="center", horizontal="center")
    ws.row_dimensions[2].height = 25

    for index, line in enumerate(lines, start=1):
        ws.append([
            index,
            line.name or "N/A",
            line.code or "-",
            line.category or "N/A",
            line.manufacturer_code or "-",
            line.ean_code or "-",
            line.quantity,
        ])
        for cell in ws[ws.max_row]:
            cell.border = _CELL_BORDER
            cell.alignment = Alignment(vertical="center")
        ws.cell(row=ws.max_row, column=7).alignment = Alignment(vertical="center", horizontal="right")

    ws.append(["", "", "", "", "", "TOTAL QTY:", sum(line.quantity for line in lines)])
    for cell in ws[ws.max_row]:
        cell.font = Font(bold=True)
        cell.fill = _fill("FFE8F4F8")
        cell.border = _CELL_BORDER
    ws.cell(row=ws.max_row, column=6).alignment = Alignment(horizontal="right")
    ws.cell(row=ws.max_row, column=7).alignment = Alignment(horizontal="right")


def build_bom_workbook(
    lines: list[BomLine],
    customer_name: str,
    reference: str,
    is_lead: bool = True,
    generated_at: datetime | None = None,
) -> bytes:
    """
    Render the BOM workbook.

    Args:
        lines: Enriched product lines
        customer_name: Shown in the summary title
        reference: Lead number, or another reference when there is no lead
        is_lead: Label the reference as "Lead Number" rather than "Reference"
        generated_at: Timestamp printed on the summary (defaults to now, UTC)

    Returns:
        The .xlsx file contents
    """
    groups = group_by_brand(lines)

    wb = Workbook()
    summary = wb.active
    summary.title = "SUMMARY"
    _write_summary(summary, groups, customer_name, reference, is_lead, generated_at or utc_now())

    for brand, brand_lines in groups.items():
        _write_brand_sheet(wb.create_sheet(brand_sheet_title(brand)), brand, brand_lines)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
