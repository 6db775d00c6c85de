"""
Unit Tests for the bill of materials workbook.
"""

import io
from datetime import datetime
from types import SimpleNamespace

from openpyxl import load_workbook

from modules.backend.documents.bom_excel import (
    BomLine,
    brand_sheet_title,
    build_bom_workbook,
    collect_equipment,
    enrich_equipment,
    group_by_brand,
)

BUILDINGS = [
    {
        "name": "Main",
        "centralRack": {
            "voipPbx": [{"productId": "pbx", "quantity": 1}],
            "ata": [{"products": [{"productId": "ata", "quantity": 2}, {"quantity": 9}]}],
            "switches": [{"productId": "switch"}],
        },
        "floors": [
            {
                "racks": [{"switches": [{"productId": "switch", "quantity": 3}]}],
                "rooms": [{"devices": [{"products": [{"productId": "ap", "quantity": 4}]}, {"name": "No product"}]}],
            },
        ],
    },
    {"name": "Annex"},
]


def _product(name: str, brand: str | None, **values) -> SimpleNamespace:
    return SimpleNamespace(
        name=name,
        code=values.get("code"),
        code1=values.get("code1"),
        code2=values.get("code2"),
        brand=SimpleNamespace(name=brand) if brand else None,
        category=SimpleNamespace(name=values["category"]) if "category" in values else None,
    )


class TestCollectEquipment:
    """Tests for collect_equipment."""

    def test_walks_tree_in_order(self):
        assert collect_equipment(BUILDINGS) == [
            ("pbx", 1),
            ("ata", 2),
            ("switch", 1),
            ("switch", 3),
            ("ap", 4),
        ]

    def test_empty_tree(self):
        assert collect_equipment([{"name": "Empty", "centralRack": None, "floors": None}]) == []

    def test_malformed_entries_are_skipped(self):
        buildings = [
            {
                "centralRack": {
                    "switches": [
                        {"products": [{"productId": "bad", "quantity": "abc"}, "junk", {"productId": "ok", "quantity": "2"}]},
                        "not-an-item",
                        {"productId": "pbx", "quantity": None},
                    ],
                },
            },
        ]

        assert collect_equipment(buildings) == [("ok", 2), ("pbx", 1)]


class TestEnrichEquipment:
    """Tests for enrich_equipment."""

    def test_catalog_details(self):
        products = {
            "switch": _product("Catalyst 9200", "Cisco", code1="5200000000001", code2="C9200-24T", category="Switches"),
        }

        [line] = enrich_equipment([("switch", 2)], products)

        assert line == BomLine(
            product_id="switch",
            quantity=2,
            name="Catalyst 9200",
            code="5200000000001",
            brand="Cisco",
            category="Switches",
            manufacturer_code="C9200-24T",
            ean_code="5200000000001",
        )

    def test_unknown_product_keeps_placeholders(self):
        [line] = enrich_equipment([("gone", 1)], {})

        assert line.name == "Unknown Product"
        assert line.brand == "Generic"
        assert line.category == "N/A"

    def test_product_without_brand(self):
        [line] = enrich_equipment([("p", 1)], {"p": _product("Patch cord", None, code="PC1")})

        assert line.brand == "Generic"
        assert line.code == "PC1"


class TestGrouping:
    """Tests for brand grouping and sheet titles."""

    def test_groups_by_upper_case_brand_sorted(self):
        lines = [
            BomLine("a", 1, brand="ubiquiti"),
            BomLine("b", 1, brand="Cisco"),
            BomLine("c", 2, brand="Ubiquiti "),
        ]

        groups = group_by_brand(lines)

        assert list(groups) == ["CISCO", "UBIQUITI"]
        assert [line.product_id for line in groups["UBIQUITI"]] == ["a", "c"]

    def test_sheet_title_rules(self):
        assert brand_sheet_title("HP/ARUBA [NETWORKS]") == "HPARUBA NETWORKS"
        assert len(brand_sheet_title("X" * 40)) == 31
        assert brand_sheet_title("???") == "GENERIC"


class TestBuildBomWorkbook:
    """Tests for build_bom_workbook."""

    def _workbook(self, **kwargs):
        lines = [
            BomLine("switch", 2, name="Catalyst 9200", brand="Cisco"),
            BomLine("ap", 3, name="U6 Lite", brand="Ubiquiti"),
            BomLine("ap2", 1, name="U6 Pro", brand="Ubiquiti"),
        ]
        content = build_bom_workbook(
            lines,
            "Aegean Hotel",
            kwargs.get("reference", "LL007"),
            kwargs.get("is_lead", True),
            datetime(2026, 10, 1, 9, 30),
        )
        return load_workbook(io.BytesIO(content))

    def test_sheets(self):
        assert self._workbook().sheetnames == ["SUMMARY", "CISCO", "UBIQUITI"]

    def test_summary(self):
        summary = self._workbook()["SUMMARY"]

        assert summary["A1"].value == "BOM SUMMARY - Aegean Hotel"
        assert (summary["A3"].value, summary["B3"].value) == ("Lead Number:", "LL007")
        assert summary["B5"].value == "2026-10-01 09:30"
        assert [summary.cell(row=9, column=c).value for c in range(1, 4)] == ["CISCO", 1, 2]
        assert [summary.cell(row=10, column=c).value for c in range(1, 4)] == ["UBIQUITI", 2, 4]
        assert [summary.cell(row=11, column=c).value for c in range(1, 4)] == ["TOTAL PRODUCTS", 3, 6]

    def test_reference_label_without_lead(self):
        summary = self._workbook(reference="Aegean Hotel", is_lead=False)["SUMMARY"]

        assert summary["A3"].value == "Reference:"

    def test_brand_sheet(self):
        sheet = self._workbook()["UBIQUITI"]

        assert sheet["A1"].value == "BOM - UBIQUITI"
        assert sheet["B2"].value == "Product Name"
        assert [sheet.cell(row=3, column=c).value for c in (1, 2, 3, 7)] == [1, "U6 Lite", "-", 3]
        assert (sheet["F5"].value, sheet["G5"].value) == ("TOTAL QTY:", 4)
