"""
Unit Tests for the cabling workbook and the Word site survey report.
"""

import io
from datetime import datetime
from types import SimpleNamespace

import pytest
from docx import Document
from openpyxl import load_workbook

from modules.backend.core.config_schema import CompanySchema
from modules.backend.documents.cabling_excel import TITLE, build_cabling_workbook
from modules.backend.documents.site_survey_docx import build_site_survey_document

BUILDINGS = [
    {
        "name": "Main",
        "code": "B1",
        "centralRack": {
            "name": "MDF",
            "units": 42,
            "cableTerminations": [{"type": "CAT6", "count": 48}],
            "fiberTerminations": [{"type": "OM3", "totalStrands": 12, "terminatedStrands": 8}],
            "devices": [{"name": "Core", "type": "SWITCH", "brand": "Cisco", "model": "C9300"}],
        },
        "floors": [
            {
                "name": "Ground",
                "floorRacks": [{"name": "IDF-0"}],
                "rooms": [{"name": "Reception", "number": "001", "type": "Office", "outlets": 4}],
            },
        ],
    },
    {"name": "Annex"},
]


@pytest.fixture
def survey() -> SimpleNamespace:
    return SimpleNamespace(
        id="survey-1",
        title="Hotel cabling",
        type="CABLING",
        status="Scheduled",
        stage=None,
        description="Two buildings, one fiber link",
        arranged_date=datetime(2026, 11, 2, 9, 30),
        address="Akti Miaouli 10",
        city="Piraeus",
        phone=None,
        email="",
        customer=SimpleNamespace(
            name="Aegean Hotel",
            afm="099999999",
            email="info@aegean.example",
            phone=None,
            address="Akti Miaouli 10",
            city="Piraeus",
        ),
        contact=SimpleNamespace(name="Maria", email="maria@aegean.example", phone=None, mobile_phone="6900000000"),
        assign_from=SimpleNamespace(name="Admin", email="admin@example.com"),
        assign_to=None,
    )


@pytest.fixture
def company() -> CompanySchema:
    return CompanySchema(
        name="Survey CRM S.A.",
        address="1 Example Street, Athens",
        phone="+30 210 0000000",
        email="info@example.com",
        website="https://example.com",
        tax_id="000000000",
    )


def _rows(content: bytes) -> list[tuple]:
    sheet = load_workbook(io.BytesIO(content)).active
    return [row for row in sheet.iter_rows(values_only=True) if any(row)]


class TestCablingWorkbook:
    """Tests for build_cabling_workbook."""

    def test_survey_and_customer_details(self, survey):
        rows = _rows(build_cabling_workbook(survey, []))

        assert rows[0][0] == TITLE
        values = dict(row for row in rows if row[1] is not None)
        assert values["Τίτλος / Title"] == "Hotel cabling"
        assert values["Ημερομηνία / Arranged Date"] == "02/11/2026 09:30"
        assert values["Επαφή / Contact"] == "Maria"
        assert values["Ανατέθηκε Από / Assigned From"] == "Admin (admin@example.com)"

    def test_empty_values_skipped(self, survey):
        labels = [row[0] for row in _rows(build_cabling_workbook(survey, []))]

        assert "Email" not in labels
        assert "Ανατέθηκε Σε / Assigned To" not in labels
        assert "ΚΤΙΡΙΑ & ΥΠΟΔΟΜΗ / BUILDINGS & INFRASTRUCTURE" not in labels

    def test_building_tree(self, survey):
        rows = _rows(build_cabling_workbook(survey, BUILDINGS))
        values = {row[0].strip(): row[1] for row in rows if row[1] is not None}
        labels = [row[0] for row in rows]

        assert "ΚΤΙΡΙΟ 2 / BUILDING 2: Annex" in labels
        assert values["Τερματισμοί Χαλκού / Cable Terminations"] == "CAT6 x48"
        assert values["Τερματισμοί Οπτικών / Fiber Terminations"] == "OM3 8/12"
        assert values["Συσκευή / Device 1: Core"] == "SWITCH - Cisco - C9300"
        assert values["ΧΩΡΟΣ 1 / ROOM 1"] == "Reception"

    def test_connections_name_buildings(self, survey):
        connections = [{"fromBuilding": 0, "toBuilding": 1, "connectionType": "FIBER", "distance": 120.5}]

        rows = _rows(build_cabling_workbook(survey, BUILDINGS, connections))
        labels = [row[0] for row in rows]

        assert "ΣΥΝΔΕΣΗ 1 / CONNECTION 1: Main → Annex" in labels

    def test_timestamps(self, survey):
        rows = _rows(
            build_cabling_workbook(
                survey,
                [],
                created_at=datetime(2026, 10, 1, 8, 0),
                updated_at=datetime(2026, 10, 3, 17, 45),
            )
        )
        values = dict(row for row in rows if row[1] is not None)

        assert values["Δημιουργήθηκε / Created"] == "01/10/2026 08:00"
        assert values["Ενημερώθηκε / Updated"] == "03/10/2026 17:45"


class TestSiteSurveyDocument:
    """Tests for build_site_survey_document."""

    def _text(self, content: bytes) -> tuple[str, str]:
        doc = Document(io.BytesIO(content))
        paragraphs = "\n".join(p.text for p in doc.paragraphs)
        cells = "\n".join(cell.text for table in doc.tables for row in table.rows for cell in row.cells)
        return paragraphs, cells

    def test_cover_and_details(self, survey, company):
        paragraphs, cells = self._text(
            build_site_survey_document(survey, company, [], [], datetime(2026, 10, 19, 12, 0))
        )

        assert "Survey CRM S.A." in paragraphs
        assert "SITE SURVEY REPORT" in paragraphs
        assert "PREPARED FOR Aegean Hotel" in paragraphs
        assert "SS-survey-1" in cells
        assert "Akti Miaouli 10, Piraeus" in cells
        assert "6900000000" in cells
        assert "No infrastructure data has been documented for this survey." in paragraphs
        assert "No files attached." in paragraphs
        assert "Document generated on 19/10/2026 12:00" in paragraphs

    def test_buildings_and_files(self, survey, company):
        files = [
            SimpleNamespace(title="Floor plan", name="plan.pdf", url="https://cdn.test/plan.pdf"),
            SimpleNamespace(title=None, name="rack.webp", url="https://cdn.test/rack.webp"),
        ]

        paragraphs, cells = self._text(build_site_survey_document(survey, company, BUILDINGS, files))

        assert "1. Main" in paragraphs
        assert "Central Rack: MDF (1 device)" in paragraphs
        assert "Ground - 1 room, 1 rack" in paragraphs
        assert "Reception (001): Office" in paragraphs
        assert "Floor plan https://cdn.test/plan.pdf" in paragraphs
        assert "rack.webp https://cdn.test/rack.webp" in paragraphs
        assert "\n".join(["Buildings", "2"]) in cells
        assert "\n".join(["Total Racks", "2"]) in cells
