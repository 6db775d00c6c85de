"""
Site survey report (.docx).

A cover block with the company letterhead, then survey information,
customer and contact, the building tree and the attached files.
"""

from datetime import datetime
from io import BytesIO
from typing import Any

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt, RGBColor

from modules.backend.core.config_schema import CompanySchema
from modules.backend.core.utils import utc_now
from modules.backend.models.file import File
from modules.backend.models.site_survey import SiteSurvey

DOCX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_ACCENT = RGBColor(0x1F, 0x4E, 0x78)
_MUTED = RGBColor(0x66, 0x66, 0x66)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _add_key_value_table(doc: Any, rows: list[tuple[str, Any]]) -> None:
    rows = [(label, value) for label, value in rows if value not in (None, "")]
    if not rows:
        return
    table = doc.add_table(rows=len(rows), cols=2)
    table.style = "Light Grid Accent 1"
    for row, (label, value) in zip(table.rows, rows):
        row.cells[0].text = ""
        row.cells[0].paragraphs[0].add_run(label).bold = True
        row.cells[1].text = str(value)


def _add_cover(doc: Any, survey: SiteSurvey, company: CompanySchema) -> None:
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(company.name)
    run.bold = True
    run.font.size = Pt(20)
    run.font.color.rgb = _ACCENT

    title = doc.add_heading("SITE SURVEY REPORT", level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER

    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(survey.type)
    run.bold = True
    run.font.size = Pt(14)

    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    p.add_run("PREPARED FOR ").italic = True
    p.add_run(survey.customer.name if survey.customer else "").bold = True

    contact_line = " • ".join(
        part for part in (company.address, company.phone, company.email, company.website) if part
    )
    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(contact_line)
    run.font.size = Pt(9)
    run.font.color.rgb = _MUTED
    if company.tax_id:
        run = p.add_run(f"\nVAT: {company.tax_id}")
        run.font.size = Pt(9)
        run.font.color.rgb = _MUTED


def _add_buildings(doc: Any, buildings: list[dict[str, Any]]) -> None:
    doc.add_heading("Infrastructure", level=1)
    if not buildings:
        doc.add_paragraph("No infrastructure data has been documented for this survey.")
        return

    floors = [floor for b in buildings for floor in b.get("floors") or []]
    rooms = sum(len(floor.get("rooms") or []) for floor in floors)
    racks = sum(1 for b in buildings if b.get("centralRack")) + sum(
        len(floor.get("floorRacks") or []) for floor in floors
    )
    _add_key_value_table(doc, [
        ("Buildings", len(buildings)),
        ("Total Floors", len(floors)),
        ("Total Racks", racks),
        ("Total Rooms", rooms),
    ])

    for index, building in enumerate(buildings, start=1):
        doc.add_heading(f"{index}. {building.get('name', '')}", level=2)
        details = " | ".join(
            part for part in (
                f"Code: {building['code']}" if building.get("code") else None,
                building.get("address") or "No address specified",
            ) if part
        )
        doc.add_paragraph(details)
        if building.get("notes"):
            doc.add_paragraph(building["notes"]).runs[0].italic = True

        central_rack = building.get("centralRack")
        if central_rack:
            devices = central_rack.get("devices") or []
            doc.add_paragraph(
                f"Central Rack: {central_rack.get('name', '')} ({_plural(len(devices), 'device')})",
                style="List Bullet",
            )
        for floor in building.get("floors") or []:
            floor_rooms = floor.get("rooms") or []
            floor_racks = floor.get("floorRacks") or []
            doc.add_paragraph(
                f"{floor.get('name', '')} - {_plural(len(floor_rooms), 'room')}, "
                f"{_plural(len(floor_racks), 'rack')}",
                style="List Bullet",
            )
            for room in floor_rooms:
                label = room.get("name", "")
                if room.get("number"):
                    label = f"{label} ({room['number']})"
                if room.get("type"):
                    label = f"{label}: {room['type']}"
                doc.add_paragraph(label, style="List Bullet 2")


def build_site_survey_document(
    survey: SiteSurvey,
    company: CompanySchema,
    buildings: list[dict[str, Any]],
    files: list[File],
    generated_at: datetime | None = None,
) -> bytes:
    """
    Render the site survey report.

    Args:
        survey: Site survey with customer, contact and assignees loaded
        company: Letterhead details
        buildings: Building tree snapshot (may be empty)
        files: Files attached to the survey
        generated_at: Timestamp printed in the footer line (defaults to now, UTC)

    Returns:
        The .docx file contents
    """
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)

    _add_cover(doc, survey, company)

    doc.add_heading("Survey Information", level=1)
    location = ", ".join(part for part in (survey.address, survey.city) if part)
    _add_key_value_table(doc, [
        ("Survey ID", f"SS-{survey.id}"),
        ("Title", survey.title),
        ("Survey Type", survey.type),
        ("Status", survey.status),
        ("Stage", survey.stage),
        ("Arranged Date", survey.arranged_date.strftime("%d/%m/%Y %H:%M") if survey.arranged_date else None),
        ("Location", location or "Not specified"),
        ("Assigned From", survey.assign_from.name if survey.assign_from else None),
        ("Assigned To", survey.assign_to.name if survey.assign_to else None),
    ])
    if survey.description:
        doc.add_paragraph()
        doc.add_paragraph(survey.description)

    doc.add_heading("Customer", level=1)
    customer = survey.customer
    _add_key_value_table(doc, [
        ("Customer", customer.name if customer else None),
        ("Tax ID", customer.afm if customer else None),
        ("Email", customer.email if customer else None),
        ("Phone", customer.phone if customer else None),
        ("Address", ", ".join(p for p in (customer.address, customer.city) if p) if customer else None),
        ("Contact", survey.contact.name if survey.contact else None),
        ("Contact Email", survey.contact.email if survey.contact else None),
        ("Contact Phone", (survey.contact.mobile_phone or survey.contact.phone) if survey.contact else None),
    ])

    _add_buildings(doc, buildings)

    doc.add_heading("Attachments", level=1)
    if files:
        for file in files:
            p = doc.add_paragraph(style="List Bullet")
            p.add_run(file.title or file.name).bold = True
            p.add_run(f" {file.url}")
    else:
        doc.add_paragraph("No files attached.")

    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run(
        f"Document generated on {(generated_at or utc_now()).strftime('%d/%m/%Y %H:%M')}"
    )
    run.italic = True
    run.font.size = Pt(8)
    run.font.color.rgb = _MUTED

    output = BytesIO()
    doc.save(output)
    return output.getvalue()
