"""
Cabling survey workbook.

Renders a two-column, bilingual (Greek / English) report of a site survey
and its cabling tree. The tree is the snapshot kept on the cabling survey,
in the same camelCase shape the client submits.
"""

from datetime import datetime
from io import BytesIO
from typing import Any

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from modules.backend.models.site_survey import SiteSurvey

TITLE = "CABLING SITE SURVEY REPORT"
HEADER_FILL = "FF2980B9"
SECTION_FILL = "FFE8F4F8"
SUBSECTION_FILL = "FFF0F8FF"
LABEL_FILL = "FFF5F5F5"


def _fill(color: str) -> PatternFill:
    return PatternFill(start_color=color, end_color=color, fill_type="solid")


def _format_date(value: datetime | None) -> str | None:
    return value.strftime("%d/%m/%Y %H:%M") if value else None


def _person(user: Any) -> str | None:
    if user is None:
        return None
    return f"{user.name or user.email} ({user.email})"


class _ReportWriter:
    """Appends styled rows to a two-column sheet."""

    def __init__(self, ws: Worksheet) -> None:
        self.ws = ws
        self.row = 1
        ws.column_dimensions["A"].width = 40
        ws.column_dimensions["B"].width = 60

    def _banner(self, text: str, font: Font, fill: str, height: int) -> None:
        cell = self.ws.cell(row=self.row, column=1, value=text)
        cell.font = font
        cell.fill = _fill(fill)
        cell.alignment = Alignment(vertical="center", horizontal="left")
        self.ws.merge_cells(start_row=self.row, start_column=1, end_row=self.row, end_column=2)
        self.ws.row_dimensions[self.row].height = height
        self.row += 1

    def header(self, text: str) -> None:
        self._banner(text, Font(size=14, bold=True, color="FFFFFFFF"), HEADER_FILL, 25)

    def section(self, text: str) -> None:
        self._banner(text, Font(size=12, bold=True), SECTION_FILL, 20)

    def subsection(self, text: str) -> None:
        self._banner(text, Font(size=11, bold=True), SUBSECTION_FILL, 18)

    def data(self, label: str, value: Any) -> None:
        """Write a label/value row. None and empty strings are skipped."""
        if value is None or value == "":
            return
        label_cell = self.ws.cell(row=self.row, column=1, value=label)
        label_cell.font = Font(size=10, bold=True)
        label_cell.fill = _fill(LABEL_FILL)
        value_cell = self.ws.cell(row=self.row, column=2, value=str(value))
        value_cell.font = Font(size=10)
        value_cell.alignment = Alignment(wrap_text=True, vertical="top")
        self.row += 1

    def blank(self) -> None:
        self.row += 1


def _terminations(rack: dict[str, Any]) -> tuple[str | None, str | None]:
    cable = ", ".join(
        f"{t.get('type')} x{t.get('count')}" for t in rack.get("cableTerminations") or []
    )
    fiber = ", ".join(
        f"{t.get('type')} {t.get('terminatedStrands')}/{t.get('totalStrands')}"
        for t in rack.get("fiberTerminations") or []
    )
    return cable or None, fiber or None


def _device_summary(device: dict[str, Any]) -> str:
    parts = [device.get("type") or "DEVICE"]
    if device.get("brand"):
        parts.append(device["brand"])
    if device.get("model"):
        parts.append(device["model"])
    return " - ".join(parts)


def _write_rack(report: _ReportWriter, rack: dict[str, Any], indent: str) -> None:
    cable, fiber = _terminations(rack)
    report.data(f"{indent}Κωδικός / Code", rack.get("code"))
    report.data(f"{indent}Μονάδες / Units", rack.get("units"))
    report.data(f"{indent}Θέση / Location", rack.get("location"))
    report.data(f"{indent}Τερματισμοί Χαλκού / Cable Terminations", cable)
    report.data(f"{indent}Τερματισμοί Οπτικών / Fiber Terminations", fiber)
    report.data(f"{indent}Σημειώσεις / Notes", rack.get("notes"))
    for index, device in enumerate(rack.get("devices") or [], start=1):
        report.data(f"{indent}Συσκευή / Device {index}: {device.get('name', '')}", _device_summary(device))
        report.data(f"{indent}  Management IP", device.get("ipAddress"))
        report.data(f"{indent}  Τηλέφωνο / Phone", device.get("phoneNumber"))
        report.data(f"{indent}  Σημειώσεις / Notes", device.get("notes"))


def _write_buildings(report: _ReportWriter, buildings: list[dict[str, Any]]) -> None:
    report.header("ΚΤΙΡΙΑ & ΥΠΟΔΟΜΗ / BUILDINGS & INFRASTRUCTURE")
    report.blank()
    for b_index, building in enumerate(buildings, start=1):
        report.section(f"ΚΤΙΡΙΟ {b_index} / BUILDING {b_index}: {building.get('name', '')}")
        report.data("Όνομα Κτιρίου / Building Name", building.get("name"))
        report.data("Κωδικός / Code", building.get("code"))
        report.data("Διεύθυνση / Address", building.get("address"))
        report.data("Σημειώσεις / Notes", building.get("notes"))

        central_rack = building.get("centralRack")
        if central_rack:
            report.subsection(f"  ΚΕΝΤΡΙΚΟ RACK / CENTRAL RACK: {central_rack.get('name', '')}")
            _write_rack(report, central_rack, "    ")
        report.blank()

        for f_index, floor in enumerate(building.get("floors") or [], start=1):
            report.subsection(f"  ΟΡΟΦΟΣ {f_index} / FLOOR {f_index}: {floor.get('name', '')}")
            report.data("    Επίπεδο / Level", floor.get("level"))
            report.data("    Κάτοψη / Blueprint", floor.get("blueprintUrl"))
            report.data("    Σημειώσεις / Notes", floor.get("notes"))

            for r_index, rack in enumerate(floor.get("floorRacks") or [], start=1):
                report.data(f"    Rack {r_index}", rack.get("name"))
                _write_rack(report, rack, "      ")

            for s_index, room in enumerate(floor.get("rooms") or [], start=1):
                report.data(f"    ΧΩΡΟΣ {s_index} / ROOM {s_index}", room.get("name"))
                report.data("      Αριθμός / Number", room.get("number"))
                report.data("      Τύπος / Type", room.get("type"))
                report.data("      Σύνδεση / Connection Type", room.get("connectionType"))
                report.data("      Πρίζες / Outlets", room.get("outlets"))
                report.data("      Σημειώσεις / Notes", room.get("notes"))
            report.blank()


def _write_connections(
    report: _ReportWriter,
    connections: list[dict[str, Any]],
    buildings: list[dict[str, Any]],
) -> None:
    def building_name(index: Any) -> str:
        if isinstance(index, int) and 0 <= index < len(buildings):
            return buildings[index].get("name") or str(index)
        return str(index)

    report.header("ΣΥΝΔΕΣΕΙΣ ΚΤΙΡΙΩΝ / BUILDING CONNECTIONS")
    report.blank()
    for index, connection in enumerate(connections, start=1):
        route = (
            f"{building_name(connection.get('fromBuilding'))} → "
            f"{building_name(connection.get('toBuilding'))}"
        )
        report.section(f"ΣΥΝΔΕΣΗ {index} / CONNECTION {index}: {route}")
        report.data("Τύπος / Connection Type", connection.get("connectionType"))
        report.data("Περιγραφή / Description", connection.get("description"))
        report.data("Απόσταση (μ) / Distance (m)", connection.get("distance"))
        report.data("Σημειώσεις / Notes", connection.get("notes"))
    report.blank()


def build_cabling_workbook(
    survey: SiteSurvey,
    buildings: list[dict[str, Any]],
    connections: list[dict[str, Any]] | None = None,
    created_at: datetime | None = None,
    updated_at: datetime | None = None,
) -> bytes:
    """
    Render the cabling survey report.

    Args:
        survey: Site survey with customer, contact and assignees loaded
        buildings: Building tree snapshot
        connections: Building connections snapshot
        created_at: Cabling survey creation time
        updated_at: Cabling survey last update time

    Returns:
        The .xlsx file contents
    """
    wb = Workbook()
    ws = wb.active
    ws.title = "Cabling Survey Report"
    report = _ReportWriter(ws)

    report.header(TITLE)
    report.blank()

    report.section("ΠΛΗΡΟΦΟΡΙΕΣ ΕΠΙΣΚΟΠΗΣΗΣ / SURVEY INFORMATION")
    report.data("Τίτλος / Title", survey.title)
    report.data("Τύπος / Type", survey.type)
    report.data("Κατάσταση / Status", survey.status)
    report.data("Ημερομηνία / Arranged Date", _format_date(survey.arranged_date))
    report.data("Περιγραφή / Description", survey.description)
    report.blank()

    report.section("ΠΛΗΡΟΦΟΡΙΕΣ ΠΕΛΑΤΗ / CUSTOMER INFORMATION")
    report.data("Πελάτης / Customer", survey.customer.name if survey.customer else None)
    if survey.contact:
        report.data("Επαφή / Contact", survey.contact.name)
        report.data("Email Επαφής / Contact Email", survey.contact.email)
    report.data("Διεύθυνση / Address", survey.address)
    report.data("Πόλη / City", survey.city)
    report.data("Τηλέφωνο / Phone", survey.phone)
    report.data("Email", survey.email)
    report.blank()

    report.section("ΑΝΑΘΕΣΗ / ASSIGNMENT")
    report.data("Ανατέθηκε Από / Assigned From", _person(survey.assign_from))
    report.data("Ανατέθηκε Σε / Assigned To", _person(survey.assign_to))
    report.blank()

    if buildings:
        _write_buildings(report, buildings)
    if connections:
        _write_connections(report, connections, buildings)

    report.section("ΧΡΟΝΙΚΑ ΣΤΟΙΧΕΙΑ / TIMESTAMPS")
    report.data("Δημιουργήθηκε / Created", _format_date(created_at))
    report.data("Ενημερώθηκε / Updated", _format_date(updated_at))

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
