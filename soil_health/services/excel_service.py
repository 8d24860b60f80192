"""
Dashboard Excel Export Service.
Generates Excel workbooks for the soil health dashboard.
"""
from io import BytesIO
from datetime import datetime
from typing import Dict, Any, List
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from soil_health.services.dashboard_service import CSV_HEADER

SOIL_GREEN = "16A34A"
SOIL_DARK = "166534"
STRIPE_BG = "DCFCE7"

STATUS_FILLS = {
    "Low": "FEE2E2",
    "Medium": "FEF9C3",
    "High": "DCFCE7",
}


class DashboardExcelService:
    """Service for generating dashboard Excel exports."""

    def __init__(self):
        self.header_fill = PatternFill(start_color=SOIL_DARK, end_color=SOIL_DARK, fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.title_font = Font(bold=True, size=16, color=SOIL_DARK)
        self.stripe_fill = PatternFill(start_color=STRIPE_BG, end_color=STRIPE_BG, fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def _apply_header_style(self, ws, row_num: int, max_col: int):
        for col in range(1, max_col + 1):
            cell = ws.cell(row=row_num, column=col)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.border

    def _auto_adjust_columns(self, ws):
        for column in ws.columns:
            values = [str(cell.value) for cell in column if cell.value is not None]
            max_length = max((len(v) for v in values), default=0)
            column_letter = get_column_letter(column[0].column)
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 40)

    def _write_title(self, ws, title: str, width: int) -> int:
        ws.cell(row=1, column=1, value=title).font = self.title_font
        ws.merge_cells(start_row=1, start_column=1, end_row=1, end_column=width)
        ws.cell(row=2, column=1, value=f"Generated: {datetime.now().strftime('%d/%m/%Y %H:%M')}").font = Font(italic=True)
        return 4

    def generate_dashboard_excel(self, summary: Dict[str, Any]) -> BytesIO:
        """
        Generate the dashboard workbook.

        Args:
            summary: Output of ``dashboard_summary``

        Returns:
            BytesIO with Excel file content
        """
        wb = Workbook()
        if wb.active:
            wb.remove(wb.active)

        self._create_district_sheet(wb, summary.get("districtSummary", []), summary.get("year"))
        self._create_state_sheet(wb, summary.get("stateDistribution", []))
        self._create_trends_sheet(wb, summary.get("npkTrends", {}))

        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def _create_district_sheet(self, wb, districts: List[Dict[str, Any]], year) -> Any:
        ws = wb.create_sheet("District Summary")
        row = self._write_title(ws, f"SOIL HEALTH DISTRICT SUMMARY {year or ''}".strip(), len(CSV_HEADER))

        for col, header in enumerate(CSV_HEADER, 1):
            ws.cell(row=row, column=col, value=header)
        self._apply_header_style(ws, row, len(CSV_HEADER))
        row += 1

        for d in districts:
            values = [
                d["districtName"],
                d["stateName"],
                d["samples"],
                d["nitrogenStatus"],
                d["phosphorusStatus"],
                d["potassiumStatus"],
                d["ph"],
                d["organicCarbon"],
                d["lastUpdated"].strftime("%Y-%m-%d %H:%M") if d["lastUpdated"] else None,
            ]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.border
                fill = STATUS_FILLS.get(value) if 4 <= col <= 6 else None
                if fill:
                    cell.fill = PatternFill(start_color=fill, end_color=fill, fill_type="solid")
            ws.cell(row=row, column=7).number_format = "0.0"
            ws.cell(row=row, column=8).number_format = "0.00"
            row += 1

        self._auto_adjust_columns(ws)
        return ws

    def _create_state_sheet(self, wb, states: List[Dict[str, Any]]) -> Any:
        ws = wb.create_sheet("State Distribution")
        headers = ["State", "Districts", "Samples", "Avg N (kg/ha)", "Avg P (kg/ha)", "Avg K (kg/ha)"]
        row = self._write_title(ws, "STATE DISTRIBUTION", len(headers))

        for col, header in enumerate(headers, 1):
            ws.cell(row=row, column=col, value=header)
        self._apply_header_style(ws, row, len(headers))
        row += 1

        for i, s in enumerate(states):
            values = [s["state"], s["districts"], s["samples"], s["avgNitrogen"], s["avgPhosphorus"], s["avgPotassium"]]
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.border
                if i % 2:
                    cell.fill = self.stripe_fill
            row += 1

        self._auto_adjust_columns(ws)
        return ws

    def _create_trends_sheet(self, wb, trends: Dict[str, List]) -> Any:
        ws = wb.create_sheet("NPK Trends")
        headers = ["Year", "Nitrogen", "Phosphorus", "Potassium"]
        row = self._write_title(ws, "NPK TRENDS", len(headers))

        for col, header in enumerate(headers, 1):
            ws.cell(row=row, column=col, value=header)
        self._apply_header_style(ws, row, len(headers))
        row += 1

        columns = zip(
            trends.get("labels", []),
            trends.get("nitrogen", []),
            trends.get("phosphorus", []),
            trends.get("potassium", []),
        )
        for values in columns:
            for col, value in enumerate(values, 1):
                ws.cell(row=row, column=col, value=value).border = self.border
            row += 1

        self._auto_adjust_columns(ws)
        return ws


dashboard_excel_service = DashboardExcelService()
