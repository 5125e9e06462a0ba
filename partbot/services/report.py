"""Excel report generation for search results."""

import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Border, Font, PatternFill, Side

from ..models import ReportRow

logger = logging.getLogger(__name__)

SHEET_TITLE = "eBay Results"
REPORT_FILE_PREFIX = "eBay_Report_"

COLUMNS = (
    ("Part Number", 20),
    ("Listing Title", 50),
    ("Price", 15),
)

HEADER_FONT = Font(bold=True)
HEADER_FILL = PatternFill(start_color="D3D3D3", end_color="D3D3D3", fill_type="solid")
HEADER_BORDER = Border(bottom=Side(style="thin"))


class ExcelReportGenerator:
    """Builds the xlsx workbook sent back to the user."""

    def generate(self, rows: list[ReportRow]) -> bytes:
        """Render rows into an xlsx document.

        An empty list still yields a valid workbook holding the header row.

        Args:
            rows: Report lines in display order.

        Returns:
            The workbook serialized as bytes.
        """
        logger.debug("Generating Excel report with %d rows", len(rows))

        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE

        for col_idx, (header, width) in enumerate(COLUMNS, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.border = HEADER_BORDER
            ws.column_dimensions[cell.column_letter].width = width

        # Listing text stays literal even when it looks like a formula
        for row_idx, row in enumerate(rows, start=2):
            for col_idx, value in enumerate((row.part_number, row.title, row.price), start=1):
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.data_type = "s"

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()
