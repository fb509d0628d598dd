"""
Excel converter - Write converted order lines to the template workbook
"""
from pathlib import Path
from typing import Dict, List, Any
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
import logging

from .normalizer import TEMPLATE_COLUMNS, NUMERIC_COLUMNS

logger = logging.getLogger(__name__)

SHEET_TITLE = "Order Training"
COLUMN_WIDTHS = [10, 30, 12, 50, 12, 10, 10, 15]


class ExcelConverter:
    """Export order template rows to .xlsx"""

    def __init__(self):
        """Initialize Excel converter"""
        self.header_fill = PatternFill(
            start_color="1F4E79",
            end_color="1F4E79",
            fill_type="solid"
        )
        self.header_font = Font(bold=True, color="FFFFFF", size=12)
        self.header_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='medium'),
            bottom=Side(style='medium')
        )
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def write_order_template(self, rows: List[Dict[str, Any]], output_path: Path) -> bool:
        """
        Write order rows under the fixed template header

        Args:
            rows: Converted rows keyed by template column
            output_path: Output Excel file path

        Returns:
            True if successful
        """
        try:
            wb = Workbook()
            ws = wb.active
            ws.title = SHEET_TITLE

            ws.append(TEMPLATE_COLUMNS)
            for cell in ws[1]:
                cell.fill = self.header_fill
                cell.font = self.header_font
                cell.alignment = Alignment(horizontal="center", vertical="center")
                cell.border = self.header_border

            for row in rows:
                ws.append([row.get(column, "") for column in TEMPLATE_COLUMNS])

            numeric = {TEMPLATE_COLUMNS.index(c) + 1 for c in NUMERIC_COLUMNS}
            for data_row in ws.iter_rows(min_row=2, max_row=ws.max_row):
                for cell in data_row:
                    cell.border = self.border
                    if cell.column in numeric:
                        cell.alignment = Alignment(horizontal="right")

            for cell, width in zip(ws[1], COLUMN_WIDTHS):
                ws.column_dimensions[cell.column_letter].width = width
            ws.freeze_panes = "A2"

            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
            logger.info(f"Created order template: {output_path} ({len(rows)} rows)")
            return True

        except Exception as e:
            logger.error(f"Error creating order template {output_path}: {e}")
            return False
