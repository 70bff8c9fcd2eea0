import os
from typing import Dict, List, Sequence
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("ExportService", "export_report.log")

EURO_FORMAT = '€ #,##0.00'


class ExportService:
    """
    Excel profit report for a set of offers.

    - Sheet "Profit": one row per offer with the breakdown, then one column per
      additional cost bucket, then a totals row
    - Sheet "Hardware": quantity per hardware group per offer
    """

    BREAKDOWN_COLUMNS = [
        ("Standard revenue", "standard_revenue"),
        ("Standard profit", "standard_profit"),
        ("Post-event revenue", "post_calc_revenue"),
        ("Post-event profit", "post_calc_profit"),
        ("Realization correction", "realization_correction"),
        ("Additional costs", "additional_costs"),
        ("Other revenue", "other_revenue"),
        ("Total revenue", "total_revenue"),
        ("Net profit", "net_profit"),
    ]

    def __init__(self, cost_buckets: Sequence[Dict[str, str]] = ()):
        self.cost_buckets = list(cost_buckets)

    # =========================
    # PUBLIC
    # =========================
    def export_profit_report(self, rows: List, output_path: str) -> str:
        """
        Write ``rows`` (ProfitReportRow items) to ``output_path``.

        Raises a readable error when the file is locked (open in Excel).
        """
        try:
            wb = Workbook()
            ws = wb.active
            ws.title = "Profit"
            self._fill_profit_sheet(ws, rows)
            self._fill_hardware_sheet(wb.create_sheet("Hardware"), rows)

            folder = os.path.dirname(output_path)
            if folder:
                os.makedirs(folder, exist_ok=True)
            wb.save(output_path)
            logger.info(f"Profit report exported ({len(rows)} offers) → {output_path}")
            return output_path

        except PermissionError:
            msg = f"Cannot write '{os.path.basename(output_path)}'. Check that it is not open in Excel."
            logger.error(msg)
            raise PermissionError(msg)
        except Exception:
            logger.error("Profit report export failed", exc_info=True)
            raise

    # =========================
    # PRIVATE
    # =========================
    def _fill_profit_sheet(self, ws, rows):
        headers = ["Offer", "Project", "Client"]
        headers += [label for label, _ in self.BREAKDOWN_COLUMNS]
        headers += [bucket["label"] for bucket in self.cost_buckets]
        ws.append(headers)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for row in rows:
            offer, breakdown = row.offer, row.breakdown
            values = [offer.offer_number, offer.project_name, offer.client_id]
            values += [getattr(breakdown, attr) for _, attr in self.BREAKDOWN_COLUMNS]
            values += [(offer.additional_costs or {}).get(bucket["key"], 0) or 0 for bucket in self.cost_buckets]
            ws.append(values)

        if rows:
            first, last = 2, len(rows) + 1
            totals = ["Total", "", ""]
            for col_idx in range(4, len(headers) + 1):
                letter = get_column_letter(col_idx)
                totals.append(f"=SUM({letter}{first}:{letter}{last})")
            ws.append(totals)
            for cell in ws[ws.max_row]:
                cell.font = Font(bold=True)

        for row_cells in ws.iter_rows(min_row=2, min_col=4):
            for cell in row_cells:
                cell.number_format = EURO_FORMAT

        for col_idx in range(1, len(headers) + 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = 18

    def _fill_hardware_sheet(self, ws, rows):
        groups = sorted({group for row in rows for group in row.hardware})
        ws.append(["Offer", "Project"] + groups)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for row in rows:
            ws.append([row.offer.offer_number, row.offer.project_name]
                      + [row.hardware.get(group, 0) for group in groups])
