from dataclasses import replace
import pytest
from openpyxl import load_workbook
from core.profit_report import ProfitReportService
from domain.offer import Offer
from domain.recalculation import Recalculation

BUCKETS = [
    {"key": "reiskosten", "label": "Reiskosten"},
    {"key": "mobiliteit", "label": "Mobiliteit"},
]


@pytest.fixture
def offers(engine, catalog, cockpit):
    base = engine.recalculate_offer(
        Offer(offer_number="OFF-1", client_id="client-1", project_name="Zomerfestival", cockpit=cockpit),
        catalog, Recalculation.fresh_create())
    costly = replace(base, offer_number="OFF-2", project_name="Winterfestival",
                     additional_costs={"reiskosten": 100, "mobiliteit": 15})
    return [costly, base]


@pytest.fixture
def service(engine, catalog):
    return ProfitReportService(engine, catalog, BUCKETS)


class TestProfitReportService:

    def test_rows_sorted_by_net_profit(self, service, offers):
        """Highest net profit first."""
        rows = service.rows(offers)
        assert [row.offer.offer_number for row in rows] == ["OFF-1", "OFF-2"]
        assert rows[0].breakdown.net_profit == pytest.approx(415)
        assert rows[1].breakdown.net_profit == pytest.approx(300)
        assert rows[0].hardware == {"crew": 6}

    def test_portfolio_totals(self, service, offers):
        """Breakdown fields are summed over all rows."""
        totals = service.portfolio_totals(service.rows(offers))
        assert totals.standard_revenue == pytest.approx(1620)
        assert totals.additional_costs == pytest.approx(115)
        assert totals.net_profit == pytest.approx(715)


class TestProfitReportExport:

    def test_workbook_layout(self, service, offers, tmp_path):
        """Profit and hardware sheets with totals row and euro format."""
        path = service.export(offers, str(tmp_path / "reports" / "profit.xlsx"))
        wb = load_workbook(path)

        assert wb.sheetnames == ["Profit", "Hardware"]
        ws = wb["Profit"]
        headers = [cell.value for cell in ws[1]]
        assert headers[:3] == ["Offer", "Project", "Client"]
        assert headers[-2:] == ["Reiskosten", "Mobiliteit"]

        assert ws.cell(row=2, column=1).value == "OFF-1"
        assert ws.cell(row=3, column=len(headers) - 1).value == 100
        assert ws.cell(row=4, column=1).value == "Total"
        assert ws.cell(row=4, column=4).value == "=SUM(D2:D3)"
        assert ws.cell(row=2, column=4).number_format == '€ #,##0.00'

        hardware = wb["Hardware"]
        assert [cell.value for cell in hardware[1]] == ["Offer", "Project", "crew"]
        assert hardware.cell(row=2, column=3).value == 6

    def test_empty_report_has_no_totals_row(self, service, tmp_path):
        """Headers only when there are no offers."""
        path = service.export([], str(tmp_path / "empty.xlsx"))
        ws = load_workbook(path)["Profit"]
        assert ws.max_row == 1
