# core/profit_report.py
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence
from domain.catalog import Catalog
from domain.offer import Offer
from domain.pricing import PricingEngine
from domain.profit import ProfitBreakdown
from infrastructure.export_service import ExportService


@dataclass
class ProfitReportRow:
    offer: Offer
    breakdown: ProfitBreakdown
    hardware: Dict[str, float] = field(default_factory=dict)


class ProfitReportService:
    """Reporting-time view over persisted offers (project overview)."""

    def __init__(self, engine: PricingEngine, catalog: Catalog,
                 cost_buckets: Sequence[Dict[str, str]] = ()):
        self.engine = engine
        self.catalog = catalog
        self.cost_buckets = list(cost_buckets)

    def rows(self, offers: Iterable[Offer]) -> List[ProfitReportRow]:
        """One row per offer, highest net profit first."""
        rows = [
            ProfitReportRow(
                offer=offer,
                breakdown=self.engine.breakdown(offer, self.catalog),
                hardware=self.engine.hardware_summary(offer.offer_lines, self.catalog),
            )
            for offer in offers
        ]
        # Stable sort keeps input order between equal profits
        return sorted(rows, key=lambda row: row.breakdown.net_profit, reverse=True)

    @staticmethod
    def portfolio_totals(rows: Iterable[ProfitReportRow]) -> ProfitBreakdown:
        total = ProfitBreakdown()
        for row in rows:
            b = row.breakdown
            total.standard_revenue += b.standard_revenue
            total.standard_profit += b.standard_profit
            total.post_calc_revenue += b.post_calc_revenue
            total.post_calc_profit += b.post_calc_profit
            total.realization_correction += b.realization_correction
            total.additional_costs += b.additional_costs
            total.other_revenue += b.other_revenue
            total.net_profit += b.net_profit
        return total

    def export(self, offers: Iterable[Offer], output_path: str) -> str:
        return ExportService(self.cost_buckets).export_profit_report(self.rows(offers), output_path)
