# domain/profit.py
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional
from .catalog import Catalog, Product, has_key_figure
from .line_derivation import LineDerivationEngine
from .offer import Offer, OfferLine


@dataclass
class ProfitBreakdown:
    """Reporting-time revenue and profit of one offer."""
    standard_revenue: float = 0.0
    standard_profit: float = 0.0
    post_calc_revenue: float = 0.0
    post_calc_profit: float = 0.0
    realization_correction: float = 0.0
    additional_costs: float = 0.0
    other_revenue: float = 0.0
    net_profit: float = 0.0
    budget_by_category: Dict[str, float] = field(default_factory=dict)

    @property
    def base_profit(self) -> float:
        return self.standard_profit + self.post_calc_profit

    @property
    def total_revenue(self) -> float:
        return self.standard_revenue + self.post_calc_revenue + self.other_revenue


class ProfitBreakdownEngine:
    """Standard profit, forecast-based post-event profit and post-event corrections."""

    def breakdown(self, offer: Optional[Offer], catalog: Catalog) -> ProfitBreakdown:
        result = ProfitBreakdown()
        if offer is None:
            return result

        staffel = offer.cockpit.effective_staffel
        for line in offer.offer_lines:
            product = catalog.product(line.product_id)
            if product is None:
                continue

            if catalog.is_post_event(product.category):
                revenue, cost = self._post_event_revenue_and_cost(line, product, offer)
                result.post_calc_revenue += revenue
                result.post_calc_profit += revenue - cost
            elif (line.quantity or 0) > 0:
                quantity = line.quantity * (staffel if product.has_staffel else 1)
                revenue = quantity * (line.unit_price or 0)
                cost = quantity * (product.cost_basis or 0)
                result.standard_revenue += revenue
                result.standard_profit += revenue - cost
                result.budget_by_category[product.category] = (
                    result.budget_by_category.get(product.category, 0.0) + cost)

        result.realization_correction = self.realization_correction(
            result.budget_by_category, offer.realization_costs)
        result.additional_costs = sum((cost or 0) for cost in (offer.additional_costs or {}).values())
        result.other_revenue = offer.other_revenue or 0.0
        result.net_profit = (result.standard_profit + result.post_calc_profit
                             + result.realization_correction - result.additional_costs
                             + result.other_revenue)
        return result

    @staticmethod
    def realization_correction(budget_by_category: Dict[str, float],
                               realization_costs: Optional[Dict[str, Optional[float]]]) -> float:
        """Budget minus actual, only for categories where an actual was entered (0 included)."""
        correction = 0.0
        for category, actual in (realization_costs or {}).items():
            if actual is None:
                continue
            correction += budget_by_category.get(category, 0.0) - actual
        return correction

    @staticmethod
    def hardware_summary(lines: Iterable[OfferLine], catalog: Catalog) -> Dict[str, float]:
        """Total line quantity per hardware group."""
        summary: Dict[str, float] = {}
        for line in lines:
            product = catalog.product(line.product_id)
            if product is None or not product.hardware_group or product.hardware_group == "none":
                continue
            summary[product.hardware_group] = summary.get(product.hardware_group, 0) + (line.quantity or 0)
        return summary

    # =========================
    # PRIVATE
    # =========================
    @staticmethod
    def _post_event_revenue_and_cost(line: OfferLine, product: Product, offer: Offer):
        fee = line.percentage_fee if line.percentage_fee is not None else (product.percentage_fee or 0)
        cost_pct = (line.percentage_cost_basis if line.percentage_cost_basis is not None
                    else (product.percentage_cost_basis or 0))

        if product.is_percentage_based and (fee > 0 or cost_pct > 0):
            base = 0.0
            if has_key_figure(product.key_figure):
                base = LineDerivationEngine.base_value(product, offer.cockpit)
            # Percentage products treat a missing multiplier as 1, not 0
            multiplied = base * (product.key_figure_multiplier or 1)
            return multiplied * fee / 100, multiplied * cost_pct / 100

        forecast = (offer.post_calc_forecasts or {}).get(line.product_id) or 0
        if forecast <= 0:
            return 0.0, 0.0
        unit_price = line.unit_price if line.unit_price is not None else (product.default_price or 0)
        return forecast * unit_price, forecast * (product.cost_basis or 0)
