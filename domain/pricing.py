# domain/pricing.py
from dataclasses import replace
from decimal import Decimal
from typing import Dict, Iterable, Optional, Union
from .calculator import BTW_RATE, OfferTotals, TotalsCalculator
from .catalog import Catalog
from .cockpit import CockpitParameters
from .key_figures import KeyFigureEvaluator
from .line_derivation import DerivationResult, LineDerivationEngine
from .offer import Discount, Offer, OfferLine
from .profit import ProfitBreakdown, ProfitBreakdownEngine
from .recalculation import Recalculation, RecalculationPolicy


class PricingEngine:
    """
    Stateless entry point shared by every caller (offer editor, batch creation,
    profit reporting). Callers only differ in *when* they invoke it.
    """

    def __init__(self, btw_rate: Union[Decimal, float] = BTW_RATE,
                 policy: Optional[RecalculationPolicy] = None):
        self.policy = policy or RecalculationPolicy()
        self.derivation = LineDerivationEngine(self.policy)
        self.totals = TotalsCalculator(btw_rate)
        self.profit = ProfitBreakdownEngine()

    # Key figures / policy
    def evaluate_key_figure(self, key_figure: Optional[str], cockpit: CockpitParameters) -> float:
        return KeyFigureEvaluator.evaluate(key_figure, cockpit)

    def should_recalculate(self, recalculation: Recalculation, key_figure: Optional[str],
                           is_ticketing: bool = False) -> bool:
        return self.policy.should_recalculate(recalculation, key_figure, is_ticketing)

    # Lines
    def derive_lines(self, existing_lines: Iterable[OfferLine], catalog: Catalog,
                     cockpit: CockpitParameters, forecasts: Optional[Dict[str, float]],
                     recalculation: Recalculation, is_new_offer: bool) -> DerivationResult:
        return self.derivation.derive_lines(existing_lines, catalog, cockpit, forecasts,
                                            recalculation, is_new_offer)

    # Totals
    def compute_totals(self, lines: Iterable[OfferLine], catalog: Catalog,
                       discount: Optional[Discount] = None, staffel: float = 1) -> OfferTotals:
        return self.totals.compute_totals(lines, catalog, discount, staffel)

    # Reporting
    def breakdown(self, offer: Offer, catalog: Catalog) -> ProfitBreakdown:
        return self.profit.breakdown(offer, catalog)

    def hardware_summary(self, lines: Iterable[OfferLine], catalog: Catalog) -> Dict[str, float]:
        return self.profit.hardware_summary(lines, catalog)

    # =========================
    # AGGREGATE HELPERS
    # =========================
    def recalculate_offer(self, offer: Offer, catalog: Catalog, recalculation: Recalculation) -> Offer:
        """Derive lines and forecasts, then refresh the totals. Returns a new Offer."""
        result = self.derive_lines(offer.offer_lines, catalog, offer.cockpit,
                                   offer.post_calc_forecasts, recalculation, offer.is_new)
        updated = replace(offer, offer_lines=result.lines, post_calc_forecasts=result.forecasts)
        return self.apply_totals(updated, catalog)

    def apply_totals(self, offer: Offer, catalog: Catalog) -> Offer:
        staffel = offer.cockpit.effective_staffel
        totals = self.compute_totals(offer.offer_lines, catalog, offer.discount, staffel)
        lines = []
        for line in offer.offer_lines:
            line_total = TotalsCalculator.line_total(line, catalog.product(line.product_id), staffel)
            lines.append(line if line.line_total == line_total else replace(line, line_total=line_total))
        return replace(
            offer,
            offer_lines=lines,
            subtotal_excl_btw=totals.subtotal,
            btw_amount=totals.btw_amount,
            total_incl_btw=totals.total,
        )
