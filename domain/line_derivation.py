# domain/line_derivation.py
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional
from .calculator import round_quantity
from .catalog import (
    Catalog, KeyFigure, Product, TICKETING_CATEGORY, TRANSACTION_PROCESSING_CATEGORY, has_key_figure,
)
from .cockpit import CockpitParameters
from .key_figures import KeyFigureEvaluator
from .offer import OfferLine
from .recalculation import Recalculation, RecalculationPolicy
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("LineDerivation", "line_derivation.log")


@dataclass
class DerivationResult:
    lines: List[OfferLine]
    forecasts: Dict[str, float]


class LineDerivationEngine:
    """
    Turns the cockpit into line quantities for every active product.

    Pass structure:
    1. presence synthesis: exactly one line per active product, catalog order
    2. per-line category rules, gated by the RecalculationPolicy
    3. post-event forecasts, stored in the forecast map only
    """

    def __init__(self, policy: Optional[RecalculationPolicy] = None):
        self.policy = policy or RecalculationPolicy()

    # =========================
    # PUBLIC
    # =========================
    def derive_lines(self, existing_lines: Iterable[OfferLine], catalog: Catalog,
                     cockpit: CockpitParameters, forecasts: Optional[Dict[str, float]],
                     recalculation: Recalculation, is_new_offer: bool) -> DerivationResult:
        lines = self.ensure_all_products_present(existing_lines, catalog, is_new_offer)
        updated_forecasts = dict(forecasts or {})

        if recalculation.skips_recalculation:
            logger.debug(f"Load of existing offer: keeping {len(lines)} stored quantities")
            return DerivationResult(lines=lines, forecasts=updated_forecasts)

        lines = [self._derive_line(line, catalog, cockpit, recalculation) for line in lines]
        self._accumulate_forecasts(updated_forecasts, catalog, cockpit, recalculation)
        return DerivationResult(lines=lines, forecasts=updated_forecasts)

    def ensure_all_products_present(self, existing_lines: Iterable[OfferLine], catalog: Catalog,
                                    is_new_offer: bool) -> List[OfferLine]:
        line_map: Dict[str, OfferLine] = {}
        for line in existing_lines or []:
            line_map.setdefault(line.product_id, line)

        final_lines = []
        for product in catalog.active_products():
            existing = line_map.get(product.id)
            if existing is not None:
                final_lines.append(replace(existing, product_name=product.name))
            else:
                final_lines.append(self._synthesize_line(product, catalog, is_new_offer))
        return final_lines

    def derive_quantity(self, product: Product, cockpit: CockpitParameters) -> int:
        """Quantity a key-figure product gets from the cockpit, category rules included."""
        multiplier = product.key_figure_multiplier or 0

        if product.category == TICKETING_CATEGORY:
            # Ticketing fees only follow an explicitly confirmed visitor total
            if not cockpit.has_visitor_override:
                return 0
            if product.key_figure == KeyFigure.TOTAL_VISITORS.value:
                return round_quantity(cockpit.total_visitors_override * multiplier)
            return round_quantity(KeyFigureEvaluator.evaluate(product.key_figure, cockpit) * multiplier)

        return round_quantity(self.base_value(product, cockpit) * multiplier)

    @staticmethod
    def base_value(product: Product, cockpit: CockpitParameters) -> float:
        if product.category == TRANSACTION_PROCESSING_CATEGORY:
            return KeyFigureEvaluator.evaluate_override_blind(product.key_figure, cockpit)
        return KeyFigureEvaluator.evaluate(product.key_figure, cockpit)

    # =========================
    # PRIVATE
    # =========================
    @staticmethod
    def _synthesize_line(product: Product, catalog: Catalog, is_new_offer: bool) -> OfferLine:
        # Existing offers never silently gain quantities for products the operator never saw
        if catalog.is_post_event(product.category) or not is_new_offer:
            quantity = 0
        else:
            quantity = product.default_quantity or 0

        return OfferLine(
            product_id=product.id,
            product_name=product.name,
            description=product.description or "",
            quantity=quantity,
            unit_price=product.default_price,
            percentage_fee=product.percentage_fee or 0,
            percentage_cost_basis=product.percentage_cost_basis or 0,
            line_total=0.0,
        )

    def _derive_line(self, line: OfferLine, catalog: Catalog, cockpit: CockpitParameters,
                     recalculation: Recalculation) -> OfferLine:
        product = catalog.product(line.product_id)
        if product is None:
            logger.warning(f"Product {line.product_id} not in catalog, line kept as is")
            return line

        if catalog.is_post_event(product.category):
            return line if line.quantity == 0 else replace(line, quantity=0)

        if not has_key_figure(product.key_figure):
            return line

        is_ticketing = product.category == TICKETING_CATEGORY
        if not self.policy.should_recalculate(recalculation, product.key_figure, is_ticketing):
            return line

        quantity = self.derive_quantity(product, cockpit)
        if quantity == line.quantity:
            return line
        logger.debug(f"{product.name}: {line.quantity} -> {quantity} ({product.key_figure})")
        return replace(line, quantity=quantity)

    def _accumulate_forecasts(self, forecasts: Dict[str, float], catalog: Catalog,
                              cockpit: CockpitParameters, recalculation: Recalculation) -> None:
        for product in catalog.active_products():
            if not catalog.is_post_event(product.category):
                continue

            if has_key_figure(product.key_figure):
                # Same field scope as the lines: an unrelated edit keeps the stored forecast
                if not self.policy.should_recalculate(recalculation, product.key_figure):
                    continue
                base = KeyFigureEvaluator.evaluate(product.key_figure, cockpit)
                forecast = round_quantity(base * (product.key_figure_multiplier or 0))
                if forecast > 0:
                    forecasts[product.id] = forecast
            elif product.default_quantity and product.default_quantity > 0:
                # Seed only; an operator-entered forecast is never overwritten
                forecasts.setdefault(product.id, product.default_quantity)
