# domain/key_figures.py
from typing import Optional
from .catalog import KeyFigure, has_key_figure
from .cockpit import CockpitParameters


class KeyFigureEvaluator:
    """Maps a key figure and the cockpit to the base value products multiply."""

    @staticmethod
    def showdate_visitor_total(cockpit: CockpitParameters) -> float:
        return float(sum((v or 0) for v in cockpit.expected_visitors_per_showdate.values()))

    @staticmethod
    def total_visitors(cockpit: CockpitParameters) -> float:
        """Confirmed override when set, otherwise the sum of the showdate forecasts."""
        if cockpit.has_visitor_override:
            return float(cockpit.total_visitors_override)
        return KeyFigureEvaluator.showdate_visitor_total(cockpit)

    @staticmethod
    def evaluate(key_figure: Optional[str], cockpit: Optional[CockpitParameters]) -> float:
        if not has_key_figure(key_figure) or cockpit is None:
            return 0.0
        try:
            key_figure = KeyFigure(key_figure)
        except ValueError:
            return 0.0

        match key_figure:
            case KeyFigure.TOTAL_VISITORS:
                return KeyFigureEvaluator.total_visitors(cockpit)
            case KeyFigure.BAR_METERS:
                return float(cockpit.bar_meters or 0)
            case KeyFigure.FOOD_SALES_POSITIONS:
                return float(cockpit.food_sales_positions or 0)
            case KeyFigure.EURO_SPEND_PER_PERSON:
                return float(cockpit.euro_spend_per_person or 0)
            case KeyFigure.NUMBER_OF_SHOWDATES:
                return float(len(cockpit.showdates or []))
            case KeyFigure.EXPECTED_REVENUE:
                return KeyFigureEvaluator.total_visitors(cockpit) * float(cockpit.euro_spend_per_person or 0)
            case KeyFigure.AVERAGE_TRANSACTION_VALUE:
                return float(cockpit.average_transaction_value or 0)
            case _:
                return 0.0

    @staticmethod
    def evaluate_override_blind(key_figure: Optional[str], cockpit: Optional[CockpitParameters]) -> float:
        """
        Variant for transaction processing: payment volume follows the showdate
        forecasts, so the total visitors override is never consulted here.
        """
        if cockpit is None:
            return 0.0
        if key_figure == KeyFigure.TOTAL_VISITORS.value:
            return KeyFigureEvaluator.showdate_visitor_total(cockpit)
        if key_figure == KeyFigure.EXPECTED_REVENUE.value:
            return KeyFigureEvaluator.showdate_visitor_total(cockpit) * float(cockpit.euro_spend_per_person or 0)
        return KeyFigureEvaluator.evaluate(key_figure, cockpit)
