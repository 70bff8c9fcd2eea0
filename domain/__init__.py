"""Domain models package.

Exports core domain classes for easier imports:
- `Product`, `CategorySetting`, `Catalog`, `KeyFigure`, `CalculationType`, `UnitType`
- `CockpitParameters`, `CockpitField`, `Offer`, `OfferLine`, `Discount`
- `Recalculation`, `RecalculationPolicy`, `PricingEngine`
"""

from .catalog import Catalog, CategorySetting, CalculationType, KeyFigure, Product, UnitType
from .cockpit import CockpitField, CockpitParameters
from .offer import Discount, Offer, OfferLine
from .recalculation import Recalculation, RecalculationMode, RecalculationPolicy
from .pricing import PricingEngine

__all__ = [
    "Catalog", "CategorySetting", "CalculationType", "KeyFigure", "Product", "UnitType",
    "CockpitField", "CockpitParameters", "Discount", "Offer", "OfferLine",
    "Recalculation", "RecalculationMode", "RecalculationPolicy", "PricingEngine",
]
