# domain/catalog.py
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set

TICKETING_CATEGORY = "ticketing_ecommerce_fees"
TRANSACTION_PROCESSING_CATEGORY = "transaction_processing"


class KeyFigure(str, Enum):
    """Base metrics a product quantity can be derived from."""
    NONE = "none"
    TOTAL_VISITORS = "total_visitors"
    BAR_METERS = "bar_meters"
    FOOD_SALES_POSITIONS = "food_sales_positions"
    EURO_SPEND_PER_PERSON = "euro_spend_per_person"
    NUMBER_OF_SHOWDATES = "number_of_showdates"
    EXPECTED_REVENUE = "expected_revenue"
    AVERAGE_TRANSACTION_VALUE = "average_transaction_value"


class CalculationType(Enum):
    STANDARD = "standard"
    POST_EVENT = "post_event"


class UnitType(Enum):
    PER_UNIT = "per_unit"
    PERCENTAGE_OF_REVENUE = "percentage_of_revenue"


def has_key_figure(key_figure: Optional[str]) -> bool:
    """True when a product is driven by the cockpit (anything but empty/"none")."""
    return bool(key_figure) and key_figure != KeyFigure.NONE.value


@dataclass
class Product:
    id: str
    name: str
    category: str
    is_active: bool = True
    description: str = ""
    default_quantity: float = 0.0
    default_price: float = 0.0
    cost_basis: float = 0.0  # internal unit cost
    unit_type: UnitType = UnitType.PER_UNIT
    percentage_fee: float = 0.0
    percentage_cost_basis: float = 0.0
    # Kept as a plain string so unknown values survive a load and evaluate to 0
    key_figure: str = KeyFigure.NONE.value
    key_figure_multiplier: float = 0.0
    has_staffel: bool = False
    hardware_group: Optional[str] = None
    display_order: int = 0

    @property
    def is_percentage_based(self) -> bool:
        return self.unit_type == UnitType.PERCENTAGE_OF_REVENUE


@dataclass
class CategorySetting:
    category: str
    calculation_type: CalculationType = CalculationType.STANDARD
    is_archived: bool = False
    display_order: int = 0


@dataclass
class Catalog:
    """Read-only snapshot of the product catalog and its category settings."""
    products: List[Product] = field(default_factory=list)
    category_settings: List[CategorySetting] = field(default_factory=list)

    def __post_init__(self):
        self._products_by_id: Dict[str, Product] = {}
        for product in self.products:
            self._products_by_id.setdefault(product.id, product)
        self._settings_by_category: Dict[str, CategorySetting] = {}
        for setting in self.category_settings:
            self._settings_by_category.setdefault(setting.category, setting)

    def product(self, product_id: str) -> Optional[Product]:
        return self._products_by_id.get(product_id)

    def setting(self, category: str) -> Optional[CategorySetting]:
        return self._settings_by_category.get(category)

    def calculation_type(self, category: str) -> CalculationType:
        """Categories without an explicit setting are standard."""
        setting = self.setting(category)
        return setting.calculation_type if setting else CalculationType.STANDARD

    def is_post_event(self, category: str) -> bool:
        return self.calculation_type(category) == CalculationType.POST_EVENT

    def archived_categories(self) -> Set[str]:
        return {s.category for s in self.category_settings if s.is_archived}

    def active_products(self) -> List[Product]:
        """Active products outside archived categories, stable-sorted by display order."""
        archived = self.archived_categories()
        active = [p for p in self.products if p.is_active and p.category not in archived]
        return sorted(active, key=lambda p: p.display_order or 0)
