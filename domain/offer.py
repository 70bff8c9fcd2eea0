# domain/offer.py
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from .cockpit import CockpitParameters


@dataclass
class OfferLine:
    product_id: str
    product_name: str = ""
    description: str = ""
    quantity: float = 0
    unit_price: Optional[float] = None
    # None means "use the product default"
    percentage_fee: Optional[float] = None
    percentage_cost_basis: Optional[float] = None
    line_total: float = 0.0  # display cache, recomputed with the totals


@dataclass
class Discount:
    amount: float = 0.0
    percentage: float = 0.0


@dataclass
class Offer:
    id: Optional[str] = None
    offer_number: str = ""
    version: int = 1
    status: str = "draft"
    client_id: str = ""
    project_name: str = ""
    project_location: str = ""
    cockpit: CockpitParameters = field(default_factory=CockpitParameters)
    offer_lines: List[OfferLine] = field(default_factory=list)
    post_calc_forecasts: Dict[str, float] = field(default_factory=dict)
    total_discount_amount: float = 0.0
    total_discount_percentage: float = 0.0
    # Computed totals, persisted for display only
    subtotal_excl_btw: float = 0.0
    btw_amount: float = 0.0
    total_incl_btw: float = 0.0
    # Reporting-time corrections
    realization_costs: Dict[str, Optional[float]] = field(default_factory=dict)
    additional_costs: Dict[str, float] = field(default_factory=dict)
    other_revenue: float = 0.0

    @property
    def is_new(self) -> bool:
        return self.id is None

    @property
    def can_be_saved(self) -> bool:
        """An offer is only created once client and project name are known."""
        return bool(self.client_id) and bool(self.project_name and self.project_name.strip())

    @property
    def discount(self) -> Discount:
        return Discount(amount=self.total_discount_amount or 0.0,
                        percentage=self.total_discount_percentage or 0.0)

    def line_for(self, product_id: str) -> Optional[OfferLine]:
        for line in self.offer_lines:
            if line.product_id == product_id:
                return line
        return None
