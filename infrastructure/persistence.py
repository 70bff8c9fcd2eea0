# infrastructure/persistence.py
import dataclasses
import datetime
import json
from enum import Enum
from typing import Any, Dict
from domain.catalog import Catalog, CategorySetting, CalculationType, Product, UnitType
from domain.cockpit import CockpitParameters, DEFAULT_AVERAGE_TRANSACTION_VALUE
from domain.offer import Offer, OfferLine


class EnhancedJSONEncoder(json.JSONEncoder):
    def default(self, o):
        if dataclasses.is_dataclass(o):
            return dataclasses.asdict(o)
        if isinstance(o, Enum):
            return o.value
        if isinstance(o, (datetime.date, datetime.datetime)):
            return o.isoformat()
        return super().default(o)


def _date(value: Any) -> datetime.date:
    return datetime.date.fromisoformat(str(value)[:10])


def _optional_float(value: Any):
    return None if value is None else float(value)


class PersistenceService:
    # =========================
    # OFFERS
    # =========================
    @staticmethod
    def offer_to_dict(offer: Offer) -> Dict[str, Any]:
        data = dataclasses.asdict(offer)
        cockpit = offer.cockpit
        # Date keys are not valid JSON keys
        data["cockpit"] = {
            **data["cockpit"],
            "showdates": [d.isoformat() for d in cockpit.showdates],
            "expected_visitors_per_showdate": {
                d.isoformat(): v for d, v in cockpit.expected_visitors_per_showdate.items()
            },
        }
        return data

    @staticmethod
    def offer_to_json(offer: Offer) -> str:
        return json.dumps(PersistenceService.offer_to_dict(offer), cls=EnhancedJSONEncoder, indent=4)

    @staticmethod
    def save_offer(offer: Offer, filepath: str):
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(PersistenceService.offer_to_dict(offer), f, cls=EnhancedJSONEncoder, indent=4)

    @staticmethod
    def load_offer(filepath: str) -> Offer:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return PersistenceService.offer_from_dict(data)

    @staticmethod
    def cockpit_from_dict(data: Dict[str, Any]) -> CockpitParameters:
        override = data.get('total_visitors_override')
        return CockpitParameters(
            showdates=[_date(d) for d in data.get('showdates', [])],
            expected_visitors_per_showdate={
                _date(d): int(v or 0) for d, v in data.get('expected_visitors_per_showdate', {}).items()
            },
            bar_meters=data.get('bar_meters', 0.0) or 0.0,
            food_sales_positions=data.get('food_sales_positions', 0.0) or 0.0,
            euro_spend_per_person=data.get('euro_spend_per_person', 0.0) or 0.0,
            total_visitors_override=int(override) if override is not None else None,
            average_transaction_value=data.get('average_transaction_value', DEFAULT_AVERAGE_TRANSACTION_VALUE),
            staffel=data.get('staffel', 1.0) or 1.0,
        )

    @staticmethod
    def offer_from_dict(data: Dict[str, Any]) -> Offer:
        """Reconstruct an Offer; missing keys fall back to the dataclass defaults."""
        lines = [
            OfferLine(
                product_id=l_data['product_id'],
                product_name=l_data.get('product_name', ""),
                description=l_data.get('description', ""),
                quantity=l_data.get('quantity', 0) or 0,
                unit_price=_optional_float(l_data.get('unit_price')),
                percentage_fee=_optional_float(l_data.get('percentage_fee')),
                percentage_cost_basis=_optional_float(l_data.get('percentage_cost_basis')),
                line_total=l_data.get('line_total', 0.0) or 0.0,
            )
            for l_data in data.get('offer_lines', [])
        ]

        return Offer(
            id=data.get('id'),
            offer_number=data.get('offer_number', ""),
            version=data.get('version', 1),
            status=data.get('status', "draft"),
            client_id=data.get('client_id', ""),
            project_name=data.get('project_name', ""),
            project_location=data.get('project_location', ""),
            cockpit=PersistenceService.cockpit_from_dict(data.get('cockpit', {})),
            offer_lines=lines,
            post_calc_forecasts=dict(data.get('post_calc_forecasts', {})),
            total_discount_amount=data.get('total_discount_amount', 0.0) or 0.0,
            total_discount_percentage=data.get('total_discount_percentage', 0.0) or 0.0,
            subtotal_excl_btw=data.get('subtotal_excl_btw', 0.0),
            btw_amount=data.get('btw_amount', 0.0),
            total_incl_btw=data.get('total_incl_btw', 0.0),
            realization_costs=dict(data.get('realization_costs', {})),
            additional_costs=dict(data.get('additional_costs', {})),
            other_revenue=data.get('other_revenue', 0.0) or 0.0,
        )

    # =========================
    # CATALOG
    # =========================
    @staticmethod
    def catalog_from_dict(data: Dict[str, Any]) -> Catalog:
        products = [
            Product(
                id=p_data['id'],
                name=p_data.get('name', ""),
                category=p_data.get('category', ""),
                is_active=p_data.get('is_active', True),
                description=p_data.get('description', ""),
                default_quantity=p_data.get('default_quantity', 0.0) or 0.0,
                default_price=p_data.get('default_price', 0.0) or 0.0,
                cost_basis=p_data.get('cost_basis', 0.0) or 0.0,
                unit_type=UnitType(p_data.get('unit_type', UnitType.PER_UNIT.value)),
                percentage_fee=p_data.get('percentage_fee', 0.0) or 0.0,
                percentage_cost_basis=p_data.get('percentage_cost_basis', 0.0) or 0.0,
                key_figure=p_data.get('key_figure') or "none",
                key_figure_multiplier=p_data.get('key_figure_multiplier', 0.0) or 0.0,
                has_staffel=p_data.get('has_staffel', False),
                hardware_group=p_data.get('hardware_group'),
                display_order=p_data.get('display_order', 0) or 0,
            )
            for p_data in data.get('products', [])
        ]
        settings = [
            CategorySetting(
                category=s_data['category'],
                calculation_type=CalculationType(s_data.get('calculation_type', CalculationType.STANDARD.value)),
                is_archived=s_data.get('is_archived', False),
                display_order=s_data.get('display_order', 0) or 0,
            )
            for s_data in data.get('category_settings', [])
        ]
        return Catalog(products=products, category_settings=settings)

    @staticmethod
    def catalog_to_dict(catalog: Catalog) -> Dict[str, Any]:
        return json.loads(json.dumps({
            "products": catalog.products,
            "category_settings": catalog.category_settings,
        }, cls=EnhancedJSONEncoder))

    @staticmethod
    def load_catalog(filepath: str) -> Catalog:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return PersistenceService.catalog_from_dict(data)

    @staticmethod
    def save_catalog(catalog: Catalog, filepath: str):
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(PersistenceService.catalog_to_dict(catalog), f, indent=4)
