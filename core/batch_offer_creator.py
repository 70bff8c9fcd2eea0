# core/batch_offer_creator.py
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from domain.catalog import Catalog
from domain.cockpit import CockpitField, CockpitParameters, DEFAULT_AVERAGE_TRANSACTION_VALUE
from domain.offer import Offer
from domain.pricing import PricingEngine
from domain.recalculation import Recalculation
from infrastructure.logging_service import get_module_logger
from infrastructure.offer_store import JsonOfferStore

logger = get_module_logger("BatchOfferCreator", "batch_offer_creator.log")


@dataclass
class BatchResult:
    created: List[Offer] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)  # row indexes


class BatchOfferCreator:
    """Creates one draft offer per input row, all priced by the same engine."""

    def __init__(self, engine: PricingEngine, catalog: Catalog, store: JsonOfferStore,
                 default_average_transaction_value: float = DEFAULT_AVERAGE_TRANSACTION_VALUE):
        self.engine = engine
        self.catalog = catalog
        self.store = store
        self.default_average_transaction_value = default_average_transaction_value

    def build_offer(self, row: Dict[str, Any], row_index: int, timestamp: Optional[int] = None) -> Offer:
        """Price a new offer from a row without persisting it."""
        cockpit = self._cockpit_from_row(row)
        timestamp = int(time.time()) if timestamp is None else timestamp
        offer = Offer(
            offer_number=f"DRAFT-{timestamp}-{row_index}",
            status="draft",
            client_id=row.get("client_id", ""),
            project_name=(row.get("project_name") or "").strip(),
            project_location=row.get("project_location", ""),
            cockpit=cockpit,
            total_discount_amount=row.get("total_discount_amount", 0.0) or 0.0,
            total_discount_percentage=row.get("total_discount_percentage", 0.0) or 0.0,
        )
        return self.engine.recalculate_offer(offer, self.catalog, Recalculation.fresh_create())

    def create_offers(self, rows: List[Dict[str, Any]], timestamp: Optional[int] = None) -> BatchResult:
        result = BatchResult()
        timestamp = int(time.time()) if timestamp is None else timestamp

        for row_index, row in enumerate(rows):
            offer = self.build_offer(row, row_index, timestamp)
            if not offer.can_be_saved:
                logger.warning(f"Row {row_index} skipped: client and project name are required")
                result.skipped.append(row_index)
                continue
            result.created.append(self.store.create(offer))

        logger.info(f"Batch done: {len(result.created)} created, {len(result.skipped)} skipped")
        return result

    def _cockpit_from_row(self, row: Dict[str, Any]) -> CockpitParameters:
        cockpit = CockpitParameters(average_transaction_value=self.default_average_transaction_value)
        cockpit = cockpit.set_showdates(row.get("showdates", []))

        for cockpit_field in CockpitField:
            if cockpit_field == CockpitField.SHOWDATES or cockpit_field.value not in row:
                continue
            cockpit = cockpit.edit(cockpit_field, row[cockpit_field.value])

        if "staffel" in row:
            cockpit = cockpit.with_staffel(row["staffel"])
        return cockpit
