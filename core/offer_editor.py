# core/offer_editor.py
import threading
from dataclasses import replace
from typing import Any, Optional
from domain.catalog import Catalog
from domain.cockpit import CockpitField, CockpitParameters, DEFAULT_AVERAGE_TRANSACTION_VALUE
from domain.offer import Offer
from domain.pricing import PricingEngine
from domain.recalculation import Recalculation
from infrastructure.autosave_scheduler import AutosaveScheduler
from infrastructure.logging_service import get_module_logger
from infrastructure.offer_store import JsonOfferStore

logger = get_module_logger("OfferEditor", "offer_editor.log")

EDITABLE_LINE_FIELDS = {"description", "quantity", "unit_price", "percentage_fee", "percentage_cost_basis"}


class OfferEditorSession:
    """
    Editing state of a single offer.

    Every change goes through the shared PricingEngine and refreshes the totals;
    saving is debounced through the AutosaveScheduler once the offer has a client
    and a project name.
    """

    def __init__(self, engine: PricingEngine, catalog: Catalog, store: JsonOfferStore,
                 scheduler: Optional[AutosaveScheduler] = None,
                 default_average_transaction_value: float = DEFAULT_AVERAGE_TRANSACTION_VALUE):
        self.engine = engine
        self.catalog = catalog
        self.store = store
        self.scheduler = scheduler
        self.default_average_transaction_value = default_average_transaction_value
        self.offer: Optional[Offer] = None
        self._autosave_key = f"offer:{id(self)}"
        # Serializes explicit saves with the autosave timer thread
        self._save_lock = threading.RLock()

    # =========================
    # OPEN
    # =========================
    def open_new(self, client_id: str = "", project_name: str = "",
                 cockpit: Optional[CockpitParameters] = None, **fields) -> Offer:
        cockpit = cockpit or CockpitParameters(
            average_transaction_value=self.default_average_transaction_value)
        offer = Offer(client_id=client_id, project_name=project_name, cockpit=cockpit, **fields)
        self.offer = self.engine.recalculate_offer(offer, self.catalog, Recalculation.fresh_create())
        logger.info(f"New offer opened ({len(self.offer.offer_lines)} lines)")
        return self.offer

    def open_existing(self, offer_id: str) -> Offer:
        offer = self.store.get(offer_id)
        self.offer = self.engine.recalculate_offer(offer, self.catalog, Recalculation.load_existing())
        logger.info(f"Offer {offer_id} opened")
        return self.offer

    # =========================
    # EDITS
    # =========================
    def edit_cockpit(self, field: CockpitField, value: Any) -> Offer:
        field = CockpitField(field)
        offer = self._require_offer()
        cockpit = offer.cockpit.edit(field, value)
        offer = replace(offer, cockpit=cockpit)
        self.offer = self.engine.recalculate_offer(offer, self.catalog, Recalculation.field_edit(field))
        self._schedule_autosave()
        return self.offer

    def set_staffel(self, staffel: Any) -> Offer:
        offer = self._require_offer()
        offer = replace(offer, cockpit=offer.cockpit.with_staffel(staffel))
        return self._apply_totals_and_autosave(offer)

    def set_discount(self, amount: Optional[float] = None, percentage: Optional[float] = None) -> Offer:
        offer = self._require_offer()
        if amount is not None:
            offer = replace(offer, total_discount_amount=float(amount))
        if percentage is not None:
            offer = replace(offer, total_discount_percentage=float(percentage))
        return self._apply_totals_and_autosave(offer)

    def update_line(self, product_id: str, **changes) -> Offer:
        """Manual edit of one line (quantity, price, percentages, description)."""
        unknown = set(changes) - EDITABLE_LINE_FIELDS
        if unknown:
            raise ValueError(f"Line fields not editable: {sorted(unknown)}")

        offer = self._require_offer()
        if offer.line_for(product_id) is None:
            raise KeyError(f"No line for product {product_id}")
        lines = [replace(line, **changes) if line.product_id == product_id else line
                 for line in offer.offer_lines]
        return self._apply_totals_and_autosave(replace(offer, offer_lines=lines))

    def set_forecast(self, product_id: str, quantity: float) -> Offer:
        """Operator-entered forecast of a post-event product. Lines are never touched."""
        offer = self._require_offer()
        forecasts = dict(offer.post_calc_forecasts)
        forecasts[product_id] = quantity
        self.offer = replace(offer, post_calc_forecasts=forecasts)
        self._schedule_autosave()
        return self.offer

    def copy_post_event_pricing(self, source: Offer) -> Offer:
        """Copy unit price and percentages of post-event lines from another offer (no quantities)."""
        offer = self._require_offer()
        post_event_ids = {p.id for p in self.catalog.products if self.catalog.is_post_event(p.category)}

        lines = []
        for line in offer.offer_lines:
            source_line = source.line_for(line.product_id) if line.product_id in post_event_ids else None
            if source_line is None:
                lines.append(line)
                continue
            lines.append(replace(
                line,
                unit_price=source_line.unit_price,
                percentage_fee=source_line.percentage_fee,
                percentage_cost_basis=source_line.percentage_cost_basis,
            ))
        logger.info(f"Post-event pricing copied from {source.offer_number or source.id}")
        return self._apply_totals_and_autosave(replace(offer, offer_lines=lines))

    # =========================
    # SAVE
    # =========================
    def save(self) -> Offer:
        with self._save_lock:
            offer = self._require_offer()
            if not offer.can_be_saved:
                raise ValueError("Client and project name are required before saving an offer")

            if offer.is_new:
                saved = self.store.create(offer)
            else:
                saved = self.store.update(offer)
            # Keep edits made while the save was running, only take over the id
            self.offer = replace(self.offer, id=saved.id)
        logger.info(f"Offer {saved.id} saved")
        return self.offer

    def close(self):
        """Write any pending autosave before the session goes away."""
        if self.scheduler is not None:
            self.scheduler.flush(self._autosave_key)

    # =========================
    # PRIVATE
    # =========================
    def _require_offer(self) -> Offer:
        if self.offer is None:
            raise ValueError("No offer opened")
        return self.offer

    def _apply_totals_and_autosave(self, offer: Offer) -> Offer:
        self.offer = self.engine.apply_totals(offer, self.catalog)
        self._schedule_autosave()
        return self.offer

    def _schedule_autosave(self):
        if self.scheduler is None or not self.offer.can_be_saved:
            return
        self.scheduler.schedule(self._autosave_key, self._autosave)

    def _autosave(self):
        try:
            self.save()
        except (ValueError, KeyError, OSError) as e:
            logger.error(f"Autosave failed: {e}")
            raise
