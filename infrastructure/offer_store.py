# infrastructure/offer_store.py
"""
JSON file store for offers: one ``<id>.json`` file per offer in a root folder.

Plain get/list/create/update by identifier; no locking, the last write wins.
"""

import os
import uuid
from dataclasses import replace
from typing import List
from domain.offer import Offer
from infrastructure.logging_service import get_module_logger
from infrastructure.persistence import PersistenceService

logger = get_module_logger("OfferStore", "offer_store.log")


class JsonOfferStore:
    def __init__(self, root_folder: str):
        self.root_folder = root_folder
        os.makedirs(root_folder, exist_ok=True)

    def _path(self, offer_id: str) -> str:
        return os.path.join(self.root_folder, f"{offer_id}.json")

    def get(self, offer_id: str) -> Offer:
        path = self._path(offer_id)
        if not os.path.exists(path):
            raise KeyError(f"Offer {offer_id} not found")
        return PersistenceService.load_offer(path)

    def list(self) -> List[Offer]:
        offers = []
        for filename in sorted(os.listdir(self.root_folder)):
            if filename.endswith(".json"):
                offers.append(PersistenceService.load_offer(os.path.join(self.root_folder, filename)))
        return offers

    def create(self, offer: Offer) -> Offer:
        """Persist a new offer and return it with its assigned id."""
        created = replace(offer, id=offer.id or str(uuid.uuid4()))
        PersistenceService.save_offer(created, self._path(created.id))
        logger.info(f"Offer created: {created.id} ({created.project_name})")
        return created

    def update(self, offer: Offer) -> Offer:
        if offer.id is None:
            raise ValueError("Cannot update an offer that was never created")
        if not os.path.exists(self._path(offer.id)):
            raise KeyError(f"Offer {offer.id} not found")
        PersistenceService.save_offer(offer, self._path(offer.id))
        logger.debug(f"Offer updated: {offer.id}")
        return offer
