# infrastructure/configuration.py
import copy
import json
import os
from decimal import Decimal
from typing import Dict, List, Optional
from infrastructure.logging_service import get_module_logger

logger = get_module_logger("Configuration", "configuration.log")

DEFAULT_ADDITIONAL_COST_BUCKETS = [
    {"key": "personeelskosten_intern", "label": "Personeelskosten intern"},
    {"key": "personeelskosten_extern", "label": "Personeelskosten extern"},
    {"key": "reiskosten", "label": "Reiskosten"},
    {"key": "mobiliteit", "label": "Mobiliteit"},
    {"key": "overnachtingen", "label": "Overnachtingen"},
    {"key": "breuk_verkoop", "label": "Breuk/verkoop"},
    {"key": "internet_techniek", "label": "Internet/techniek"},
    {"key": "overige_kosten", "label": "Overige kosten"},
]


def _app_data_dir() -> str:
    app_data = os.environ.get('LOCALAPPDATA', os.path.join(os.path.expanduser('~'), 'AppData', 'Local'))
    return os.path.join(app_data, "FestiQuote")


class ConfigurationService:
    """Service to load and manage application configuration."""

    _instance = None  # Singleton instance

    DEFAULTS = {
        "btw_rate": 21.0,  # percent
        "default_average_transaction_value": 13.0,
        "autosave_delay_seconds": 1.0,
        "additional_cost_buckets": DEFAULT_ADDITIONAL_COST_BUCKETS,
        "offers_root_folder": None,
    }

    @classmethod
    def get_instance(cls) -> 'ConfigurationService':
        if cls._instance is None:
            cls._instance = ConfigurationService()
        return cls._instance

    def __init__(self, config_path: str = None):
        if config_path is None:
            db_dir = _app_data_dir()
            os.makedirs(db_dir, exist_ok=True)
            config_path = os.path.join(db_dir, "app_config.json")

        self.config_path = config_path
        self.config = self._load_config()

    def _load_config(self) -> dict:
        defaults = copy.deepcopy(self.DEFAULTS)
        if not os.path.exists(self.config_path):
            return defaults

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Unreadable config {self.config_path}, using defaults: {e}")
            return defaults

        for key, value in defaults.items():
            loaded.setdefault(key, value)
        return loaded

    def save(self):
        try:
            with open(self.config_path, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error(f"Error saving config: {e}")

    def get_btw_rate(self) -> Decimal:
        """BTW rate as a fraction (21 -> 0.21)."""
        return Decimal(str(self.config.get("btw_rate", 21.0))) / Decimal(100)

    def get_default_average_transaction_value(self) -> float:
        return float(self.config.get("default_average_transaction_value", 13.0))

    def get_autosave_delay(self) -> float:
        return float(self.config.get("autosave_delay_seconds", 1.0))

    def get_additional_cost_buckets(self) -> List[Dict[str, str]]:
        return self.config.get("additional_cost_buckets", DEFAULT_ADDITIONAL_COST_BUCKETS)

    def get_offers_root_folder(self) -> Optional[str]:
        """Folder holding the offer JSON files. Defaults to AppData if not set."""
        folder = self.config.get("offers_root_folder")
        if not folder:
            folder = os.path.join(_app_data_dir(), "Offers")
            os.makedirs(folder, exist_ok=True)
        return folder

    def set_offers_root_folder(self, folder: str):
        old_folder = self.config.get("offers_root_folder")
        self.config["offers_root_folder"] = folder
        self.save()
        return old_folder
