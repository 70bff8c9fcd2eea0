import os
import sys
from domain.pricing import PricingEngine
from infrastructure.autosave_scheduler import AutosaveScheduler
from infrastructure.configuration import ConfigurationService
from infrastructure.logging_service import enable_logging


def initialize_app(config: ConfigurationService = None) -> PricingEngine:
    """Set up the shared pieces (import path, logging) and build the pricing engine."""
    app_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    if app_root not in sys.path:
        sys.path.insert(0, app_root)

    enable_logging()

    config = config or ConfigurationService.get_instance()
    return PricingEngine(btw_rate=config.get_btw_rate())


def create_autosave_scheduler(config: ConfigurationService = None) -> AutosaveScheduler:
    config = config or ConfigurationService.get_instance()
    return AutosaveScheduler(delay=config.get_autosave_delay())
