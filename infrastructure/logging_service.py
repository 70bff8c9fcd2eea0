"""
Per-module loggers: verbose detail in a dedicated file, problems on the console.

Each engine or service module gets its own detail file under ``logs/`` so a
derivation pass can be traced line by line without flooding the console:

    logger = get_module_logger("LineDerivation", "line_derivation.log")
    logger.debug("Ticketing fee: 0 -> 300")    # logs/line_derivation.log only
    logger.warning("Product not in catalog")   # detail file + console

Modules create their logger at import time. ``disable_all_logging()`` and
``enable_logging()`` reconfigure every logger created so far, so the switch
works whether it is flipped before or after the imports (tests disable it in
conftest.py, ``initialize_app()`` enables it).
"""

import logging
from pathlib import Path
from typing import Dict

ROOT_LOGGER_NAME = "FestiQuote"
LOG_DIR = Path("logs")

_LOGGING_DISABLED = False


def _is_console_handler(handler: logging.Handler) -> bool:
    return type(handler) is logging.StreamHandler


class ModuleFileLogger:
    """Writes detail to ``logs/<file>`` and forwards warnings and errors to the root logger."""

    def __init__(self, module_name: str, detail_filename: str):
        self.module_name = module_name
        self.detail_filename = detail_filename
        self.main_logger = logging.getLogger(ROOT_LOGGER_NAME)
        self.detail_logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}.detail")
        self.detail_logger.propagate = False
        self.configure()

    def configure(self):
        """(Re)build the handlers for the current global on/off state."""
        self.close()

        if _LOGGING_DISABLED:
            # Block everything, including the console
            self.main_logger.setLevel(logging.CRITICAL + 1)
            self.detail_logger.setLevel(logging.CRITICAL + 1)
            return

        self.main_logger.setLevel(logging.DEBUG)
        if not any(_is_console_handler(h) for h in self.main_logger.handlers):
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(
                logging.Formatter('%(asctime)s [%(levelname)s] %(name)s: %(message)s', '%H:%M:%S')
            )
            console_handler.setLevel(logging.WARNING)
            self.main_logger.addHandler(console_handler)

        self.detail_logger.setLevel(logging.DEBUG)
        LOG_DIR.mkdir(exist_ok=True)
        log_path = LOG_DIR / Path(self.detail_filename).name
        detail_handler = logging.FileHandler(str(log_path), mode='w', encoding='utf-8')
        detail_handler.setFormatter(
            logging.Formatter('%(asctime)s [%(levelname)s]: %(message)s', datefmt='%H:%M:%S')
        )
        detail_handler.setLevel(logging.DEBUG)
        self.detail_logger.addHandler(detail_handler)

    def debug(self, message: str):
        self.detail_logger.debug(message)

    def info(self, message: str):
        self.detail_logger.info(message)

    def warning(self, message: str):
        self.detail_logger.warning(message)
        self.main_logger.warning(f"[{self.module_name}] {message}")

    def error(self, message: str, exc_info: bool = False):
        self.detail_logger.error(message, exc_info=exc_info)
        self.main_logger.error(f"[{self.module_name}] {message}", exc_info=exc_info)

    def exception(self, message: str):
        """Error with full traceback, detail file + console."""
        self.detail_logger.exception(message)
        self.main_logger.exception(f"[{self.module_name}] {message}")

    def close(self):
        """Close the detail file; later detail messages are dropped until configure()."""
        for handler in list(self.detail_logger.handlers):
            handler.close()
            self.detail_logger.removeHandler(handler)
        self.detail_logger.addHandler(logging.NullHandler())


_module_loggers: Dict[str, ModuleFileLogger] = {}


def get_module_logger(module_name: str, detail_filename: str) -> ModuleFileLogger:
    """Return the cached logger for a module, creating it on first use."""
    key = f"{module_name}:{detail_filename}"
    if key not in _module_loggers:
        _module_loggers[key] = ModuleFileLogger(module_name, detail_filename)
    return _module_loggers[key]


def close_all_module_loggers():
    """Release the detail files (end of a command). Loggers stay usable."""
    for logger in _module_loggers.values():
        logger.close()


def _reconfigure_all():
    for logger in _module_loggers.values():
        logger.configure()


def disable_all_logging():
    """Disable every log (console and files), for existing and future loggers."""
    global _LOGGING_DISABLED
    _LOGGING_DISABLED = True
    _reconfigure_all()


def enable_logging():
    global _LOGGING_DISABLED
    _LOGGING_DISABLED = False
    _reconfigure_all()


def is_logging_disabled() -> bool:
    return _LOGGING_DISABLED
