"""Logging configuration — stdlib logging with plant-aware defaults."""

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "shopfloor"


class PlantFilter(logging.Filter):
    """Stamps every record with the plant name so multi-plant logs stay readable."""

    def __init__(self, plant: str = "-"):
        super().__init__()
        self.plant = plant

    def filter(self, record: logging.LogRecord) -> bool:
        record.plant = self.plant
        return True


def setup_logging(level: str = "INFO", log_file: Path | None = None,
                  plant: str = "-") -> logging.Logger:
    """Configure the root shopfloor logger. Returns configured logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(plant)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if not logger.handlers:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(formatter)
        logger.addHandler(console)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_file))
            fh.setFormatter(formatter)
            logger.addHandler(fh)

    # Handler-level so records propagated from child loggers get stamped too
    for handler in logger.handlers:
        stamps = [f for f in handler.filters if isinstance(f, PlantFilter)]
        if stamps:
            for f in stamps:
                f.plant = plant
        else:
            handler.addFilter(PlantFilter(plant))

    return logger


def get_logger(module_name: str) -> logging.Logger:
    """Get a child logger. Usage: logger = get_logger(__name__)"""
    if module_name == ROOT_LOGGER or module_name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(module_name)
    return logging.getLogger(f"{ROOT_LOGGER}.{module_name}")
