"""
stock_config -- single public entrypoint for plant configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads the YAML file
    directly.  Returns a frozen ``PlantConfig``.

Architecture position:
    Configuration -- sits above ``stock_kernel`` and below
    ``stock_services``.  The kernel MUST NEVER import from
    ``stock_config``; ``stock_config.bridges`` translates the config into
    kernel-compatible inputs.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- schema or structural validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``STOCK_CONFIG_TRACE`` log entry with the config id, version and
    SHA-256 checksum of the source document.
"""

from __future__ import annotations

import logging
from pathlib import Path

from stock_config.loader import load_plant_config
from stock_config.schema import PlantConfig

_logger = logging.getLogger("stock_kernel.config")

# Default configuration file
DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "plant.yaml"


def get_active_config(path: Path | str | None = None) -> PlantConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Override path to the plant YAML file.
            Defaults to stock_config/sets/plant.yaml.

    Returns:
        A validated, frozen PlantConfig.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If configuration validation fails.
    """
    config = load_plant_config(Path(path) if path is not None else DEFAULT_CONFIG_PATH)

    errors = config.validate()
    if errors:
        raise ValueError(
            "Configuration validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    _logger.info(
        "STOCK_CONFIG_TRACE",
        extra={
            "trace_type": "STOCK_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "total_silos": config.total_silos,
            "default_item_count": len(config.default_finished_goods),
        },
    )
    return config


__all__ = ["PlantConfig", "get_active_config", "DEFAULT_CONFIG_PATH"]
