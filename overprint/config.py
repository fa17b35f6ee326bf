"""
Export settings, optionally overridden from ``config.json`` in the user's
config directory.
"""
import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from .utils.app_dirs import get_config_dir

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.json"


@dataclass
class ExportConfig:
    """Tunables of the export pipeline."""

    # Seconds to wait after removing annotations from the engine
    settle_delay: float = 0.1

    line_height_factor: float = 1.2
    text_padding: float = 4.0
    squiggly_period: float = 6.0

    # Full-name substring that labels duplicate fonts instead of "Variant n"
    variant_marker: str = "Variable"

    @classmethod
    def from_dict(cls, config: dict) -> "ExportConfig":
        """Create config from a dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in config.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            values[key] = str(value) if key == "variant_marker" else float(value)
        return cls(**values)


def load_config(path: Optional[Path] = None) -> ExportConfig:
    """
    Load the export config.

    Args:
        path: Explicit config file; defaults to ``config.json`` in the
            user config directory

    Returns:
        The loaded config, or defaults if the file is missing or unreadable
    """
    if path is None:
        path = get_config_dir() / CONFIG_FILENAME

    if not path.exists():
        return ExportConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Failed to read config %s: %s", path, e)
        return ExportConfig()

    if not isinstance(data, dict):
        logger.warning("Config %s is not a JSON object", path)
        return ExportConfig()

    try:
        return ExportConfig.from_dict(data)
    except (TypeError, ValueError) as e:
        logger.warning("Invalid value in config %s: %s", path, e)
        return ExportConfig()
