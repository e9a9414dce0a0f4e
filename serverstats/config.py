import logging
from typing import Any, Dict

import yaml

from .audit import audit_log

CONFIG_PATH = "config.yaml"

DEFAULTS: Dict[str, Any] = {
    "command_prefix": "!",
    "stats_file": "stats.json",
    "stats_category_name": "📊 SERVER STATS",
    "help_footer": "Developed by Skoda®Studio",
}


def load_config(path: str = CONFIG_PATH) -> Dict[str, Any]:
    """Load YAML config merged over the defaults. Never writes or creates the file."""
    config = dict(DEFAULTS)
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logging.error(f"{path} not found. Proceeding with defaults in memory.")
        audit_log(f"{path} not found. Proceeding with defaults in memory.")
        return config
    except Exception as e:
        logging.error(f"Error loading {path}: {e}", exc_info=True)
        audit_log(f"Error loading {path}: {e}")
        return config

    if not isinstance(cfg, dict):
        logging.warning(f"{path} did not parse to a mapping. Using defaults.")
        audit_log(f"{path} did not parse to a mapping. Using defaults.")
        return config
    # Keys left blank in the YAML keep their defaults
    config.update({key: value for key, value in cfg.items() if value is not None})
    return config
