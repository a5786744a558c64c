from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path("crudcore.config.yaml")

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "database": {
        "url": "sqlite:///crudcore.db",
        "echo": False,
    },
    "manager": {
        "default_primary_key": "id",
        "default_limit": 15,
        "default_rules_set": "default",
    },
    "logging": {
        "level": "INFO",
    },
}


def merge_defaults(config: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay user sections on top of the built-in defaults."""
    merged: Dict[str, Any] = deepcopy(DEFAULT_CONFIG)
    for section, values in config.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section] = {**merged[section], **values}
        else:
            merged[section] = values
    return merged


def _validate(config: Dict[str, Any]) -> None:
    manager = config["manager"]
    if not isinstance(manager.get("default_primary_key"), str) or not manager["default_primary_key"]:
        raise ValueError("Config 'manager.default_primary_key' must be a non-empty string")
    if not isinstance(manager.get("default_limit"), int) or manager["default_limit"] < 1:
        raise ValueError("Config 'manager.default_limit' must be a positive integer")
    if not isinstance(manager.get("default_rules_set"), str) or not manager["default_rules_set"]:
        raise ValueError("Config 'manager.default_rules_set' must be a non-empty string")
    if not isinstance(config["database"].get("url"), str):
        raise ValueError("Config 'database.url' must be a string")


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load crudcore configuration from a YAML file.

    Args:
        path: Optional path to the config file. Defaults to crudcore.config.yaml
              in the working directory; that default may be absent.

    Returns:
        Configuration dictionary merged over DEFAULT_CONFIG

    Raises:
        FileNotFoundError: If an explicit path doesn't exist
        ValueError: If the file is not a mapping or holds invalid values
    """
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not cfg_path.exists():
        if path is not None:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return deepcopy(DEFAULT_CONFIG)

    with cfg_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError("Config must be a dictionary")

    config = merge_defaults(raw)
    _validate(config)
    return config


def get_manager_settings(config: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Manager defaults (primary key, page limit, rules set name)."""
    if config is None:
        config = load_config()
    return dict(config.get("manager") or DEFAULT_CONFIG["manager"])


def get_database_url(config: Optional[Dict[str, Any]] = None) -> str:
    if config is None:
        config = load_config()
    return (config.get("database") or {}).get("url") or DEFAULT_CONFIG["database"]["url"]
