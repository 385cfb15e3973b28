"""
config_loader.py
-----------------
Singleton config loader. Reads config.yaml (and the template catalog file it
points to) once and caches them. All modules access configuration through
this — never hardcoded values.
"""

import os
import yaml
from typing import Any, Dict


_CONFIG_DIR = os.path.dirname(__file__)
_CONFIG_CACHE: Dict[str, Any] = {}
_TEMPLATES_CACHE: list[Dict[str, Any]] = []


def _read_yaml(path: str) -> Any:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found: {path}")
    with open(path, "r") as f:
        return yaml.safe_load(f)


def load_config(config_path: str | None = None) -> Dict[str, Any]:
    """
    Load and cache the YAML configuration file.

    Args:
        config_path: Path to config.yaml. Defaults to config/ relative to this file.

    Returns:
        Full config dictionary.
    """
    global _CONFIG_CACHE

    if _CONFIG_CACHE:
        return _CONFIG_CACHE

    if config_path is None:
        config_path = os.path.join(_CONFIG_DIR, "config.yaml")

    _CONFIG_CACHE = _read_yaml(config_path)
    return _CONFIG_CACHE


def load_templates(templates_path: str | None = None) -> list[Dict[str, Any]]:
    """
    Load and cache the raw template catalog entries, in file order.

    Args:
        templates_path: Path to a templates YAML file. Defaults to the file
            named by catalog.templates_file in config.yaml.
    """
    global _TEMPLATES_CACHE

    if _TEMPLATES_CACHE and templates_path is None:
        return _TEMPLATES_CACHE

    if templates_path is None:
        templates_path = os.path.join(_CONFIG_DIR, load_config()["catalog"]["templates_file"])

    entries = _read_yaml(templates_path)["templates"]
    _TEMPLATES_CACHE = entries
    return entries


def get_catalog_config() -> Dict[str, Any]:
    """Returns the catalog block."""
    return load_config()["catalog"]


def get_scoring_config() -> Dict[str, Any]:
    """Returns the scoring block (weights + bonus rules)."""
    return load_config()["scoring"]


def get_scoring_rule_config(rule_name: str) -> Dict[str, Any]:
    """
    Returns the config block for a single scoring rule.

    Raises:
        KeyError: If rule_name is not in the scoring config.
    """
    scoring = get_scoring_config()
    if rule_name not in scoring:
        raise KeyError(
            f"No scoring rule config for '{rule_name}'. "
            f"Available: {[k for k in scoring.keys() if k not in ('weights', 'max_recommendations')]}"
        )
    return scoring[rule_name]


def get_customization_config() -> Dict[str, Any]:
    """Returns the customizations block."""
    return load_config()["customizations"]


def get_personalization_config() -> Dict[str, Any]:
    """Returns the personalization block."""
    return load_config()["personalization"]


def get_optimization_config() -> Dict[str, Any]:
    """Returns the optimization analyzer thresholds."""
    return load_config()["optimization"]


def get_output_config() -> Dict[str, Any]:
    """Returns the output block."""
    return load_config()["output"]


def reset_config() -> None:
    """Clears cached config. Useful for testing."""
    global _CONFIG_CACHE, _TEMPLATES_CACHE
    _CONFIG_CACHE = {}
    _TEMPLATES_CACHE = []
