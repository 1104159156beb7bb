# =============================================================================
# inventory_core/config.py
# Explicit configuration object for the inventory dashboard
# =============================================================================
"""
InventoryConfig - backend address, request timeout and local storage namespace.

Values are resolved in this order:
1. Streamlit secrets, ``[inventory]`` table
2. Environment variables (INVENTORY_API_URL, INVENTORY_TIMEOUT, ...)
3. Defaults

Expected secrets.toml format:
    [inventory]
    api_base_url = "https://backend.example.com/api"
    request_timeout = 10
    namespace = "bennimix"
    storage_path = "local_data/inventory.db"
"""

from __future__ import annotations
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import logging

from inventory_core.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_PATH = Path(__file__).parent.parent / "local_data" / "inventory.db"

ENV_KEYS = {
    "api_base_url": "INVENTORY_API_URL",
    "request_timeout": "INVENTORY_TIMEOUT",
    "namespace": "INVENTORY_NAMESPACE",
    "storage_path": "INVENTORY_STORAGE_PATH",
    "id_field": "INVENTORY_ID_FIELD",
    "check_interval": "INVENTORY_CHECK_INTERVAL",
}


@dataclass(frozen=True)
class InventoryConfig:
    """Configuration passed explicitly to the coordinator and screens."""
    api_base_url: str = "http://localhost:5000/api"
    request_timeout: float = 10.0
    namespace: str = "bennimix"
    storage_path: Path = DEFAULT_STORAGE_PATH
    id_field: str = "_id"
    check_interval: float = 30.0      # seconds between automatic connection checks
    headers: Dict[str, str] = field(default_factory=lambda: {"Content-Type": "application/json"})

    def __post_init__(self):
        if not self.api_base_url or not str(self.api_base_url).startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Invalid backend address: {self.api_base_url!r}",
                config_key="api_base_url",
                expected_type="http(s) URL",
            )
        if self.request_timeout <= 0:
            raise ConfigurationError(
                "Request timeout must be positive",
                config_key="request_timeout",
                expected_type="positive number",
            )
        if not self.namespace or ":" in self.namespace:
            raise ConfigurationError(
                f"Invalid storage namespace: {self.namespace!r}",
                config_key="namespace",
                expected_type="non-empty string without ':'",
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> InventoryConfig:
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {k: v for k, v in values.items() if k in known and v not in (None, "")}

        try:
            if "request_timeout" in kwargs:
                kwargs["request_timeout"] = float(kwargs["request_timeout"])
            if "check_interval" in kwargs:
                kwargs["check_interval"] = float(kwargs["check_interval"])
        except (TypeError, ValueError):
            raise ConfigurationError(
                "Timeout or check interval is not a number",
                config_key="request_timeout",
                expected_type="number",
            )

        if "storage_path" in kwargs:
            kwargs["storage_path"] = Path(kwargs["storage_path"])
        if "api_base_url" in kwargs:
            kwargs["api_base_url"] = str(kwargs["api_base_url"]).rstrip("/")

        return cls(**kwargs)

    def with_overrides(self, **overrides) -> InventoryConfig:
        """Return a copy with some values replaced."""
        return replace(self, **overrides)


def _load_from_secrets() -> Dict[str, Any]:
    """Read the [inventory] table from Streamlit secrets, if configured."""
    try:
        import streamlit as st
        if "inventory" in st.secrets:
            return dict(st.secrets["inventory"])
    except FileNotFoundError:
        # No secrets.toml present
        pass
    except Exception as e:
        logger.debug(f"Streamlit secrets unavailable: {e}")
    return {}


def _load_from_env() -> Dict[str, Any]:
    """Read overrides from environment variables."""
    return {
        name: os.environ[env_key]
        for name, env_key in ENV_KEYS.items()
        if os.environ.get(env_key)
    }


def load_config(overrides: Optional[Mapping[str, Any]] = None) -> InventoryConfig:
    """
    Resolve the dashboard configuration.

    Args:
        overrides: Values that win over secrets and environment

    Returns:
        Validated InventoryConfig
    """
    merged: Dict[str, Any] = {}
    merged.update(_load_from_env())
    merged.update(_load_from_secrets())
    if overrides:
        merged.update(overrides)

    config = InventoryConfig.from_mapping(merged)
    logger.info(f"Configuration loaded: backend={config.api_base_url} namespace={config.namespace}")
    return config
