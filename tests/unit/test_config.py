# =============================================================================
# tests/unit/test_config.py
# Unit Tests for configuration
# =============================================================================

from pathlib import Path

import pytest

from inventory_core.config import InventoryConfig, load_config
from inventory_core.errors import ConfigurationError


class TestInventoryConfig:
    """Validation of explicit configuration"""

    def test_defaults(self):
        config = InventoryConfig()
        assert config.request_timeout == 10.0
        assert config.namespace == "bennimix"
        assert config.id_field == "_id"

    def test_invalid_url(self):
        with pytest.raises(ConfigurationError):
            InventoryConfig(api_base_url="localhost:5000")

    def test_invalid_timeout(self):
        with pytest.raises(ConfigurationError):
            InventoryConfig(request_timeout=0)

    def test_namespace_without_separator(self):
        with pytest.raises(ConfigurationError):
            InventoryConfig(namespace="a:b")

    def test_from_mapping_casts_values(self):
        config = InventoryConfig.from_mapping({
            "api_base_url": "https://backend.test/api/",
            "request_timeout": "15",
            "storage_path": "/tmp/inv.db",
            "unknown": "ignored",
        })
        assert config.api_base_url == "https://backend.test/api"
        assert config.request_timeout == 15.0
        assert config.storage_path == Path("/tmp/inv.db")

    def test_from_mapping_bad_number(self):
        with pytest.raises(ConfigurationError):
            InventoryConfig.from_mapping({"request_timeout": "soon"})

    def test_with_overrides(self):
        config = InventoryConfig().with_overrides(namespace="test")
        assert config.namespace == "test"


class TestLoadConfig:
    """Environment and explicit overrides"""

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("INVENTORY_API_URL", "https://env.test/api")
        monkeypatch.setenv("INVENTORY_NAMESPACE", "envns")
        config = load_config()
        assert config.api_base_url == "https://env.test/api"
        assert config.namespace == "envns"

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("INVENTORY_NAMESPACE", "envns")
        config = load_config({"namespace": "explicit"})
        assert config.namespace == "explicit"
