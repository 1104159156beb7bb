# =============================================================================
# inventory_core/errors/__init__.py
# Centralized Error Handling for the Inventory Dashboard
# =============================================================================

from .exceptions import (
    InventoryError,
    NetworkError,
    NotFoundError,
    ValidationError,
    StorageError,
    ConfigurationError,
)

__all__ = [
    "InventoryError",
    "NetworkError",
    "NotFoundError",
    "ValidationError",
    "StorageError",
    "ConfigurationError",
]
