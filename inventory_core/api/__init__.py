"""
Remote Store Module
Connector for the inventory backend's REST endpoints
"""

from .base_connector import BaseAPIConnector, APIConfig
from .rest_store import RestStoreClient

__all__ = [
    "BaseAPIConnector",
    "APIConfig",
    "RestStoreClient",
]
