# =============================================================================
# inventory_core/screens/__init__.py
# Screen controllers - one per dashboard module
# =============================================================================

from .base import ScreenController, STATUS_COLUMN, KEY_COLUMN
from .raw_materials import RawMaterialsScreen
from .finished_products import FinishedProductsScreen
from .stock_movements import StockMovementsScreen
from .dispatch import DispatchScreen
from .stock_management import StockManagementScreen
from .production import ProductionScreen
from .reports import ReportsScreen

__all__ = [
    "ScreenController",
    "STATUS_COLUMN",
    "KEY_COLUMN",
    "RawMaterialsScreen",
    "FinishedProductsScreen",
    "StockMovementsScreen",
    "DispatchScreen",
    "StockManagementScreen",
    "ProductionScreen",
    "ReportsScreen",
]
