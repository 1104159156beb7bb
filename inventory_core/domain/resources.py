# =============================================================================
# inventory_core/domain/resources.py
# Resource registry - one schema per screen
# =============================================================================

from __future__ import annotations
from typing import Dict, List

from .records import FieldSpec, ResourceSchema
from .calculations import TOLL_FEES

RAW_MATERIALS = "raw_materials"
FINISHED_PRODUCTS = "finished_products"
STOCK_MOVEMENTS = "stock_movements"
DISPATCHES = "dispatches"
STOCKS = "stocks"
PRODUCTION_BATCHES = "production_batches"

MATERIAL_TABS = ("Sorghum", "Pigeon Peas", "Sesame Seeds", "Rice", "Sugar")

MOVEMENT_SOURCES = ("Raw Materials", "Production", "Storage")
MOVEMENT_DESTINATIONS = ("Production", "Finished Products", "Storage")

PRODUCTION_DEPARTMENTS = (
    "Store", "Cleaning", "Scorching", "Milling", "Packaging", "Finished Store",
)


RESOURCES: Dict[str, ResourceSchema] = {
    RAW_MATERIALS: ResourceSchema(
        name=RAW_MATERIALS,
        endpoint="rawmaterials",
        label="Raw Materials",
        icon="🌾",
        fields=(
            FieldSpec("productName", "choice", required=True, label="Material", choices=MATERIAL_TABS),
            FieldSpec("date", "date", required=True, label="Date"),
            FieldSpec("storeKeeper", required=True, label="Store Keeper"),
            FieldSpec("supervisor", required=True, label="Supervisor"),
            FieldSpec("location", label="Location"),
            FieldSpec("batchNumber", label="Batch Number"),
            FieldSpec("openingBalance", "number", label="Opening Balance"),
            FieldSpec("newStock", "number", label="New Stock"),
            FieldSpec("totalStock", "number", label="Total Stock", derived=True),
            FieldSpec("stockOut", "number", label="Stock Out"),
            FieldSpec("balance", "number", label="Balance", derived=True),
            FieldSpec("remarks", label="Remarks"),
            FieldSpec("requisitionNumber", label="Requisition Number"),
        ),
    ),
    FINISHED_PRODUCTS: ResourceSchema(
        name=FINISHED_PRODUCTS,
        endpoint="finished-products",
        label="Finished Products",
        icon="🏷️",
        fields=(
            FieldSpec("product", required=True, label="Product Name"),
            FieldSpec("batch", required=True, label="Batch Number"),
            FieldSpec("quantity", "number", required=True, label="Quantity", minimum=0),
            FieldSpec("unit", required=True, label="Unit"),
            FieldSpec("date", "date", required=True, label="Date"),
        ),
    ),
    STOCK_MOVEMENTS: ResourceSchema(
        name=STOCK_MOVEMENTS,
        endpoint="stock-movements",
        label="Stock Movements",
        icon="🔁",
        fields=(
            FieldSpec("item", required=True, label="Item Name"),
            FieldSpec("quantity", "number", required=True, label="Quantity", minimum=0),
            FieldSpec("from", "choice", required=True, label="From", choices=MOVEMENT_SOURCES),
            FieldSpec("to", "choice", required=True, label="To", choices=MOVEMENT_DESTINATIONS),
            FieldSpec("date", "date", required=True, label="Date"),
        ),
    ),
    DISPATCHES: ResourceSchema(
        name=DISPATCHES,
        endpoint="dispatch-delivery",
        label="Dispatch & Delivery",
        icon="🚚",
        fields=(
            FieldSpec("item", required=True, label="Item"),
            FieldSpec("quantity", "number", required=True, label="Quantity", minimum=0),
            FieldSpec("date", "date", required=True, label="Date"),
            FieldSpec("customer", required=True, label="Customer"),
            FieldSpec("driver", required=True, label="Driver"),
            FieldSpec("vehicle", required=True, label="Vehicle"),
            FieldSpec("vehicleGroup", "choice", label="Toll Group", choices=tuple(TOLL_FEES)),
            FieldSpec("fuelCost", "number", label="Fuel Cost", minimum=0),
            FieldSpec("perDiemRate", "number", label="Per Diem Rate", minimum=0),
            FieldSpec("personnelCount", "number", label="Personnel", minimum=0),
            FieldSpec("tollFee", "number", label="Toll Fee", derived=True),
            FieldSpec("totalCost", "number", label="Total Cost", derived=True),
        ),
    ),
    STOCKS: ResourceSchema(
        name=STOCKS,
        endpoint="stocks",
        label="Stock Management",
        icon="📦",
        fields=(
            FieldSpec("name", required=True, label="Name"),
            FieldSpec("quantity", "number", required=True, label="Quantity", minimum=0),
            FieldSpec("category", required=True, label="Category"),
            FieldSpec("unitPrice", "number", required=True, label="Unit Price", minimum=0),
            FieldSpec("supplier", label="Supplier"),
        ),
    ),
    PRODUCTION_BATCHES: ResourceSchema(
        name=PRODUCTION_BATCHES,
        endpoint="production-batches",
        label="Production",
        icon="🏭",
        fields=(
            FieldSpec("batchCode", required=True, label="Batch ID"),
            FieldSpec("date", "date", required=True, label="Date"),
            FieldSpec("client", label="Client"),
            FieldSpec("product", required=True, label="Product"),
            FieldSpec("plannedTons", "number", required=True, label="Planned (MT)", minimum=0),
            FieldSpec("ingredients", "list", label="Raw Material Allocation"),
            FieldSpec("departments", "list", label="Department Tracking"),
        ),
    ),
}


def get_schema(resource: str) -> ResourceSchema:
    """Look up a resource schema by name."""
    try:
        return RESOURCES[resource]
    except KeyError:
        raise KeyError(f"Unknown resource: {resource}. Known: {', '.join(RESOURCES)}")


def list_resources() -> List[str]:
    return list(RESOURCES)
