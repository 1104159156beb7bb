# =============================================================================
# inventory_core/domain/__init__.py
# Records, resource schemas and derived-field calculations
# =============================================================================

from .records import Record, FieldSpec, ResourceSchema, new_local_id, records_to_rows
from .resources import RESOURCES, get_schema, list_resources
from . import calculations

__all__ = [
    "Record",
    "FieldSpec",
    "ResourceSchema",
    "new_local_id",
    "records_to_rows",
    "RESOURCES",
    "get_schema",
    "list_resources",
    "calculations",
]
