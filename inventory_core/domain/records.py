# =============================================================================
# inventory_core/domain/records.py
# Generic Record container and resource field schemas
# =============================================================================
"""
Record - one row of any resource (raw materials, dispatches, ...).

A Record carries its base fields, the server identifier once persisted, and a
local identifier while it only exists on this device. Derived values (totals,
balances, costs) are never stored here; screens recompute them on every read.

ResourceSchema - field specification for one resource, used to validate and
coerce a payload before any write is attempted.
"""

from __future__ import annotations
import math
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from inventory_core.errors import ValidationError

# Keys that never travel to the backend
LOCAL_ONLY_KEYS = ("_local_id", "_pending", "_id", "id")

FIELD_KINDS = ("text", "number", "date", "choice", "list")


def new_local_id() -> str:
    """Identifier for a record that has not reached the backend yet."""
    return f"local-{uuid.uuid4().hex[:12]}"


@dataclass
class Record:
    """A resource row plus its sync bookkeeping."""
    fields: Dict[str, Any]
    id: Optional[str] = None
    local_id: Optional[str] = None
    pending: bool = False

    @property
    def key(self) -> str:
        """Stable key for matching the same logical record across lists."""
        return self.id or self.local_id or ""

    @property
    def is_confirmed(self) -> bool:
        """True only for records the backend has acknowledged."""
        return self.id is not None and not self.pending

    @property
    def sync_label(self) -> str:
        if self.is_confirmed:
            return "✅ Synced"
        if self.id is None:
            return "⏳ Not yet synced"
        return "⏳ Change pending"

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def to_payload(self) -> Dict[str, Any]:
        """Body sent to the backend."""
        return {k: v for k, v in self.fields.items() if k not in LOCAL_ONLY_KEYS}

    def to_storage(self) -> Dict[str, Any]:
        """JSON-safe representation for the local cache and the write queue."""
        return {
            "fields": self.to_payload(),
            "id": self.id,
            "local_id": self.local_id,
            "pending": self.pending,
        }

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> Record:
        return cls(
            fields=dict(data.get("fields") or {}),
            id=data.get("id"),
            local_id=data.get("local_id"),
            pending=bool(data.get("pending", False)),
        )

    @classmethod
    def from_remote(cls, data: Dict[str, Any], id_field: str = "_id") -> Record:
        """Build a confirmed record from a backend JSON object."""
        raw_id = data.get(id_field, data.get("id"))
        return cls(
            fields={k: v for k, v in data.items() if k not in (id_field, "id", "__v")},
            id=str(raw_id) if raw_id is not None else None,
        )


@dataclass(frozen=True)
class FieldSpec:
    """Specification of one form field."""
    name: str
    kind: str = "text"
    required: bool = False
    label: Optional[str] = None
    choices: Tuple[str, ...] = ()
    minimum: Optional[float] = None
    derived: bool = False

    @property
    def title(self) -> str:
        return self.label or self.name

    def coerce(self, value: Any) -> Any:
        """
        Coerce a raw form value to this field's type.

        Empty values come back as None; the caller decides whether that is
        acceptable.
        """
        if value is None or (isinstance(value, str) and value.strip() == ""):
            return None

        if self.kind == "number":
            if isinstance(value, bool):
                raise ValidationError(
                    f"{self.title} must be a number",
                    field=self.name, expected="number", actual=str(value),
                )
            try:
                number = float(value)
            except (TypeError, ValueError):
                raise ValidationError(
                    f"{self.title} must be a number",
                    field=self.name, expected="number", actual=str(value),
                )
            if not math.isfinite(number):
                raise ValidationError(
                    f"{self.title} must be a finite number",
                    field=self.name, expected="finite number", actual=str(value),
                )
            if self.minimum is not None and number < self.minimum:
                raise ValidationError(
                    f"{self.title} must be at least {self.minimum:g}",
                    field=self.name, expected=f">= {self.minimum:g}", actual=str(value),
                )
            return int(number) if number.is_integer() else number

        if self.kind == "date":
            if isinstance(value, datetime):
                return value.date().isoformat()
            if isinstance(value, date):
                return value.isoformat()
            text = str(value)
            try:
                # Backend dates may carry a time part ("2025-07-29T00:00:00.000Z")
                return date.fromisoformat(text.split("T")[0]).isoformat()
            except ValueError:
                raise ValidationError(
                    f"{self.title} is not a valid date",
                    field=self.name, expected="YYYY-MM-DD", actual=text,
                )

        if self.kind == "choice":
            text = str(value)
            if self.choices and text not in self.choices:
                raise ValidationError(
                    f"{self.title} must be one of: {', '.join(self.choices)}",
                    field=self.name, expected="|".join(self.choices), actual=text,
                )
            return text

        if self.kind == "list":
            if not isinstance(value, (list, tuple)):
                raise ValidationError(
                    f"{self.title} must be a list",
                    field=self.name, expected="list", actual=type(value).__name__,
                )
            return [dict(item) for item in value]

        return str(value).strip()


@dataclass(frozen=True)
class ResourceSchema:
    """Field schema and REST endpoint of one resource."""
    name: str
    endpoint: str
    label: str
    fields: Tuple[FieldSpec, ...]
    icon: str = "📦"

    def field(self, name: str) -> FieldSpec:
        for field_spec in self.fields:
            if field_spec.name == name:
                return field_spec
        raise KeyError(name)

    @property
    def field_names(self) -> List[str]:
        return [field_spec.name for field_spec in self.fields]

    @property
    def numeric_fields(self) -> List[str]:
        return [field_spec.name for field_spec in self.fields if field_spec.kind == "number"]

    @property
    def required_fields(self) -> List[str]:
        return [field_spec.name for field_spec in self.fields if field_spec.required]

    def validate(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate and coerce a payload against this schema.

        Unknown keys are dropped. Derived fields are accepted but never
        required, since screens recompute them.

        Raises:
            ValidationError: on the first missing or malformed field
        """
        clean: Dict[str, Any] = {}
        for field_spec in self.fields:
            value = field_spec.coerce(values.get(field_spec.name))
            if value is None:
                if field_spec.required and not field_spec.derived:
                    raise ValidationError(
                        f"Please fill in the {field_spec.title}.",
                        field=field_spec.name, expected=field_spec.kind, actual="",
                    )
                continue
            clean[field_spec.name] = value
        return clean

    def blank_form(self) -> Dict[str, Any]:
        """Empty form state for this resource."""
        form: Dict[str, Any] = {}
        for field_spec in self.fields:
            if field_spec.kind == "number":
                form[field_spec.name] = 0
            elif field_spec.kind == "list":
                form[field_spec.name] = []
            elif field_spec.kind == "choice" and field_spec.choices:
                form[field_spec.name] = field_spec.choices[0]
            else:
                form[field_spec.name] = ""
        return form


def records_to_rows(records: List[Record]) -> List[Dict[str, Any]]:
    """Flat dictionaries for tables and export collaborators."""
    return [dict(r.fields) for r in records]
