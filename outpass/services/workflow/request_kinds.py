"""
Descriptors for the two request kinds.

Leave and outing run through the same lifecycle; a RequestKind bundles the
parts that differ: models, schemas, the quota counter it draws from and the
mapping from payload field names to model columns.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Type

from outpass.models.history import LeaveHistory, OutingHistory
from outpass.models.request import Leave, Outing
from outpass.schemas.common.base import BaseCreateSchema, BaseUpdateSchema
from outpass.schemas.request import (
    LeaveCreate,
    LeaveStudentUpdate,
    OutingCreate,
    OutingStudentUpdate,
)


@dataclass(frozen=True)
class RequestKind:
    """
    Attributes:
        name: Singular label used in messages ("leave", "outing")
        model: Request model class
        history_model: History model class the request is archived into
        counter: Student column holding the remaining quota
        quota_period: Period the quota is reset for ("semester", "month")
        detail_field: Kind specific text column (reason or purpose)
        departure_label: How the departure time is named in messages
        create_schema: Payload schema for new requests
        update_schema: Student editable subset
        field_map: Payload field name to model column name
    """
    name: str
    model: Type[Any]
    history_model: Type[Any]
    counter: str
    quota_period: str
    detail_field: str
    departure_label: str
    create_schema: Type[BaseCreateSchema]
    update_schema: Type[BaseUpdateSchema]
    field_map: Mapping[str, str] = field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def article(self) -> str:
        return "an" if self.name[0] in "aeiou" else "a"

    def to_columns(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Rename payload keys to model columns."""
        return {self.field_map.get(key, key): value for key, value in values.items()}


LEAVE = RequestKind(
    name="leave",
    model=Leave,
    history_model=LeaveHistory,
    counter="remaining_leaves",
    quota_period="semester",
    detail_field="reason",
    departure_label="Out date",
    create_schema=LeaveCreate,
    update_schema=LeaveStudentUpdate,
    field_map=MappingProxyType({"out_date": "scheduled_out", "in_date": "scheduled_in"}),
)

OUTING = RequestKind(
    name="outing",
    model=Outing,
    history_model=OutingHistory,
    counter="remaining_outings",
    quota_period="month",
    detail_field="purpose",
    departure_label="Out time",
    create_schema=OutingCreate,
    update_schema=OutingStudentUpdate,
    field_map=MappingProxyType(
        {"out_time": "scheduled_out", "in_time": "scheduled_in", "date": "outing_date"}
    ),
)

__all__ = ["RequestKind", "LEAVE", "OUTING"]
