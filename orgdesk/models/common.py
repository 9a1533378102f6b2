"""Enums and schema helpers shared by every model module."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Annotated, Any, ClassVar

from pydantic import AfterValidator, BaseModel, Field, model_validator

from orgdesk.utils.time import to_naive_utc


class UserRole(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class Visibility(str, enum.Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    RESTRICTED = "restricted"


# Accepts ISO-8601 with or without offset; stored as naive UTC.
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]

NonEmptyStr = Annotated[str, Field(min_length=1)]
OrderIndex = Annotated[int, Field(ge=0)]


class InputModel(BaseModel):
    model_config = {"use_enum_values": True, "extra": "ignore", "populate_by_name": True}


class PartialUpdate(InputModel):
    """Sparse update input.

    Omitted fields mean "leave unchanged"; fields sent as null mean "clear".
    Columns listed in ``required_fields`` cannot be cleared.
    """

    id: int

    required_fields: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_for_required(self) -> "PartialUpdate":
        for name in self.required_fields & self.model_fields_set:
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Fields the caller actually supplied, nulls included."""
        return {name: getattr(self, name) for name in self.model_fields_set if name != "id"}
