"""Notes models — organization-scoped folder tree and the notes filed in it."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field

from orgdesk.database import Base, TimestampMixin
from orgdesk.models.common import InputModel, NonEmptyStr, PartialUpdate


class NotesFolder(TimestampMixin, Base):
    __tablename__ = "notes_folders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True)
    # Null for a root folder. Parent must share organization_id.
    parent_id: Mapped[Optional[int]] = mapped_column(ForeignKey("notes_folders.id"), nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))


class Note(TimestampMixin, Base):
    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    folder_id: Mapped[Optional[int]] = mapped_column(ForeignKey("notes_folders.id"), nullable=True, index=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True)
    title: Mapped[str] = mapped_column(String(500))
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))


# ── Pydantic Schemas ─────────────────────────────────────────

class NotesFolderCreate(InputModel):
    organization_id: int
    parent_id: int | None
    name: NonEmptyStr
    created_by: int


class NotesFolderResponse(BaseModel):
    id: int
    organization_id: int
    parent_id: int | None = None
    name: str
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NoteCreate(InputModel):
    folder_id: int | None
    organization_id: int
    title: NonEmptyStr
    content: str | None
    created_by: int


class NoteUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"title"})

    folder_id: int | None = None
    title: NonEmptyStr | None = None
    content: str | None = None


class NoteResponse(BaseModel):
    id: int
    folder_id: int | None = None
    organization_id: int
    title: str
    content: str | None = None
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class NotesFolderQuery(InputModel):
    organization_id: int = Field(alias="organizationId")
    parent_id: int | None = Field(default=None, alias="parentId")


class NotesQuery(InputModel):
    """``folderId`` omitted lists every note; null lists root notes only."""

    organization_id: int = Field(alias="organizationId")
    folder_id: int | None = Field(default=None, alias="folderId")

    @property
    def folder_filter_given(self) -> bool:
        return "folder_id" in self.model_fields_set
