"""LMS models — instances own courses, courses own modules, modules own lessons."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field

from orgdesk.database import Base, TimestampMixin
from orgdesk.models.common import InputModel, NonEmptyStr, OrderIndex, PartialUpdate, Visibility


class LmsInstance(TimestampMixin, Base):
    __tablename__ = "lms_instances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Course(TimestampMixin, Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    lms_instance_id: Mapped[int] = mapped_column(ForeignKey("lms_instances.id"), index=True)
    title: Mapped[str] = mapped_column(String(500))
    slug: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(String(20))  # public, private, restricted
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))


class Module(TimestampMixin, Base):
    __tablename__ = "modules"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(ForeignKey("courses.id"), index=True)
    title: Mapped[str] = mapped_column(String(500))
    slug: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer)


class Lesson(TimestampMixin, Base):
    __tablename__ = "lessons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    module_id: Mapped[int] = mapped_column(ForeignKey("modules.id"), index=True)
    title: Mapped[str] = mapped_column(String(500))
    slug: Mapped[str] = mapped_column(String(255))
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer)


# ── Pydantic Schemas ─────────────────────────────────────────

class LmsInstanceCreate(InputModel):
    organization_id: int
    name: NonEmptyStr
    slug: NonEmptyStr
    description: str | None


class LmsInstanceResponse(BaseModel):
    id: int
    organization_id: int
    name: str
    slug: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CourseCreate(InputModel):
    lms_instance_id: int
    title: NonEmptyStr
    slug: NonEmptyStr
    description: str | None
    content: str | None
    visibility: Visibility
    created_by: int


class CourseUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"title", "slug", "visibility"})

    title: NonEmptyStr | None = None
    slug: NonEmptyStr | None = None
    description: str | None = None
    content: str | None = None
    visibility: Visibility | None = None


class CourseResponse(BaseModel):
    id: int
    lms_instance_id: int
    title: str
    slug: str
    description: str | None = None
    content: str | None = None
    visibility: Visibility
    created_by: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ModuleCreate(InputModel):
    course_id: int
    title: NonEmptyStr
    slug: NonEmptyStr
    description: str | None
    # None asks the server for the next free position.
    order_index: OrderIndex | None = None


class ModuleResponse(BaseModel):
    id: int
    course_id: int
    title: str
    slug: str
    description: str | None = None
    order_index: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LessonCreate(InputModel):
    module_id: int
    title: NonEmptyStr
    slug: NonEmptyStr
    content: str | None
    order_index: OrderIndex | None = None


class LessonResponse(BaseModel):
    id: int
    module_id: int
    title: str
    slug: str
    content: str | None = None
    order_index: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class LmsInstanceIdQuery(InputModel):
    lms_instance_id: int = Field(alias="lmsInstanceId")


class CourseIdQuery(InputModel):
    course_id: int = Field(alias="courseId")


class ModuleIdQuery(InputModel):
    module_id: int = Field(alias="moduleId")
