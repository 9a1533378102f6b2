"""Shared vocabulary — categories and tags owned by an LMS instance, a blog instance, both, or neither.

Storage keeps the two owner columns side by side and nullable. Application
code reads ownership through :func:`owner_of`, which folds the pair into one
of the :data:`VocabularyOwner` variants.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, ClassVar, Optional, Union

from sqlalchemy import Column, ForeignKey, Integer, String, Table, Text
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field, computed_field

from orgdesk.database import Base, TimestampMixin
from orgdesk.models.common import InputModel, NonEmptyStr


@dataclass(frozen=True)
class LmsOwned:
    kind: ClassVar[str] = "lms"
    lms_instance_id: int


@dataclass(frozen=True)
class BlogOwned:
    kind: ClassVar[str] = "blog"
    blog_instance_id: int


@dataclass(frozen=True)
class SharedOwned:
    kind: ClassVar[str] = "shared"
    lms_instance_id: int
    blog_instance_id: int


@dataclass(frozen=True)
class Unowned:
    kind: ClassVar[str] = "unowned"


VocabularyOwner = Union[LmsOwned, BlogOwned, SharedOwned, Unowned]


def owner_of(lms_instance_id: int | None, blog_instance_id: int | None) -> VocabularyOwner:
    if lms_instance_id is not None and blog_instance_id is not None:
        return SharedOwned(lms_instance_id, blog_instance_id)
    if lms_instance_id is not None:
        return LmsOwned(lms_instance_id)
    if blog_instance_id is not None:
        return BlogOwned(blog_instance_id)
    return Unowned()


def owner_payload(owner: VocabularyOwner) -> dict[str, Any]:
    return {"kind": owner.kind, **asdict(owner)}


class Category(TimestampMixin, Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    lms_instance_id: Mapped[Optional[int]] = mapped_column(ForeignKey("lms_instances.id"), nullable=True, index=True)
    blog_instance_id: Mapped[Optional[int]] = mapped_column(ForeignKey("blog_instances.id"), nullable=True, index=True)

    @property
    def owner(self) -> VocabularyOwner:
        return owner_of(self.lms_instance_id, self.blog_instance_id)


class Tag(TimestampMixin, Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(255))
    lms_instance_id: Mapped[Optional[int]] = mapped_column(ForeignKey("lms_instances.id"), nullable=True, index=True)
    blog_instance_id: Mapped[Optional[int]] = mapped_column(ForeignKey("blog_instances.id"), nullable=True, index=True)

    @property
    def owner(self) -> VocabularyOwner:
        return owner_of(self.lms_instance_id, self.blog_instance_id)


# Association tables. Schema only; no handlers read or write them yet.
course_categories = Table(
    "course_categories",
    Base.metadata,
    Column("course_id", ForeignKey("courses.id"), primary_key=True),
    Column("category_id", ForeignKey("categories.id"), primary_key=True),
)

course_tags = Table(
    "course_tags",
    Base.metadata,
    Column("course_id", ForeignKey("courses.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)

blog_post_categories = Table(
    "blog_post_categories",
    Base.metadata,
    Column("blog_post_id", ForeignKey("blog_posts.id"), primary_key=True),
    Column("category_id", ForeignKey("categories.id"), primary_key=True),
)

blog_post_tags = Table(
    "blog_post_tags",
    Base.metadata,
    Column("blog_post_id", ForeignKey("blog_posts.id"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id"), primary_key=True),
)


# ── Pydantic Schemas ─────────────────────────────────────────

class CategoryCreate(InputModel):
    name: NonEmptyStr
    slug: NonEmptyStr
    description: str | None
    lms_instance_id: int | None
    blog_instance_id: int | None


class TagCreate(InputModel):
    name: NonEmptyStr
    slug: NonEmptyStr
    lms_instance_id: int | None
    blog_instance_id: int | None


class _VocabularyResponse(BaseModel):
    id: int
    name: str
    slug: str
    lms_instance_id: int | None = None
    blog_instance_id: int | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def owner(self) -> dict[str, Any]:
        return owner_payload(owner_of(self.lms_instance_id, self.blog_instance_id))


class CategoryResponse(_VocabularyResponse):
    description: str | None = None


class TagResponse(_VocabularyResponse):
    pass


class VocabularyQuery(InputModel):
    """Either, both or neither filter; supplied filters are AND-composed.

    A filter is either omitted or an id; an explicit null is rejected.
    """

    lms_instance_id: int = Field(default=None, alias="lmsInstanceId")
    blog_instance_id: int = Field(default=None, alias="blogInstanceId")
