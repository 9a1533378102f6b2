"""Blog models — instances own posts whose publish state is derived from published_at."""

from __future__ import annotations

import enum
from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, Field, computed_field

from orgdesk.database import Base, TimestampMixin
from orgdesk.models.common import InputModel, NonEmptyStr, PartialUpdate, UtcDatetime, Visibility
from orgdesk.utils.time import to_naive_utc, utc_now_naive


class PublicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    PUBLISHED = "published"


def publication_status(published_at: datetime | None, now: datetime | None = None) -> PublicationStatus:
    """Derive a post's state: no date is a draft, a date at or before now is published."""
    if published_at is None:
        return PublicationStatus.DRAFT
    now = to_naive_utc(now) if now is not None else utc_now_naive()
    if to_naive_utc(published_at) <= now:
        return PublicationStatus.PUBLISHED
    return PublicationStatus.SCHEDULED


class BlogInstance(TimestampMixin, Base):
    __tablename__ = "blog_instances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100))
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class BlogPost(TimestampMixin, Base):
    __tablename__ = "blog_posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    blog_instance_id: Mapped[int] = mapped_column(ForeignKey("blog_instances.id"), index=True)
    title: Mapped[str] = mapped_column(String(500))
    slug: Mapped[str] = mapped_column(String(255))
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    excerpt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    visibility: Mapped[str] = mapped_column(String(20))
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id"))
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    @property
    def status(self) -> PublicationStatus:
        return publication_status(self.published_at)


# ── Pydantic Schemas ─────────────────────────────────────────

class BlogInstanceCreate(InputModel):
    organization_id: int
    name: NonEmptyStr
    slug: NonEmptyStr
    description: str | None


class BlogInstanceResponse(BaseModel):
    id: int
    organization_id: int
    name: str
    slug: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class BlogPostCreate(InputModel):
    blog_instance_id: int
    title: NonEmptyStr
    slug: NonEmptyStr
    content: str | None
    excerpt: str | None
    visibility: Visibility
    created_by: int
    published_at: UtcDatetime | None


class BlogPostUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"title", "slug", "visibility"})

    title: NonEmptyStr | None = None
    slug: NonEmptyStr | None = None
    content: str | None = None
    excerpt: str | None = None
    visibility: Visibility | None = None
    published_at: UtcDatetime | None = None


class BlogPostResponse(BaseModel):
    id: int
    blog_instance_id: int
    title: str
    slug: str
    content: str | None = None
    excerpt: str | None = None
    visibility: Visibility
    created_by: int
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> PublicationStatus:
        return publication_status(self.published_at)


class BlogInstanceIdQuery(InputModel):
    blog_instance_id: int = Field(alias="blogInstanceId")
