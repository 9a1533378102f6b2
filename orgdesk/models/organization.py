"""Organization (tenant), user and membership models."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from pydantic import BaseModel, EmailStr, Field, field_validator

from orgdesk.database import Base, TimestampMixin
from orgdesk.models.common import InputModel, NonEmptyStr, PartialUpdate, UserRole


class Organization(TimestampMixin, Base):
    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    password_hash: Mapped[str] = mapped_column(String(255))


class OrganizationUser(TimestampMixin, Base):
    __tablename__ = "organization_users"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_users_org_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(ForeignKey("organizations.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    role: Mapped[str] = mapped_column(String(20))  # owner, admin, member, viewer


# ── Pydantic Schemas ─────────────────────────────────────────

class OrganizationCreate(InputModel):
    name: NonEmptyStr
    slug: NonEmptyStr
    description: str | None


class OrganizationUpdate(PartialUpdate):
    required_fields: ClassVar[frozenset[str]] = frozenset({"name", "slug"})

    name: NonEmptyStr | None = None
    slug: NonEmptyStr | None = None
    description: str | None = None


class OrganizationResponse(BaseModel):
    id: int
    name: str
    slug: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserCreate(InputModel):
    email: EmailStr
    name: NonEmptyStr
    password: str = Field(min_length=6)

    @field_validator("password")
    @classmethod
    def _fits_bcrypt(cls, value: str) -> str:
        # bcrypt only reads the first 72 bytes.
        if len(value.encode("utf-8")) > 72:
            raise ValueError("password must be at most 72 bytes")
        return value


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    password_hash: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationUserCreate(InputModel):
    organization_id: int
    user_id: int
    role: UserRole


class OrganizationUserResponse(BaseModel):
    id: int
    organization_id: int
    user_id: int
    role: UserRole
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrganizationIdQuery(InputModel):
    organization_id: int = Field(alias="organizationId")
