"""Organization, user and team-membership handlers."""

from __future__ import annotations

import logging
from typing import Sequence

import bcrypt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.errors import DuplicateMembership, UniquenessViolation
from orgdesk.models.organization import (
    Organization,
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationUser,
    OrganizationUserCreate,
    User,
    UserCreate,
)
from orgdesk.services.guards import commit_or_raise, ensure_exists, ensure_unique
from orgdesk.utils.time import advance_timestamp

logger = logging.getLogger("orgdesk.organizations")


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), password_hash.encode("utf-8"))


async def create_organization(session: AsyncSession, data: OrganizationCreate) -> Organization:
    await ensure_unique(session, Organization.slug, data.slug, "Organization")

    organization = Organization(
        name=data.name,
        slug=data.slug,
        description=data.description,
    )
    session.add(organization)
    await commit_or_raise(session, lambda: UniquenessViolation("Organization", "slug", data.slug))
    await session.refresh(organization)
    logger.info("organization created id=%s slug=%s", organization.id, organization.slug)
    return organization


async def get_organizations(session: AsyncSession) -> Sequence[Organization]:
    result = await session.execute(select(Organization).order_by(Organization.id))
    return result.scalars().all()


async def update_organization(session: AsyncSession, data: OrganizationUpdate) -> Organization:
    organization = await ensure_exists(session, Organization, data.id, "Organization")
    changes = data.changes()
    if "slug" in changes:
        await ensure_unique(session, Organization.slug, changes["slug"], "Organization", exclude_id=organization.id)

    for field, value in changes.items():
        setattr(organization, field, value)
    organization.updated_at = advance_timestamp(organization.updated_at)

    await commit_or_raise(session, lambda: UniquenessViolation("Organization", "slug", changes.get("slug")))
    await session.refresh(organization)
    return organization


async def create_user(session: AsyncSession, data: UserCreate) -> User:
    email = str(data.email)
    await ensure_unique(session, User.email, email, "User")

    user = User(email=email, name=data.name, password_hash=hash_password(data.password))
    session.add(user)
    await commit_or_raise(session, lambda: UniquenessViolation("User", "email", email))
    await session.refresh(user)
    logger.info("user created id=%s", user.id)
    return user


async def create_organization_user(session: AsyncSession, data: OrganizationUserCreate) -> OrganizationUser:
    """Add a member. Checks run in order and stop at the first failure."""
    await ensure_exists(session, Organization, data.organization_id, "Organization")
    await ensure_exists(session, User, data.user_id, "User")

    existing = await session.execute(
        select(OrganizationUser.id).where(
            OrganizationUser.organization_id == data.organization_id,
            OrganizationUser.user_id == data.user_id,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise DuplicateMembership(data.organization_id, data.user_id)

    membership = OrganizationUser(
        organization_id=data.organization_id,
        user_id=data.user_id,
        role=data.role,
    )
    session.add(membership)
    # The unique constraint catches a concurrent insert that passed the check above.
    await commit_or_raise(session, lambda: DuplicateMembership(data.organization_id, data.user_id))
    await session.refresh(membership)
    logger.info(
        "member added organization_id=%s user_id=%s role=%s",
        membership.organization_id,
        membership.user_id,
        membership.role,
    )
    return membership


async def get_organization_users(session: AsyncSession, organization_id: int) -> Sequence[OrganizationUser]:
    result = await session.execute(
        select(OrganizationUser)
        .where(OrganizationUser.organization_id == organization_id)
        .order_by(OrganizationUser.id)
    )
    return result.scalars().all()
