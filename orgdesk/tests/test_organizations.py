"""Tests for organization, user and membership handlers."""

from __future__ import annotations

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from orgdesk.errors import DuplicateMembership, NotFoundError, UniquenessViolation
from orgdesk.models.organization import (
    OrganizationCreate,
    OrganizationUpdate,
    OrganizationUser,
    OrganizationUserCreate,
    UserCreate,
)
from orgdesk.services import organizations
from orgdesk.services.guards import commit_or_raise


@pytest.mark.asyncio
async def test_create_organization_and_list(db_session):
    created = await organizations.create_organization(
        db_session, OrganizationCreate(name="Acme", slug="acme", description=None)
    )

    assert created.id is not None
    assert created.created_at is not None
    assert created.updated_at is not None

    listed = await organizations.get_organizations(db_session)
    assert [o.slug for o in listed] == ["acme"]


@pytest.mark.asyncio
async def test_duplicate_organization_slug_is_rejected(db_session, org):
    with pytest.raises(UniquenessViolation) as exc:
        await organizations.create_organization(
            db_session, OrganizationCreate(name="Other", slug="acme", description=None)
        )
    assert exc.value.details["field"] == "slug"


@pytest.mark.asyncio
async def test_update_organization_keeps_omitted_fields(db_session, org):
    before = org.updated_at
    updated = await organizations.update_organization(
        db_session, OrganizationUpdate(id=org.id, description="Widgets")
    )

    assert updated.name == "Acme"
    assert updated.slug == "acme"
    assert updated.description == "Widgets"
    assert updated.updated_at > before


@pytest.mark.asyncio
async def test_update_organization_slug_collision(db_session, org, other_org):
    with pytest.raises(UniquenessViolation):
        await organizations.update_organization(db_session, OrganizationUpdate(id=other_org.id, slug="acme"))


def test_organization_update_rejects_null_name():
    with pytest.raises(ValidationError):
        OrganizationUpdate.model_validate({"id": 1, "name": None})


@pytest.mark.asyncio
async def test_create_user_stores_opaque_hash(db_session):
    created = await organizations.create_user(
        db_session, UserCreate(email="dev@example.com", name="Dev", password="hunter22")
    )

    assert created.password_hash.startswith("$2b$")
    assert "hunter22" not in created.password_hash
    assert organizations.verify_password("hunter22", created.password_hash)
    assert not organizations.verify_password("hunter23", created.password_hash)


@pytest.mark.asyncio
async def test_duplicate_email_is_rejected(db_session, user):
    with pytest.raises(UniquenessViolation):
        await organizations.create_user(
            db_session, UserCreate(email="owner@example.com", name="Again", password="secret1")
        )


def test_user_password_minimum_length():
    with pytest.raises(ValidationError):
        UserCreate(email="dev@example.com", name="Dev", password="123")


def test_user_password_must_fit_bcrypt():
    with pytest.raises(ValidationError):
        UserCreate(email="dev@example.com", name="Dev", password="x" * 73)


def test_hash_password_is_salted_bcrypt():
    first = organizations.hash_password("secret")
    second = organizations.hash_password("secret")

    assert first != second
    assert first.startswith("$2b$")
    assert organizations.verify_password("secret", first)
    assert organizations.verify_password("secret", second)


@pytest.mark.asyncio
async def test_duplicate_membership_leaves_one_row(db_session, org, user):
    data = OrganizationUserCreate(organization_id=org.id, user_id=user.id, role="owner")

    first = await organizations.create_organization_user(db_session, data)
    assert first.role == "owner"

    with pytest.raises(DuplicateMembership):
        await organizations.create_organization_user(db_session, data)

    count = await db_session.execute(
        select(func.count()).select_from(OrganizationUser).where(
            OrganizationUser.organization_id == org.id,
            OrganizationUser.user_id == user.id,
        )
    )
    assert count.scalar_one() == 1


@pytest.mark.asyncio
async def test_membership_checks_organization_before_user(db_session):
    with pytest.raises(NotFoundError) as exc:
        await organizations.create_organization_user(
            db_session, OrganizationUserCreate(organization_id=99, user_id=98, role="member")
        )
    assert exc.value.entity == "Organization"


@pytest.mark.asyncio
async def test_membership_missing_user(db_session, org):
    with pytest.raises(NotFoundError) as exc:
        await organizations.create_organization_user(
            db_session, OrganizationUserCreate(organization_id=org.id, user_id=98, role="member")
        )
    assert exc.value.entity == "User"


def test_membership_role_is_closed_enum():
    with pytest.raises(ValidationError):
        OrganizationUserCreate(organization_id=1, user_id=1, role="superuser")


@pytest.mark.asyncio
async def test_unique_constraint_backs_membership_check(db_session, org, user):
    org_id, user_id = org.id, user.id
    db_session.add_all(
        [
            OrganizationUser(organization_id=org_id, user_id=user_id, role="owner"),
            OrganizationUser(organization_id=org_id, user_id=user_id, role="viewer"),
        ]
    )

    with pytest.raises(DuplicateMembership):
        await commit_or_raise(db_session, lambda: DuplicateMembership(org_id, user_id))

    members = await organizations.get_organization_users(db_session, org_id)
    assert members == []


@pytest.mark.asyncio
async def test_get_organization_users_scoped_to_org(db_session, org, other_org, user):
    await organizations.create_organization_user(
        db_session, OrganizationUserCreate(organization_id=org.id, user_id=user.id, role="admin")
    )

    assert len(await organizations.get_organization_users(db_session, org.id)) == 1
    assert await organizations.get_organization_users(db_session, other_org.id) == []
