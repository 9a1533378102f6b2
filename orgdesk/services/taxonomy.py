"""Category and tag handlers for the vocabulary shared by LMS and blog instances."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.models.blog import BlogInstance
from orgdesk.models.lms import LmsInstance
from orgdesk.models.taxonomy import Category, CategoryCreate, Tag, TagCreate
from orgdesk.services.guards import commit_or_raise, ensure_exists


async def _ensure_owners(session: AsyncSession, lms_instance_id: int | None, blog_instance_id: int | None) -> None:
    if lms_instance_id is not None:
        await ensure_exists(session, LmsInstance, lms_instance_id, "LMS instance")
    if blog_instance_id is not None:
        await ensure_exists(session, BlogInstance, blog_instance_id, "Blog instance")


def _filtered(model, lms_instance_id: int | None, blog_instance_id: int | None):
    # Supplying both filters keeps only rows linked to both instances.
    query = select(model)
    if lms_instance_id is not None:
        query = query.where(model.lms_instance_id == lms_instance_id)
    if blog_instance_id is not None:
        query = query.where(model.blog_instance_id == blog_instance_id)
    return query.order_by(model.id)


async def create_category(session: AsyncSession, data: CategoryCreate) -> Category:
    await _ensure_owners(session, data.lms_instance_id, data.blog_instance_id)

    category = Category(
        name=data.name,
        slug=data.slug,
        description=data.description,
        lms_instance_id=data.lms_instance_id,
        blog_instance_id=data.blog_instance_id,
    )
    session.add(category)
    await commit_or_raise(session)
    await session.refresh(category)
    return category


async def get_categories(
    session: AsyncSession,
    lms_instance_id: int | None = None,
    blog_instance_id: int | None = None,
) -> Sequence[Category]:
    result = await session.execute(_filtered(Category, lms_instance_id, blog_instance_id))
    return result.scalars().all()


async def create_tag(session: AsyncSession, data: TagCreate) -> Tag:
    await _ensure_owners(session, data.lms_instance_id, data.blog_instance_id)

    tag = Tag(
        name=data.name,
        slug=data.slug,
        lms_instance_id=data.lms_instance_id,
        blog_instance_id=data.blog_instance_id,
    )
    session.add(tag)
    await commit_or_raise(session)
    await session.refresh(tag)
    return tag


async def get_tags(
    session: AsyncSession,
    lms_instance_id: int | None = None,
    blog_instance_id: int | None = None,
) -> Sequence[Tag]:
    result = await session.execute(_filtered(Tag, lms_instance_id, blog_instance_id))
    return result.scalars().all()
