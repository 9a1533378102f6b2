"""Blog handlers: instances and posts."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.models.blog import BlogInstance, BlogInstanceCreate, BlogPost, BlogPostCreate, BlogPostUpdate
from orgdesk.models.organization import Organization, User
from orgdesk.services.guards import commit_or_raise, ensure_exists
from orgdesk.utils.time import advance_timestamp

logger = logging.getLogger("orgdesk.blog")


async def create_blog_instance(session: AsyncSession, data: BlogInstanceCreate) -> BlogInstance:
    await ensure_exists(session, Organization, data.organization_id, "Organization")

    instance = BlogInstance(
        organization_id=data.organization_id,
        name=data.name,
        slug=data.slug,
        description=data.description,
    )
    session.add(instance)
    await commit_or_raise(session)
    await session.refresh(instance)
    logger.info("blog instance created id=%s organization_id=%s", instance.id, instance.organization_id)
    return instance


async def get_blog_instances(session: AsyncSession, organization_id: int) -> Sequence[BlogInstance]:
    result = await session.execute(
        select(BlogInstance).where(BlogInstance.organization_id == organization_id).order_by(BlogInstance.id)
    )
    return result.scalars().all()


async def create_blog_post(session: AsyncSession, data: BlogPostCreate) -> BlogPost:
    await ensure_exists(session, BlogInstance, data.blog_instance_id, "Blog instance")
    await ensure_exists(session, User, data.created_by, "User")

    post = BlogPost(
        blog_instance_id=data.blog_instance_id,
        title=data.title,
        slug=data.slug,
        content=data.content,
        excerpt=data.excerpt,
        visibility=data.visibility,
        created_by=data.created_by,
        published_at=data.published_at,
    )
    session.add(post)
    await commit_or_raise(session)
    await session.refresh(post)
    logger.info("blog post created id=%s status=%s", post.id, post.status.value)
    return post


async def get_blog_posts(session: AsyncSession, blog_instance_id: int) -> Sequence[BlogPost]:
    """Posts of one instance, newest created first."""
    result = await session.execute(
        select(BlogPost)
        .where(BlogPost.blog_instance_id == blog_instance_id)
        .order_by(desc(BlogPost.created_at), desc(BlogPost.id))
    )
    return result.scalars().all()


async def update_blog_post(session: AsyncSession, data: BlogPostUpdate) -> BlogPost:
    post = await ensure_exists(session, BlogPost, data.id, "Blog post")

    for field, value in data.changes().items():
        setattr(post, field, value)
    post.updated_at = advance_timestamp(post.updated_at)

    await commit_or_raise(session)
    await session.refresh(post)
    return post
