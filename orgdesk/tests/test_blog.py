"""Tests for blog instances, posts and derived publication status."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from orgdesk.errors import NotFoundError
from orgdesk.models.blog import (
    BlogInstanceCreate,
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
    PublicationStatus,
    publication_status,
)
from orgdesk.services import blog
from orgdesk.utils.time import utc_now_naive


NOW = datetime(2026, 10, 19, 12, 0, 0)


def test_publication_status_derivation():
    assert publication_status(None, NOW) == PublicationStatus.DRAFT
    assert publication_status(NOW - timedelta(seconds=1), NOW) == PublicationStatus.PUBLISHED
    assert publication_status(NOW, NOW) == PublicationStatus.PUBLISHED
    assert publication_status(NOW + timedelta(seconds=1), NOW) == PublicationStatus.SCHEDULED


def test_publication_status_accepts_aware_datetimes():
    aware = datetime(2026, 10, 19, 14, 0, tzinfo=timezone(timedelta(hours=2)))
    assert publication_status(aware, NOW) == PublicationStatus.PUBLISHED


async def _instance(session, org):
    return await blog.create_blog_instance(
        session, BlogInstanceCreate(organization_id=org.id, name="News", slug="news", description=None)
    )


def _post(instance_id: int, user_id: int, slug: str, published_at=None) -> BlogPostCreate:
    return BlogPostCreate(
        blog_instance_id=instance_id,
        title=slug.title(),
        slug=slug,
        content=None,
        excerpt=None,
        visibility="public",
        created_by=user_id,
        published_at=published_at,
    )


@pytest.mark.asyncio
async def test_post_status_follows_published_at(db_session, org, user):
    instance = await _instance(db_session, org)

    draft = await blog.create_blog_post(db_session, _post(instance.id, user.id, "draft"))
    live = await blog.create_blog_post(
        db_session, _post(instance.id, user.id, "live", utc_now_naive() - timedelta(days=1))
    )
    later = await blog.create_blog_post(
        db_session, _post(instance.id, user.id, "later", utc_now_naive() + timedelta(days=1))
    )

    assert draft.status == PublicationStatus.DRAFT
    assert live.status == PublicationStatus.PUBLISHED
    assert later.status == PublicationStatus.SCHEDULED
    assert BlogPostResponse.model_validate(later).model_dump(mode="json")["status"] == "scheduled"


@pytest.mark.asyncio
async def test_offset_published_at_stored_as_utc(db_session, org, user):
    instance = await _instance(db_session, org)
    data = BlogPostCreate.model_validate(
        {
            "blog_instance_id": instance.id,
            "title": "Launch",
            "slug": "launch",
            "content": None,
            "excerpt": None,
            "visibility": "public",
            "created_by": user.id,
            "published_at": "2030-01-01T02:00:00+02:00",
        }
    )

    post = await blog.create_blog_post(db_session, data)
    assert post.published_at == datetime(2030, 1, 1, 0, 0, 0)


@pytest.mark.asyncio
async def test_blog_posts_newest_first(db_session, org, user):
    instance = await _instance(db_session, org)
    first = await blog.create_blog_post(db_session, _post(instance.id, user.id, "first"))
    second = await blog.create_blog_post(db_session, _post(instance.id, user.id, "second"))

    posts = await blog.get_blog_posts(db_session, instance.id)
    assert [p.id for p in posts] == [second.id, first.id]


@pytest.mark.asyncio
async def test_blog_post_requires_existing_instance(db_session, user):
    with pytest.raises(NotFoundError) as exc:
        await blog.create_blog_post(db_session, _post(321, user.id, "ghost"))
    assert exc.value.entity == "Blog instance"


@pytest.mark.asyncio
async def test_unpublishing_returns_post_to_draft(db_session, org, user):
    instance = await _instance(db_session, org)
    post = await blog.create_blog_post(
        db_session, _post(instance.id, user.id, "live", utc_now_naive() - timedelta(hours=1))
    )

    updated = await blog.update_blog_post(
        db_session, BlogPostUpdate.model_validate({"id": post.id, "published_at": None})
    )
    assert updated.status == PublicationStatus.DRAFT
    assert updated.title == "Live"


@pytest.mark.asyncio
async def test_get_blog_instances(db_session, org, other_org):
    instance = await _instance(db_session, org)

    assert [i.id for i in await blog.get_blog_instances(db_session, org.id)] == [instance.id]
    assert await blog.get_blog_instances(db_session, other_org.id) == []
