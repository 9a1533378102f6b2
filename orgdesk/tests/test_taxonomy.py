"""Tests for the shared category and tag vocabulary."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from orgdesk.errors import NotFoundError
from orgdesk.models.blog import BlogInstanceCreate
from orgdesk.models.lms import LmsInstanceCreate
from orgdesk.models.taxonomy import (
    BlogOwned,
    CategoryCreate,
    CategoryResponse,
    LmsOwned,
    SharedOwned,
    TagCreate,
    Unowned,
    VocabularyQuery,
    owner_of,
)
from orgdesk.services import blog, lms, taxonomy


def test_owner_of_variants():
    assert owner_of(1, None) == LmsOwned(1)
    assert owner_of(None, 2) == BlogOwned(2)
    assert owner_of(1, 2) == SharedOwned(1, 2)
    assert owner_of(None, None) == Unowned()


async def _instances(session, org):
    lms_instance = await lms.create_lms_instance(
        session, LmsInstanceCreate(organization_id=org.id, name="Academy", slug="academy", description=None)
    )
    blog_instance = await blog.create_blog_instance(
        session, BlogInstanceCreate(organization_id=org.id, name="News", slug="news", description=None)
    )
    return lms_instance.id, blog_instance.id


@pytest.mark.asyncio
async def test_get_categories_filters(db_session, org):
    lms_id, blog_id = await _instances(db_session, org)
    lms_only = await taxonomy.create_category(
        db_session,
        CategoryCreate(name="Python", slug="python", description=None, lms_instance_id=lms_id, blog_instance_id=None),
    )
    blog_only = await taxonomy.create_category(
        db_session,
        CategoryCreate(name="Release", slug="release", description=None, lms_instance_id=None, blog_instance_id=blog_id),
    )
    shared = await taxonomy.create_category(
        db_session,
        CategoryCreate(name="Guides", slug="guides", description="How-tos", lms_instance_id=lms_id, blog_instance_id=blog_id),
    )
    loose = await taxonomy.create_category(
        db_session,
        CategoryCreate(name="Misc", slug="misc", description=None, lms_instance_id=None, blog_instance_id=None),
    )

    by_lms = await taxonomy.get_categories(db_session, lms_instance_id=lms_id)
    assert {c.id for c in by_lms} == {lms_only.id, shared.id}

    by_blog = await taxonomy.get_categories(db_session, blog_instance_id=blog_id)
    assert {c.id for c in by_blog} == {blog_only.id, shared.id}

    by_both = await taxonomy.get_categories(db_session, lms_instance_id=lms_id, blog_instance_id=blog_id)
    assert [c.id for c in by_both] == [shared.id]

    everything = await taxonomy.get_categories(db_session)
    assert [c.id for c in everything] == [lms_only.id, blog_only.id, shared.id, loose.id]


@pytest.mark.asyncio
async def test_category_owner_is_rendered(db_session, org):
    lms_id, blog_id = await _instances(db_session, org)
    shared = await taxonomy.create_category(
        db_session,
        CategoryCreate(name="Guides", slug="guides", description=None, lms_instance_id=lms_id, blog_instance_id=blog_id),
    )

    assert shared.owner == SharedOwned(lms_id, blog_id)
    body = CategoryResponse.model_validate(shared).model_dump(mode="json")
    assert body["owner"] == {"kind": "shared", "lms_instance_id": lms_id, "blog_instance_id": blog_id}


@pytest.mark.asyncio
async def test_tags_filter_by_blog(db_session, org):
    lms_id, blog_id = await _instances(db_session, org)
    tag = await taxonomy.create_tag(
        db_session, TagCreate(name="async", slug="async", lms_instance_id=None, blog_instance_id=blog_id)
    )
    await taxonomy.create_tag(
        db_session, TagCreate(name="sql", slug="sql", lms_instance_id=lms_id, blog_instance_id=None)
    )

    tags = await taxonomy.get_tags(db_session, blog_instance_id=blog_id)
    assert [t.id for t in tags] == [tag.id]
    assert tags[0].owner == BlogOwned(blog_id)


@pytest.mark.asyncio
async def test_vocabulary_owner_must_exist(db_session):
    with pytest.raises(NotFoundError) as exc:
        await taxonomy.create_tag(
            db_session, TagCreate(name="x", slug="x", lms_instance_id=None, blog_instance_id=55)
        )
    assert exc.value.entity == "Blog instance"

    with pytest.raises(NotFoundError) as exc:
        await taxonomy.create_category(
            db_session,
            CategoryCreate(name="x", slug="x", description=None, lms_instance_id=56, blog_instance_id=None),
        )
    assert exc.value.entity == "LMS instance"


def test_vocabulary_query_rejects_null_filter():
    assert VocabularyQuery.model_validate({}).lms_instance_id is None
    assert VocabularyQuery.model_validate({"blogInstanceId": 3}).blog_instance_id == 3

    with pytest.raises(ValidationError):
        VocabularyQuery.model_validate({"lmsInstanceId": None})
    with pytest.raises(ValidationError):
        VocabularyQuery.model_validate({"blogInstanceId": None})
