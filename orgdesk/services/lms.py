"""LMS handlers: instances, courses, modules and lessons."""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.models.lms import (
    Course,
    CourseCreate,
    CourseUpdate,
    Lesson,
    LessonCreate,
    LmsInstance,
    LmsInstanceCreate,
    Module,
    ModuleCreate,
)
from orgdesk.models.organization import Organization, User
from orgdesk.services.guards import commit_or_raise, ensure_exists, next_order_index
from orgdesk.utils.time import advance_timestamp

logger = logging.getLogger("orgdesk.lms")


async def create_lms_instance(session: AsyncSession, data: LmsInstanceCreate) -> LmsInstance:
    await ensure_exists(session, Organization, data.organization_id, "Organization")

    instance = LmsInstance(
        organization_id=data.organization_id,
        name=data.name,
        slug=data.slug,
        description=data.description,
    )
    session.add(instance)
    await commit_or_raise(session)
    await session.refresh(instance)
    logger.info("lms instance created id=%s organization_id=%s", instance.id, instance.organization_id)
    return instance


async def get_lms_instances(session: AsyncSession, organization_id: int) -> Sequence[LmsInstance]:
    result = await session.execute(
        select(LmsInstance).where(LmsInstance.organization_id == organization_id).order_by(LmsInstance.id)
    )
    return result.scalars().all()


async def create_course(session: AsyncSession, data: CourseCreate) -> Course:
    await ensure_exists(session, LmsInstance, data.lms_instance_id, "LMS instance")
    await ensure_exists(session, User, data.created_by, "User")

    course = Course(
        lms_instance_id=data.lms_instance_id,
        title=data.title,
        slug=data.slug,
        description=data.description,
        content=data.content,
        visibility=data.visibility,
        created_by=data.created_by,
    )
    session.add(course)
    await commit_or_raise(session)
    await session.refresh(course)
    logger.info("course created id=%s lms_instance_id=%s", course.id, course.lms_instance_id)
    return course


async def get_courses(session: AsyncSession, lms_instance_id: int) -> Sequence[Course]:
    result = await session.execute(
        select(Course).where(Course.lms_instance_id == lms_instance_id).order_by(Course.id)
    )
    return result.scalars().all()


async def update_course(session: AsyncSession, data: CourseUpdate) -> Course:
    course = await ensure_exists(session, Course, data.id, "Course")

    for field, value in data.changes().items():
        setattr(course, field, value)
    course.updated_at = advance_timestamp(course.updated_at)

    await commit_or_raise(session)
    await session.refresh(course)
    return course


async def create_module(session: AsyncSession, data: ModuleCreate) -> Module:
    await ensure_exists(session, Course, data.course_id, "Course")

    order_index = data.order_index
    if order_index is None:
        order_index = await next_order_index(session, Module.order_index, Module.course_id, data.course_id)

    module = Module(
        course_id=data.course_id,
        title=data.title,
        slug=data.slug,
        description=data.description,
        order_index=order_index,
    )
    session.add(module)
    await commit_or_raise(session)
    await session.refresh(module)
    return module


async def get_modules(session: AsyncSession, course_id: int) -> Sequence[Module]:
    result = await session.execute(
        select(Module).where(Module.course_id == course_id).order_by(Module.order_index, Module.id)
    )
    return result.scalars().all()


async def create_lesson(session: AsyncSession, data: LessonCreate) -> Lesson:
    await ensure_exists(session, Module, data.module_id, "Module")

    order_index = data.order_index
    if order_index is None:
        order_index = await next_order_index(session, Lesson.order_index, Lesson.module_id, data.module_id)

    lesson = Lesson(
        module_id=data.module_id,
        title=data.title,
        slug=data.slug,
        content=data.content,
        order_index=order_index,
    )
    session.add(lesson)
    await commit_or_raise(session)
    await session.refresh(lesson)
    return lesson


async def get_lessons(session: AsyncSession, module_id: int) -> Sequence[Lesson]:
    result = await session.execute(
        select(Lesson).where(Lesson.module_id == module_id).order_by(Lesson.order_index, Lesson.id)
    )
    return result.scalars().all()
