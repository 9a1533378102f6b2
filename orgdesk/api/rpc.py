"""Procedure-call API.

Every operation is registered by name in ``OPERATIONS`` together with its
kind, input schema, handler and response schema. Queries may be called with
``GET /api/rpc/{name}?input=<json>``; any operation may be called with
``POST /api/rpc/{name}`` and a JSON body.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.api.identity import get_caller_id
from orgdesk.database import get_session
from orgdesk.errors import OperationNotAllowed, OrgDeskError, UnknownOperation
from orgdesk.models.blog import (
    BlogInstanceCreate,
    BlogInstanceIdQuery,
    BlogInstanceResponse,
    BlogPostCreate,
    BlogPostResponse,
    BlogPostUpdate,
)
from orgdesk.models.lms import (
    CourseCreate,
    CourseIdQuery,
    CourseResponse,
    CourseUpdate,
    LessonCreate,
    LessonResponse,
    LmsInstanceCreate,
    LmsInstanceIdQuery,
    LmsInstanceResponse,
    ModuleCreate,
    ModuleIdQuery,
    ModuleResponse,
)
from orgdesk.models.notes import (
    NoteCreate,
    NoteResponse,
    NotesFolderCreate,
    NotesFolderQuery,
    NotesFolderResponse,
    NotesQuery,
    NoteUpdate,
)
from orgdesk.models.organization import (
    OrganizationCreate,
    OrganizationIdQuery,
    OrganizationResponse,
    OrganizationUpdate,
    OrganizationUserCreate,
    OrganizationUserResponse,
    UserCreate,
    UserResponse,
)
from orgdesk.models.taxonomy import CategoryCreate, CategoryResponse, TagCreate, TagResponse, VocabularyQuery
from orgdesk.observability.metrics import metrics
from orgdesk.services import blog, lms, notes, organizations, taxonomy
from orgdesk.utils.time import utc_now

router = APIRouter(prefix="/api/rpc", tags=["rpc"])
logger = logging.getLogger("orgdesk.rpc")

QUERY = "query"
MUTATION = "mutation"


@dataclass(frozen=True)
class Operation:
    kind: str
    handler: Callable[[AsyncSession, Any], Awaitable[Any]]
    input_model: Optional[type[BaseModel]] = None
    output_model: Optional[type[BaseModel]] = None
    many: bool = False

    @property
    def records_creator(self) -> bool:
        return self.input_model is not None and "created_by" in self.input_model.model_fields


async def _healthcheck(_session: AsyncSession, _payload: None) -> dict:
    return {"status": "ok", "timestamp": utc_now().isoformat()}


OPERATIONS: dict[str, Operation] = {
    "healthcheck": Operation(QUERY, _healthcheck),
    # Organizations and team
    "createOrganization": Operation(
        MUTATION, organizations.create_organization, OrganizationCreate, OrganizationResponse
    ),
    "getOrganizations": Operation(
        QUERY, lambda s, _: organizations.get_organizations(s), None, OrganizationResponse, many=True
    ),
    "updateOrganization": Operation(
        MUTATION, organizations.update_organization, OrganizationUpdate, OrganizationResponse
    ),
    "createUser": Operation(MUTATION, organizations.create_user, UserCreate, UserResponse),
    "createOrganizationUser": Operation(
        MUTATION, organizations.create_organization_user, OrganizationUserCreate, OrganizationUserResponse
    ),
    "getOrganizationUsers": Operation(
        QUERY,
        lambda s, q: organizations.get_organization_users(s, q.organization_id),
        OrganizationIdQuery,
        OrganizationUserResponse,
        many=True,
    ),
    # LMS
    "createLmsInstance": Operation(MUTATION, lms.create_lms_instance, LmsInstanceCreate, LmsInstanceResponse),
    "getLmsInstances": Operation(
        QUERY, lambda s, q: lms.get_lms_instances(s, q.organization_id), OrganizationIdQuery, LmsInstanceResponse, many=True
    ),
    "createCourse": Operation(MUTATION, lms.create_course, CourseCreate, CourseResponse),
    "getCourses": Operation(
        QUERY, lambda s, q: lms.get_courses(s, q.lms_instance_id), LmsInstanceIdQuery, CourseResponse, many=True
    ),
    "updateCourse": Operation(MUTATION, lms.update_course, CourseUpdate, CourseResponse),
    "createModule": Operation(MUTATION, lms.create_module, ModuleCreate, ModuleResponse),
    "getModules": Operation(
        QUERY, lambda s, q: lms.get_modules(s, q.course_id), CourseIdQuery, ModuleResponse, many=True
    ),
    "createLesson": Operation(MUTATION, lms.create_lesson, LessonCreate, LessonResponse),
    "getLessons": Operation(
        QUERY, lambda s, q: lms.get_lessons(s, q.module_id), ModuleIdQuery, LessonResponse, many=True
    ),
    # Blog
    "createBlogInstance": Operation(MUTATION, blog.create_blog_instance, BlogInstanceCreate, BlogInstanceResponse),
    "getBlogInstances": Operation(
        QUERY, lambda s, q: blog.get_blog_instances(s, q.organization_id), OrganizationIdQuery, BlogInstanceResponse, many=True
    ),
    "createBlogPost": Operation(MUTATION, blog.create_blog_post, BlogPostCreate, BlogPostResponse),
    "getBlogPosts": Operation(
        QUERY, lambda s, q: blog.get_blog_posts(s, q.blog_instance_id), BlogInstanceIdQuery, BlogPostResponse, many=True
    ),
    "updateBlogPost": Operation(MUTATION, blog.update_blog_post, BlogPostUpdate, BlogPostResponse),
    # Shared vocabulary
    "createCategory": Operation(MUTATION, taxonomy.create_category, CategoryCreate, CategoryResponse),
    "getCategories": Operation(
        QUERY,
        lambda s, q: taxonomy.get_categories(s, q.lms_instance_id, q.blog_instance_id),
        VocabularyQuery,
        CategoryResponse,
        many=True,
    ),
    "createTag": Operation(MUTATION, taxonomy.create_tag, TagCreate, TagResponse),
    "getTags": Operation(
        QUERY,
        lambda s, q: taxonomy.get_tags(s, q.lms_instance_id, q.blog_instance_id),
        VocabularyQuery,
        TagResponse,
        many=True,
    ),
    # Notes
    "createNotesFolder": Operation(MUTATION, notes.create_notes_folder, NotesFolderCreate, NotesFolderResponse),
    "getNotesFolders": Operation(
        QUERY,
        lambda s, q: notes.get_notes_folders(s, q.organization_id, q.parent_id),
        NotesFolderQuery,
        NotesFolderResponse,
        many=True,
    ),
    "createNote": Operation(MUTATION, notes.create_note, NoteCreate, NoteResponse),
    "getNotes": Operation(
        QUERY,
        lambda s, q: notes.get_notes(s, q.organization_id, q.folder_id, only_folder=q.folder_filter_given),
        NotesQuery,
        NoteResponse,
        many=True,
    ),
    "updateNote": Operation(MUTATION, notes.update_note, NoteUpdate, NoteResponse),
}


def _serialize(operation: Operation, result: Any) -> Any:
    if operation.output_model is None:
        return result
    if operation.many:
        return [operation.output_model.model_validate(row).model_dump(mode="json") for row in result]
    return operation.output_model.model_validate(result).model_dump(mode="json")


def _parse_input(operation: Operation, raw: Any) -> Optional[BaseModel]:
    if operation.input_model is None:
        return None
    try:
        return operation.input_model.model_validate({} if raw is None else raw)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc


def _decode_json(text: str | bytes | None) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("input",), "msg": f"Invalid JSON: {exc.msg}", "input": None}]
        ) from exc


async def dispatch(
    name: str,
    raw_input: Any,
    session: AsyncSession,
    caller_id: Optional[int] = None,
    *,
    read_only: bool = False,
) -> Any:
    """Validate input, run the named handler and return a JSON-ready result."""
    operation = OPERATIONS.get(name)
    if operation is None:
        raise UnknownOperation(name)
    if read_only and operation.kind != QUERY:
        raise OperationNotAllowed(name)

    # The token's subject wins over any created_by sent in the body.
    if caller_id is not None and operation.records_creator and isinstance(raw_input, (dict, type(None))):
        raw_input = {**(raw_input or {}), "created_by": caller_id}

    payload = _parse_input(operation, raw_input)
    result = await operation.handler(session, payload)
    return _serialize(operation, result)


async def _run(
    name: str,
    raw_input: Any,
    session: AsyncSession,
    caller_id: Optional[int],
    read_only: bool,
):
    try:
        data = await dispatch(name, raw_input, session, caller_id, read_only=read_only)
    except OrgDeskError as exc:
        metrics.observe_operation(name, exc.code)
        logger.warning(
            "operation failed: %s",
            exc.message,
            extra={"operation": name, "error_code": exc.code},
        )
        return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})
    except RequestValidationError:
        metrics.observe_operation(name, "validation_error")
        raise

    metrics.observe_operation(name)
    return data


@router.get("")
async def list_operations():
    """Names and kinds of every registered operation."""
    return {
        "operations": [{"name": name, "kind": op.kind} for name, op in OPERATIONS.items()],
    }


@router.get("/{name}")
async def call_query(
    name: str,
    input: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_session),
):
    """Run a query operation with JSON-encoded input in the query string."""
    raw = None
    if name in OPERATIONS:
        raw = _decode_json(input)
    return await _run(name, raw, session, None, read_only=True)


@router.post("/{name}")
async def call_operation(
    name: str,
    request: Request,
    session: AsyncSession = Depends(get_session),
    caller_id: Optional[int] = Depends(get_caller_id),
):
    """Run any operation with its input as the JSON request body."""
    raw = None
    if name in OPERATIONS:
        raw = _decode_json(await request.body())
    return await _run(name, raw, session, caller_id, read_only=False)
