"""Existence, ownership and uniqueness checks shared by every handler."""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from orgdesk.errors import CrossTenantViolation, NotFoundError, OrgDeskError, UniquenessViolation

logger = logging.getLogger("orgdesk.guards")

ModelT = TypeVar("ModelT")


async def ensure_exists(session: AsyncSession, model: type[ModelT], entity_id: int, label: str) -> ModelT:
    """Load ``model`` by primary key or raise NotFoundError naming ``label``."""
    row = await session.get(model, entity_id)
    if row is None:
        raise NotFoundError(label, entity_id)
    return row


def ensure_same_organization(
    organization_id: int,
    related: Any,
    message: str,
) -> None:
    if related.organization_id != organization_id:
        raise CrossTenantViolation(
            message,
            {
                "organization_id": organization_id,
                "related_organization_id": related.organization_id,
                "related_id": related.id,
            },
        )


async def ensure_unique(
    session: AsyncSession,
    column: InstrumentedAttribute,
    value: Any,
    entity: str,
    exclude_id: int | None = None,
) -> None:
    model = column.class_
    query = select(model.id).where(column == value)
    if exclude_id is not None:
        query = query.where(model.id != exclude_id)
    result = await session.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise UniquenessViolation(entity, column.key, value)


async def next_order_index(session: AsyncSession, column: InstrumentedAttribute, parent_column: InstrumentedAttribute, parent_id: int) -> int:
    """max(order_index)+1 among siblings, 0 for the first child."""
    result = await session.execute(select(func.max(column)).where(parent_column == parent_id))
    current = result.scalar_one_or_none()
    return 0 if current is None else current + 1


async def commit_or_raise(
    session: AsyncSession,
    on_conflict: Callable[[], OrgDeskError] | None = None,
) -> None:
    """Commit; a constraint failure rolls back and surfaces as ``on_conflict()``."""
    try:
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("write rejected by storage constraint: %s", exc.orig)
        if on_conflict is None:
            raise
        raise on_conflict() from exc
