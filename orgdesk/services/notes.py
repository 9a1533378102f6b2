"""Notes handlers: the per-organization folder tree and notes.

Folder creation is the one place with compound validation. The checks run in
a fixed order and stop at the first failure, since the parent's organization
can only be compared once the organization itself is known to exist:

1. organization exists
2. creator exists
3. parent folder (when given) exists
4. parent folder belongs to the same organization

Cycle detection is not needed while folders cannot be moved.
"""

from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from orgdesk.models.notes import Note, NoteCreate, NotesFolder, NotesFolderCreate, NoteUpdate
from orgdesk.models.organization import Organization, User
from orgdesk.services.guards import commit_or_raise, ensure_exists, ensure_same_organization
from orgdesk.utils.time import advance_timestamp

logger = logging.getLogger("orgdesk.notes")


async def _ensure_folder_in_organization(
    session: AsyncSession,
    folder_id: int,
    organization_id: int,
    label: str,
) -> NotesFolder:
    folder = await ensure_exists(session, NotesFolder, folder_id, label)
    ensure_same_organization(
        organization_id,
        folder,
        f"{label} must belong to the same organization",
    )
    return folder


async def create_notes_folder(session: AsyncSession, data: NotesFolderCreate) -> NotesFolder:
    await ensure_exists(session, Organization, data.organization_id, "Organization")
    await ensure_exists(session, User, data.created_by, "User")
    if data.parent_id is not None:
        await _ensure_folder_in_organization(session, data.parent_id, data.organization_id, "Parent folder")

    folder = NotesFolder(
        organization_id=data.organization_id,
        parent_id=data.parent_id,
        name=data.name,
        created_by=data.created_by,
    )
    session.add(folder)
    await commit_or_raise(session)
    await session.refresh(folder)
    logger.info(
        "notes folder created id=%s organization_id=%s parent_id=%s",
        folder.id,
        folder.organization_id,
        folder.parent_id,
    )
    return folder


async def get_notes_folders(
    session: AsyncSession,
    organization_id: int,
    parent_id: int | None = None,
) -> Sequence[NotesFolder]:
    """Children of ``parent_id``, or the root folders when it is None."""
    query = select(NotesFolder).where(NotesFolder.organization_id == organization_id)
    if parent_id is None:
        query = query.where(NotesFolder.parent_id.is_(None))
    else:
        query = query.where(NotesFolder.parent_id == parent_id)
    result = await session.execute(query.order_by(NotesFolder.id))
    return result.scalars().all()


async def create_note(session: AsyncSession, data: NoteCreate) -> Note:
    await ensure_exists(session, Organization, data.organization_id, "Organization")
    await ensure_exists(session, User, data.created_by, "User")
    if data.folder_id is not None:
        await _ensure_folder_in_organization(session, data.folder_id, data.organization_id, "Folder")

    note = Note(
        folder_id=data.folder_id,
        organization_id=data.organization_id,
        title=data.title,
        content=data.content,
        created_by=data.created_by,
    )
    session.add(note)
    await commit_or_raise(session)
    await session.refresh(note)
    return note


async def get_notes(
    session: AsyncSession,
    organization_id: int,
    folder_id: int | None = None,
    *,
    only_folder: bool = False,
) -> Sequence[Note]:
    """Notes of an organization.

    With ``only_folder`` unset every note is returned. With it set, ``folder_id``
    selects one folder's notes, and None selects notes filed at the root.
    """
    query = select(Note).where(Note.organization_id == organization_id)
    if only_folder:
        if folder_id is None:
            query = query.where(Note.folder_id.is_(None))
        else:
            query = query.where(Note.folder_id == folder_id)
    result = await session.execute(query.order_by(Note.id))
    return result.scalars().all()


async def update_note(session: AsyncSession, data: NoteUpdate) -> Note:
    note = await ensure_exists(session, Note, data.id, "Note")
    changes = data.changes()
    if changes.get("folder_id") is not None:
        await _ensure_folder_in_organization(session, changes["folder_id"], note.organization_id, "Folder")

    for field, value in changes.items():
        setattr(note, field, value)
    note.updated_at = advance_timestamp(note.updated_at)

    await commit_or_raise(session)
    await session.refresh(note)
    return note
