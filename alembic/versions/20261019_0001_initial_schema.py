"""Initial schema for OrgDesk: tenancy, LMS, blog, shared vocabulary and notes.

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _instance_table(name: str) -> None:
    op.create_table(
        name,
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_organization_id", name, ["organization_id"], unique=False)


def _vocabulary_table(name: str, with_description: bool) -> None:
    columns = [
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
    ]
    if with_description:
        columns.append(sa.Column("description", sa.Text(), nullable=True))
    op.create_table(
        name,
        *columns,
        sa.Column("lms_instance_id", sa.Integer(), nullable=True),
        sa.Column("blog_instance_id", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lms_instance_id"], ["lms_instances.id"]),
        sa.ForeignKeyConstraint(["blog_instance_id"], ["blog_instances.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(f"ix_{name}_lms_instance_id", name, ["lms_instance_id"], unique=False)
    op.create_index(f"ix_{name}_blog_instance_id", name, ["blog_instance_id"], unique=False)


def _association_table(name: str, left: tuple[str, str], right: tuple[str, str]) -> None:
    op.create_table(
        name,
        sa.Column(left[0], sa.Integer(), nullable=False),
        sa.Column(right[0], sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint([left[0]], [left[1]]),
        sa.ForeignKeyConstraint([right[0]], [right[1]]),
        sa.PrimaryKeyConstraint(left[0], right[0]),
    )


def upgrade() -> None:
    op.create_table(
        "organizations",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_organizations_slug", "organizations", ["slug"], unique=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "organization_users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_users_org_user"),
    )
    op.create_index("ix_organization_users_organization_id", "organization_users", ["organization_id"], unique=False)
    op.create_index("ix_organization_users_user_id", "organization_users", ["user_id"], unique=False)

    _instance_table("lms_instances")
    _instance_table("blog_instances")

    _vocabulary_table("categories", with_description=True)
    _vocabulary_table("tags", with_description=False)

    op.create_table(
        "courses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("lms_instance_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(length=20), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["lms_instance_id"], ["lms_instances.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_courses_lms_instance_id", "courses", ["lms_instance_id"], unique=False)

    op.create_table(
        "modules",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("course_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["course_id"], ["courses.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_modules_course_id", "modules", ["course_id"], unique=False)

    op.create_table(
        "lessons",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("module_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["module_id"], ["modules.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_lessons_module_id", "lessons", ["module_id"], unique=False)

    op.create_table(
        "blog_posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("blog_instance_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("visibility", sa.String(length=20), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["blog_instance_id"], ["blog_instances.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_blog_posts_blog_instance_id", "blog_posts", ["blog_instance_id"], unique=False)

    op.create_table(
        "notes_folders",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("parent_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["parent_id"], ["notes_folders.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notes_folders_organization_id", "notes_folders", ["organization_id"], unique=False)
    op.create_index("ix_notes_folders_parent_id", "notes_folders", ["parent_id"], unique=False)

    op.create_table(
        "notes",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("folder_id", sa.Integer(), nullable=True),
        sa.Column("organization_id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(["folder_id"], ["notes_folders.id"]),
        sa.ForeignKeyConstraint(["organization_id"], ["organizations.id"]),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notes_folder_id", "notes", ["folder_id"], unique=False)
    op.create_index("ix_notes_organization_id", "notes", ["organization_id"], unique=False)

    _association_table("course_categories", ("course_id", "courses.id"), ("category_id", "categories.id"))
    _association_table("course_tags", ("course_id", "courses.id"), ("tag_id", "tags.id"))
    _association_table("blog_post_categories", ("blog_post_id", "blog_posts.id"), ("category_id", "categories.id"))
    _association_table("blog_post_tags", ("blog_post_id", "blog_posts.id"), ("tag_id", "tags.id"))


def downgrade() -> None:
    for table in ("blog_post_tags", "blog_post_categories", "course_tags", "course_categories"):
        op.drop_table(table)

    op.drop_index("ix_notes_organization_id", table_name="notes")
    op.drop_index("ix_notes_folder_id", table_name="notes")
    op.drop_table("notes")
    op.drop_index("ix_notes_folders_parent_id", table_name="notes_folders")
    op.drop_index("ix_notes_folders_organization_id", table_name="notes_folders")
    op.drop_table("notes_folders")

    op.drop_index("ix_blog_posts_blog_instance_id", table_name="blog_posts")
    op.drop_table("blog_posts")
    op.drop_index("ix_lessons_module_id", table_name="lessons")
    op.drop_table("lessons")
    op.drop_index("ix_modules_course_id", table_name="modules")
    op.drop_table("modules")
    op.drop_index("ix_courses_lms_instance_id", table_name="courses")
    op.drop_table("courses")

    for table in ("tags", "categories"):
        op.drop_index(f"ix_{table}_blog_instance_id", table_name=table)
        op.drop_index(f"ix_{table}_lms_instance_id", table_name=table)
        op.drop_table(table)

    for table in ("blog_instances", "lms_instances"):
        op.drop_index(f"ix_{table}_organization_id", table_name=table)
        op.drop_table(table)

    op.drop_index("ix_organization_users_user_id", table_name="organization_users")
    op.drop_index("ix_organization_users_organization_id", table_name="organization_users")
    op.drop_table("organization_users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    op.drop_index("ix_organizations_slug", table_name="organizations")
    op.drop_table("organizations")
