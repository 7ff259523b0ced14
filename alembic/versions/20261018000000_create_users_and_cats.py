"""Create users and cats tables.

Revision ID: 20261018000000
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20261018000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="user"),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("role IN ('user', 'admin')", name="ck_users_role"),
    )
    op.create_index(op.f("ix_users_user_name"), "users", ["user_name"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "cats",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("cat_name", sa.String(length=255), nullable=False),
        sa.Column("weight", sa.Float(), nullable=False),
        sa.Column("filename", sa.String(length=1024), nullable=False),
        sa.Column("birthdate", sa.DateTime(timezone=True), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("latitude", sa.Float(), nullable=False, server_default="0"),
        sa.Column("owner_id", sa.Uuid(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_cats_owner_id"), "cats", ["owner_id"], unique=False)
    op.create_index(op.f("ix_cats_longitude"), "cats", ["longitude"], unique=False)
    op.create_index(op.f("ix_cats_latitude"), "cats", ["latitude"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_cats_latitude"), table_name="cats")
    op.drop_index(op.f("ix_cats_longitude"), table_name="cats")
    op.drop_index(op.f("ix_cats_owner_id"), table_name="cats")
    op.drop_table("cats")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_user_name"), table_name="users")
    op.drop_table("users")
