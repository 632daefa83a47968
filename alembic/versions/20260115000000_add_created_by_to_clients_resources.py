"""Track who created each client and resource.

Revision ID: 20260115000000
Revises: 20260101000000
Create Date: 2026-01-15

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20260115000000"
down_revision: Union[str, None] = "20260101000000"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    for table in ("clients", "resources"):
        with op.batch_alter_table(table) as batch_op:
            batch_op.add_column(sa.Column("created_by", sa.Integer(), nullable=True))
            batch_op.create_foreign_key(
                op.f(f"fk_{table}_created_by_users"),
                "users",
                ["created_by"],
                ["id"],
                ondelete="SET NULL",
            )


def downgrade() -> None:
    for table in ("resources", "clients"):
        with op.batch_alter_table(table) as batch_op:
            batch_op.drop_constraint(op.f(f"fk_{table}_created_by_users"), type_="foreignkey")
            batch_op.drop_column("created_by")
