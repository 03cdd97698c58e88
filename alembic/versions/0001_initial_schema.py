# File: /alembic/versions/0001_initial_schema.py | Version: 1.0 | Title: Initial grid schema
"""initial grid schema: users, bases, tables, columns, rows, cell values, views"""

from alembic import op
import sqlalchemy as sa

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "base",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("owner_id", sa.String(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("last_opened_table_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_base_owner_id", "base", ["owner_id"])

    op.create_table(
        "data_table",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("base_id", sa.String(), sa.ForeignKey("base.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_data_table_base_id", "data_table", ["base_id"])

    op.create_table(
        "table_column",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("data_table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_table_column_table_id", "table_column", ["table_id"])

    op.create_table(
        "row",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("data_table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("batch_id", sa.String(100), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_row_table_id", "row", ["table_id"])
    op.create_index("ix_row_batch_id", "row", ["batch_id"])
    op.create_index("ix_row_table_id_created_at_id", "row", ["table_id", "created_at", "id"])

    op.create_table(
        "cell_value",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("row_id", sa.String(), sa.ForeignKey("row.id", ondelete="CASCADE"), nullable=False),
        sa.Column("column_id", sa.String(), sa.ForeignKey("table_column.id", ondelete="CASCADE"), nullable=False),
        sa.Column("text_value", sa.Text(), nullable=True),
        sa.Column("number_value", sa.Float(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("row_id", "column_id", name="uq_cell_value_row_column"),
    )
    op.create_index("ix_cell_value_row_id", "cell_value", ["row_id"])
    op.create_index("ix_cell_value_column_id", "cell_value", ["column_id"])

    op.create_table(
        "view",
        sa.Column("id", sa.String(), primary_key=True, nullable=False),
        sa.Column("table_id", sa.String(), sa.ForeignKey("data_table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("filters_json", sa.JSON(), nullable=False),
        sa.Column("sorts_json", sa.JSON(), nullable=False),
        sa.Column("hidden_columns_json", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_view_table_id", "view", ["table_id"])


def downgrade():
    op.drop_index("ix_view_table_id", table_name="view")
    op.drop_table("view")
    op.drop_index("ix_cell_value_column_id", table_name="cell_value")
    op.drop_index("ix_cell_value_row_id", table_name="cell_value")
    op.drop_table("cell_value")
    op.drop_index("ix_row_table_id_created_at_id", table_name="row")
    op.drop_index("ix_row_batch_id", table_name="row")
    op.drop_index("ix_row_table_id", table_name="row")
    op.drop_table("row")
    op.drop_index("ix_table_column_table_id", table_name="table_column")
    op.drop_table("table_column")
    op.drop_index("ix_data_table_base_id", table_name="data_table")
    op.drop_table("data_table")
    op.drop_index("ix_base_owner_id", table_name="base")
    op.drop_table("base")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
