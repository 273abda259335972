"""Create stocks table

Revision ID: 0001
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "stocks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("symbol", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("open", sa.Float(), nullable=False, server_default="0"),
        sa.Column("high", sa.Float(), nullable=False, server_default="0"),
        sa.Column("low", sa.Float(), nullable=False, server_default="0"),
        sa.Column("close", sa.Float(), nullable=False, server_default="0"),
        sa.Column("volume", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("market_cap", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("pe_ratio", sa.Float(), nullable=False, server_default="0"),
        sa.Column("dividend_yield", sa.Float(), nullable=False, server_default="0"),
        sa.Column("percent_change", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fifty_two_week_high", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fifty_two_week_low", sa.Float(), nullable=False, server_default="0"),
        sa.Column("average_volume", sa.BigInteger(), nullable=False, server_default="0"),
        sa.Column("beta", sa.Float(), nullable=False, server_default="0"),
        sa.Column("sector", sa.String(100), nullable=False, server_default=""),
        sa.Column("country", sa.String(100), nullable=False, server_default=""),
        # Preferred-stock fields
        sa.Column("dividend_rate", sa.Float(), nullable=True),
        sa.Column("currency", sa.String(10), nullable=True),
        sa.Column("exchange", sa.String(100), nullable=True),
        sa.Column("par_value", sa.Float(), nullable=True),
        sa.Column("ex_dividend_date", sa.DateTime(), nullable=True),
        sa.Column("dividend_date", sa.DateTime(), nullable=True),
        sa.Column("stock_type", sa.String(20), nullable=True),
        sa.Column("ai_insights", sa.Text(), nullable=False, server_default=""),
        sa.Column("last_updated", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_stocks_symbol", "stocks", ["symbol"], unique=True)
    op.create_index("ix_stocks_last_updated", "stocks", ["last_updated"])


def downgrade() -> None:
    op.drop_index("ix_stocks_last_updated", table_name="stocks")
    op.drop_index("ix_stocks_symbol", table_name="stocks")
    op.drop_table("stocks")
