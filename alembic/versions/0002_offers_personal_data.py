"""Add offers and shared personal data

Revision ID: 0002_offers_personal_data
Revises: 0001_marketplace_engagement
Create Date: 2026-10-19

Adds the partner offer table and the per-request billing/execution address
record the consumer shares with the engaged partner.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0002_offers_personal_data'
down_revision = '0001_marketplace_engagement'
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'market_offers',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_by_user_id', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('net_total', sa.Numeric(14, 2), nullable=False),
        sa.Column('tax_rate', sa.Numeric(5, 2), nullable=False, server_default=sa.text('0')),
        sa.Column('discount_type', sa.String(), nullable=False, server_default=sa.text("'percent'")),
        sa.Column('discount_value', sa.Numeric(14, 2), nullable=False, server_default=sa.text('0')),
        sa.Column('discount_label', sa.String(), nullable=True),
        sa.Column('gross_total', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'created'")),
        sa.Column('signature_id', sa.String(), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        'market_request_personal_data',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('bill_first_name', sa.String(), nullable=True),
        sa.Column('bill_last_name', sa.String(), nullable=True),
        sa.Column('bill_company', sa.String(), nullable=True),
        sa.Column('bill_street', sa.String(), nullable=True),
        sa.Column('bill_house_number', sa.String(), nullable=True),
        sa.Column('bill_postal_code', sa.String(), nullable=True),
        sa.Column('bill_city', sa.String(), nullable=True),
        sa.Column('bill_phone', sa.String(), nullable=True),
        sa.Column('bill_email', sa.String(), nullable=True),
        sa.Column('exec_same_as_billing', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('exec_street', sa.String(), nullable=True),
        sa.Column('exec_house_number', sa.String(), nullable=True),
        sa.Column('exec_postal_code', sa.String(), nullable=True),
        sa.Column('exec_city', sa.String(), nullable=True),
        *_timestamps(),
    )


def downgrade() -> None:
    op.drop_table('market_request_personal_data')
    op.drop_table('market_offers')
