"""Create marketplace engagement tables

Revision ID: 0001_marketplace_engagement
Revises:
Create Date: 2026-10-19

Creates the request / application / conversation / appointment / order /
rating tables plus request status history and chat document metadata.
The partial unique index uq_market_applications_one_accepted keeps at most
one accepted application per request.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB

# revision identifiers, used by Alembic.
revision = '0001_marketplace_engagement'
down_revision = None
branch_labels = None
depends_on = None

JSON_TYPE = sa.JSON().with_variant(JSONB(), 'postgresql')


def _timestamps(updated=True):
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        )
    return columns


def upgrade() -> None:
    op.create_table(
        'partners',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('owner_user_id', sa.String(), nullable=False, index=True),
        sa.Column('display_name', sa.String(), nullable=True),
        sa.Column('company_name', sa.String(), nullable=True),
        sa.Column('rating_avg', sa.Numeric(4, 2), nullable=True),
        sa.Column('rating_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
    )

    op.create_table(
        'market_requests',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), nullable=False, index=True),
        sa.Column('summary', sa.String(500), nullable=True),
        sa.Column('request_text', sa.Text(), nullable=False),
        sa.Column('branch', sa.String(), nullable=False, server_default=sa.text("'Allgemein'")),
        sa.Column('category', sa.String(), nullable=False, server_default=sa.text("'Sonstiges'")),
        sa.Column('city', sa.String(), nullable=True),
        sa.Column('zip', sa.String(), nullable=True),
        sa.Column('urgency', sa.String(), nullable=True),
        sa.Column('execution', sa.String(), nullable=False, server_default=sa.text("'digital'")),
        sa.Column('budget_min', sa.Numeric(14, 2), nullable=True),
        sa.Column('budget_max', sa.Numeric(14, 2), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'Anfrage'")),
        sa.Column('extras', JSON_TYPE, nullable=False, server_default=sa.text("'{}'")),
        sa.Column('applications_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        *_timestamps(),
    )
    op.create_index('ix_market_requests_user_status', 'market_requests', ['user_id', 'status'])

    op.create_table(
        'market_applications',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('partner_id', sa.String(), sa.ForeignKey('partners.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'submitted'")),
        sa.Column('message_text', sa.Text(), nullable=True),
        sa.Column('message_html', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('request_id', 'partner_id', name='uq_market_application_request_partner'),
    )
    op.create_index(
        'uq_market_applications_one_accepted',
        'market_applications',
        ['request_id'],
        unique=True,
        postgresql_where=sa.text("status = 'accepted'"),
        sqlite_where=sa.text("status = 'accepted'"),
    )

    op.create_table(
        'market_conversations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('application_id', sa.String(), sa.ForeignKey('market_applications.id', ondelete='SET NULL'), nullable=True),
        sa.Column('partner_id', sa.String(), sa.ForeignKey('partners.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('consumer_user_id', sa.String(), nullable=False, index=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(updated=False),
    )

    op.create_table(
        'market_messages',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('conversation_id', sa.String(), sa.ForeignKey('market_conversations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('sender_user_id', sa.String(), nullable=False),
        sa.Column('kind', sa.String(50), nullable=False, index=True),
        sa.Column('payload', JSON_TYPE, nullable=True),
        sa.Column('body_text', sa.Text(), nullable=True),
        sa.Column('body_html', sa.Text(), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index(
        'ix_market_messages_conversation_created',
        'market_messages',
        ['conversation_id', 'created_at', 'id'],
    )

    op.create_table(
        'market_appointments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('created_by_user_id', sa.String(), nullable=False),
        sa.Column('kind', sa.String(), nullable=False, server_default=sa.text("'vor_ort'")),
        sa.Column('start_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_min', sa.Integer(), nullable=False, server_default=sa.text('60')),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('video_url', sa.String(), nullable=True),
        sa.Column('phone_customer', sa.String(), nullable=True),
        sa.Column('phone_partner', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'proposed'")),
        *_timestamps(),
    )

    op.create_table(
        'market_orders',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('net_total', sa.Numeric(14, 2), nullable=False),
        sa.Column('tax_rate', sa.Numeric(5, 2), nullable=False, server_default=sa.text('0')),
        sa.Column('discount_type', sa.String(), nullable=False, server_default=sa.text("'percent'")),
        sa.Column('discount_value', sa.Numeric(14, 2), nullable=False, server_default=sa.text('0')),
        sa.Column('discount_label', sa.String(), nullable=True),
        sa.Column('gross_total', sa.Numeric(14, 2), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default=sa.text("'created'")),
        *_timestamps(),
    )

    op.create_table(
        'market_partner_ratings',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('partner_id', sa.String(), sa.ForeignKey('partners.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('consumer_user_id', sa.String(), nullable=False),
        sa.Column('stars', sa.Integer(), nullable=False),
        sa.Column('text', sa.Text(), nullable=True),
        sa.Column('name', sa.String(), nullable=True),
        *_timestamps(updated=False),
        sa.UniqueConstraint('request_id', 'consumer_user_id', name='uq_market_rating_request_consumer'),
    )

    op.create_table(
        'market_request_status_history',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('old_status', sa.String(50), nullable=True),
        sa.Column('new_status', sa.String(50), nullable=False),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('changed_by', sa.String(), nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index(
        'idx_request_history_created',
        'market_request_status_history',
        ['request_id', sa.text('created_at DESC')],
    )

    op.create_table(
        'market_documents',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('conversation_id', sa.String(), sa.ForeignKey('market_conversations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('request_id', sa.String(), sa.ForeignKey('market_requests.id', ondelete='CASCADE'), nullable=False),
        sa.Column('uploaded_by_user_id', sa.String(), nullable=False),
        sa.Column('path', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('size', sa.Integer(), nullable=True),
        sa.Column('content_type', sa.String(), nullable=True),
        sa.Column('category', sa.String(), nullable=True),
        *_timestamps(updated=False),
    )


def downgrade() -> None:
    op.drop_table('market_documents')
    op.drop_index('idx_request_history_created', table_name='market_request_status_history')
    op.drop_table('market_request_status_history')
    op.drop_table('market_partner_ratings')
    op.drop_table('market_orders')
    op.drop_table('market_appointments')
    op.drop_index('ix_market_messages_conversation_created', table_name='market_messages')
    op.drop_table('market_messages')
    op.drop_table('market_conversations')
    op.drop_index('uq_market_applications_one_accepted', table_name='market_applications')
    op.drop_table('market_applications')
    op.drop_index('ix_market_requests_user_status', table_name='market_requests')
    op.drop_table('market_requests')
    op.drop_table('partners')
