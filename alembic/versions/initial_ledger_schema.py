"""initial ledger schema

Revision ID: initial_ledger_schema
Revises:
Create Date: 2026-10-17

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_ledger_schema'
down_revision = None
branch_labels = None
depends_on = None

UUID = postgresql.UUID(as_uuid=True)
MONEY = sa.Numeric(14, 2)

transaction_type = sa.Enum('income', 'expense', name='transaction_type')
transaction_status = sa.Enum('pending', 'completed', name='transaction_status')
category_kind = sa.Enum('user', 'savings', 'goal_refund', 'transfer', name='category_kind')
debt_type = sa.Enum('lend', 'borrow', name='debt_type')
debt_status = sa.Enum('pending', 'partial', 'completed', name='debt_status')
goal_status = sa.Enum('in_progress', 'completed', 'cancelled', name='goal_status')

ENUMS = [transaction_type, transaction_status, category_kind, debt_type, debt_status, goal_status]


def _timestamps(updated=True):
    columns = [sa.Column('created_at', sa.DateTime(timezone=True), nullable=True)]
    if updated:
        columns.append(sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True))
    return columns


def upgrade():
    bind = op.get_bind()
    for enum in ENUMS:
        enum.create(bind, checkfirst=True)

    op.create_table(
        'users',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('hashed_password', sa.String, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        *_timestamps(updated=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'wallets',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('initial_balance', MONEY, nullable=False),
        sa.Column('balance', MONEY, nullable=False),
        sa.Column('currency', sa.String(length=10), nullable=False),
        sa.Column('icon', sa.String(length=20), nullable=True),
        sa.Column('color', sa.String(length=20), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'])

    op.create_table(
        'categories',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('type', postgresql.ENUM(name='transaction_type', create_type=False), nullable=False),
        sa.Column('kind', postgresql.ENUM(name='category_kind', create_type=False), nullable=False),
        sa.Column('icon', sa.String(length=20), nullable=True),
        sa.Column('color', sa.String(length=20), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_categories_user_id', 'categories', ['user_id'])

    op.create_table(
        'transactions',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('wallet_id', UUID, sa.ForeignKey('wallets.id'), nullable=False),
        sa.Column('category_id', UUID, sa.ForeignKey('categories.id'), nullable=False),
        sa.Column('type', postgresql.ENUM(name='transaction_type', create_type=False), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', postgresql.ENUM(name='transaction_status', create_type=False), nullable=False),
        sa.Column('work_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('received_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('source_goal_id', UUID, nullable=True),
        sa.Column('source_contribution_id', UUID, nullable=True),
        sa.Column('paired_transaction_id', UUID, nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_transactions_user_id', 'transactions', ['user_id'])
    op.create_index('ix_transactions_wallet_id', 'transactions', ['wallet_id'])
    op.create_index('ix_transactions_category_id', 'transactions', ['category_id'])
    op.create_index('ix_transactions_source_goal_id', 'transactions', ['source_goal_id'])

    op.create_table(
        'debts',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', postgresql.ENUM(name='debt_type', create_type=False), nullable=False),
        sa.Column('person_name', sa.String(length=100), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('remaining_amount', MONEY, nullable=False),
        sa.Column('status', postgresql.ENUM(name='debt_status', create_type=False), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_debts_user_id', 'debts', ['user_id'])

    op.create_table(
        'debt_payments',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('debt_id', UUID, sa.ForeignKey('debts.id', ondelete='CASCADE'), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_debt_payments_debt_id', 'debt_payments', ['debt_id'])

    op.create_table(
        'goals',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('user_id', UUID, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('target_amount', MONEY, nullable=False),
        sa.Column('current_amount', MONEY, nullable=False),
        sa.Column('status', postgresql.ENUM(name='goal_status', create_type=False), nullable=False),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_goals_user_id', 'goals', ['user_id'])

    op.create_table(
        'goal_contributions',
        sa.Column('id', UUID, primary_key=True),
        sa.Column('goal_id', UUID, sa.ForeignKey('goals.id', ondelete='CASCADE'), nullable=False),
        sa.Column('wallet_id', UUID, sa.ForeignKey('wallets.id'), nullable=False),
        sa.Column('amount', MONEY, nullable=False),
        sa.Column('contribution_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('transaction_id', UUID, sa.ForeignKey('transactions.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(updated=False),
    )
    op.create_index('ix_goal_contributions_goal_id', 'goal_contributions', ['goal_id'])


def downgrade():
    op.drop_table('goal_contributions')
    op.drop_table('goals')
    op.drop_table('debt_payments')
    op.drop_table('debts')
    op.drop_table('transactions')
    op.drop_table('categories')
    op.drop_table('wallets')
    op.drop_table('users')

    bind = op.get_bind()
    for enum in reversed(ENUMS):
        enum.drop(bind, checkfirst=True)
