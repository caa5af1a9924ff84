"""Initial schema with cards and transactions tables

Revision ID: 3b7e1c9d52a4
Revises:
Create Date: 2026-10-17 09:14:02.318544

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e1c9d52a4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    # Create cards table
    op.create_table(
        'cards',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Card ID'),
        sa.Column('card_number', sa.String(length=19), nullable=False, comment='Card number (PAN)'),
        sa.Column('cardholder_name', sa.String(length=255), nullable=False, comment='Name as it appears on the card'),
        sa.Column('expiration_date', sa.Date(), nullable=False, comment='Card is usable strictly before this date'),
        sa.Column('cvv', sa.String(length=4), nullable=False, comment='Card verification value'),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=False, comment='Available balance'),
        sa.CheckConstraint('balance >= 0', name='check_card_balance_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('card_number')
    )

    # Create transactions table
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False, comment='Transaction ID'),
        sa.Column('card_id', sa.Integer(), nullable=False, comment='Debited card'),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False, comment='Charged amount'),
        sa.Column('status', sa.String(length=16), nullable=False, comment='APPROVED, DECLINED, FAILED or REFUNDED'),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), nullable=False, comment='Creation timestamp'),
        sa.Column('description', sa.String(length=255), nullable=True, comment='Optional payment description'),
        sa.CheckConstraint('amount > 0', name='check_transaction_amount_positive'),
        sa.CheckConstraint(
            "status IN ('APPROVED', 'DECLINED', 'FAILED', 'REFUNDED')",
            name='check_transaction_status'
        ),
        sa.ForeignKeyConstraint(['card_id'], ['cards.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_transactions_card_id', 'transactions', ['card_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_transactions_card_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('cards')
