"""Password reset tokens and citizen settings

Revision ID: c4e6a8b0d2f1
Revises: a1c3e5f7b9d0
Create Date: 2026-10-18

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'c4e6a8b0d2f1'
down_revision = 'a1c3e5f7b9d0'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('password_reset_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('account_type', sa.String(length=20), nullable=False),
        sa.Column('account_id', sa.Integer(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_password_reset_tokens_token_hash', 'password_reset_tokens', ['token_hash'], unique=True)
    op.create_index('ix_password_reset_tokens_account', 'password_reset_tokens', ['account_type', 'account_id'])

    op.add_column('standard_users', sa.Column('app_notifications', sa.Boolean(), nullable=False, server_default='true'))
    op.add_column('standard_users', sa.Column('language', sa.String(length=10), nullable=False, server_default='en'))


def downgrade():
    op.drop_column('standard_users', 'language')
    op.drop_column('standard_users', 'app_notifications')

    op.drop_table('password_reset_tokens')
