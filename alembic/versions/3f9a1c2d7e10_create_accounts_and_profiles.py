"""create accounts and profiles

Revision ID: 3f9a1c2d7e10
Revises:
Create Date: 2026-10-18 09:12:44.512301
"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3f9a1c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # gen_random_uuid() is built in from PostgreSQL 13, pgcrypto before that
    op.execute('CREATE EXTENSION IF NOT EXISTS pgcrypto')

    account_role_enum = postgresql.ENUM('USER', 'ADMIN', 'SELLER', name='accountrole', create_type=False)
    account_role_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'accounts',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('first_name', sa.String(length=150), nullable=False),
        sa.Column('last_name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('role', account_role_enum, server_default='USER', nullable=False),
        sa.Column('avatar', sa.String(length=1024), nullable=True),
        sa.Column('otp', sa.Integer(), nullable=True),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('refresh_token', sa.String(length=1024), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='accounts_email_key'),
        sa.UniqueConstraint('phone', name='accounts_phone_key'),
    )
    op.create_index(op.f('ix_accounts_first_name'), 'accounts', ['first_name'], unique=False)
    op.create_index(op.f('ix_accounts_last_name'), 'accounts', ['last_name'], unique=False)

    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('name_bn', sa.String(length=255), nullable=False),
        sa.Column('father', sa.String(length=255), nullable=False),
        sa.Column('father_bn', sa.String(length=255), nullable=False),
        sa.Column('mother', sa.String(length=255), nullable=False),
        sa.Column('mother_bn', sa.String(length=255), nullable=False),
        sa.Column('dob', sa.Date(), nullable=False),
        sa.Column('gender', sa.String(length=32), nullable=False),
        sa.Column('nid', sa.String(length=1), nullable=False),
        sa.Column('nid_no', sa.String(length=32), nullable=True),
        sa.Column('breg', sa.String(length=32), nullable=True),
        sa.Column('passport', sa.String(length=32), nullable=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('mobile', sa.String(length=20), nullable=False),
        sa.Column('confirm_mobile', sa.String(length=20), nullable=False),
        sa.Column('nationality', sa.String(length=64), nullable=False),
        sa.Column('religion', sa.String(length=64), nullable=False),
        sa.Column('marital_status', sa.String(length=32), nullable=False),
        sa.Column('quota', sa.String(length=64), nullable=False),
        sa.Column('dep_status', sa.String(length=64), nullable=True),
        sa.Column('present_address', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('ssc', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('hsc', postgresql.JSONB(astext_type=sa.Text()), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['accounts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_profiles_user_id'), 'profiles', ['user_id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_profiles_user_id'), table_name='profiles')
    op.drop_table('profiles')
    op.drop_index(op.f('ix_accounts_last_name'), table_name='accounts')
    op.drop_index(op.f('ix_accounts_first_name'), table_name='accounts')
    op.drop_table('accounts')
    sa.Enum(name='accountrole').drop(op.get_bind(), checkfirst=True)
