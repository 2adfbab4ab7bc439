"""Create snippets, users and sessions tables

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000

The sessions table matches the model Flask-Session defines for its
SQLAlchemy backend. Flask-Session also creates it on startup when missing,
so it is only created here if it does not exist yet.
"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'snippets',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created', sa.DateTime(), nullable=False),
        sa.Column('expires', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_snippets_created', 'snippets', ['created'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('hashed_password', sa.String(length=60), nullable=False),
        sa.Column('created', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='users_uc_email'),
    )

    if not sa.inspect(op.get_bind()).has_table('sessions'):
        op.create_table(
            'sessions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('session_id', sa.String(length=255), nullable=True),
            sa.Column('data', sa.LargeBinary(), nullable=True),
            sa.Column('expiry', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('session_id'),
        )
    op.create_index('sessions_expiry_idx', 'sessions', ['expiry'])


def downgrade():
    op.drop_index('sessions_expiry_idx', table_name='sessions')
    op.drop_table('sessions')
    op.drop_table('users')
    op.drop_index('ix_snippets_created', table_name='snippets')
    op.drop_table('snippets')
