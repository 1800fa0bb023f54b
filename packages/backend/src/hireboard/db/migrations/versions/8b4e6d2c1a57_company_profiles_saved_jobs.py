"""company profiles and reviews, saved jobs, token versioning and password reset

Revision ID: 8b4e6d2c1a57
Revises: 3f1c2a9d7b10
Create Date: 2026-10-18 15:40:07.518233
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b4e6d2c1a57'
down_revision: Union[str, None] = '3f1c2a9d7b10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table('users') as batch_op:
        batch_op.add_column(
            sa.Column('token_version', sa.Integer(), nullable=False, server_default='0')
        )
        batch_op.add_column(
            sa.Column('password_reset_token_hash', sa.String(length=64), nullable=True)
        )
        batch_op.add_column(
            sa.Column('password_reset_expires', sa.DateTime(timezone=True), nullable=True)
        )

    op.create_table(
        'saved_jobs',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'job_id', name='uq_saved_jobs_user_job'),
    )
    op.create_table(
        'company_profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('employer_id', sa.Uuid(), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=False),
        sa.Column('industry', sa.String(length=100), nullable=True),
        sa.Column('company_size', sa.String(length=10), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(length=500), nullable=True),
        sa.Column('location_city', sa.String(length=100), nullable=True),
        sa.Column('location_country', sa.String(length=100), nullable=True),
        sa.Column('headquarters', sa.String(length=200), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('social_links', sa.JSON(), nullable=False),
        sa.Column('ratings', sa.Float(), nullable=False),
        sa.Column('is_verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['employer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('employer_id'),
    )
    op.create_table(
        'company_reviews',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('reviewer_id', sa.Uuid(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('comment', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['company_profiles.id']),
        sa.ForeignKeyConstraint(['reviewer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('company_id', 'reviewer_id', name='uq_company_reviews_reviewer'),
    )


def downgrade() -> None:
    op.drop_table('company_reviews')
    op.drop_table('company_profiles')
    op.drop_table('saved_jobs')
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_column('password_reset_expires')
        batch_op.drop_column('password_reset_token_hash')
        batch_op.drop_column('token_version')
