"""initial schema: users, jobs, applications, notes, interviews, job alerts

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 09:12:41.204118
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('location_city', sa.String(length=100), nullable=True),
        sa.Column('location_country', sa.String(length=100), nullable=True),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('company_name', sa.String(length=200), nullable=True),
        sa.Column('resume_file_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_table(
        'jobs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('company_id', sa.Uuid(), nullable=False),
        sa.Column('responsibilities', sa.JSON(), nullable=False),
        sa.Column('qualifications', sa.JSON(), nullable=False),
        sa.Column('job_type', sa.String(length=20), nullable=False),
        sa.Column('location_city', sa.String(length=100), nullable=True),
        sa.Column('location_country', sa.String(length=100), nullable=True),
        sa.Column('salary_min', sa.Float(), nullable=True),
        sa.Column('salary_max', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('remote', sa.Boolean(), nullable=False),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('applicant_count', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('views', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['company_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_jobs_company', 'jobs', ['company_id'])
    op.create_index('idx_jobs_active_created', 'jobs', ['is_active', 'created_at'])

    op.create_table(
        'applications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('job_id', sa.Uuid(), nullable=False),
        sa.Column('applicant_id', sa.Uuid(), nullable=False),
        sa.Column('cover_letter', sa.Text(), nullable=True),
        sa.Column('resume_file_name', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=True),
        sa.Column('screening_score', sa.Float(), nullable=True),
        sa.Column('applied_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['applicant_id'], ['users.id']),
        sa.ForeignKeyConstraint(['job_id'], ['jobs.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('applicant_id', 'job_id', name='uq_applications_applicant_job'),
    )
    op.create_index('idx_applications_job_status', 'applications', ['job_id', 'status'])

    op.create_table(
        'application_notes',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Uuid(), nullable=False),
        sa.Column('author_id', sa.Uuid(), nullable=False),
        sa.Column('text', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id']),
        sa.ForeignKeyConstraint(['author_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'interviews',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('application_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('interviewer_id', sa.Uuid(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('score', sa.Float(), nullable=True),
        sa.ForeignKeyConstraint(['application_id'], ['applications.id']),
        sa.ForeignKeyConstraint(['interviewer_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'job_alerts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('keywords', sa.JSON(), nullable=False),
        sa.Column('job_types', sa.JSON(), nullable=False),
        sa.Column('location', sa.String(length=100), nullable=True),
        sa.Column('min_salary', sa.Float(), nullable=True),
        sa.Column('max_salary', sa.Float(), nullable=True),
        sa.Column('remote', sa.Boolean(), nullable=False),
        sa.Column('frequency', sa.String(length=10), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('last_sent', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('idx_job_alerts_user', 'job_alerts', ['user_id'])


def downgrade() -> None:
    op.drop_index('idx_job_alerts_user', table_name='job_alerts')
    op.drop_table('job_alerts')
    op.drop_table('interviews')
    op.drop_table('application_notes')
    op.drop_index('idx_applications_job_status', table_name='applications')
    op.drop_table('applications')
    op.drop_index('idx_jobs_active_created', table_name='jobs')
    op.drop_index('idx_jobs_company', table_name='jobs')
    op.drop_table('jobs')
    op.drop_table('users')
